# ccc_mocktest/services/review.py
"""
Joins a stored result back to question content for display.

Correctness is taken from the stored answer record, never recomputed: the
grade given at submission time stands even if the bank changed since.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional

QUESTION_NOT_FOUND = "Question not found"

QuestionLookup = Callable[[Any], Optional[Mapping[str, Any]]]


def _missing_entry(answer: Mapping[str, Any]) -> Dict[str, Any]:
    question_id = answer.get("question")
    return {
        "questionId": str(question_id) if question_id is not None else None,
        "questionText": QUESTION_NOT_FOUND,
        "questionTextHi": "",
        "options": [],
        "optionsHi": [],
        "correctAnswer": None,
        "userAnswer": answer.get("selectedAnswer"),
        "isCorrect": bool(answer.get("isCorrect", False))
    }


def review_entry(answer: Mapping[str, Any], question: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    if question is None:
        return _missing_entry(answer)

    return {
        "questionId": str(question.get("_id")),
        "questionText": question.get("questionText", ""),
        "questionTextHi": question.get("questionTextHi") or "",
        "options": list(question.get("options") or []),
        "optionsHi": list(question.get("optionsHi") or []),
        "correctAnswer": question.get("correctAnswer"),
        "userAnswer": answer.get("selectedAnswer"),
        "isCorrect": bool(answer.get("isCorrect", False))
    }


def assemble_review(result: Mapping[str, Any], question_lookup: QuestionLookup) -> List[Dict[str, Any]]:
    """One review entry per stored answer record, in stored order.

    ``question_lookup`` maps a question id to its document or None; a missing
    question yields a "Question not found" entry for that record only.
    """
    review = []
    for answer in result.get("answers") or []:
        question_id = answer.get("question")
        question = question_lookup(question_id) if question_id is not None else None
        review.append(review_entry(answer, question))
    return review


def lookup_from_documents(questions: List[Mapping[str, Any]]) -> QuestionLookup:
    """Build a lookup over already fetched question documents"""
    by_id = {str(question.get("_id")): question for question in questions}
    return lambda question_id: by_id.get(str(question_id))
