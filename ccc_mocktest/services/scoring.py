# ccc_mocktest/services/scoring.py
"""
Scoring engine.

Grades one submission against the question bank. Pure: no I/O, no hidden
state; persisting the outcome is the caller's job.

Two ways of correlating answers with questions are supported:

* keyed - answers arrive as ``{questionId: answer}``; order of the bank does
  not matter. This is the preferred mode.
* positional - ``answers[i]`` belongs to ``questions[i]``. Kept for older
  clients only and best-effort: if the bank changes between the client
  fetching it and submitting, answers are graded against the wrong questions.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..core.exceptions import NoQuestionsAvailable
from ..core.utils import round_half_up

logger = logging.getLogger(__name__)

KEYED = "keyed"
POSITIONAL = "positional"
ANSWER_MODES = (KEYED, POSITIONAL)


@dataclass(frozen=True)
class Unanswered:
    """No usable selection was submitted for the question"""


@dataclass(frozen=True)
class SelectedIndex:
    index: int


SubmittedAnswer = Union[Unanswered, SelectedIndex]

UNANSWERED = Unanswered()


def parse_submitted_answer(raw: Any) -> SubmittedAnswer:
    """Normalize a raw wire value; anything but a non-negative integer is unanswered"""
    # bool is an int subclass but never a valid selection
    if isinstance(raw, bool):
        return UNANSWERED
    if isinstance(raw, int):
        return SelectedIndex(raw) if raw >= 0 else UNANSWERED
    if isinstance(raw, float) and raw.is_integer() and raw >= 0:
        return SelectedIndex(int(raw))
    return UNANSWERED


@dataclass
class AnswerRecord:
    question: Optional[Any]
    selected_answer: Optional[str]
    is_correct: bool

    def to_document(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "selectedAnswer": self.selected_answer,
            "isCorrect": self.is_correct
        }


@dataclass
class ScoreSummary:
    answers: List[AnswerRecord] = field(default_factory=list)
    score: int = 0
    total_questions: int = 0
    percentage: int = 0
    mode: str = KEYED


def _options(question: Mapping[str, Any]) -> List[Any]:
    return list(question.get("options") or [])


def resolve_correct_index(question: Mapping[str, Any]) -> Optional[int]:
    """Authoritative correct option index, or None when it cannot be resolved.

    A valid in-range ``correctAnswerIndex`` wins; otherwise the first option
    equal to ``correctAnswer`` is used.
    """
    options = _options(question)
    index = question.get("correctAnswerIndex")
    if isinstance(index, int) and not isinstance(index, bool) and 0 <= index < len(options):
        return index

    correct_text = question.get("correctAnswer")
    if correct_text is not None:
        for position, option in enumerate(options):
            if option == correct_text:
                return position

    return None


def grade_answer(question: Mapping[str, Any], answer: SubmittedAnswer) -> AnswerRecord:
    """Grade a single answer against its question"""
    options = _options(question)
    correct_index = resolve_correct_index(question)
    if correct_index is None:
        logger.warning(f"⚠️ Question {question.get('_id')} has no resolvable correct answer")

    selected = None
    if isinstance(answer, SelectedIndex) and answer.index < len(options):
        selected = answer.index

    is_correct = selected is not None and selected == correct_index

    return AnswerRecord(
        question=question.get("_id"),
        selected_answer=options[selected] if selected is not None else None,
        is_correct=is_correct
    )


def compute_percentage(score: int, total_questions: int) -> int:
    if total_questions <= 0:
        raise NoQuestionsAvailable()
    return round_half_up(100 * score / total_questions)


def _align_keyed(questions: Sequence[Mapping[str, Any]], answers: Mapping[str, Any]) -> List[SubmittedAnswer]:
    known_ids = {str(question.get("_id")) for question in questions}
    unknown = [key for key in answers if key not in known_ids]
    if unknown:
        logger.warning(f"⚠️ Ignoring answers for unknown questions: {unknown}")

    return [
        parse_submitted_answer(answers.get(str(question.get("_id"))))
        for question in questions
    ]


def _align_positional(questions: Sequence[Mapping[str, Any]], answers: Sequence[Any]) -> List[SubmittedAnswer]:
    if len(answers) != len(questions):
        logger.warning(
            f"⚠️ Positional submission has {len(answers)} answers for {len(questions)} questions"
        )

    aligned = []
    for position in range(len(questions)):
        raw = answers[position] if position < len(answers) else None
        aligned.append(parse_submitted_answer(raw))
    return aligned


def score(questions: Sequence[Mapping[str, Any]],
          submitted_answers: Union[Mapping[str, Any], Sequence[Any]],
          mode: str = KEYED) -> ScoreSummary:
    """Grade a submission.

    ``submitted_answers`` is a ``{questionId: answer}`` mapping in keyed mode
    and an ordered list in positional mode. Malformed answers count as
    unattempted; an empty bank raises NoQuestionsAvailable.
    """
    if mode not in ANSWER_MODES:
        raise ValueError(f"Unknown answer mode: {mode}")

    total_questions = len(questions)
    if total_questions == 0:
        raise NoQuestionsAvailable()

    if mode == KEYED:
        aligned = _align_keyed(questions, submitted_answers)
    else:
        aligned = _align_positional(questions, submitted_answers)

    records = [grade_answer(question, answer) for question, answer in zip(questions, aligned)]
    correct = sum(1 for record in records if record.is_correct)

    return ScoreSummary(
        answers=records,
        score=correct,
        total_questions=total_questions,
        percentage=compute_percentage(correct, total_questions),
        mode=mode
    )
