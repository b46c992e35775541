# ccc_mocktest/services/question_service.py
import logging
from typing import Dict, Any, List, Optional

from ..core.config import config
from ..core.exceptions import NotFoundError, ValidationError
from ..core.stores import QuestionStore
from ..core.utils import QuestionBankCache, ValidationUtils, serialize_document

logger = logging.getLogger(__name__)

# Fields never shown to students before they submit
ANSWER_KEY_FIELDS = ("correctAnswer", "correctAnswerIndex")

EDITABLE_FIELDS = (
    "questionText", "options", "questionTextHi", "optionsHi",
    "correctAnswer", "correctAnswerIndex"
)

def strip_answer_key(question: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in question.items() if key not in ANSWER_KEY_FIELDS}

def build_question_document(data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a full question payload and return the document to store.

    ``correctAnswer`` must be one of the options. ``correctAnswerIndex`` is
    optional; when given it must point at that same option, when absent it is
    derived from the text.
    """
    question_text = data.get("questionText")
    options = data.get("options")
    correct_answer = data.get("correctAnswer")
    
    if not ValidationUtils.is_non_empty_string(question_text) or not options or correct_answer is None:
        raise ValidationError("questionText, options and correctAnswer are required")
    
    if not isinstance(options, list) or len(options) < config.MIN_OPTIONS_PER_QUESTION:
        raise ValidationError(f"At least {config.MIN_OPTIONS_PER_QUESTION} options are required")
    
    if not all(ValidationUtils.is_non_empty_string(option) for option in options):
        raise ValidationError("Options must be non-empty strings")
    
    options_hi = data.get("optionsHi") or []
    if options_hi and len(options_hi) != len(options):
        raise ValidationError("optionsHi must be empty or match the number of options")
    
    if correct_answer not in options:
        raise ValidationError("correctAnswer must match one of the options")
    
    correct_index = data.get("correctAnswerIndex")
    if correct_index is None:
        correct_index = options.index(correct_answer)
    elif isinstance(correct_index, bool) or not isinstance(correct_index, int) \
            or not 0 <= correct_index < len(options):
        raise ValidationError("correctAnswerIndex is out of range")
    elif options[correct_index] != correct_answer:
        raise ValidationError("correctAnswerIndex and correctAnswer refer to different options")
    
    return {
        "questionText": question_text.strip(),
        "options": list(options),
        "questionTextHi": data.get("questionTextHi") or "",
        "optionsHi": list(options_hi),
        "correctAnswer": correct_answer,
        "correctAnswerIndex": correct_index
    }

class QuestionService:
    """Question bank management; every write invalidates the bank cache"""
    
    def __init__(self, question_store: QuestionStore, cache: Optional[QuestionBankCache] = None):
        self.question_store = question_store
        self.cache = cache or QuestionBankCache()
    
    async def get_bank(self, refresh: bool = False) -> List[Dict[str, Any]]:
        """Full bank with answer keys, in stable order, possibly cached"""
        if refresh:
            self.cache.invalidate()
        return await self.cache.get_or_refresh(self.question_store.list_all)
    
    async def list_public_questions(self) -> List[Dict[str, Any]]:
        questions = await self.get_bank()
        return [serialize_document(strip_answer_key(question)) for question in questions]
    
    async def list_questions(self) -> List[Dict[str, Any]]:
        questions = await self.question_store.list_all()
        return serialize_document(questions)
    
    async def get_question(self, question_id: str) -> Dict[str, Any]:
        question = await self.question_store.get_by_id(question_id)
        if not question:
            raise NotFoundError("Question not found")
        return serialize_document(question)
    
    async def get_questions_by_ids(self, question_ids: List[Any]) -> List[Dict[str, Any]]:
        return await self.question_store.get_many(question_ids)
    
    async def create_question(self, data: Dict[str, Any]) -> Dict[str, Any]:
        document = build_question_document(data)
        question = await self.question_store.create(document)
        self.cache.invalidate()
        logger.info(f"✅ Question created: {question['_id']}")
        return serialize_document(question)
    
    async def update_question(self, question_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        existing = await self.question_store.get_by_id(question_id)
        if not existing:
            raise NotFoundError("Question not found")
        
        changes = {key: value for key, value in data.items() if key in EDITABLE_FIELDS}
        if not changes:
            raise ValidationError("No updatable fields provided")
        
        merged = {key: existing.get(key) for key in EDITABLE_FIELDS}
        merged.update(changes)
        # New options or answer text without an explicit index: re-derive it
        if ("correctAnswer" in changes or "options" in changes) and "correctAnswerIndex" not in changes:
            merged["correctAnswerIndex"] = None
        
        document = build_question_document(merged)
        updated = await self.question_store.update(question_id, document)
        if not updated:
            raise NotFoundError("Question not found")
        
        self.cache.invalidate()
        logger.info(f"✅ Question updated: {question_id}")
        return serialize_document(updated)
    
    async def delete_question(self, question_id: str):
        deleted = await self.question_store.delete(question_id)
        if not deleted:
            raise NotFoundError("Question not found")
        
        self.cache.invalidate()
        logger.info(f"🗑️ Question deleted: {question_id}")
    
    async def count_questions(self) -> int:
        return await self.question_store.count()
