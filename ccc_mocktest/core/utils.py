# ccc_mocktest/core/utils.py
import logging
import math
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId

from .config import config

logger = logging.getLogger(__name__)

class QuestionBankCache:
    """Short-lived, process-local memo of the question bank.

    Owns a single value with the time it was fetched. Staleness inside the TTL
    window is accepted; admin writes call invalidate() so edits show up on the
    next read. A TTL of 0 disables caching.
    """
    
    def __init__(self, ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl = config.QUESTION_CACHE_TTL_SECONDS if ttl is None else ttl
        self._clock = clock
        self._value: Optional[List[Dict[str, Any]]] = None
        self._fetched_at: Optional[float] = None
    
    def is_fresh(self) -> bool:
        if self._value is None or self._fetched_at is None:
            return False
        return self._clock() - self._fetched_at < self.ttl
    
    async def get_or_refresh(self, loader: Callable[[], Awaitable[List[Dict[str, Any]]]]) -> List[Dict[str, Any]]:
        """Return the cached bank, reloading it through loader when stale"""
        if self.is_fresh():
            return self._value
        
        value = await loader()
        if self.ttl > 0:
            self._value = value
            self._fetched_at = self._clock()
        return value
    
    def invalidate(self):
        if self._value is not None:
            logger.info("🧹 Question bank cache invalidated")
        self._value = None
        self._fetched_at = None
    
    def get_stats(self) -> Dict[str, Any]:
        return {
            "ttl_seconds": self.ttl,
            "cached": self._value is not None,
            "fresh": self.is_fresh(),
            "cached_questions": len(self._value) if self._value else 0
        }

class ValidationUtils:
    """Utility functions for data validation"""
    
    @staticmethod
    def to_object_id(value: Any) -> Optional[ObjectId]:
        """Parse an id string, None when it is not a valid ObjectId"""
        if isinstance(value, ObjectId):
            return value
        # ObjectId(None) would mint a fresh id
        if value is None:
            return None
        try:
            return ObjectId(value)
        except (InvalidId, TypeError):
            return None
    
    @staticmethod
    def is_non_empty_string(value: Any) -> bool:
        return isinstance(value, str) and bool(value.strip())

class DateTimeUtils:
    """Utility functions for date/time operations"""
    
    @staticmethod
    def now() -> datetime:
        return datetime.now(timezone.utc)
    
    @staticmethod
    def get_current_timestamp() -> float:
        return time.time()

def round_half_up(value: float) -> int:
    """Round .5 up, matching how percentages were always reported"""
    return int(math.floor(value + 0.5))

def serialize_document(value: Any) -> Any:
    """Make a Mongo document JSON ready (ObjectId -> str, datetime -> ISO)"""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: serialize_document(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_document(item) for item in value]
    return value
