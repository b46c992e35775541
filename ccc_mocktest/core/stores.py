# ccc_mocktest/core/stores.py
"""
Thin async data-access objects over the Motor collections.

Ids are accepted as strings and converted here; an id that is not a valid
ObjectId simply matches nothing.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

import pymongo
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from .exceptions import DuplicateUserError
from .utils import ValidationUtils, DateTimeUtils

logger = logging.getLogger(__name__)

def _object_ids(ids: Iterable[Any]) -> List[Any]:
    parsed = (ValidationUtils.to_object_id(value) for value in ids)
    return [oid for oid in parsed if oid is not None]

class UserStore:
    
    def __init__(self, collection):
        self.collection = collection
    
    async def find_by_roll_number(self, roll_number: str) -> Optional[Dict[str, Any]]:
        return await self.collection.find_one({"rollNumber": roll_number})
    
    async def find_by_id(self, user_id: Any) -> Optional[Dict[str, Any]]:
        oid = ValidationUtils.to_object_id(user_id)
        if oid is None:
            return None
        return await self.collection.find_one({"_id": oid})
    
    async def find_many_by_ids(self, user_ids: Iterable[Any]) -> List[Dict[str, Any]]:
        oids = _object_ids(user_ids)
        if not oids:
            return []
        cursor = self.collection.find({"_id": {"$in": oids}}, {"password": 0})
        return await cursor.to_list(length=None)
    
    async def create(self, document: Dict[str, Any]) -> Dict[str, Any]:
        document = dict(document, createdAt=DateTimeUtils.now())
        try:
            result = await self.collection.insert_one(document)
        except DuplicateKeyError:
            # Lost a race with a concurrent registration
            raise DuplicateUserError()
        document["_id"] = result.inserted_id
        return document
    
    async def count_students(self) -> int:
        return await self.collection.count_documents({"role": "student"})

class QuestionStore:
    
    # Stable order the client and the scorer both rely on
    SORT = [("createdAt", pymongo.ASCENDING), ("_id", pymongo.ASCENDING)]
    
    def __init__(self, collection):
        self.collection = collection
    
    async def list_all(self) -> List[Dict[str, Any]]:
        cursor = self.collection.find({}).sort(self.SORT)
        return await cursor.to_list(length=None)
    
    async def get_by_id(self, question_id: Any) -> Optional[Dict[str, Any]]:
        oid = ValidationUtils.to_object_id(question_id)
        if oid is None:
            return None
        return await self.collection.find_one({"_id": oid})
    
    async def get_many(self, question_ids: Iterable[Any]) -> List[Dict[str, Any]]:
        oids = _object_ids(question_ids)
        if not oids:
            return []
        cursor = self.collection.find({"_id": {"$in": oids}})
        return await cursor.to_list(length=None)
    
    async def create(self, document: Dict[str, Any]) -> Dict[str, Any]:
        now = DateTimeUtils.now()
        document = dict(document, createdAt=now, updatedAt=now)
        result = await self.collection.insert_one(document)
        document["_id"] = result.inserted_id
        return document
    
    async def update(self, question_id: Any, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        oid = ValidationUtils.to_object_id(question_id)
        if oid is None:
            return None
        fields = dict(fields, updatedAt=DateTimeUtils.now())
        return await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": fields},
            return_document=ReturnDocument.AFTER
        )
    
    async def delete(self, question_id: Any) -> bool:
        oid = ValidationUtils.to_object_id(question_id)
        if oid is None:
            return False
        result = await self.collection.delete_one({"_id": oid})
        return result.deleted_count == 1
    
    async def count(self) -> int:
        return await self.collection.count_documents({})

class ResultStore:
    
    NEWEST_FIRST = [("createdAt", pymongo.DESCENDING), ("_id", pymongo.DESCENDING)]
    
    def __init__(self, collection):
        self.collection = collection
    
    async def create(self, document: Dict[str, Any]) -> Dict[str, Any]:
        now = DateTimeUtils.now()
        document = dict(document, createdAt=now, updatedAt=now)
        result = await self.collection.insert_one(document)
        document["_id"] = result.inserted_id
        logger.info(f"✅ Result saved: {result.inserted_id}")
        return document
    
    async def find_by_student(self, student_id: Any) -> List[Dict[str, Any]]:
        oid = ValidationUtils.to_object_id(student_id)
        if oid is None:
            return []
        cursor = self.collection.find({"student": oid}).sort(self.NEWEST_FIRST)
        return await cursor.to_list(length=None)
    
    async def latest_by_student(self, student_id: Any) -> Optional[Dict[str, Any]]:
        oid = ValidationUtils.to_object_id(student_id)
        if oid is None:
            return None
        return await self.collection.find_one({"student": oid}, sort=self.NEWEST_FIRST)
    
    async def latest_by_roll_number(self, roll_number: str) -> Optional[Dict[str, Any]]:
        return await self.collection.find_one({"rollNumber": roll_number}, sort=self.NEWEST_FIRST)
    
    async def count_by_student(self, student_id: Any) -> int:
        oid = ValidationUtils.to_object_id(student_id)
        if oid is None:
            return 0
        return await self.collection.count_documents({"student": oid})
    
    async def find_all(self) -> List[Dict[str, Any]]:
        cursor = self.collection.find({}).sort(self.NEWEST_FIRST)
        return await cursor.to_list(length=None)
    
    async def aggregate_scores(self) -> Dict[str, Any]:
        """Count, sum and max of score over every stored result"""
        pipeline = [
            {"$group": {
                "_id": None,
                "count": {"$sum": 1},
                "total": {"$sum": "$score"},
                "highest": {"$max": "$score"}
            }}
        ]
        rows = await self.collection.aggregate(pipeline).to_list(length=1)
        if not rows:
            return {"count": 0, "total": 0, "highest": 0}
        row = rows[0]
        return {
            "count": row.get("count", 0),
            "total": row.get("total", 0),
            "highest": row.get("highest") or 0
        }
