# ccc_mocktest/core/database.py
import logging
from typing import Dict, Any, Optional

import pymongo
from motor.motor_asyncio import AsyncIOMotorClient

from .config import config

logger = logging.getLogger(__name__)

class DatabaseManager:
    """Owns the MongoDB client and the three collections the app uses"""
    
    def __init__(self, uri: Optional[str] = None, db_name: Optional[str] = None):
        self.uri = uri or config.MONGO_URI
        self.db_name = db_name or config.MONGO_DB_NAME
        self.mongo_client = None
        self.db = None
        self.users_collection = None
        self.questions_collection = None
        self.results_collection = None
    
    async def initialize(self):
        """Connect, ping and make sure indexes exist"""
        logger.info("🔄 Initializing Database Manager")
        
        try:
            self.mongo_client = AsyncIOMotorClient(
                self.uri,
                maxPoolSize=config.MONGO_MAX_POOL_SIZE,
                serverSelectionTimeoutMS=config.MONGO_TIMEOUT_MS,
                connectTimeoutMS=config.MONGO_TIMEOUT_MS
            )
            
            # Test connection
            await self.mongo_client.admin.command('ping')
            
            self.db = self.mongo_client[self.db_name]
            self.users_collection = self.db[config.USERS_COLLECTION]
            self.questions_collection = self.db[config.QUESTIONS_COLLECTION]
            self.results_collection = self.db[config.RESULTS_COLLECTION]
            
            await self._create_indexes()
            
            logger.info(f"✅ MongoDB connection established ({self.db_name})")
            
        except Exception as e:
            logger.error(f"❌ MongoDB connection failed: {e}")
            raise Exception(f"MongoDB connection failure: {e}")
    
    async def _create_indexes(self):
        """Create MongoDB indexes"""
        # Roll number uniqueness is enforced here, not only in the service
        await self.users_collection.create_index([("rollNumber", pymongo.ASCENDING)], unique=True)
        
        try:
            await self.questions_collection.create_index([("createdAt", pymongo.ASCENDING)])
            await self.results_collection.create_index([
                ("student", pymongo.ASCENDING),
                ("createdAt", pymongo.DESCENDING)
            ])
            await self.results_collection.create_index([
                ("rollNumber", pymongo.ASCENDING),
                ("createdAt", pymongo.DESCENDING)
            ])
            logger.info("📊 MongoDB indexes created")
        except Exception as idx_error:
            logger.warning(f"⚠️ Index creation failed: {idx_error}")
    
    async def validate_connection(self) -> Dict[str, Any]:
        """Validate database connection"""
        status = {
            "mongodb": False,
            "collections_accessible": False,
            "overall": False
        }
        
        if self.mongo_client is None:
            return status
        
        try:
            await self.mongo_client.admin.command('ping')
            status["mongodb"] = True
            
            await self.questions_collection.count_documents({}, limit=1)
            status["collections_accessible"] = True
        except Exception as e:
            logger.error(f"❌ MongoDB validation failed: {e}")
        
        status["overall"] = status["mongodb"] and status["collections_accessible"]
        return status
    
    def close(self):
        """Close database connections"""
        if self.mongo_client:
            self.mongo_client.close()
            self.mongo_client = None
            logger.info("✅ Database connections closed")

# Singleton pattern for database manager
_db_manager = None

def get_db_manager() -> DatabaseManager:
    """Get database manager instance (singleton)"""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager

def close_db_manager():
    """Close database manager instance"""
    global _db_manager
    if _db_manager:
        _db_manager.close()
        _db_manager = None
