# ccc_mocktest/core/config.py
import os
from typing import Dict, Any, List
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Config:
    """Centralized configuration management"""
    
    # ==================== API Configuration ====================
    API_TITLE = "CCC Mock Test API"
    API_DESCRIPTION = "Mock test backend: question bank, submissions, scoring and review"
    API_VERSION = "1.0.0"
    
    API_HOST = os.getenv("API_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("API_PORT", "5000"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    
    # Comma separated, "*" allows everything
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    GZIP_MINIMUM_SIZE = int(os.getenv("GZIP_MINIMUM_SIZE", "1000"))
    
    # ==================== Database Configuration ====================
    MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "ccc_mocktest")
    MONGO_MAX_POOL_SIZE = int(os.getenv("MONGO_MAX_POOL_SIZE", "50"))
    MONGO_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))
    
    # Collections
    USERS_COLLECTION = os.getenv("USERS_COLLECTION", "users")
    QUESTIONS_COLLECTION = os.getenv("QUESTIONS_COLLECTION", "questions")
    RESULTS_COLLECTION = os.getenv("RESULTS_COLLECTION", "results")
    
    # ==================== Auth Configuration ====================
    JWT_SECRET = os.getenv("JWT_SECRET", "")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRES_DAYS = int(os.getenv("JWT_EXPIRES_DAYS", "7"))
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))
    
    # ==================== Test Configuration ====================
    QUESTION_CACHE_TTL_SECONDS = float(os.getenv("QUESTION_CACHE_TTL_SECONDS", "30"))
    ALLOW_MULTIPLE_ATTEMPTS = os.getenv("ALLOW_MULTIPLE_ATTEMPTS", "true").lower() == "true"
    MIN_OPTIONS_PER_QUESTION = 2
    
    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
    
    # ==================== Environment Overrides ====================
    @classmethod
    def from_env(cls) -> 'Config':
        """Create config with environment variable overrides"""
        return cls()
    
    # ==================== Validation ====================
    def validate(self) -> Dict[str, Any]:
        """Validate configuration and return status"""
        issues = []
        
        if not self.JWT_SECRET:
            issues.append("JWT_SECRET is required")
        
        if not self.MONGO_URI:
            issues.append("MONGO_URI is required")
        
        if self.JWT_EXPIRES_DAYS < 1:
            issues.append("JWT_EXPIRES_DAYS must be at least 1")
        
        if not (4 <= self.BCRYPT_ROUNDS <= 31):
            issues.append("BCRYPT_ROUNDS must be between 4 and 31")
        
        if self.QUESTION_CACHE_TTL_SECONDS < 0:
            issues.append("QUESTION_CACHE_TTL_SECONDS cannot be negative")
        
        return {
            "valid": len(issues) == 0,
            "issues": issues,
            "config_loaded": True,
            "allow_multiple_attempts": self.ALLOW_MULTIPLE_ATTEMPTS
        }

# Global configuration instance
config = Config.from_env()

# Validate on import
validation_result = config.validate()
if not validation_result["valid"]:
    import logging
    logger = logging.getLogger(__name__)
    logger.warning(f"Configuration issues: {validation_result['issues']}")
