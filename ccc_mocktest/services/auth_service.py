# ccc_mocktest/services/auth_service.py
import asyncio
import logging
from typing import Dict, Any, Optional

from ..core.exceptions import DuplicateUserError, InvalidCredentialsError, ValidationError
from ..core.security import hash_password, verify_password, create_access_token
from ..core.stores import UserStore
from ..core.utils import ValidationUtils

logger = logging.getLogger(__name__)

STUDENT = "student"
ADMIN = "admin"
ROLES = (STUDENT, ADMIN)

MAX_ROLL_NUMBER_LENGTH = 100
MAX_NAME_LENGTH = 200

def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """User fields that are safe to return; never the password hash"""
    return {
        "id": str(user["_id"]),
        "name": user.get("name", ""),
        "rollNumber": user.get("rollNumber", ""),
        "role": user.get("role", STUDENT)
    }

class AuthService:
    """Registration and login against the credential store.

    bcrypt is CPU bound, so hashing and verification run in the default
    executor instead of on the event loop.
    """
    
    def __init__(self, user_store: UserStore):
        self.user_store = user_store
    
    async def _hash_password(self, password: str) -> str:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, hash_password, password)
    
    async def _verify_password(self, password: str, password_hash: str) -> bool:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, verify_password, password, password_hash)
    
    async def register(self, name: Optional[str], roll_number: Optional[str],
                       password: Optional[str], role: Optional[str] = None) -> Dict[str, Any]:
        if not all(ValidationUtils.is_non_empty_string(value) for value in (name, roll_number, password)):
            raise ValidationError("Name, roll number and password are required")
        
        role = role or STUDENT
        if role not in ROLES:
            raise ValidationError(f"Role must be one of: {', '.join(ROLES)}")
        
        name = name.strip()
        roll_number = roll_number.strip()
        
        if len(roll_number) > MAX_ROLL_NUMBER_LENGTH:
            raise ValidationError(f"Roll number cannot be longer than {MAX_ROLL_NUMBER_LENGTH} characters")
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError(f"Name cannot be longer than {MAX_NAME_LENGTH} characters")
        
        if await self.user_store.find_by_roll_number(roll_number):
            logger.warning(f"Registration rejected, duplicate roll number: {roll_number}")
            raise DuplicateUserError()
        
        user = await self.user_store.create({
            "name": name,
            "rollNumber": roll_number,
            "password": await self._hash_password(password),
            "role": role
        })
        
        logger.info(f"✅ Registered {role}: {roll_number}")
        return public_user(user)
    
    async def login(self, roll_number: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        if not roll_number or not password:
            raise InvalidCredentialsError()
        
        user = await self.user_store.find_by_roll_number(roll_number.strip())
        if not user or not await self._verify_password(password, user.get("password", "")):
            raise InvalidCredentialsError()
        
        token = create_access_token(str(user["_id"]), user.get("role", STUDENT))
        logger.info(f"✅ Login: {user['rollNumber']}")
        
        return {
            "token": token,
            "user": public_user(user)
        }
