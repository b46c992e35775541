# ccc_mocktest/core/security.py
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional

import bcrypt
import jwt

from .config import config
from .exceptions import AuthenticationError

logger = logging.getLogger(__name__)

def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Salted bcrypt hash of a plaintext password"""
    salt = bcrypt.gensalt(rounds=rounds or config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash"""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Stored password hash is malformed")
        return False

def create_access_token(user_id: str, role: str, expires_days: Optional[int] = None) -> str:
    """Issue a signed token carrying the user id and role"""
    days = config.JWT_EXPIRES_DAYS if expires_days is None else expires_days
    payload = {
        "id": user_id,
        "role": role,
        "exp": datetime.now(timezone.utc) + timedelta(days=days)
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)

def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry, return the identity claims"""
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Not authorized, token failed")
    
    if not payload.get("id") or not payload.get("role"):
        raise AuthenticationError("Not authorized, token failed")
    
    return {"id": str(payload["id"]), "role": payload["role"]}
