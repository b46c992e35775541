# ccc_mocktest/api/dependencies.py
"""
Request-scoped dependencies: service lookup and the access gate.

Services are built once in the application lifespan and kept on
``app.state``; tests swap them through ``app.dependency_overrides``.
"""

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..core.exceptions import AuthenticationError, PermissionDeniedError
from ..core.security import decode_access_token
from ..services.auth_service import AuthService
from ..services.question_service import QuestionService
from ..services.test_service import TestService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service

def get_question_service(request: Request) -> QuestionService:
    return request.app.state.question_service

def get_test_service(request: Request) -> TestService:
    return request.app.state.test_service

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Dict[str, Any]:
    """Verify the bearer token and return ``{id, role}``"""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthenticationError("Not authorized, no token")
    return decode_access_token(credentials.credentials)

def require_role(role: str) -> Callable:
    """Dependency rejecting authenticated users whose role differs"""
    
    async def check_role(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if user.get("role") != role:
            logger.warning(f"Access denied for user {user.get('id')}: requires {role}")
            raise PermissionDeniedError(f"Access denied: {role} role required")
        return user
    
    return check_role
