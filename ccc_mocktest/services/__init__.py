"""
Business logic: authentication, question bank, scoring and review
"""

from .auth_service import AuthService
from .question_service import QuestionService
from .test_service import TestService

__all__ = [
    "AuthService",
    "QuestionService",
    "TestService"
]
