"""
Pydantic models for request validation
"""

from .schemas import (
    RegisterRequest,
    LoginRequest,
    SubmitTestRequest,
    QuestionRequest
)

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "SubmitTestRequest",
    "QuestionRequest"
]
