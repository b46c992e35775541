# ccc_mocktest/models/schemas.py
"""
Pydantic request bodies. Fields are optional so that missing values reach the
services, which answer with their own validation messages.
"""

from typing import Any, List, Optional

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    rollNumber: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class LoginRequest(BaseModel):
    rollNumber: Optional[str] = None
    password: Optional[str] = None


class SubmitTestRequest(BaseModel):
    # Validated by the test service: keyed objects or positional values
    answers: Any = None


class QuestionRequest(BaseModel):
    questionText: Optional[str] = None
    options: Optional[List[str]] = None
    questionTextHi: Optional[str] = None
    optionsHi: Optional[List[str]] = None
    correctAnswer: Optional[str] = None
    correctAnswerIndex: Optional[int] = None
