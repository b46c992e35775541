# ccc_mocktest/api/auth_routes.py
import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..models.schemas import RegisterRequest, LoginRequest
from ..services.auth_service import AuthService
from .dependencies import get_auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.post("/register", status_code=201)
async def register(request_data: RegisterRequest,
                   auth_service: AuthService = Depends(get_auth_service)):
    """Create a user; role defaults to student"""
    user = await auth_service.register(
        request_data.name,
        request_data.rollNumber,
        request_data.password,
        request_data.role
    )
    return JSONResponse(
        status_code=201,
        content={"message": "Registered successfully", "user": user}
    )

@router.post("/login")
async def login(request_data: LoginRequest,
                auth_service: AuthService = Depends(get_auth_service)):
    """Exchange roll number and password for a bearer token"""
    session = await auth_service.login(request_data.rollNumber, request_data.password)
    return {
        "message": "Login successful",
        "token": session["token"],
        "user": session["user"]
    }
