"""
FastAPI routes and API layer
"""

from .auth_routes import router as auth_router
from .student_routes import router as student_router
from .admin_routes import router as admin_router

__all__ = ["auth_router", "student_router", "admin_router"]
