# ccc_mocktest/main.py
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import config
from .core.database import get_db_manager, close_db_manager
from .core.exceptions import MockTestError
from .core.stores import UserStore, QuestionStore, ResultStore
from .core.utils import QuestionBankCache, DateTimeUtils
from .services.auth_service import AuthService
from .services.question_service import QuestionService
from .services.test_service import TestService
from .api import auth_router, student_router, admin_router

# Setup logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

def build_services(app: FastAPI, db_manager) -> None:
    """Wire stores, the question cache and services onto app.state"""
    user_store = UserStore(db_manager.users_collection)
    question_store = QuestionStore(db_manager.questions_collection)
    result_store = ResultStore(db_manager.results_collection)
    
    question_cache = QuestionBankCache(ttl=config.QUESTION_CACHE_TTL_SECONDS)
    question_service = QuestionService(question_store, question_cache)
    
    app.state.question_cache = question_cache
    app.state.auth_service = AuthService(user_store)
    app.state.question_service = question_service
    app.state.test_service = TestService(question_service, result_store, user_store)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    logger.info("🚀 CCC Mock Test API starting...")
    
    try:
        validation = config.validate()
        if not validation["valid"]:
            raise Exception(f"Configuration invalid: {validation['issues']}")
        
        logger.info("✅ Configuration validated")
        
        logger.info("🔄 Initializing database...")
        db_manager = get_db_manager()
        await db_manager.initialize()
        
        build_services(app, db_manager)
        
        logger.info("✅ All systems operational")
        logger.info(f"⚡ Question cache TTL: {config.QUESTION_CACHE_TTL_SECONDS}s")
        logger.info(f"📝 Multiple attempts allowed: {config.ALLOW_MULTIPLE_ATTEMPTS}")
        
    except Exception as e:
        logger.error(f"❌ Startup failed: {e}")
        raise Exception(f"Application startup failed: {e}")
    
    yield
    
    logger.info("👋 Shutting down...")
    close_db_manager()
    logger.info("✅ Graceful shutdown completed")

# Create FastAPI application
app = FastAPI(
    title=config.API_TITLE,
    description=config.API_DESCRIPTION,
    version=config.API_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Compress responses; the question list is fetched by every student at once
app.add_middleware(GZipMiddleware, minimum_size=config.GZIP_MINIMUM_SIZE)

# Include API routes
app.include_router(auth_router)
app.include_router(student_router)
app.include_router(admin_router)

def error_response(status_code: int, error: str, message: str, error_type: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "type": error_type
        }
    )

# Exception handlers
@app.exception_handler(MockTestError)
async def mock_test_error_handler(request: Request, exc: MockTestError):
    """Handle domain errors"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return error_response(exc.status_code, exc.error, exc.message, exc.error_type)

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Handle malformed request bodies"""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg')}" if location else (first.get("msg") or "Invalid request")
    logger.warning(f"Request validation error: {message}")
    return error_response(400, "Validation Error", message, "validation_error")

@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle validation errors"""
    logger.warning(f"Validation error: {exc}")
    return error_response(400, "Validation Error", str(exc), "validation_error")

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Keep framework errors (unknown route, wrong method) in the same shape"""
    return error_response(exc.status_code, "HTTP Error", str(exc.detail), "http_error")

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return error_response(500, "Internal Server Error", "An unexpected error occurred", "server_error")

@app.get("/")
async def home():
    """Home endpoint"""
    return {
        "service": config.API_TITLE,
        "version": config.API_VERSION,
        "status": "operational"
    }

@app.get("/health")
async def health_check():
    """Health check"""
    health_status = {
        "status": "healthy",
        "service": "ccc_mocktest_api",
        "version": config.API_VERSION,
        "timestamp": DateTimeUtils.get_current_timestamp()
    }
    
    try:
        db_health = await get_db_manager().validate_connection()
        health_status["database"] = "healthy" if db_health["overall"] else "degraded"
    except Exception as e:
        health_status["database"] = "error"
        logger.warning(f"Database health check failed: {e}")
    
    cache = getattr(app.state, "question_cache", None)
    if cache is not None:
        health_status["question_cache"] = cache.get_stats()
    
    if health_status["database"] != "healthy":
        health_status["status"] = "degraded"
        return JSONResponse(status_code=503, content=health_status)
    
    return health_status

@app.get("/info")
async def api_info():
    """API information and capabilities"""
    return {
        "name": config.API_TITLE,
        "version": config.API_VERSION,
        "description": config.API_DESCRIPTION,
        "configuration": {
            "question_cache_ttl_seconds": config.QUESTION_CACHE_TTL_SECONDS,
            "allow_multiple_attempts": config.ALLOW_MULTIPLE_ATTEMPTS,
            "token_lifetime_days": config.JWT_EXPIRES_DAYS
        },
        "endpoints": {
            "register": "POST /api/auth/register",
            "login": "POST /api/auth/login",
            "questions": "GET /api/student/questions",
            "submit": "POST /api/student/submit",
            "review": "GET /api/student/review",
            "my_results": "GET /api/student/results",
            "manage_questions": "GET/POST /api/admin/questions, GET/PUT/DELETE /api/admin/questions/{id}",
            "all_results": "GET /api/admin/results",
            "stats": "GET /api/admin/stats",
            "student_review": "GET /api/admin/student/{rollNumber}/review",
            "health": "GET /health",
            "docs": "GET /docs"
        }
    }

if __name__ == "__main__":
    import uvicorn
    
    debug_mode = os.getenv('DEBUG_MODE', 'false').lower() == 'true'
    
    logger.info("🚀 Starting CCC Mock Test API")
    logger.info(f"🌐 Server: http://{config.API_HOST}:{config.API_PORT}")
    logger.info(f"📚 Docs: http://{config.API_HOST}:{config.API_PORT}/docs")
    
    uvicorn.run(
        "ccc_mocktest.main:app",
        host=config.API_HOST,
        port=config.API_PORT,
        reload=debug_mode,
        log_level=config.LOG_LEVEL.lower(),
        access_log=debug_mode
    )
