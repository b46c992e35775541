# ccc_mocktest/api/student_routes.py
import logging
from typing import Dict, Any
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..models.schemas import SubmitTestRequest
from ..services.auth_service import STUDENT
from ..services.question_service import QuestionService
from ..services.test_service import TestService
from .dependencies import get_question_service, get_test_service, require_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/student", tags=["student"])

@router.get("/questions")
async def get_questions(question_service: QuestionService = Depends(get_question_service)):
    """Public question list without answer keys"""
    return await question_service.list_public_questions()

@router.post("/submit", status_code=201)
async def submit_test(request_data: SubmitTestRequest,
                      user: Dict[str, Any] = Depends(require_role(STUDENT)),
                      test_service: TestService = Depends(get_test_service)):
    """Score a submission.

    Preferred body: ``{"answers": [{"questionId": ..., "selectedOptionIndex": ...}]}``.
    A plain list of option indexes is still accepted and matched by position.
    """
    outcome = await test_service.submit(user["id"], request_data.answers)
    return JSONResponse(
        status_code=201,
        content={"message": "Test submitted successfully", **outcome}
    )

@router.get("/review")
async def review_test(user: Dict[str, Any] = Depends(require_role(STUDENT)),
                      test_service: TestService = Depends(get_test_service)):
    """Latest result joined with question content"""
    return await test_service.get_student_review(user["id"])

@router.get("/results")
async def get_my_results(user: Dict[str, Any] = Depends(require_role(STUDENT)),
                         test_service: TestService = Depends(get_test_service)):
    results = await test_service.get_student_results(user["id"])
    return {"count": len(results), "results": results}
