# ccc_mocktest/api/admin_routes.py
import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..models.schemas import QuestionRequest
from ..services.auth_service import ADMIN
from ..services.question_service import QuestionService
from ..services.test_service import TestService
from .dependencies import get_question_service, get_test_service, require_role

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_role(ADMIN))]
)

# ==================== Questions ====================

@router.post("/questions", status_code=201)
async def create_question(request_data: QuestionRequest,
                          question_service: QuestionService = Depends(get_question_service)):
    question = await question_service.create_question(request_data.model_dump())
    return JSONResponse(
        status_code=201,
        content={"message": "Question added successfully", "question": question}
    )

@router.get("/questions")
async def list_questions(question_service: QuestionService = Depends(get_question_service)):
    return await question_service.list_questions()

@router.get("/questions/{question_id}")
async def get_question(question_id: str,
                       question_service: QuestionService = Depends(get_question_service)):
    return await question_service.get_question(question_id)

@router.put("/questions/{question_id}")
async def update_question(question_id: str, request_data: QuestionRequest,
                          question_service: QuestionService = Depends(get_question_service)):
    updated = await question_service.update_question(
        question_id, request_data.model_dump(exclude_unset=True)
    )
    return {"message": "Question updated successfully", "question": updated}

@router.delete("/questions/{question_id}")
async def delete_question(question_id: str,
                          question_service: QuestionService = Depends(get_question_service)):
    await question_service.delete_question(question_id)
    return {"message": "Question deleted successfully"}

# ==================== Results ====================

@router.get("/results")
async def get_all_results(test_service: TestService = Depends(get_test_service)):
    results = await test_service.get_all_results()
    return {"count": len(results), "results": results}

@router.get("/stats")
async def get_stats(test_service: TestService = Depends(get_test_service)):
    return await test_service.get_stats()

@router.get("/student/{roll_number}/review")
async def get_student_review(roll_number: str,
                             test_service: TestService = Depends(get_test_service)):
    return await test_service.get_review_by_roll_number(roll_number)
