"""
Question Bank Router — /question-bank

Endpoints:
  GET /question-bank?level=&method= — banked questions for one level and method
"""

from fastapi import APIRouter, Depends, Query

from routers.deps import get_exercise_service
from services.exercise_service import ExerciseService

router = APIRouter(prefix="/question-bank", tags=["question-bank"])


@router.get("")
def list_questions(
    level: int = Query(..., ge=1),
    method: int = Query(..., ge=1, le=6),
    service: ExerciseService = Depends(get_exercise_service),
):
    return {
        "success": True,
        "message": "Successfully received data",
        "data": service.bank.entries(level, method),
    }
