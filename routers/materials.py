"""
Materials Router — /materials

Endpoints:
  POST /materials/generate — draft one learning material with the model
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from routers.deps import get_exercise_service, to_http_error
from services.errors import PipelineError
from services.exercise_service import ExerciseService

router = APIRouter(prefix="/materials", tags=["materials"])


class GenerateMaterialRequest(BaseModel):
    method: int = Field(0, ge=0, le=6)
    difficulty: Optional[str] = None
    description: str = ""


@router.post("/generate")
async def generate_material(
    request: GenerateMaterialRequest,
    service: ExerciseService = Depends(get_exercise_service),
):
    try:
        material = await service.generate_material(request.method, request.difficulty, request.description)
    except PipelineError as e:
        raise to_http_error(e)

    return {
        "success": True,
        "message": "Success generating materials",
        "data": {"material": material.model_dump(by_alias=True)},
    }
