"""
Shared router dependencies.
"""

from fastapi import HTTPException, Request

from services.errors import GenerationExhausted, NotFoundError, PipelineError, ValidationEmpty
from services.exercise_service import ExerciseService


def get_exercise_service(request: Request) -> ExerciseService:
    """The service instance wired up by the application lifespan."""
    return request.app.state.exercise_service


def to_http_error(error: PipelineError) -> HTTPException:
    """Map a pipeline failure onto an HTTP status."""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ValidationEmpty):
        return HTTPException(status_code=422, detail="No valid question could be generated, please try again")
    if isinstance(error, GenerationExhausted):
        return HTTPException(status_code=503, detail="Generation failed, please try again")
    return HTTPException(status_code=400, detail=str(error))
