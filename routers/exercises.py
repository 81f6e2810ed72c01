"""
Exercises Router — /exercises

Endpoints:
  POST /exercises/generate                        — generate validated questions for an exercise
  POST /exercises/{exercise_id}/quizzes           — add a teacher-authored quiz
  PUT  /exercises/{exercise_id}/quizzes/{quiz_id} — edit a quiz, re-banking its questions
  POST /exercises/answer                          — grade a learner's submission
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from grading.schemas import SubmittedAnswer
from routers.deps import get_exercise_service, to_http_error
from services.errors import PipelineError
from services.exercise_service import AuthoredQuestion, ExerciseService, for_display

router = APIRouter(prefix="/exercises", tags=["exercises"])

log = logging.getLogger("generation.pipeline")


# ─── Schemas ───────────────────────────────────────────────────────────────────

class GenerateQuestionsRequest(BaseModel):
    exercise_id: str
    quantity: int = Field(..., ge=1, le=50)
    method: int = Field(0, ge=0, le=6, description="0 = mixed")


class QuizCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    questions: List[AuthoredQuestion] = Field(..., min_length=1)


class AnswerRequest(BaseModel):
    exercise_id: str
    quiz_id: str
    answers: List[SubmittedAnswer]


# ─── Routes ────────────────────────────────────────────────────────────────────

@router.post("/generate")
async def generate_questions(
    request: GenerateQuestionsRequest,
    service: ExerciseService = Depends(get_exercise_service),
):
    """Generate, validate and bank question items for the exercise's learner."""
    try:
        items = await service.generate_questions(request.exercise_id, request.quantity, request.method)
    except PipelineError as e:
        log.warning(f"[GENERATE] failed: {e}")
        raise to_http_error(e)

    return {
        "success": True,
        "message": "Success generating questions",
        "data": {"questions": [item.to_payload() for item in items]},
    }


@router.post("/{exercise_id}/quizzes", status_code=201)
async def create_quiz(
    exercise_id: str,
    request: QuizCreateRequest,
    service: ExerciseService = Depends(get_exercise_service),
):
    """Add a quiz; every question is checked against the question bank."""
    try:
        quiz = await service.add_quiz(exercise_id, request.name, request.questions, request.description)
    except PipelineError as e:
        raise to_http_error(e)

    return {
        "success": True,
        "message": "Successfully added new quiz",
        "data": for_display(quiz).model_dump(mode="json", by_alias=True),
    }


@router.post("/answer")
async def answer(
    request: AnswerRequest,
    service: ExerciseService = Depends(get_exercise_service),
):
    """Transcribe and score each answer, then store the quiz point."""
    try:
        quiz, result = await service.submit_answers(request.exercise_id, request.quiz_id, request.answers)
    except PipelineError as e:
        raise to_http_error(e)

    return {
        "success": True,
        "message": "Answers processed successfully",
        "data": {
            "quiz": for_display(quiz).model_dump(mode="json", by_alias=True),
            "result": result.model_dump(),
        },
    }


@router.put("/{exercise_id}/quizzes/{quiz_id}")
async def update_quiz(
    exercise_id: str,
    quiz_id: str,
    request: QuizCreateRequest,
    service: ExerciseService = Depends(get_exercise_service),
):
    """Replace a quiz's questions; edited questions are re-banked."""
    try:
        quiz = await service.update_quiz(exercise_id, quiz_id, request.name, request.questions, request.description)
    except PipelineError as e:
        raise to_http_error(e)

    return {
        "success": True,
        "message": "Quiz successfully updated",
        "data": for_display(quiz).model_dump(mode="json", by_alias=True),
    }
