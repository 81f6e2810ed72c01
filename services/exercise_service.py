"""
Exercise Service

Orchestrates the two pipeline flows against the collaborators:

  generation:  exercise lookup → assessment sample + bank history → prompt
               → model → validator → concurrent bank upserts
  grading:     exercise/quiz lookup → grading pipeline → answers + quiz point saved

Also assembles and edits teacher-authored quizzes (bank check per question)
and generates learning material.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from database.documents import DocumentStore
from database.question_bank import QuestionBank
from generation.assets import asset_filename, in_whitelist, to_serving_path, to_storage_path
from generation.llm_client import GenerationClient
from generation.prompts import exercise_prompt, material_prompt
from generation.schemas import (
    MIXED, RAPID_NAMING, AssessmentEntry, GeneratedMaterial, GenerationRequest,
    HexColorQuestion, MaterialRequest, PathQuestion, QuestionItem, TextQuestion, is_hex_color,
)
from generation.validator import validate_items
from grading.pipeline import GradingPipeline, aggregate_score
from grading.schemas import Exercise, ExerciseQuiz, GradeResult, SubmittedAnswer
from services.ai_config import AIServiceConfig
from services.errors import NotFoundError, ValidationEmpty

log = logging.getLogger("generation.pipeline")

ASSESSMENT_SAMPLE_SIZE = 10


class AuthoredQuestion(BaseModel):
    """Question typed in by a teacher; `question` may be a bare string."""
    method: int = Field(..., ge=1, le=6)
    question: Union[str, Dict[str, Any]]
    key: str = Field(..., min_length=1)

    @field_validator("key")
    @classmethod
    def _key_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("answer key must not be blank")
        return v

    @field_validator("question")
    @classmethod
    def _question_not_blank(cls, v: Union[str, Dict[str, Any]]) -> Union[str, Dict[str, Any]]:
        value = v.get("value") if isinstance(v, dict) else v
        if not isinstance(value, str) or not value.strip():
            raise ValueError("question content must not be empty")
        return v

    @property
    def value(self) -> str:
        if isinstance(self.question, dict):
            return self.question["value"]
        return self.question


def classify_authored(authored: AuthoredQuestion) -> QuestionItem:
    """
    Rapid naming (method 5) questions are a hex colour or an image path;
    every other method is plain text.
    """
    value = authored.value.strip()
    if authored.method == RAPID_NAMING:
        if is_hex_color(value):
            content = HexColorQuestion(value=value)
        else:
            content = PathQuestion(value=to_storage_path(value))
    else:
        content = TextQuestion(value=value)
    return QuestionItem(method=authored.method, question=content, key=authored.key)


def for_display(quiz: ExerciseQuiz) -> ExerciseQuiz:
    """Copy of the quiz with image questions pointing at their serving path."""
    questions = [
        q.model_copy(update={"question": PathQuestion(value=to_serving_path(q.question.value))})
        if isinstance(q.question, PathQuestion) else q
        for q in quiz.questions
    ]
    return quiz.model_copy(update={"questions": questions})


def build_assessment_sample(exercises: List[Exercise], limit: int = ASSESSMENT_SAMPLE_SIZE) -> List[AssessmentEntry]:
    """The `limit` most recent answered questions across a learner's exercises."""
    entries: List[AssessmentEntry] = []
    for exercise in exercises:
        for quiz in exercise.quiz:
            for question in quiz.questions:
                record = next((a for a in quiz.answers if a.question_id == question.id), None)
                if record is None:
                    continue
                entries.append(AssessmentEntry(
                    method=question.method,
                    question=question.question.model_dump(by_alias=True),
                    key=question.key,
                    text=record.transcribed_text,
                    duration=record.duration,
                    similarity_point=record.similarity_point,
                ))
    return entries[-limit:] if limit > 0 else []


class ExerciseService:

    def __init__(
        self,
        config: AIServiceConfig,
        generator: GenerationClient,
        bank: QuestionBank,
        store: DocumentStore,
        grader: GradingPipeline,
    ):
        self.config = config
        self.generator = generator
        self.bank = bank
        self.store = store
        self.grader = grader

    def _exercise(self, exercise_id: str) -> Exercise:
        exercise = self.store.find_by_id(exercise_id)
        if exercise is None:
            raise NotFoundError("Exercise", exercise_id)
        return exercise

    # ─── Generation ────────────────────────────────────────────────────────────

    async def generate_questions(
        self,
        exercise_id: str,
        quantity: int,
        method: int = MIXED,
        model: Optional[str] = None,
    ) -> List[QuestionItem]:
        """
        Generate validated, banked question items for a learner's exercise.

        Raises:
            NotFoundError:       unknown exercise
            GenerationExhausted: the model never produced parseable output
            ValidationEmpty:     every generated item was rejected
        """
        exercise = self._exercise(exercise_id)
        if exercise.children_id:
            exercises = self.store.find({"children_id": exercise.children_id})
        else:
            exercises = [exercise]

        request = GenerationRequest(
            quantity=quantity,
            method=method,
            history=self.bank.history(),
            assessment_sample=build_assessment_sample(exercises),
            asset_whitelist=self.config.asset_whitelist,
        )
        log.info(f"[GENERATE] exercise={exercise_id} quantity={quantity} method={method}")

        parsed = await self.generator.generate(exercise_prompt(request), model=model)
        items = validate_items(parsed, request)
        if not items:
            raise ValidationEmpty(quantity)

        codes = await self.bank.upsert_many(items, level=exercise.level)
        return [item.model_copy(update={"code": code}) for item, code in zip(items, codes)]

    async def generate_material(
        self,
        method: int = MIXED,
        difficulty: Optional[str] = None,
        description: str = "",
        model: Optional[str] = None,
    ) -> GeneratedMaterial:
        """Generate one learning-material draft; images outside the whitelist are dropped."""
        request = MaterialRequest(
            difficulty=difficulty,
            method=method,
            description=description,
            asset_whitelist=self.config.asset_whitelist,
        )
        data = await self.generator.generate(material_prompt(request), model=model, expect=dict)
        material = GeneratedMaterial.model_validate(data)

        images = [asset_filename(i) for i in material.images if in_whitelist(i, request.asset_whitelist)]
        update: Dict[str, Any] = {"images": images}
        if method != MIXED:
            update["method"] = method
        return material.model_copy(update=update)

    # ─── Quiz assembly ─────────────────────────────────────────────────────────

    async def add_quiz(
        self,
        exercise_id: str,
        name: str,
        questions: List[AuthoredQuestion],
        description: Optional[str] = None,
    ) -> ExerciseQuiz:
        """
        Append a teacher-authored quiz to an exercise. Each question is banked
        and embedded as an independent copy carrying its content hash.
        """
        exercise = self._exercise(exercise_id)
        banked = await self._bank_authored(questions, exercise.level)

        quiz = ExerciseQuiz(
            id=uuid4().hex,
            name=name,
            description=description,
            date=datetime.now(timezone.utc),
            questions=[item.model_copy(update={"id": uuid4().hex}) for item in banked],
        )
        exercise.quiz.append(quiz)
        self.store.save(exercise)
        log.info(f"[QUIZ] exercise={exercise_id} quiz={quiz.id} questions={len(banked)}")
        return quiz

    async def update_quiz(
        self,
        exercise_id: str,
        quiz_id: str,
        name: str,
        questions: List[AuthoredQuestion],
        description: Optional[str] = None,
    ) -> ExerciseQuiz:
        """
        Replace a quiz's name, description and questions. Edited questions are
        re-classified and re-banked. A question whose content is unchanged keeps
        its id, so answers recorded against it survive; answers to removed
        questions are dropped and the quiz point is recomputed.
        """
        exercise = self._exercise(exercise_id)
        quiz = exercise.find_quiz(quiz_id)
        if quiz is None:
            raise NotFoundError("Quiz", quiz_id)

        banked = await self._bank_authored(questions, exercise.level)

        unused_ids: Dict[str, List[str]] = {}
        for old in quiz.questions:
            unused_ids.setdefault(old.code, []).append(old.id)
        updated = []
        for item in banked:
            reusable = unused_ids.get(item.code)
            ident = reusable.pop(0) if reusable else uuid4().hex
            updated.append(item.model_copy(update={"id": ident}))

        kept_ids = {q.id for q in updated}
        answers = [a for a in quiz.answers if a.question_id in kept_ids]

        quiz.name = name
        quiz.description = description
        quiz.questions = updated
        quiz.answers = answers
        quiz.quiz_point = aggregate_score((a.similarity_point for a in answers), len(updated)) if answers else None

        self.store.save(exercise)
        log.info(f"[QUIZ] exercise={exercise_id} quiz={quiz_id} updated, questions={len(updated)} "
                 f"answers kept={len(answers)}")
        return quiz

    async def _bank_authored(self, questions: List[AuthoredQuestion], level: Optional[int]) -> List[QuestionItem]:
        items = [classify_authored(q) for q in questions]
        codes = await self.bank.upsert_many(items, level=level)
        return [item.model_copy(update={"code": code}) for item, code in zip(items, codes)]

    # ─── Grading ───────────────────────────────────────────────────────────────

    async def submit_answers(
        self,
        exercise_id: str,
        quiz_id: str,
        answers: List[SubmittedAnswer],
    ) -> Tuple[ExerciseQuiz, GradeResult]:
        """Grade a submission, replace the quiz's answers and save the exercise."""
        exercise = self._exercise(exercise_id)
        quiz = exercise.find_quiz(quiz_id)
        if quiz is None:
            raise NotFoundError("Quiz", quiz_id)

        result, records = await self.grader.grade(quiz, answers)
        quiz.answers = records
        quiz.quiz_point = result.score
        self.store.save(exercise)
        return quiz, result
