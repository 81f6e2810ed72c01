"""
Pydantic schemas for answer grading and the exercise documents it updates.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from generation.schemas import QuestionItem


class SubmittedAnswer(BaseModel):
    """One answer as sent by the learner's client."""
    question_id: str
    answer: str = Field(..., description="Data URL or bare base64 of the recorded answer")
    file_type: str = Field(..., description="MIME type, e.g. image/png or audio/webm")
    duration: str = ""
    time_opened: Optional[datetime] = None
    time_answered: Optional[datetime] = None


class TranscriptionResult(BaseModel):
    text: str = ""
    similarity_hint: Optional[float] = None


class AnswerRecord(BaseModel):
    """A graded answer stored on the quiz."""
    question_id: str
    raw_answer_payload: str
    media_type: str
    transcribed_text: str = ""
    similarity_point: float = Field(0.0, ge=0, le=100)
    local_similarity: Optional[float] = Field(None, ge=0, le=100)
    duration: str = ""
    time_opened: Optional[datetime] = None
    time_answered: Optional[datetime] = None


class GradeResult(BaseModel):
    quiz_id: Optional[str] = None
    score: int = 0
    answered: int = 0
    total_questions: int = 0


class ExerciseQuiz(BaseModel):
    """Ordered questions plus the answers recorded against them."""
    id: Optional[str] = None
    name: str
    description: Optional[str] = None
    date: Optional[datetime] = None
    questions: List[QuestionItem] = Field(default_factory=list)
    answers: List[AnswerRecord] = Field(default_factory=list)
    quiz_point: Optional[int] = None
    is_hidden: bool = False

    @model_validator(mode="after")
    def _answers_reference_questions(self) -> "ExerciseQuiz":
        known = {q.id for q in self.questions}
        for record in self.answers:
            if record.question_id not in known:
                raise ValueError(f"answer references unknown question {record.question_id!r}")
        return self

    def find_question(self, question_id: str) -> Optional[QuestionItem]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


class Exercise(BaseModel):
    """Exercise document: a named set of quizzes assigned to one learner."""
    id: str
    children_id: Optional[str] = None
    teacher_id: Optional[str] = None
    level: Optional[int] = Field(None, description="Learner level; questions banked for this exercise carry it")
    name: str
    description: Optional[str] = None
    quiz: List[ExerciseQuiz] = Field(default_factory=list)

    def find_quiz(self, quiz_id: str) -> Optional[ExerciseQuiz]:
        for quiz in self.quiz:
            if quiz.id == quiz_id:
                return quiz
        return None
