"""
SQLAlchemy models for the exercise pipeline

question_bank — content-addressed catalog of accepted questions (one row per hash)
exercises     — exercise documents owned by the learning-management side
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from sqlalchemy.sql import func

from database.database import Base


class QuestionBankEntry(Base):
    """
    One known question. Created once per unique content hash, never mutated.
    The unique constraint on `code` makes concurrent inserts of the same
    content collapse to one row.
    """
    __tablename__ = "question_bank"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(32), unique=True, nullable=False, index=True)  # md5 content hash
    level = Column(Integer, nullable=True, index=True)  # learner level of the exercise that banked it
    method = Column(Integer, nullable=False, index=True)  # 1..6
    question_type = Column(String(10), nullable=False)  # text | path | hex
    question_value = Column(Text, nullable=False)  # storage form for path items
    key = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<QuestionBankEntry(code='{self.code}', method={self.method})>"


class ExerciseDocument(Base):
    """Exercise stored as a JSON document, looked up by id or learner."""
    __tablename__ = "exercises"

    id = Column(String(36), primary_key=True)
    children_id = Column(String(64), nullable=True, index=True)
    body = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<ExerciseDocument(id='{self.id}', children_id='{self.children_id}')>"
