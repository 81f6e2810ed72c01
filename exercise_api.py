"""
Exercise Pipeline API — Main Application
FastAPI application exposing question generation, material generation and
answer grading on top of the generation & grading pipeline.
"""

from dotenv import load_dotenv
load_dotenv()

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from database.database import Base, SessionLocal, engine
from database.documents import SqlDocumentStore
from database.question_bank import QuestionBank
from generation.llm_client import GenerationClient
from grading.pipeline import GradingPipeline
from grading.transcription import TranscriptionDispatcher
from routers import exercises, materials, question_bank
from services.ai_config import AIServiceConfig
from services.exercise_service import ExerciseService

# Use Python's standard logger so output appears in the uvicorn console
logging.basicConfig(level=logging.INFO, format="%(asctime)s  %(levelname)s  %(message)s")


def build_service(config: AIServiceConfig) -> ExerciseService:
    """Wire the pipeline components against the configured database."""
    return ExerciseService(
        config=config,
        generator=GenerationClient(config),
        bank=QuestionBank(SessionLocal),
        store=SqlDocumentStore(SessionLocal),
        grader=GradingPipeline(TranscriptionDispatcher(config)),
    )


def create_app(service: Optional[ExerciseService] = None) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup: create tables + wire the service."""
        owned = service is None
        if owned:
            Base.metadata.create_all(bind=engine)
            app.state.exercise_service = build_service(AIServiceConfig.from_env())
        else:
            app.state.exercise_service = service
        yield
        if owned:
            await app.state.exercise_service.generator.aclose()
            await app.state.exercise_service.grader.dispatcher.aclose()

    app = FastAPI(
        title="Exercise Pipeline API",
        description="Exercise generation and answer grading for the tutoring platform",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(exercises.router)
    app.include_router(materials.router)
    app.include_router(question_bank.router)

    @app.get("/")
    def read_root():
        return {"status": "Online"}

    return app


app = create_app()
