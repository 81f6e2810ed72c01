from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Callable, List

import httpx
import pytest
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from database.database import Base, make_engine  # noqa: E402
from database.documents import SqlDocumentStore  # noqa: E402
from database.question_bank import QuestionBank  # noqa: E402
from services.ai_config import AIServiceConfig  # noqa: E402

BASE_URL = "http://ai.test"


class RecordingHandler:
    """httpx mock handler that records requests and replays canned replies."""

    def __init__(self, replies: Callable[[httpx.Request], httpx.Response]):
        self._replies = replies
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._replies(request)

    def bodies(self) -> list:
        return [json.loads(r.content) for r in self.requests]


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def config() -> AIServiceConfig:
    return AIServiceConfig(base_url=BASE_URL, asset_whitelist=["kucing.png", "meja.png", "singa.png"])


@pytest.fixture
def session_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'pipeline.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


@pytest.fixture
def bank(session_factory) -> QuestionBank:
    return QuestionBank(session_factory)


@pytest.fixture
def store(session_factory) -> SqlDocumentStore:
    return SqlDocumentStore(session_factory)
