"""
Endpoint configuration for the external AI service.

Passed explicitly into GenerationClient and TranscriptionDispatcher.
"""

import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


# Object images shipped with the platform (storage/exercise/<name>.png)
DEFAULT_ASSET_WHITELIST = [
    "anjing.png",
    "buku.png",
    "gunting.png",
    "kucing.png",
    "kursi.png",
    "meja.png",
    "mobil.png",
    "motor.png",
    "pensil.png",
    "pesawat.png",
    "singa.png",
    "ular.png",
]

DEFAULT_MODEL = "gpt-oss:20b-cloud"


class AIServiceConfig(BaseModel):
    """Where and how to reach the AI service."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(..., min_length=1, description="Base URL of the AI service")
    generate_path: str = "/llm-quiz/api/generate"
    ocr_path: str = "/image-processing"
    speech_path: str = "/speech-to-text"
    default_model: str = DEFAULT_MODEL
    max_attempts: int = Field(3, ge=1)
    asset_whitelist: List[str] = Field(default_factory=lambda: list(DEFAULT_ASSET_WHITELIST))

    def url(self, path: str) -> str:
        return self.base_url.rstrip("/") + path

    @classmethod
    def from_env(cls) -> "AIServiceConfig":
        """Build the config from environment variables (and a .env file if present)."""
        load_dotenv()
        base_url = os.getenv("AI_API_URL")
        if not base_url:
            raise RuntimeError(
                "AI_API_URL is not set. Add it to your .env file."
            )
        return cls(
            base_url=base_url,
            default_model=os.getenv("AI_MODEL", DEFAULT_MODEL),
            max_attempts=int(os.getenv("AI_MAX_ATTEMPTS", "3")),
        )
