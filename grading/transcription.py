"""
Transcription Dispatcher

Routes a learner's recorded answer to the AI service:

    image/*  → POST {ocr_path}     {"image": <full data URL>, "correct": <key>}
    audio/*  → POST {speech_path}  {"audio": <bare base64>,   "correct": <key>}

Both reply {"text": str, "similarity": number}; the service's similarity is
the primary score signal.
"""

import logging
from typing import Optional

import httpx

from grading.schemas import TranscriptionResult
from services.ai_config import AIServiceConfig
from services.errors import TranscriptionServiceError, UnsupportedMedia

log = logging.getLogger("grading.pipeline")


def strip_data_url(payload: str) -> str:
    """'data:audio/webm;base64,AAAA' → 'AAAA'; bare base64 is returned unchanged."""
    head, sep, body = payload.partition(",")
    return body if sep and body else payload


class TranscriptionDispatcher:
    """OCR / speech-to-text caller."""

    def __init__(self, config: AIServiceConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._http = http_client

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=httpx.Timeout(None))
        return self._http

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def transcribe(self, media_type: str, payload: str, expected_key: str) -> TranscriptionResult:
        """
        Transcribe one answer.

        Raises:
            UnsupportedMedia:          media type is neither image/* nor audio/*
            TranscriptionServiceError: the external call failed
        """
        media_type = (media_type or "").lower()
        if media_type.startswith("image/"):
            path, body, tag = self.config.ocr_path, {"image": payload, "correct": expected_key}, "OCR"
        elif media_type.startswith("audio/"):
            path, body, tag = self.config.speech_path, {"audio": strip_data_url(payload), "correct": expected_key}, "STT"
        else:
            raise UnsupportedMedia(media_type)

        try:
            response = await self._client().post(self.config.url(path), json=body)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            log.error(f"[{tag}] call failed: {e}")
            raise TranscriptionServiceError(path, str(e)) from e

        if not isinstance(data, dict):
            raise TranscriptionServiceError(path, "reply is not a JSON object")

        similarity = data.get("similarity")
        hint = float(similarity) if isinstance(similarity, (int, float)) and not isinstance(similarity, bool) else None
        result = TranscriptionResult(text=str(data.get("text") or ""), similarity_hint=hint)
        log.info(f"[{tag}] text={result.text[:60]!r} similarity={hint}")
        return result
