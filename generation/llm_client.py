"""
Step 2 — Generation Client

Calls the AI service's text-generation endpoint and turns its reply into
structured data:

    POST {base_url}{generate_path}   {"model": ..., "prompt": ..., "stream": false}
    → {"response": "<raw, possibly fenced text>"}

Up to `max_attempts` calls are made. Transport errors and unparseable
replies both count as a failed attempt; retries are immediate.
"""

import logging
from typing import Any, Optional

import httpx

from generation.sanitizer import parse, sanitize
from services.ai_config import AIServiceConfig
from services.errors import GenerationExhausted

log = logging.getLogger("generation.pipeline")


class GenerationClient:
    """Text-generation caller with bounded retry-and-repair."""

    def __init__(self, config: AIServiceConfig, http_client: Optional[httpx.AsyncClient] = None):
        """
        Args:
            config:      AI service endpoints and defaults
            http_client: Optional shared client (tests inject one with a mock transport)
        """
        self.config = config
        self._http = http_client

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            # No deadline: a hung call blocks this unit of work
            self._http = httpx.AsyncClient(timeout=httpx.Timeout(None))
        return self._http

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def call_model(self, prompt: str, model: str) -> str:
        """One raw call to the generation endpoint. Raises on transport/endpoint errors."""
        response = await self._client().post(
            self.config.url(self.config.generate_path),
            json={"model": model, "prompt": prompt, "stream": False},
        )
        response.raise_for_status()
        data = response.json()
        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise ValueError("endpoint reply has no 'response' text")
        return text

    async def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_attempts: Optional[int] = None,
        expect: Optional[type] = None,
    ) -> Any:
        """
        Generate and parse structured output.

        Args:
            prompt:       Full instruction text
            model:        Model id (defaults to config.default_model)
            max_attempts: Attempt budget (defaults to config.max_attempts)
            expect:       Required JSON container type (dict / list); other shapes are retried

        Returns:
            The parsed JSON value of the first reply that parses

        Raises:
            GenerationExhausted: no attempt produced parseable output
        """
        model = model or self.config.default_model
        attempts = max_attempts or self.config.max_attempts
        log.info(f"[LLM] generating with model={model}, attempts={attempts}")

        for attempt in range(1, attempts + 1):
            try:
                raw = await self.call_model(prompt, model)
            except (httpx.HTTPError, ValueError) as e:
                log.warning(f"[LLM] attempt {attempt}/{attempts}: endpoint error: {e}")
                continue

            parsed = parse(sanitize(raw))
            if parsed is not None and (expect is None or isinstance(parsed, expect)):
                log.info(f"[LLM] attempt {attempt}/{attempts}: parsed OK")
                return parsed
            log.warning(f"[LLM] attempt {attempt}/{attempts}: unparseable reply: {raw[:200]!r}")

        raise GenerationExhausted(attempts)
