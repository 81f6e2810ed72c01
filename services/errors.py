"""
Error taxonomy for the generation and grading pipeline.

Every failure surfaced by the core is one of these kinds; routers map them
onto HTTP status codes.
"""


class PipelineError(Exception):
    """Base class for all pipeline failures."""


class GenerationExhausted(PipelineError):
    """All model-call attempts failed to yield parseable structured output."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Model failed to produce valid JSON after {attempts} attempts")


class ValidationEmpty(PipelineError):
    """The constraint validator dropped every generated item."""

    def __init__(self, requested: int):
        self.requested = requested
        super().__init__(f"No generated item survived validation (requested {requested})")


class UnsupportedMedia(PipelineError):
    """Submitted answer is neither an image nor an audio payload."""

    def __init__(self, media_type: str):
        self.media_type = media_type
        super().__init__(f"Unsupported media type: {media_type!r}")


class TranscriptionServiceError(PipelineError):
    """External OCR / speech-to-text call failed."""

    def __init__(self, endpoint: str, reason: str):
        self.endpoint = endpoint
        self.reason = reason
        super().__init__(f"Transcription call to {endpoint} failed: {reason}")


class NotFoundError(PipelineError):
    """A collaborator lookup (exercise, quiz) returned nothing."""

    def __init__(self, kind: str, ident: str):
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind} not found: {ident}")
