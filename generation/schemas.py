"""
Pydantic schemas for the exercise generation pipeline.

Question content is a closed tagged variant: Text | Path | HexColor.
The model (and the web client) spell the tag as "type": "text" | "path" | "hex".
"""

import re
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator


HEX_COLOR_RE = re.compile(r"^#([0-9a-fA-F]{8}|[0-9a-fA-F]{6}|[0-9a-fA-F]{4}|[0-9a-fA-F]{3})$")

# Method tags
LISTENING = 1
WRITING = 2
READING_ALOUD = 3
WORD_ORDERING = 4
RAPID_NAMING = 5
ARITHMETIC = 6

MIXED = 0   # request-only: let the model pick per item


def is_hex_color(value: str) -> bool:
    return bool(HEX_COLOR_RE.match(value or ""))


# ─── Question content variants ────────────────────────────────────────────────

class _QuestionBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class TextQuestion(_QuestionBase):
    kind: Literal["text"] = Field("text", alias="type")
    value: str


class PathQuestion(_QuestionBase):
    """Image-backed question; value is a filename or a storage/serving path."""
    kind: Literal["path"] = Field("path", alias="type")
    value: str = Field(..., min_length=1)

    @property
    def filename(self) -> str:
        return self.value.split("/")[-1]


class HexColorQuestion(_QuestionBase):
    kind: Literal["hex"] = Field("hex", alias="type")
    value: str

    @field_validator("value")
    @classmethod
    def _check_hex(cls, v: str) -> str:
        if not is_hex_color(v):
            raise ValueError(f"not a hex colour: {v!r}")
        return v


def _question_kind(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return value.get("type", value.get("kind", "text"))
    return getattr(value, "kind", None)


Question = Annotated[
    Union[
        Annotated[TextQuestion, Tag("text")],
        Annotated[PathQuestion, Tag("path")],
        Annotated[HexColorQuestion, Tag("hex")],
    ],
    Discriminator(_question_kind),
]


# ─── Question item ────────────────────────────────────────────────────────────

class QuestionItem(BaseModel):
    """One exercise question with its answer key."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    method: int
    question: Question
    key: str
    code: Optional[str] = None          # content hash, set once the item is banked

    @classmethod
    def from_generated(cls, data: Dict[str, Any]) -> "QuestionItem":
        """
        Build an item from one element of the model's JSON array.

        Raises ValueError / pydantic.ValidationError when the element is
        structurally wrong (callers drop such items).
        """
        if not isinstance(data, dict):
            raise ValueError("item is not an object")
        method = data.get("method")
        key = data.get("key")
        question = data.get("question")
        if isinstance(method, float) and method.is_integer():
            method = int(method)
        if isinstance(method, bool) or not isinstance(method, int):
            raise ValueError(f"method must be an integer, got {method!r}")
        if not isinstance(key, str):
            raise ValueError("key must be a string")
        if not isinstance(question, dict) or not isinstance(question.get("value"), str):
            raise ValueError("question must carry a string value")

        raw_type = str(question.get("type") or "text").lower()
        value = question["value"]
        if raw_type == "path":
            content = PathQuestion(value=value)
        elif raw_type == "hex" or (raw_type == "text" and is_hex_color(value)):
            content = HexColorQuestion(value=value)
        else:
            content = TextQuestion(value=value)
        return cls(method=method, question=content, key=key)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ─── Requests ─────────────────────────────────────────────────────────────────

class AssessmentEntry(BaseModel):
    """One graded answer fed back to the model as context."""
    method: int
    question: Dict[str, Any]
    key: str
    text: Optional[str] = None
    duration: Optional[str] = None
    similarity_point: Optional[float] = None


class GenerationRequest(BaseModel):
    """Ephemeral input to one quiz-item generation run."""
    quantity: int = Field(..., gt=0)
    method: int = Field(MIXED, ge=0, le=6)
    history: List[Dict[str, Any]] = Field(default_factory=list)
    assessment_sample: List[AssessmentEntry] = Field(default_factory=list, max_length=10)
    asset_whitelist: List[str] = Field(default_factory=list)


class MaterialRequest(BaseModel):
    """Input to one learning-material generation run."""
    difficulty: Optional[str] = None
    method: int = Field(MIXED, ge=0, le=6)
    description: str = ""
    asset_whitelist: List[str] = Field(default_factory=list)


# ─── Generation output types ──────────────────────────────────────────────────

class GeneratedMaterial(BaseModel):
    """Learning material as returned by the model."""
    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    method: int = MIXED
    description: str = ""
    images: List[str] = Field(default_factory=list)
    content: str = ""
    readed_text: str = Field("", alias="readedText")
    is_hidden: bool = Field(False, alias="isHidden")
    video_url: str = Field("", alias="videoUrl")
