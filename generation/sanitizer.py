"""
Model output clean-up.

sanitize() strips incidental formatting around a raw model reply;
parse() attempts a JSON parse and returns None instead of raising, so the
generation client can treat any failure as a uniform retry signal.
"""

import json
import re
from typing import Any, Optional


_FENCE_OPEN_RE = re.compile(r"^```[a-zA-Z]*[ \t]*\n?")
_FENCE_CLOSE_RE = re.compile(r"\n?```$")
_PREAMBLE_RE = re.compile(r"^here is[^:\n]*:", re.IGNORECASE)


def sanitize(raw: str) -> str:
    """Trim whitespace, code fences and a leading "Here is ...:" preamble."""
    cleaned = (raw or "").strip()
    # Repeat until a pass changes nothing
    while True:
        previous = cleaned
        cleaned = _PREAMBLE_RE.sub("", cleaned, count=1).strip()
        cleaned = _FENCE_OPEN_RE.sub("", cleaned, count=1).strip()
        cleaned = _FENCE_CLOSE_RE.sub("", cleaned, count=1).strip()
        if cleaned == previous:
            return cleaned


def parse(clean: str) -> Optional[Any]:
    """JSON-decode already sanitized text; None on failure."""
    try:
        return json.loads(clean)
    except (TypeError, ValueError):
        return None
