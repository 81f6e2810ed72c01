"""
Step 3 — Constraint Validator

Filters and normalises a batch of generated items. Rules, in order; an item
failing any of them is dropped:

  0. structure — method/question/key present with the right types
  1. method is an integer in [1, 6]
  2. a specific requested method (request.method != 0) must match exactly
  3. arithmetic items (method 6) are never image-backed
  4. image items must name a whitelisted asset

Surviving image items are rewritten to their serving path, then the list is
truncated to request.quantity. A short result is not an error.

Word-ordering items (method 4) whose words differ from the key's are kept
but logged.
"""

import logging
import re
from collections import Counter
from typing import Any, List, Optional

from pydantic import ValidationError

from generation.assets import in_whitelist, to_serving_path
from generation.schemas import ARITHMETIC, MIXED, WORD_ORDERING, GenerationRequest, PathQuestion, QuestionItem

log = logging.getLogger("generation.pipeline")

_WORD_SEP_RE = re.compile(r"[\s\-/,|]+")


def word_counts(text: str) -> Counter:
    """Lower-cased words of a sentence, ignoring ' - ' style separators."""
    return Counter(w for w in _WORD_SEP_RE.split((text or "").lower()) if w)


def word_order_mismatch(item: QuestionItem) -> bool:
    """True when a word-ordering item's shuffled words are not exactly the key's words."""
    if item.method != WORD_ORDERING or isinstance(item.question, PathQuestion):
        return False
    return word_counts(item.question.value) != word_counts(item.key)


def _coerce(raw: Any) -> Optional[QuestionItem]:
    if isinstance(raw, QuestionItem):
        return raw
    try:
        return QuestionItem.from_generated(raw)
    except (ValidationError, ValueError) as e:
        log.info(f"[VALIDATE] drop (structure): {e}")
        return None


def rejection_reason(item: QuestionItem, request: GenerationRequest) -> Optional[str]:
    """Name of the first rule the item breaks, or None if it passes all four."""
    if not 1 <= item.method <= 6:
        return "method out of range"
    if request.method != MIXED and item.method != request.method:
        return f"method {item.method} != requested {request.method}"
    if item.method == ARITHMETIC and isinstance(item.question, PathQuestion):
        return "arithmetic item is image-backed"
    if isinstance(item.question, PathQuestion) and not in_whitelist(item.question.value, request.asset_whitelist):
        return f"asset {item.question.filename!r} not whitelisted"
    return None


def _normalise(item: QuestionItem) -> QuestionItem:
    if isinstance(item.question, PathQuestion):
        question = PathQuestion(value=to_serving_path(item.question.value))
        return item.model_copy(update={"question": question})
    return item


def validate_items(items: Any, request: GenerationRequest) -> List[QuestionItem]:
    """
    Step 3: keep the generated items that satisfy every rule.

    Args:
        items:   Parsed model output (expected: a JSON array of item objects)
        request: The generation request the items answer

    Returns:
        At most request.quantity valid, normalised items, in model order
    """
    if not isinstance(items, list):
        log.warning(f"[VALIDATE] model output is {type(items).__name__}, expected a list")
        return []

    accepted: List[QuestionItem] = []
    for raw in items:
        item = _coerce(raw)
        if item is None:
            continue
        reason = rejection_reason(item, request)
        if reason:
            log.info(f"[VALIDATE] drop ({reason}): {item.question.value!r}")
            continue
        if word_order_mismatch(item):
            log.warning(f"[VALIDATE] word-ordering item does not reuse the key's words: "
                        f"{item.question.value!r} vs {item.key!r}")
        accepted.append(_normalise(item))

    result = accepted[:request.quantity]
    log.info(f"[VALIDATE] kept {len(result)}/{len(items)} (requested {request.quantity})")
    return result
