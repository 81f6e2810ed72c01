"""
Step 4 — Question Bank

Content-addressed catalog of accepted questions. The key is an md5 digest
over the normalised (question value, answer key) pair, so regenerating the
same question any number of times leaves exactly one bank row.

Image questions are hashed and stored in their storage form
(storage/exercise/<file>), not the serving path handed to clients.
"""

import asyncio
import hashlib
import json
import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from database.models import QuestionBankEntry
from generation.assets import to_serving_path, to_storage_path
from generation.schemas import PathQuestion, QuestionItem

log = logging.getLogger("generation.pipeline")

_WS_RE = re.compile(r"\s+")


# ─── Hashing ───────────────────────────────────────────────────────────────────

def normalize_text(text: str) -> str:
    """Lower-case and collapse whitespace."""
    return _WS_RE.sub(" ", (text or "").strip().lower())


def bank_value(item: QuestionItem) -> str:
    """Question value as the bank stores it."""
    if isinstance(item.question, PathQuestion):
        return to_storage_path(item.question.value)
    return item.question.value.strip()


def content_hash(item: QuestionItem) -> str:
    payload = json.dumps(
        {"question": normalize_text(bank_value(item)), "key": normalize_text(item.key)},
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


# ─── Bank ──────────────────────────────────────────────────────────────────────

class QuestionBank:
    """Insert-if-absent store over the question_bank table."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    def get(self, code: str) -> Optional[QuestionBankEntry]:
        db = self._session()
        try:
            return db.query(QuestionBankEntry).filter(QuestionBankEntry.code == code).first()
        finally:
            db.close()

    def count(self) -> int:
        db = self._session()
        try:
            return db.query(QuestionBankEntry).count()
        finally:
            db.close()

    def upsert_if_absent(self, item: QuestionItem, level: Optional[int] = None) -> str:
        """
        Bank the item unless its content is already known.

        Returns:
            The content hash, whether a row was created or not
        """
        code = content_hash(item)
        db = self._session()
        try:
            if db.query(QuestionBankEntry.id).filter(QuestionBankEntry.code == code).first():
                log.debug(f"[BANK] duplicate content, no-op: {code}")
                return code
            db.add(QuestionBankEntry(
                code=code,
                level=level,
                method=item.method,
                question_type=item.question.kind,
                question_value=bank_value(item),
                key=item.key,
            ))
            db.commit()
            log.info(f"[BANK] new entry {code} (method={item.method})")
        except IntegrityError:
            # Lost the race to a concurrent insert of the same content
            db.rollback()
            log.debug(f"[BANK] concurrent duplicate, no-op: {code}")
        finally:
            db.close()
        return code

    async def upsert_many(self, items: Iterable[QuestionItem], level: Optional[int] = None) -> List[str]:
        """Bank a batch concurrently, one task per item. Hashes come back in input order."""
        return list(await asyncio.gather(*(
            asyncio.to_thread(self.upsert_if_absent, item, level) for item in items
        )))

    def entries(self, level: int, method: int) -> List[Dict[str, Any]]:
        """Bank entries for one level and method, image values in their serving form."""
        db = self._session()
        try:
            rows = (
                db.query(QuestionBankEntry)
                .filter(QuestionBankEntry.level == level, QuestionBankEntry.method == method)
                .order_by(QuestionBankEntry.created_at, QuestionBankEntry.id)
                .all()
            )
            return [
                {
                    "code": r.code,
                    "level": r.level,
                    "method": r.method,
                    "question": {
                        "type": r.question_type,
                        "value": to_serving_path(r.question_value) if r.question_type == "path" else r.question_value,
                    },
                    "key": r.key,
                }
                for r in rows
            ]
        finally:
            db.close()

    def history(self, limit: int = 50) -> List[Dict[str, Any]]:
        """Most recent bank entries, newest first, for prompt conditioning."""
        db = self._session()
        try:
            rows = (
                db.query(QuestionBankEntry)
                .order_by(QuestionBankEntry.created_at.desc(), QuestionBankEntry.id.desc())
                .limit(limit)
                .all()
            )
            return [
                {
                    "method": r.method,
                    "question": {"type": r.question_type, "value": r.question_value},
                    "key": r.key,
                }
                for r in rows
            ]
        finally:
            db.close()
