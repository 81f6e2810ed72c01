"""
Exercise document store

The pipeline only needs find_by_id / find / save on exercises; anything
that offers those three calls can stand in (see DocumentStore).
SqlDocumentStore keeps each exercise as one JSON row.
"""

from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy.orm import sessionmaker

from database.models import ExerciseDocument
from grading.schemas import Exercise


class DocumentStore(Protocol):
    def find_by_id(self, ident: str) -> Optional[Exercise]: ...

    def find(self, filter: Dict[str, Any]) -> List[Exercise]: ...

    def save(self, entity: Exercise) -> Exercise: ...


_FILTER_COLUMNS = {
    "id": ExerciseDocument.id,
    "children_id": ExerciseDocument.children_id,
}


class SqlDocumentStore:
    """DocumentStore over the exercises table. Each call is its own transaction."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def find_by_id(self, ident: str) -> Optional[Exercise]:
        db = self._session_factory()
        try:
            row = db.get(ExerciseDocument, ident)
            return Exercise.model_validate(row.body) if row else None
        finally:
            db.close()

    def find(self, filter: Dict[str, Any]) -> List[Exercise]:
        db = self._session_factory()
        try:
            query = db.query(ExerciseDocument)
            for field, value in filter.items():
                if field not in _FILTER_COLUMNS:
                    raise ValueError(f"Unsupported filter field: {field}")
                query = query.filter(_FILTER_COLUMNS[field] == value)
            rows = query.order_by(ExerciseDocument.created_at, ExerciseDocument.id).all()
            return [Exercise.model_validate(r.body) for r in rows]
        finally:
            db.close()

    def save(self, entity: Exercise) -> Exercise:
        db = self._session_factory()
        try:
            body = entity.model_dump(mode="json", by_alias=True)
            row = db.get(ExerciseDocument, entity.id)
            if row is None:
                db.add(ExerciseDocument(id=entity.id, children_id=entity.children_id, body=body))
            else:
                row.children_id = entity.children_id
                row.body = body
            db.commit()
            return entity
        finally:
            db.close()
