# fitplan/store.py
"""
Row-level access to the `activities`, `workouts` and `profiles` tables.

Every call is scoped by an explicit `user_id` equality filter. Writes are
flushed, not committed: the caller decides when a unit of work ends
(`commit()` / `rollback()`). Database errors surface as `StoreError`.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError

from . import db
from .errors import StoreError

Order = Tuple[str, str]  # (column, "asc" | "desc")


def commit() -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StoreError(str(e.__cause__ or e)) from e


def rollback() -> None:
    db.session.rollback()


class TableStore:
    def __init__(self, model, owner_column: str = "user_id", pk: str = "id"):
        self.model = model
        self.owner_column = owner_column
        self.pk = pk

    def _col(self, name: str):
        try:
            return getattr(self.model, name)
        except AttributeError:
            raise StoreError(f"{self.model.__tablename__} has no column '{name}'")

    def _scoped(self, user_id: int):
        return self.model.query.filter(self._col(self.owner_column) == user_id)

    # ------------------------------
    # Reads
    # ------------------------------
    def select(
        self,
        user_id: int,
        eq: Optional[Dict[str, Any]] = None,
        gte: Optional[Dict[str, Any]] = None,
        lte: Optional[Dict[str, Any]] = None,
        order_by: Sequence[Order] = (),
        limit: Optional[int] = None,
    ) -> List[Any]:
        q = self._scoped(user_id)
        for name, value in (eq or {}).items():
            q = q.filter(self._col(name) == value)
        for name, value in (gte or {}).items():
            q = q.filter(self._col(name) >= value)
        for name, value in (lte or {}).items():
            q = q.filter(self._col(name) <= value)
        for name, direction in order_by:
            col = self._col(name)
            q = q.order_by(col.desc() if direction == "desc" else col.asc())
        if limit is not None:
            q = q.limit(limit)
        try:
            return q.all()
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    def get(self, user_id: int, row_id: Any) -> Optional[Any]:
        try:
            return self._scoped(user_id).filter(self._col(self.pk) == row_id).first()
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    def exists(self, user_id: int, **eq) -> bool:
        return bool(self.select(user_id, eq=eq, limit=1))

    # ------------------------------
    # Writes
    # ------------------------------
    def _flush(self):
        try:
            db.session.flush()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreError(str(e.__cause__ or e)) from e

    def insert(self, user_id: int, values: Dict[str, Any]) -> Any:
        row = self.model(**{**values, self.owner_column: user_id})
        db.session.add(row)
        self._flush()
        return row

    def insert_many(self, user_id: int, rows: Iterable[Dict[str, Any]]) -> List[Any]:
        created = [self.model(**{**values, self.owner_column: user_id}) for values in rows]
        db.session.add_all(created)
        self._flush()
        return created

    def update(self, user_id: int, row_id: Any, values: Dict[str, Any]) -> Optional[Any]:
        row = self.get(user_id, row_id)
        if row is None:
            return None
        for name, value in values.items():
            self._col(name)
            setattr(row, name, value)
        self._flush()
        return row

    def update_where(self, user_id: int, eq: Dict[str, Any], values: Dict[str, Any]) -> int:
        rows = self.select(user_id, eq=eq)
        for row in rows:
            for name, value in values.items():
                setattr(row, name, value)
        self._flush()
        return len(rows)

    def delete(self, user_id: int, row_id: Any) -> bool:
        row = self.get(user_id, row_id)
        if row is None:
            return False
        db.session.delete(row)
        self._flush()
        return True

    def upsert(self, user_id: int, values: Dict[str, Any], on_conflict: Sequence[str]) -> Any:
        """
        Insert `values`, or overwrite the row that already holds the same
        `on_conflict` column values for this user.
        """
        keys = {name: values[name] for name in on_conflict if name != self.owner_column}
        existing = self.select(user_id, eq=keys, limit=1)
        if not existing:
            return self.insert(user_id, values)
        row = existing[0]
        for name, value in values.items():
            if name in on_conflict or name == self.owner_column:
                continue
            setattr(row, name, value)
        self._flush()
        return row
