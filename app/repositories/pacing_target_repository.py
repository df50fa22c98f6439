"""
app/repositories/pacing_target_repository.py

Persistence layer for pacing targets.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.pacing_target import PacingTargetInput, TargetKey
from db.models.pacing_target import KEY_CONSTRAINT, PacingTarget
from db.repositories.errors import DuplicateTargetError, TargetStoreError

_DEFAULT_BATCH_SIZE = 1000


def _is_key_violation(exc: IntegrityError) -> bool:
    diag = getattr(exc.orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None)
    if constraint_name:
        return constraint_name == KEY_CONSTRAINT
    return KEY_CONSTRAINT in str(exc.orig)


class PacingTargetRepository:
    """
    Repository for pacing target reads, writes and batch inserts.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def exists(self, key: TargetKey) -> bool:
        """
        Return True when any target (enabled or not) matches the key.
        """

        stmt = (
            select(PacingTarget.id)
            .where(
                PacingTarget.client_subgroup_id == key.client_subgroup_id,
                PacingTarget.channel == key.channel,
                PacingTarget.tag_type == key.tag_type,
                PacingTarget.tag_id == key.tag_id,
                PacingTarget.month == key.month,
            )
            .limit(1)
        )
        try:
            return self._session.execute(stmt).scalar_one_or_none() is not None
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise TargetStoreError("Failed to query existing pacing targets.") from exc

    def get(self, target_id: uuid.UUID) -> PacingTarget | None:
        return self._session.get(PacingTarget, target_id)

    def list_targets(
        self,
        *,
        month: str | None = None,
        client_subgroup_id: int | None = None,
        search: str | None = None,
    ) -> list[PacingTarget]:
        stmt = select(PacingTarget)
        if month:
            stmt = stmt.where(PacingTarget.month == month)
        if client_subgroup_id is not None:
            stmt = stmt.where(PacingTarget.client_subgroup_id == client_subgroup_id)
        if search:
            stmt = stmt.where(PacingTarget.tag_name.icontains(search, autoescape=True))
        stmt = stmt.order_by(PacingTarget.created_at.desc())
        return list(self._session.execute(stmt).unique().scalars().all())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, record: PacingTargetInput) -> PacingTarget:
        target = PacingTarget(**self._payload(record))
        self._session.add(target)
        self._commit()
        self._session.refresh(target)
        return target

    def update_spends_target(
        self,
        target: PacingTarget,
        *,
        spends_target: Decimal,
        modified_by: uuid.UUID,
    ) -> PacingTarget:
        target.spends_target = spends_target
        self._touch(target, modified_by)
        self._commit()
        self._session.refresh(target)
        return target

    def toggle_status(self, target: PacingTarget, *, modified_by: uuid.UUID) -> PacingTarget:
        target.status = not target.status
        self._touch(target, modified_by)
        self._commit()
        return target

    def delete(self, target: PacingTarget) -> None:
        self._session.delete(target)
        self._commit()

    def insert_many(
        self,
        records: Sequence[PacingTargetInput],
        *,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        Insert all records in one transaction.

        Either every record is written or none is. A uniqueness key violation
        raises DuplicateTargetError; any other failure raises TargetStoreError.
        """

        if not records:
            return 0

        size = max(1, batch_size)
        payloads = [self._payload(record) for record in records]
        inserted = 0
        with self._write_errors():
            for start in range(0, len(payloads), size):
                chunk = payloads[start : start + size]
                stmt = insert(PacingTarget).values(chunk).returning(PacingTarget.id)
                inserted += len(self._session.scalars(stmt).all())
            self._session.commit()
        return inserted

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _commit(self) -> None:
        with self._write_errors():
            self._session.commit()

    @contextmanager
    def _write_errors(self) -> Iterator[None]:
        """
        Roll back and translate SQLAlchemy failures into store errors.
        """

        try:
            yield
        except IntegrityError as exc:
            self._session.rollback()
            if _is_key_violation(exc):
                raise DuplicateTargetError("A pacing target with the same key already exists.") from exc
            raise TargetStoreError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise TargetStoreError(str(exc)) from exc

    @staticmethod
    def _touch(target: PacingTarget, modified_by: uuid.UUID) -> None:
        target.modified_by_id = modified_by
        target.last_modified = datetime.now(timezone.utc)

    @staticmethod
    def _payload(record: PacingTargetInput) -> dict[str, Any]:
        return {
            "id": uuid.uuid4(),
            "client_name": record.client_name,
            "client_subgroup_id": record.client_subgroup_id,
            "tag_name": record.tag_name,
            "channel": record.channel,
            "tag_type": record.tag_type,
            "tag_id": record.tag_id,
            "month": record.month,
            "spends_target": record.spends_target,
            "status": record.status,
            "created_by_id": record.created_by,
            "modified_by_id": record.modified_by,
            "last_modified": datetime.now(timezone.utc),
        }
