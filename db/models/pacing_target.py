"""
db/models/pacing_target.py

Monthly spend goal for one client subgroup / tag / channel combination.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.user import User


class TagType:
    CATEGORY = "Category"
    SUB_CATEGORY = "Sub Category"
    ACCOUNT = "Account"


ALLOWED_TAG_TYPES = (TagType.CATEGORY, TagType.SUB_CATEGORY, TagType.ACCOUNT)

ALLOWED_CHANNEL_IDS = (1, 2, 27, 65, 109)

KEY_CONSTRAINT = "uq_pacing_targets_key"


class PacingTarget(Base, TimestampMixin):
    __tablename__ = "pacing_targets"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    client_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Denormalized from reference data at creation time",
    )
    client_subgroup_id: Mapped[int] = mapped_column(Integer, nullable=False)
    tag_name: Mapped[str] = mapped_column(String(255), nullable=False)
    channel: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    tag_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Category, Sub Category, Account",
    )
    tag_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="0 for Account targets",
    )
    month: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        comment="YYYY-MM",
    )
    spends_target: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
    )
    modified_by_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
    )
    last_modified: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    created_by: Mapped["User"] = relationship("User", foreign_keys=[created_by_id], lazy="joined")
    modified_by: Mapped["User"] = relationship("User", foreign_keys=[modified_by_id], lazy="joined")

    # ── Constraints / indexes ──────────────────────────────────────────────────

    __table_args__ = (
        UniqueConstraint(
            "client_subgroup_id",
            "channel",
            "tag_type",
            "tag_id",
            "month",
            name=KEY_CONSTRAINT,
        ),
        CheckConstraint("spends_target >= 0", name="ck_pacing_targets_spends_target_non_negative"),
        CheckConstraint("month ~ '^[0-9]{4}-[0-9]{2}$'", name="ck_pacing_targets_month_format"),
        Index("ix_pacing_targets_client_month_tag", "client_subgroup_id", "month", "tag_id"),
        Index("ix_pacing_targets_month", "month"),
        Index("ix_pacing_targets_tag_id", "tag_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<PacingTarget id={self.id} client_subgroup_id={self.client_subgroup_id} "
            f"tag_type={self.tag_type!r} tag_id={self.tag_id} month={self.month!r}>"
        )
