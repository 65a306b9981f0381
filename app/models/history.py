# app/models/history.py

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, Uuid
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, JSONType
from app.models.enums import HistoryAction


class HistoryEntry(Base):
    """
    Append-only snapshot of a versioned CRM entity.

    One table serves every versioned entity type; ``entity_type`` names the
    type and ``entity_id`` the row. ``snapshot`` holds the tracked fields as
    they were *before* the update or rollback that produced the entry.
    Rows are never updated.
    """

    __tablename__ = "history_entries"
    __table_args__ = (
        UniqueConstraint(
            "entity_type", "entity_id", "version", name="uq_history_entity_version"
        ),
        Index("ix_history_entity", "entity_type", "entity_id", "changed_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # measurement / contract / office
    entity_type: Mapped[str] = mapped_column(String(40), nullable=False)
    entity_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    # Sequential number per entity (starting at 1)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    snapshot: Mapped[dict] = mapped_column(JSONType, nullable=False)
    schema_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    changed_fields: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)

    action: Mapped[HistoryAction] = mapped_column(
        SAEnum(HistoryAction, name="history_action", native_enum=False),
        nullable=False,
    )

    # NULL once the author account is deleted
    changed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
