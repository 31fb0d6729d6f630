"""
Movement model.
Maps to the movements table in PostgreSQL.

Movements are append-only: rows are inserted once per check-out or
return and never updated or deleted afterwards.
"""

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from equiptrack.database import Base
from equiptrack.models.equipment import new_id, utcnow

if TYPE_CHECKING:
    from equiptrack.models.equipment import Equipment


class Movement(Base):
    """Movement model - a single check-out or return event."""

    __tablename__ = "movements"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    equipment_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("equipment.id", ondelete="RESTRICT"),
        index=True,
        nullable=False,
    )
    event_type: Mapped[str] = mapped_column(String(20), nullable=False)
    event_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True, nullable=False
    )

    # Assignment snapshot at event time
    assigned_to: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    site: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    job_reference: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    pickup_photo_url: Mapped[str] = mapped_column(Text, default="", nullable=False)
    return_photo_url: Mapped[str] = mapped_column(Text, default="", nullable=False)
    expected_return_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Return workflow
    return_condition: Mapped[str | None] = mapped_column(String(20), nullable=True)
    has_new_issues: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    issue_description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    requires_service: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    requires_repair: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_by: Mapped[str] = mapped_column(String(200), default="system", nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    equipment: Mapped["Equipment"] = relationship("Equipment", back_populates="movements")

    def __repr__(self) -> str:
        return f"<Movement {self.event_type} {self.equipment_id} @ {self.event_timestamp}>"
