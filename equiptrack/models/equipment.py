"""
Equipment model.
Maps to the equipment table in PostgreSQL.
"""

import uuid
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from equiptrack.database import Base
from equiptrack.models.enums import EquipmentCondition, EquipmentStatus

if TYPE_CHECKING:
    from equiptrack.models.movement import Movement


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Equipment(Base):
    """Equipment model - one physical asset and its current assignment snapshot."""

    __tablename__ = "equipment"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    asset_id: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    qr_code: Mapped[str] = mapped_column(String(128), default="", nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(100), default="General", nullable=False)
    condition: Mapped[str] = mapped_column(
        String(20), default=EquipmentCondition.GOOD.value, nullable=False
    )
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    photo_url: Mapped[str] = mapped_column(Text, default="", nullable=False)

    # Test & tag compliance
    test_tag_done_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    test_tag_next_due: Mapped[date | None] = mapped_column(Date, nullable=True)
    tag_threshold_days: Mapped[int] = mapped_column(Integer, default=30, nullable=False)

    # Stored status is only a hint; the canonical value is derived on read
    current_status: Mapped[str] = mapped_column(
        String(20), default=EquipmentStatus.AVAILABLE.value, nullable=False
    )

    # Current assignment (empty strings when unassigned)
    assigned_to: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    assigned_site: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    assigned_job: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    expected_return_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    # Relationships
    movements: Mapped[list["Movement"]] = relationship(
        "Movement",
        back_populates="equipment",
        order_by="Movement.event_timestamp.desc()",
    )

    def __repr__(self) -> str:
        return f"<Equipment {self.asset_id} {self.name} ({self.current_status})>"
