from __future__ import annotations
from typing import TYPE_CHECKING
from enum import Enum as PyEnum
from sqlalchemy import Integer, String, ForeignKey, Text, JSON, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base

if TYPE_CHECKING:
    from .room import Room
    from .tenant import Tenant

class BedStatus(str, PyEnum):
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    MAINTENANCE = "MAINTENANCE"
    RESERVED = "RESERVED"

class Bed(Base):
    __tablename__ = "beds"
    __table_args__ = (UniqueConstraint("room_id", "bed_number", name="uq_beds_room_bed_number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    bed_number: Mapped[str] = mapped_column(String(10), nullable=False)
    status: Mapped[BedStatus] = mapped_column(Enum(BedStatus), default=BedStatus.AVAILABLE, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    images: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    room: Mapped[Room] = relationship(back_populates="beds")
    tenants: Mapped[list[Tenant]] = relationship(back_populates="bed")

    @property
    def label(self) -> str:
        return f"{self.room.room_number}-{self.bed_number}"
