from decimal import Decimal
from enum import Enum as PyEnum
from sqlalchemy import Integer, String, ForeignKey, Numeric, Boolean, Text, JSON, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base

class RoomType(str, PyEnum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    DORMITORY = "dormitory"

# Beds created with a new room, per room type
BEDS_PER_ROOM_TYPE = {
    RoomType.SINGLE: 1,
    RoomType.DOUBLE: 2,
    RoomType.TRIPLE: 3,
    RoomType.DORMITORY: 4,
}

class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (UniqueConstraint("property_id", "room_number", name="uq_rooms_property_room_number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[int] = mapped_column(ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    room_number: Mapped[str] = mapped_column(String(20), nullable=False)
    floor: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    room_type: Mapped[RoomType] = mapped_column(Enum(RoomType), nullable=False)
    has_ac: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_attached_bath: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_balcony: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    monthly_rent: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    security_deposit: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    daily_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    # {"1": 9000, "2": 16000}: price for booking that many beds of the room
    multi_bed_pricing: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    description: Mapped[str | None] = mapped_column(Text)
    amenities: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    images: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    @property
    def label(self) -> str:
        return f"Room {self.room_number}"

    # Python properties go above: the ``property`` relationship shadows the builtin from here on
    property: Mapped["Property"] = relationship(back_populates="rooms")
    beds: Mapped[list["Bed"]] = relationship(back_populates="room", cascade="all, delete-orphan", order_by="Bed.bed_number")
    maintenance_requests: Mapped[list["MaintenanceRequest"]] = relationship(back_populates="room", cascade="all, delete-orphan")
