from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from enum import Enum as PyEnum
from sqlalchemy import Integer, String, ForeignKey, Date, Numeric, Text, Enum, DateTime, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base

if TYPE_CHECKING:
    from .bed import Bed
    from .user import User

class BookingStatus(str, PyEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CONVERTED = "converted"

class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    # Primary bed; every bed held by the booking is listed in booking_beds
    bed_id: Mapped[int | None] = mapped_column(ForeignKey("beds.id", ondelete="SET NULL"), nullable=True, index=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    requested_checkin: Mapped[date] = mapped_column(Date, nullable=False)
    duration_months: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    expected_checkout: Mapped[date | None] = mapped_column(Date)
    ac_selected: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    breakfast_selected: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    lunch_selected: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    dinner_selected: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    advance_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    advance_paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    status: Mapped[BookingStatus] = mapped_column(Enum(BookingStatus), default=BookingStatus.PENDING, nullable=False, index=True)
    admin_notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    bed: Mapped[Optional[Bed]] = relationship()
    user: Mapped[Optional[User]] = relationship(back_populates="bookings")
    booking_beds: Mapped[list[BookingBed]] = relationship(back_populates="booking", cascade="all, delete-orphan")

    @property
    def beds(self) -> list[Bed]:
        if self.booking_beds:
            return [bb.bed for bb in self.booking_beds]
        return [self.bed] if self.bed else []

class BookingBed(Base):
    __tablename__ = "booking_beds"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    booking_id: Mapped[int] = mapped_column(ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    bed_id: Mapped[int] = mapped_column(ForeignKey("beds.id", ondelete="CASCADE"), nullable=False, index=True)

    booking: Mapped[Booking] = relationship(back_populates="booking_beds")
    bed: Mapped[Bed] = relationship()
