from __future__ import annotations
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional
from enum import Enum as PyEnum
from sqlalchemy import Integer, String, ForeignKey, Date, DateTime, Text, Boolean, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base

if TYPE_CHECKING:
    from .user import User
    from .bed import Bed
    from .billing import Bill, Payment
    from .deposit import SecurityDeposit
    from .maintenance import MaintenanceRequest

class TenantStatus(str, PyEnum):
    ACTIVE = "ACTIVE"
    NOTICE_PERIOD = "NOTICE_PERIOD"
    CHECKED_OUT = "CHECKED_OUT"

# Tenants still living in their bed
RESIDENT_STATUSES = (TenantStatus.ACTIVE, TenantStatus.NOTICE_PERIOD)

class DocumentType(str, PyEnum):
    AADHAAR = "AADHAAR"
    PAN = "PAN"
    PASSPORT = "PASSPORT"
    DRIVING_LICENSE = "DRIVING_LICENSE"
    VOTER_ID = "VOTER_ID"
    OTHER = "OTHER"

class Tenant(Base):
    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), unique=True, nullable=False)
    bed_id: Mapped[int | None] = mapped_column(ForeignKey("beds.id", ondelete="SET NULL"), nullable=True, index=True)

    # Profile
    date_of_birth: Mapped[date | None] = mapped_column(Date)
    gender: Mapped[str | None] = mapped_column(String(20))
    blood_group: Mapped[str | None] = mapped_column(String(5))
    emergency_name: Mapped[str | None] = mapped_column(String(200))
    emergency_phone: Mapped[str | None] = mapped_column(String(20))
    emergency_relation: Mapped[str | None] = mapped_column(String(50))
    occupation: Mapped[str | None] = mapped_column(String(20))
    workplace_college: Mapped[str | None] = mapped_column(String(200))
    work_address: Mapped[str | None] = mapped_column(String(300))
    notes: Mapped[str | None] = mapped_column(Text)

    # Stay
    check_in_date: Mapped[date | None] = mapped_column(Date)
    expected_checkout: Mapped[date | None] = mapped_column(Date)
    actual_checkout: Mapped[date | None] = mapped_column(Date)
    notice_given_date: Mapped[date | None] = mapped_column(Date)
    notice_period_days: Mapped[int] = mapped_column(Integer, default=30, nullable=False)
    status: Mapped[TenantStatus] = mapped_column(Enum(TenantStatus), default=TenantStatus.ACTIVE, nullable=False, index=True)

    # Meals
    breakfast_subscribed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    lunch_subscribed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    dinner_subscribed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    user: Mapped[User] = relationship(back_populates="tenant")
    bed: Mapped[Optional[Bed]] = relationship(back_populates="tenants")
    bills: Mapped[list[Bill]] = relationship(back_populates="tenant", cascade="all, delete-orphan", order_by="desc(Bill.billing_month)")
    payments: Mapped[list[Payment]] = relationship(back_populates="tenant")
    deposits: Mapped[list[SecurityDeposit]] = relationship(back_populates="tenant", cascade="all, delete-orphan")
    documents: Mapped[list[TenantDocument]] = relationship(back_populates="tenant", cascade="all, delete-orphan")
    maintenance_requests: Mapped[list[MaintenanceRequest]] = relationship(back_populates="tenant", cascade="all, delete-orphan")

    @property
    def name(self) -> str:
        return self.user.name if self.user else f"Tenant #{self.id}"

class TenantDocument(Base):
    __tablename__ = "tenant_documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    document_type: Mapped[DocumentType] = mapped_column(Enum(DocumentType), nullable=False)
    document_number: Mapped[str] = mapped_column(String(50), nullable=False)
    file_url: Mapped[str] = mapped_column(String(500), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    tenant: Mapped[Tenant] = relationship(back_populates="documents")
