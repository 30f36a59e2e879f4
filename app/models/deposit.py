from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from enum import Enum as PyEnum
from sqlalchemy import Integer, String, ForeignKey, Date, DateTime, Numeric, Text, Enum, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base
from .billing import PaymentMethod

if TYPE_CHECKING:
    from .tenant import Tenant

class DepositStatus(str, PyEnum):
    HELD = "held"
    PARTIALLY_REFUNDED = "partially_refunded"
    REFUNDED = "refunded"

class SecurityDeposit(Base):
    __tablename__ = "security_deposits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    tenant_id: Mapped[int] = mapped_column(ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    paid_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(Enum(PaymentMethod), nullable=False)
    amount_refunded: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    refund_date: Mapped[date | None] = mapped_column(Date)
    refund_method: Mapped[PaymentMethod | None] = mapped_column(Enum(PaymentMethod), nullable=True)
    # [{"reason": "Broken chair", "amount": 200}]
    deductions: Mapped[list | None] = mapped_column(JSON, nullable=True)
    status: Mapped[str] = mapped_column(String(30), default=DepositStatus.HELD.value, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    tenant: Mapped[Tenant] = relationship(back_populates="deposits")

    @property
    def deductions_total(self) -> Decimal:
        return sum((Decimal(str(d.get("amount", 0))) for d in (self.deductions or [])), Decimal("0"))

    @property
    def refundable(self) -> Decimal:
        return Decimal(self.amount_paid) - self.deductions_total - Decimal(self.amount_refunded or 0)
