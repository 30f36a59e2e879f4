import logging
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from ..exceptions import DomainError, NotFoundError
from ..models import SecurityDeposit, DepositStatus, PaymentMethod, Tenant
from ..schemas import Deduction
from .currency import to_money

logger = logging.getLogger(__name__)


def deposit_status(amount_paid, amount_refunded, deductions_total) -> DepositStatus:
    """Status of a deposit given what was paid, refunded and deducted.

    The refundable threshold is ``amount_paid - deductions_total``: reaching it
    means fully refunded, anything above zero below it is a partial refund.
    """
    threshold = to_money(amount_paid) - to_money(deductions_total)
    refunded = to_money(amount_refunded)
    if refunded >= threshold:
        return DepositStatus.REFUNDED
    if refunded > 0:
        return DepositStatus.PARTIALLY_REFUNDED
    return DepositStatus.HELD


def get_deposit(db: Session, deposit_id: int) -> SecurityDeposit:
    deposit = db.get(SecurityDeposit, deposit_id)
    if not deposit:
        raise NotFoundError("Security deposit not found")
    return deposit


def record_security_deposit(db: Session, tenant_id: int, amount, paid_date: date | None,
                            payment_method: PaymentMethod, notes: str | None = None) -> SecurityDeposit:
    if not db.get(Tenant, tenant_id):
        raise NotFoundError("Tenant not found")
    amount = to_money(amount)
    if amount <= 0:
        raise DomainError("Deposit amount must be greater than zero")
    deposit = SecurityDeposit(
        tenant_id=tenant_id,
        amount_paid=amount,
        paid_date=paid_date or date.today(),
        payment_method=payment_method,
        amount_refunded=Decimal("0.00"),
        deductions=[],
        status=DepositStatus.HELD.value,
        notes=notes,
    )
    db.add(deposit)
    db.commit()
    db.refresh(deposit)
    logger.info("Deposit %s of %s recorded for tenant %s", deposit.id, amount, tenant_id)
    return deposit


def refund_security_deposit(db: Session, deposit_id: int, amount, refund_date: date | None,
                            refund_method: PaymentMethod, deductions: list[Deduction] | None = None,
                            notes: str | None = None) -> SecurityDeposit:
    """Refund part or all of a deposit.

    Deductions given here replace the stored list; ``None`` keeps it.
    """
    deposit = get_deposit(db, deposit_id)
    amount = to_money(amount)
    if amount < 0:
        raise DomainError("Refund amount cannot be negative")

    if deductions is not None:
        deduction_rows = [{"reason": d.reason.strip(), "amount": float(to_money(d.amount))} for d in deductions]
    else:
        deduction_rows = list(deposit.deductions or [])
    deductions_total = sum((to_money(d["amount"]) for d in deduction_rows), Decimal("0.00"))
    threshold = to_money(deposit.amount_paid) - deductions_total
    if threshold < 0:
        raise DomainError("Deductions exceed the deposit amount")

    new_refunded = to_money(deposit.amount_refunded) + amount
    if new_refunded > threshold:
        raise DomainError("Refund exceeds the refundable amount")

    deposit.deductions = deduction_rows
    deposit.amount_refunded = new_refunded
    deposit.refund_date = refund_date or date.today()
    deposit.refund_method = refund_method
    deposit.status = deposit_status(deposit.amount_paid, new_refunded, deductions_total).value
    if notes:
        deposit.notes = notes
    db.commit()
    logger.info("Deposit %s refunded %s, status %s", deposit.id, amount, deposit.status)
    return deposit
