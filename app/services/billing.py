"""
Bills, line items and payments.

``total_amount`` is always the sum of the line items and ``paid_amount`` the
sum of the payments recorded against the bill. A bill is PAID exactly when
its balance reaches zero.
"""
import logging
from datetime import date, datetime, timedelta
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..exceptions import ConflictError, DomainError, NotFoundError, PermissionDenied
from ..models import (
    Bill, BillLineItem, BillStatus, BillItemType, Payment, PaymentStatus,
    ElectricityReading, Tenant, User,
)
from ..schemas import LineItemIn, PaymentIn
from . import notifications
from .currency import to_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

# Bills that still expect money from the tenant
PAYABLE_STATUSES = (BillStatus.DRAFT, BillStatus.SENT, BillStatus.PARTIAL, BillStatus.OVERDUE)


def month_start(day: date) -> date:
    return day.replace(day=1)


def rent_description(billing_month: date) -> str:
    return f"Monthly Rent - {billing_month.strftime('%B %Y')}"


def bill_balance(bill: Bill) -> Decimal:
    return to_money(bill.total_amount) - to_money(bill.paid_amount)


def get_bill(db: Session, bill_id: int) -> Bill:
    bill = db.get(Bill, bill_id)
    if not bill:
        raise NotFoundError("Bill not found")
    return bill


def _recalculate(bill: Bill) -> None:
    bill.total_amount = sum((to_money(item.amount) for item in bill.line_items), ZERO)
    if bill.status in (BillStatus.DRAFT, BillStatus.CANCELLED):
        return
    paid = to_money(bill.paid_amount)
    if paid > 0 and bill_balance(bill) <= 0:
        bill.status = BillStatus.PAID
    elif paid > 0:
        bill.status = BillStatus.PARTIAL


def _ensure_editable(bill: Bill) -> None:
    if bill.status in (BillStatus.CANCELLED, BillStatus.PAID):
        raise DomainError(f"Cannot modify a {bill.status.value.lower()} bill")


def build_rent_bill(tenant: Tenant, billing_month: date, due_date: date, created_by_id: int | None = None,
                    notes: str | None = None) -> Bill:
    """An unsaved DRAFT bill with the single RENT line of the tenant's room."""
    rent = tenant.bed.room.monthly_rent if tenant.bed else None
    if rent is None:
        raise DomainError(f"No monthly rent configured for tenant {tenant.name}")
    rent = to_money(rent)
    bill = Bill(
        tenant_id=tenant.id,
        created_by_id=created_by_id,
        billing_month=billing_month,
        due_date=due_date,
        total_amount=rent,
        paid_amount=ZERO,
        late_fee_applied=ZERO,
        status=BillStatus.DRAFT,
        notes=notes,
    )
    bill.line_items.append(BillLineItem(
        item_type=BillItemType.RENT,
        description=rent_description(billing_month),
        quantity=Decimal("1"),
        unit_price=rent,
        amount=rent,
    ))
    return bill


def create_bill(db: Session, tenant_id: int, billing_month: date, due_date: date | None = None,
                notes: str | None = None, created_by: User | None = None) -> Bill:
    tenant = db.get(Tenant, tenant_id)
    if not tenant:
        raise NotFoundError("Tenant not found")
    billing_month = month_start(billing_month)
    due_date = due_date or billing_month + timedelta(days=settings.BILL_DUE_DAYS)
    exists = db.query(Bill).filter(Bill.tenant_id == tenant.id, Bill.billing_month == billing_month).first()
    if exists:
        raise ConflictError("Bill already exists for this month")
    bill = build_rent_bill(tenant, billing_month, due_date, created_by.id if created_by else None, notes)
    db.add(bill)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Bill already exists for this month")
    db.refresh(bill)
    logger.info("Bill %s created for tenant %s (%s)", bill.id, tenant.id, billing_month)
    return bill


def add_line_item(db: Session, bill_id: int, data: LineItemIn) -> BillLineItem:
    bill = get_bill(db, bill_id)
    _ensure_editable(bill)
    quantity = to_money(data.quantity)
    unit_price = to_money(data.unit_price)
    item = BillLineItem(
        item_type=data.item_type,
        description=data.description.strip(),
        quantity=quantity,
        unit_price=unit_price,
        amount=to_money(quantity * unit_price),
    )
    bill.line_items.append(item)
    _recalculate(bill)
    db.commit()
    return item


def remove_line_item(db: Session, item_id: int) -> Bill:
    item = db.get(BillLineItem, item_id)
    if not item:
        raise NotFoundError("Line item not found")
    bill = item.bill
    _ensure_editable(bill)
    if item.item_type == BillItemType.LATE_FEE:
        bill.late_fee_applied = max(ZERO, to_money(bill.late_fee_applied) - to_money(item.amount))
    bill.line_items.remove(item)
    _recalculate(bill)
    db.commit()
    return bill


def add_electricity_charge(db: Session, bill_id: int, bed_id: int, previous_reading, current_reading,
                           rate_per_unit, reading_date: date | None = None) -> ElectricityReading:
    bill = get_bill(db, bill_id)
    _ensure_editable(bill)
    previous = to_money(previous_reading)
    current = to_money(current_reading)
    rate = to_money(rate_per_unit)
    if current < previous:
        raise DomainError("Current reading cannot be lower than the previous reading")
    units = current - previous
    total = to_money(units * rate)
    reading = ElectricityReading(
        bed_id=bed_id,
        added_to_bill_id=bill.id,
        reading_date=reading_date or date.today(),
        previous_reading=previous,
        current_reading=current,
        units_consumed=units,
        rate_per_unit=rate,
        total_amount=total,
    )
    db.add(reading)
    bill.line_items.append(BillLineItem(
        item_type=BillItemType.ELECTRICITY,
        description=f"Electricity ({units} units @ {rate}/unit)",
        quantity=units,
        unit_price=rate,
        amount=total,
    ))
    _recalculate(bill)
    db.commit()
    return reading


def apply_late_fee(db: Session, bill_id: int, amount) -> Bill:
    bill = get_bill(db, bill_id)
    _ensure_editable(bill)
    fee = to_money(amount)
    if fee <= 0:
        raise DomainError("Late fee must be greater than zero")
    bill.line_items.append(BillLineItem(
        item_type=BillItemType.LATE_FEE,
        description="Late payment fee",
        quantity=Decimal("1"),
        unit_price=fee,
        amount=fee,
    ))
    bill.late_fee_applied = to_money(bill.late_fee_applied) + fee
    _recalculate(bill)
    db.commit()
    logger.info("Late fee %s applied to bill %s", fee, bill.id)
    return bill


def send_bill(db: Session, bill_id: int) -> Bill:
    bill = get_bill(db, bill_id)
    if bill.status != BillStatus.DRAFT:
        raise DomainError("Only draft bills can be sent")
    bill.status = BillStatus.SENT
    bill.sent_at = datetime.utcnow()
    db.commit()
    notifications.send_bill_notification(bill)
    return bill


def _apply_payment(db: Session, bill: Bill, data: PaymentIn, status: PaymentStatus,
                   recorded_by: User | None) -> Payment:
    if bill.status not in PAYABLE_STATUSES:
        raise DomainError(f"Cannot record payment on a {bill.status.value.lower()} bill")
    amount = to_money(data.amount)
    if amount <= 0:
        raise DomainError("Payment amount must be greater than zero")
    if amount > bill_balance(bill):
        raise DomainError("Payment amount exceeds the bill balance")
    payment = Payment(
        bill_id=bill.id,
        tenant_id=bill.tenant_id,
        recorded_by_id=recorded_by.id if recorded_by else None,
        amount=amount,
        payment_method=data.payment_method,
        status=status,
        transaction_date=data.transaction_date or date.today(),
        reference=(data.reference or "").strip() or None,
        notes=data.notes,
    )
    db.add(payment)
    bill.paid_amount = to_money(bill.paid_amount) + amount
    bill.status = BillStatus.PAID if bill_balance(bill) <= 0 else BillStatus.PARTIAL
    db.commit()
    db.refresh(payment)
    logger.info("Payment %s of %s on bill %s, bill now %s", payment.id, amount, bill.id, bill.status.value)
    return payment


def record_payment(db: Session, bill_id: int, data: PaymentIn, recorded_by: User | None = None) -> Payment:
    """Payment collected by the admin."""
    return _apply_payment(db, get_bill(db, bill_id), data, PaymentStatus.SUCCESS, recorded_by)


def record_tenant_payment(db: Session, tenant: Tenant, bill_id: int, data: PaymentIn) -> Payment:
    """Payment reported by the tenant; kept PENDING until the admin confirms it."""
    bill = get_bill(db, bill_id)
    if bill.tenant_id != tenant.id:
        raise PermissionDenied("This bill does not belong to you")
    return _apply_payment(db, bill, data, PaymentStatus.PENDING, tenant.user)


def confirm_payment(db: Session, payment_id: int) -> Payment:
    payment = db.get(Payment, payment_id)
    if not payment:
        raise NotFoundError("Payment not found")
    if payment.status != PaymentStatus.PENDING:
        raise DomainError("Only pending payments can be confirmed")
    payment.status = PaymentStatus.SUCCESS
    db.commit()
    return payment


def mark_as_overdue(db: Session, bill_id: int) -> Bill:
    bill = get_bill(db, bill_id)
    if bill.status not in (BillStatus.SENT, BillStatus.PARTIAL):
        raise DomainError("Only sent or partially paid bills can be marked overdue")
    bill.status = BillStatus.OVERDUE
    db.commit()
    logger.info("Bill %s marked overdue", bill.id)
    return bill


def cancel_bill(db: Session, bill_id: int) -> Bill:
    bill = get_bill(db, bill_id)
    if bill.payments:
        raise DomainError("Cannot cancel a bill with recorded payments")
    if bill.status == BillStatus.CANCELLED:
        raise DomainError("Bill is already cancelled")
    bill.status = BillStatus.CANCELLED
    db.commit()
    logger.info("Bill %s cancelled", bill.id)
    return bill


def bills_query(db: Session, status: BillStatus | None = None, month: date | None = None):
    q = db.query(Bill).join(Tenant)
    if status:
        q = q.filter(Bill.status == status)
    if month:
        q = q.filter(Bill.billing_month == month_start(month))
    return q.order_by(Bill.billing_month.desc(), Bill.id.desc())


def collected_between(db: Session, start: date, end: date) -> Decimal:
    payments = (
        db.query(Payment)
        .filter(Payment.transaction_date >= start, Payment.transaction_date <= end,
                Payment.status != PaymentStatus.FAILED)
        .all()
    )
    return sum((to_money(p.amount) for p in payments), ZERO)

