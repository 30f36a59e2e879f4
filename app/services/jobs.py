"""
Periodic billing jobs, triggered over HTTP by an external scheduler.

Each job takes ``today`` so a run can be replayed for a given date. Jobs keep
going past a failing item and report it in ``errors``.
"""
import logging
from datetime import date, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..exceptions import DomainError
from ..models import Bill, BillStatus, Tenant, TenantStatus
from ..schemas import PaymentReminder
from . import notifications
from .billing import bill_balance, build_rent_bill, month_start

logger = logging.getLogger(__name__)

REMINDER_STATUSES = (BillStatus.DRAFT, BillStatus.SENT, BillStatus.PARTIAL)
OVERDUE_CANDIDATES = (BillStatus.SENT, BillStatus.PARTIAL)


def generate_monthly_bills(db: Session, today: date | None = None, force: bool = False) -> dict:
    """Create this month's DRAFT rent bill for every active tenant with a bed.

    Only runs on the first day of the month unless ``force`` is set. Tenants
    already billed for the month are skipped, so repeated runs are harmless.
    """
    today = today or date.today()
    billing_month = month_start(today)
    result = {
        "billing_month": billing_month.isoformat(),
        "ran": False,
        "created": 0,
        "bill_ids": [],
        "skipped": 0,
        "errors": [],
    }
    if today.day != 1 and not force:
        logger.info("Monthly billing skipped: %s is not the first of the month", today)
        return result

    result["ran"] = True
    due_date = billing_month + timedelta(days=settings.BILL_DUE_DAYS)
    tenants = (
        db.query(Tenant)
        .filter(Tenant.status == TenantStatus.ACTIVE, Tenant.bed_id.isnot(None))
        .order_by(Tenant.id)
        .all()
    )
    for tenant in tenants:
        already_billed = (
            db.query(Bill.id)
            .filter(Bill.tenant_id == tenant.id, Bill.billing_month == billing_month)
            .first()
        )
        if already_billed:
            result["skipped"] += 1
            continue
        try:
            bill = build_rent_bill(tenant, billing_month, due_date)
            with db.begin_nested():
                db.add(bill)
            result["created"] += 1
            result["bill_ids"].append(bill.id)
        except IntegrityError:
            # Another run billed this tenant in the meantime
            result["skipped"] += 1
        except DomainError as e:
            logger.error("Bill for tenant %s not generated: %s", tenant.id, e)
            result["errors"].append({"tenant_id": tenant.id, "error": str(e)})
        except Exception as e:
            logger.exception("Bill for tenant %s failed", tenant.id)
            result["errors"].append({"tenant_id": tenant.id, "error": str(e)})
    db.commit()
    logger.info(
        "Monthly billing for %s: %d created, %d skipped, %d errors",
        billing_month, result["created"], result["skipped"], len(result["errors"]),
    )
    return result


def mark_overdue_bills(db: Session, today: date | None = None) -> dict:
    """SENT or PARTIAL bills whose due date has passed become OVERDUE."""
    today = today or date.today()
    q = db.query(Bill).filter(Bill.due_date < today, Bill.status.in_(OVERDUE_CANDIDATES))
    bill_ids = [row.id for row in q.with_entities(Bill.id).all()]
    if bill_ids:
        db.query(Bill).filter(Bill.id.in_(bill_ids)).update(
            {Bill.status: BillStatus.OVERDUE}, synchronize_session=False
        )
    db.commit()
    db.expire_all()
    logger.info("Marked %d bill(s) overdue", len(bill_ids))
    return {"count": len(bill_ids), "bill_ids": bill_ids}


def send_payment_reminders(db: Session, today: date | None = None) -> dict:
    """Remind tenants of unpaid bills falling due within the reminder window."""
    today = today or date.today()
    window_end = today + timedelta(days=settings.REMINDER_WINDOW_DAYS)
    bills = (
        db.query(Bill)
        .filter(
            Bill.status.in_(REMINDER_STATUSES),
            Bill.due_date >= today,
            Bill.due_date <= window_end,
        )
        .order_by(Bill.due_date, Bill.id)
        .all()
    )
    details, errors = [], []
    for bill in bills:
        try:
            balance = bill_balance(bill)
            if balance <= 0:
                continue
            user = bill.tenant.user
            reminder = PaymentReminder(
                tenant=user.name,
                phone=user.phone,
                email=user.email,
                bill_id=bill.id,
                billing_month=bill.billing_month,
                due_date=bill.due_date,
                balance=float(balance),
                days_until_due=(bill.due_date - today).days,
            )
            notifications.send_payment_reminder(reminder)
            details.append(reminder.model_dump(mode="json"))
        except Exception as e:
            logger.exception("Reminder for bill %s failed", bill.id)
            errors.append({"bill_id": bill.id, "error": str(e)})
    return {"count": len(details), "details": details, "errors": errors}


def run_daily_maintenance(db: Session, today: date | None = None) -> dict:
    today = today or date.today()
    return {
        "date": today.isoformat(),
        "mark_overdue": mark_overdue_bills(db, today),
        "payment_reminders": send_payment_reminders(db, today),
    }
