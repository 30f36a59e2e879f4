"""
JSON endpoints hit by the external scheduler.

When ``CRON_SECRET`` is set every call must carry ``Authorization: Bearer
<CRON_SECRET>``. Typical schedule: ``/api/cron/billing`` at 00:05 on the 1st,
``/api/cron/daily`` every morning.
"""
import logging
from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from ..config import settings
from ..db import get_db
from ..exceptions import DomainError
from ..services import jobs

logger = logging.getLogger(__name__)


def verify_cron_secret(authorization: str | None = Header(None)):
    if settings.CRON_SECRET and authorization != f"Bearer {settings.CRON_SECRET}":
        raise DomainError("Unauthorized", status_code=401)


router = APIRouter(prefix="/api/cron", tags=["cron"], dependencies=[Depends(verify_cron_secret)])


def _failure(error: str, exc: Exception) -> JSONResponse:
    return JSONResponse({"error": error, "message": str(exc)}, status_code=500)


@router.get("/billing")
def cron_billing(force: bool = False, db: Session = Depends(get_db)):
    try:
        result = jobs.generate_monthly_bills(db, force=force)
    except Exception as e:
        logger.exception("Monthly billing run failed")
        db.rollback()
        return _failure("Failed to generate bills", e)
    if not result["ran"]:
        return {"success": True, "message": "Bills are only generated on the 1st of the month", **result}
    return {"success": True, "message": f"Generated {result['created']} bills", **result}


@router.get("/mark-overdue")
def cron_mark_overdue(db: Session = Depends(get_db)):
    try:
        result = jobs.mark_overdue_bills(db)
    except Exception as e:
        logger.exception("Overdue run failed")
        db.rollback()
        return _failure("Failed to mark overdue bills", e)
    return {"success": True, "message": f"Marked {result['count']} bills as overdue", **result}


@router.get("/payment-reminders")
def cron_payment_reminders(db: Session = Depends(get_db)):
    try:
        result = jobs.send_payment_reminders(db)
    except Exception as e:
        logger.exception("Reminder run failed")
        return _failure("Failed to send payment reminders", e)
    return {"success": True, "message": f"Sent {result['count']} payment reminders", **result}


@router.get("/daily")
def cron_daily(db: Session = Depends(get_db)):
    try:
        result = jobs.run_daily_maintenance(db)
    except Exception as e:
        logger.exception("Daily maintenance run failed")
        db.rollback()
        return _failure("Failed to run daily tasks", e)
    return {"success": True, "tasks": result}
