from datetime import date
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy import func
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import User, Property, Bed, BedStatus, Bill, BillStatus, Booking, BookingStatus, Tenant, TenantStatus, RESIDENT_STATUSES
from ..security import require_admin
from ..services.billing import collected_between
from ..services.maintenance import open_requests_count
from ..templating import templates

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def occupancy_stats(db: Session) -> dict:
    counts = dict(db.query(Bed.status, func.count(Bed.id)).group_by(Bed.status).all())
    beds = {status.value: counts.get(status, 0) for status in BedStatus}
    total = sum(beds.values())
    occupied = beds[BedStatus.OCCUPIED.value]
    return {
        "beds": beds,
        "total_beds": total,
        "occupancy_rate": round(occupied / total * 100, 1) if total else 0.0,
    }


@router.get("", response_class=HTMLResponse)
def overview(request: Request, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    today = date.today()
    month_start = today.replace(day=1)
    stats = occupancy_stats(db)
    stats.update({
        "properties": db.query(Property).count(),
        "tenants": db.query(Tenant).filter(Tenant.status.in_(RESIDENT_STATUSES)).count(),
        "on_notice": db.query(Tenant).filter(Tenant.status == TenantStatus.NOTICE_PERIOD).count(),
        "month_revenue": collected_between(db, month_start, today),
        "overdue_bills": db.query(Bill).filter(Bill.status == BillStatus.OVERDUE).count(),
        "pending_bookings": db.query(Booking).filter(Booking.status == BookingStatus.PENDING).count(),
        "open_maintenance": open_requests_count(db),
    })
    recent_bookings = (
        db.query(Booking)
        .filter(Booking.status == BookingStatus.PENDING)
        .order_by(Booking.created_at.desc())
        .limit(5)
        .all()
    )
    upcoming_checkouts = (
        db.query(Tenant)
        .filter(Tenant.status == TenantStatus.NOTICE_PERIOD)
        .order_by(Tenant.expected_checkout.asc())
        .limit(5)
        .all()
    )
    return templates.TemplateResponse(
        request,
        "dashboard/index.html",
        {
            "user": user,
            "today": today,
            "stats": stats,
            "recent_bookings": recent_bookings,
            "upcoming_checkouts": upcoming_checkouts,
        },
    )
