from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import User, Booking, BookingStatus
from ..security import require_admin
from ..services import bookings as booking_service
from ..templating import templates

router = APIRouter(prefix="/dashboard/bookings", tags=["bookings"])


@router.get("/", response_class=HTMLResponse)
def bookings_index(request: Request, status: BookingStatus | None = None, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    q = db.query(Booking)
    if status:
        q = q.filter(Booking.status == status)
    bookings = q.order_by(Booking.created_at.desc()).all()
    return templates.TemplateResponse(
        request,
        "bookings/index.html",
        {"user": user, "bookings": bookings, "statuses": list(BookingStatus), "status": status, "BookingStatus": BookingStatus},
    )


@router.post("/{booking_id}/approve")
def bookings_approve(booking_id: int, admin_notes: str | None = Form(None), user: User = Depends(require_admin), db: Session = Depends(get_db)):
    booking_service.approve_booking(db, booking_id, admin_notes)
    return RedirectResponse(url="/dashboard/bookings/", status_code=303)


@router.post("/{booking_id}/reject")
def bookings_reject(booking_id: int, admin_notes: str | None = Form(None), user: User = Depends(require_admin), db: Session = Depends(get_db)):
    booking_service.reject_booking(db, booking_id, admin_notes)
    return RedirectResponse(url="/dashboard/bookings/", status_code=303)


@router.post("/{booking_id}/convert")
def bookings_convert(booking_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    tenant = booking_service.convert_booking_to_tenant(db, booking_id)
    return RedirectResponse(url=f"/dashboard/tenants/{tenant.id}", status_code=303)
