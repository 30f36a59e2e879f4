from datetime import date
from fastapi import APIRouter, Request, Depends, Query
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from ..config import settings
from ..db import get_db
from ..models import Property, Room, RoomType, BedStatus
from ..limiter import limiter
from ..schemas import BookingRequestIn
from ..services import bookings as booking_service
from ..services.content import active_testimonials
from ..services.inventory import available_beds, get_room, room_price_for_beds
from ..templating import templates
from .forms import checkbox, fields

router = APIRouter(tags=["public"])


@router.get("/", response_class=HTMLResponse)
def landing(request: Request, db: Session = Depends(get_db)):
    properties = db.query(Property).filter(Property.is_active.is_(True)).order_by(Property.name.asc()).all()
    return templates.TemplateResponse(
        request,
        "public/landing.html",
        {"properties": properties, "testimonials": active_testimonials(db)},
    )


@router.get("/browse", response_class=HTMLResponse)
def browse(request: Request, property_id: int | None = None, room_type: RoomType | None = None,
           ac: str | None = None, db: Session = Depends(get_db)):
    has_ac = {"yes": True, "no": False}.get(ac or "")
    beds = available_beds(db, property_id, room_type, has_ac)
    # Group by room so multi-bed rooms show once
    rooms: dict[int, dict] = {}
    for bed in beds:
        entry = rooms.setdefault(bed.room_id, {"room": bed.room, "beds": []})
        entry["beds"].append(bed)
    return templates.TemplateResponse(
        request,
        "public/browse.html",
        {
            "rooms": list(rooms.values()),
            "properties": db.query(Property).filter(Property.is_active.is_(True)).order_by(Property.name.asc()).all(),
            "room_types": list(RoomType),
            "property_id": property_id,
            "room_type": room_type,
            "ac": ac or "",
        },
    )


@router.get("/rooms/{room_id}", response_class=HTMLResponse)
def room_detail(request: Request, room_id: int, db: Session = Depends(get_db)):
    room = get_room(db, room_id)
    if not room.property.is_active:
        return HTMLResponse("<h2>Room not found</h2>", status_code=404)
    free_beds = [b for b in room.beds if b.status == BedStatus.AVAILABLE]
    pricing = [(count, room_price_for_beds(room, count)) for count in range(1, len(free_beds) + 1)] if room.monthly_rent is not None else []
    return templates.TemplateResponse(
        request,
        "public/room.html",
        {"room": room, "prop": room.property, "free_beds": free_beds, "pricing": pricing},
    )


@router.get("/book", response_class=HTMLResponse)
def book_form(request: Request, bed_ids: list[int] = Query(default=[]), db: Session = Depends(get_db)):
    beds = available_beds(db)
    selected = [b for b in beds if b.id in bed_ids]
    room = selected[0].room if selected else None
    return templates.TemplateResponse(
        request,
        "public/book.html",
        {"beds": beds, "selected_ids": [b.id for b in selected], "room": room, "today": date.today()},
    )


@router.post("/book")
@limiter.limit(settings.RATE_LIMIT_BOOKING)
async def book_submit(request: Request, db: Session = Depends(get_db)):
    form = await request.form()
    data = BookingRequestIn(
        bed_ids=[int(v) for v in form.getlist("bed_ids") if str(v).strip()],
        **fields(form, ("name", "phone", "email", "requested_checkin", "duration_months", "duration_days",
                        "expected_checkout", "advance_amount", "notes")),
        ac_selected=checkbox(form, "ac_selected"),
        breakfast_selected=checkbox(form, "breakfast_selected"),
        lunch_selected=checkbox(form, "lunch_selected"),
        dinner_selected=checkbox(form, "dinner_selected"),
    )
    booking = booking_service.create_booking(db, data)
    return RedirectResponse(url=f"/book/success?booking_id={booking.id}", status_code=303)


@router.get("/book/success", response_class=HTMLResponse)
def book_success(request: Request, booking_id: int | None = None):
    return templates.TemplateResponse(request, "public/book_success.html", {"booking_id": booking_id})
