from datetime import date
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import User, Property, Room, RoomType
from ..schemas import RoomIn
from ..security import require_admin
from ..services import inventory
from ..templating import templates
from .forms import checkbox, fields, save_uploads, split_list, text

router = APIRouter(prefix="/dashboard/rooms", tags=["rooms"])


def multi_bed_pricing_from_form(form) -> dict | None:
    """Reads price_for_1 .. price_for_4 inputs into {"1": price, ...}."""
    pricing = {}
    for count in range(1, 5):
        value = text(form, f"price_for_{count}")
        if value:
            pricing[str(count)] = float(value)
    return pricing or None


def room_from_form(form) -> RoomIn:
    return RoomIn(
        **fields(form, ("property_id", "room_number", "floor", "room_type", "monthly_rent",
                        "security_deposit", "daily_price", "description")),
        has_ac=checkbox(form, "has_ac"),
        has_attached_bath=checkbox(form, "has_attached_bath"),
        has_balcony=checkbox(form, "has_balcony"),
        multi_bed_pricing=multi_bed_pricing_from_form(form),
        amenities=split_list(text(form, "amenities")),
    )


def _form_context(db: Session, user: User, room: Room | None, property_id: int | None = None) -> dict:
    return {
        "user": user,
        "room": room,
        "properties": db.query(Property).order_by(Property.name.asc()).all(),
        "room_types": list(RoomType),
        "selected_property_id": room.property_id if room else property_id,
    }


@router.get("/", response_class=HTMLResponse)
def rooms_index(request: Request, property_id: int | None = None, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    q = db.query(Room).join(Property)
    if property_id:
        q = q.filter(Room.property_id == property_id)
    rooms = q.order_by(Property.name.asc(), Room.room_number.asc()).all()
    properties = db.query(Property).order_by(Property.name.asc()).all()
    return templates.TemplateResponse(
        request,
        "rooms/index.html",
        {"user": user, "rooms": rooms, "properties": properties, "property_id": property_id},
    )


@router.get("/new", response_class=HTMLResponse)
def rooms_new(request: Request, property_id: int | None = None, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    return templates.TemplateResponse(request, "rooms/form.html", _form_context(db, user, None, property_id))


@router.post("/new")
async def rooms_create(request: Request, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    form = await request.form()
    data = room_from_form(form)
    images = await save_uploads(form, "images", "rooms")
    room = inventory.create_room(db, data, images)
    return RedirectResponse(url=f"/dashboard/rooms/{room.id}", status_code=303)


@router.get("/{room_id}", response_class=HTMLResponse)
def rooms_detail(request: Request, room_id: int, on: date | None = Query(None, alias="date"),
                 user: User = Depends(require_admin), db: Session = Depends(get_db)):
    room = inventory.get_room(db, room_id)
    on = on or date.today()
    occupancy = inventory.room_occupancy(db, room, on)
    held = {row["bed"].id for row in occupancy}
    return templates.TemplateResponse(
        request,
        "rooms/detail.html",
        {"user": user, "room": room, "on_date": on, "occupancy": occupancy, "free_count": len(room.beds) - len(held)},
    )


@router.get("/{room_id}/edit", response_class=HTMLResponse)
def rooms_edit(request: Request, room_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    room = inventory.get_room(db, room_id)
    return templates.TemplateResponse(request, "rooms/form.html", _form_context(db, user, room))


@router.post("/{room_id}/edit")
async def rooms_update(request: Request, room_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    form = await request.form()
    data = room_from_form(form)
    room = inventory.get_room(db, room_id)
    kept = [url for url in room.images if url not in form.getlist("remove_images")]
    new_images = await save_uploads(form, "images", "rooms")
    inventory.update_room(db, room_id, data, kept + new_images)
    return RedirectResponse(url=f"/dashboard/rooms/{room_id}", status_code=303)


@router.post("/{room_id}/delete")
def rooms_delete(room_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    inventory.delete_room(db, room_id)
    return RedirectResponse(url="/dashboard/rooms/", status_code=303)
