from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import User, Bed, BedStatus, Room, Property
from ..schemas import BedIn
from ..security import require_admin
from ..services import inventory
from ..templating import templates
from .forms import fields, save_uploads

router = APIRouter(prefix="/dashboard/beds", tags=["beds"])


@router.get("/", response_class=HTMLResponse)
def beds_index(request: Request, status: BedStatus | None = None, property_id: int | None = None,
               user: User = Depends(require_admin), db: Session = Depends(get_db)):
    q = db.query(Bed).join(Room).join(Property)
    if status:
        q = q.filter(Bed.status == status)
    if property_id:
        q = q.filter(Room.property_id == property_id)
    beds = q.order_by(Property.name.asc(), Room.room_number.asc(), Bed.bed_number.asc()).all()
    return templates.TemplateResponse(
        request,
        "beds/index.html",
        {
            "user": user,
            "beds": beds,
            "statuses": list(BedStatus),
            "status": status,
            "properties": db.query(Property).order_by(Property.name.asc()).all(),
            "property_id": property_id,
        },
    )


@router.get("/new", response_class=HTMLResponse)
def beds_new(request: Request, room_id: int | None = None, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    rooms = db.query(Room).join(Property).order_by(Property.name.asc(), Room.room_number.asc()).all()
    return templates.TemplateResponse(
        request,
        "beds/form.html",
        {"user": user, "bed": None, "rooms": rooms, "room_id": room_id, "statuses": list(BedStatus)},
    )


@router.post("/new")
async def beds_create(request: Request, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    form = await request.form()
    data = BedIn(**fields(form, ("room_id", "bed_number", "status", "description")))
    images = await save_uploads(form, "images", "beds")
    bed = inventory.create_bed(db, data, images)
    return RedirectResponse(url=f"/dashboard/rooms/{bed.room_id}", status_code=303)


@router.get("/{bed_id}/edit", response_class=HTMLResponse)
def beds_edit(request: Request, bed_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    bed = inventory.get_bed(db, bed_id)
    rooms = db.query(Room).join(Property).order_by(Property.name.asc(), Room.room_number.asc()).all()
    return templates.TemplateResponse(
        request,
        "beds/form.html",
        {"user": user, "bed": bed, "rooms": rooms, "room_id": bed.room_id, "statuses": list(BedStatus)},
    )


@router.post("/{bed_id}/edit")
async def beds_update(request: Request, bed_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    form = await request.form()
    data = BedIn(**fields(form, ("room_id", "bed_number", "status", "description")))
    bed = inventory.get_bed(db, bed_id)
    kept = [url for url in bed.images if url not in form.getlist("remove_images")]
    new_images = await save_uploads(form, "images", "beds")
    inventory.update_bed(db, bed_id, data, kept + new_images)
    return RedirectResponse(url=f"/dashboard/rooms/{data.room_id}", status_code=303)


@router.post("/{bed_id}/status")
def beds_set_status(bed_id: int, status: BedStatus = Form(...), user: User = Depends(require_admin), db: Session = Depends(get_db)):
    bed = inventory.update_bed_status(db, bed_id, status)
    return RedirectResponse(url=f"/dashboard/rooms/{bed.room_id}", status_code=303)


@router.post("/{bed_id}/delete")
def beds_delete(bed_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    room_id = inventory.get_bed(db, bed_id).room_id
    inventory.delete_bed(db, bed_id)
    return RedirectResponse(url=f"/dashboard/rooms/{room_id}", status_code=303)
