from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import User, Property
from ..schemas import PropertyIn
from ..security import require_admin
from ..services import inventory
from ..templating import templates
from .forms import checkbox, fields, save_uploads, split_list, text

router = APIRouter(prefix="/dashboard/properties", tags=["properties"])

TEXT_FIELDS = (
    "name", "address", "city", "state", "pincode", "description", "phone", "email", "google_maps_link",
    "latitude", "longitude", "website", "facebook", "instagram", "whatsapp",
    "breakfast_price", "breakfast_menu", "lunch_price", "lunch_menu", "dinner_price", "dinner_menu",
)


def property_from_form(form) -> PropertyIn:
    return PropertyIn(
        **fields(form, TEXT_FIELDS),
        amenities=split_list(text(form, "amenities")),
        rules=split_list(text(form, "rules")),
        breakfast_enabled=checkbox(form, "breakfast_enabled"),
        lunch_enabled=checkbox(form, "lunch_enabled"),
        dinner_enabled=checkbox(form, "dinner_enabled"),
    )


@router.get("/", response_class=HTMLResponse)
def properties_index(request: Request, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    properties = db.query(Property).order_by(Property.created_at.desc()).all()
    return templates.TemplateResponse(request, "properties/list.html", {"user": user, "properties": properties})


@router.get("/new", response_class=HTMLResponse)
def properties_new_form(request: Request, user: User = Depends(require_admin)):
    return templates.TemplateResponse(request, "properties/edit.html", {"user": user, "prop": None})


@router.post("/")
async def properties_create(request: Request, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    form = await request.form()
    data = property_from_form(form)
    images = await save_uploads(form, "images", "properties")
    prop = inventory.create_property(db, data, images)
    return RedirectResponse(url=f"/dashboard/properties/{prop.id}", status_code=303)


@router.get("/{property_id}", response_class=HTMLResponse)
def properties_detail(request: Request, property_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    prop = inventory.get_property(db, property_id)
    return templates.TemplateResponse(request, "properties/detail.html", {"user": user, "prop": prop})


@router.get("/{property_id}/edit", response_class=HTMLResponse)
def properties_edit_form(request: Request, property_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    prop = inventory.get_property(db, property_id)
    return templates.TemplateResponse(request, "properties/edit.html", {"user": user, "prop": prop})


@router.post("/{property_id}/edit")
async def properties_edit(request: Request, property_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    form = await request.form()
    data = property_from_form(form)
    new_images = await save_uploads(form, "images", "properties")
    prop = inventory.get_property(db, property_id)
    kept = [url for url in prop.images if url not in form.getlist("remove_images")]
    inventory.update_property(db, property_id, data, kept + new_images)
    return RedirectResponse(url=f"/dashboard/properties/{property_id}", status_code=303)


@router.post("/{property_id}/toggle")
def properties_toggle(property_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    inventory.toggle_property_status(db, property_id)
    return RedirectResponse(url="/dashboard/properties/", status_code=303)


@router.post("/{property_id}/delete")
def properties_delete(property_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    inventory.delete_property(db, property_id)
    return RedirectResponse(url="/dashboard/properties/", status_code=303)
