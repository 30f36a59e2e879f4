from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import User, Property, Testimonial, Announcement
from ..schemas import TestimonialIn, AnnouncementIn
from ..security import require_admin
from ..services import content
from ..templating import templates
from .forms import checkbox, fields, save_uploads

router = APIRouter(prefix="/dashboard", tags=["content"])


def _properties(db: Session) -> list[Property]:
    return db.query(Property).order_by(Property.name.asc()).all()


# ---- Testimonials ----

@router.get("/testimonials", response_class=HTMLResponse)
def testimonials_index(request: Request, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    testimonials = db.query(Testimonial).order_by(Testimonial.created_at.desc()).all()
    return templates.TemplateResponse(request, "content/testimonials.html", {"user": user, "testimonials": testimonials})


@router.get("/testimonials/new", response_class=HTMLResponse)
def testimonials_new(request: Request, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    return templates.TemplateResponse(
        request, "content/testimonial_form.html", {"user": user, "testimonial": None, "properties": _properties(db)}
    )


async def _testimonial_from_form(request: Request, current_photo: str | None = None) -> TestimonialIn:
    form = await request.form()
    photos = await save_uploads(form, "photo_file", "testimonials")
    values = fields(form, ("property_id", "name", "photo", "testimonial", "rating"))
    values["photo"] = photos[0] if photos else values.get("photo", current_photo)
    return TestimonialIn(**values, is_active=checkbox(form, "is_active"))


@router.post("/testimonials/new")
async def testimonials_create(request: Request, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    content.create_testimonial(db, await _testimonial_from_form(request))
    return RedirectResponse(url="/dashboard/testimonials", status_code=303)


@router.get("/testimonials/{testimonial_id}/edit", response_class=HTMLResponse)
def testimonials_edit(request: Request, testimonial_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    testimonial = db.get(Testimonial, testimonial_id)
    if not testimonial:
        return HTMLResponse("<h2>Testimonial not found</h2>", status_code=404)
    return templates.TemplateResponse(
        request, "content/testimonial_form.html", {"user": user, "testimonial": testimonial, "properties": _properties(db)}
    )


@router.post("/testimonials/{testimonial_id}/edit")
async def testimonials_update(request: Request, testimonial_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    testimonial = db.get(Testimonial, testimonial_id)
    data = await _testimonial_from_form(request, testimonial.photo if testimonial else None)
    content.update_testimonial(db, testimonial_id, data)
    return RedirectResponse(url="/dashboard/testimonials", status_code=303)


@router.post("/testimonials/{testimonial_id}/toggle")
def testimonials_toggle(testimonial_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    content.toggle_testimonial(db, testimonial_id)
    return RedirectResponse(url="/dashboard/testimonials", status_code=303)


@router.post("/testimonials/{testimonial_id}/delete")
def testimonials_delete(testimonial_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    content.delete_testimonial(db, testimonial_id)
    return RedirectResponse(url="/dashboard/testimonials", status_code=303)


# ---- Announcements ----

@router.get("/announcements", response_class=HTMLResponse)
def announcements_index(request: Request, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    announcements = db.query(Announcement).order_by(Announcement.created_at.desc()).all()
    return templates.TemplateResponse(
        request,
        "content/announcements.html",
        {"user": user, "announcements": announcements, "properties": _properties(db)},
    )


@router.post("/announcements")
def announcements_create(title: str = Form(...), content_text: str = Form(..., alias="content"),
                         property_id: int | None = Form(None), user: User = Depends(require_admin), db: Session = Depends(get_db)):
    content.create_announcement(db, AnnouncementIn(title=title, content=content_text, property_id=property_id))
    return RedirectResponse(url="/dashboard/announcements", status_code=303)


@router.post("/announcements/{announcement_id}/toggle")
def announcements_toggle(announcement_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    content.toggle_announcement(db, announcement_id)
    return RedirectResponse(url="/dashboard/announcements", status_code=303)


@router.post("/announcements/{announcement_id}/delete")
def announcements_delete(announcement_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    content.delete_announcement(db, announcement_id)
    return RedirectResponse(url="/dashboard/announcements", status_code=303)
