from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..exceptions import NotFoundError
from ..models import Announcement, Property, Testimonial, Tenant
from ..schemas import TestimonialIn, AnnouncementIn


def _get(db: Session, model, obj_id: int, label: str):
    obj = db.get(model, obj_id)
    if not obj:
        raise NotFoundError(f"{label} not found")
    return obj


# ---- Testimonials ----

def create_testimonial(db: Session, data: TestimonialIn) -> Testimonial:
    _get(db, Property, data.property_id, "Property")
    testimonial = Testimonial(**data.model_dump())
    db.add(testimonial)
    db.commit()
    db.refresh(testimonial)
    return testimonial


def update_testimonial(db: Session, testimonial_id: int, data: TestimonialIn) -> Testimonial:
    testimonial = _get(db, Testimonial, testimonial_id, "Testimonial")
    _get(db, Property, data.property_id, "Property")
    for field, value in data.model_dump().items():
        setattr(testimonial, field, value)
    db.commit()
    return testimonial


def delete_testimonial(db: Session, testimonial_id: int) -> None:
    db.delete(_get(db, Testimonial, testimonial_id, "Testimonial"))
    db.commit()


def toggle_testimonial(db: Session, testimonial_id: int) -> Testimonial:
    testimonial = _get(db, Testimonial, testimonial_id, "Testimonial")
    testimonial.is_active = not testimonial.is_active
    db.commit()
    return testimonial


def active_testimonials(db: Session, limit: int = 6) -> list[Testimonial]:
    return (
        db.query(Testimonial)
        .join(Property)
        .filter(Testimonial.is_active.is_(True), Property.is_active.is_(True))
        .order_by(Testimonial.created_at.desc())
        .limit(limit)
        .all()
    )


# ---- Announcements ----

def create_announcement(db: Session, data: AnnouncementIn) -> Announcement:
    if data.property_id is not None:
        _get(db, Property, data.property_id, "Property")
    announcement = Announcement(**data.model_dump())
    db.add(announcement)
    db.commit()
    db.refresh(announcement)
    return announcement


def delete_announcement(db: Session, announcement_id: int) -> None:
    db.delete(_get(db, Announcement, announcement_id, "Announcement"))
    db.commit()


def toggle_announcement(db: Session, announcement_id: int) -> Announcement:
    announcement = _get(db, Announcement, announcement_id, "Announcement")
    announcement.is_active = not announcement.is_active
    db.commit()
    return announcement


def announcements_for_tenant(db: Session, tenant: Tenant, limit: int | None = None) -> list[Announcement]:
    """Active announcements for every property plus those of the tenant's property."""
    property_id = tenant.bed.room.property_id if tenant.bed else None
    q = db.query(Announcement).filter(Announcement.is_active.is_(True))
    if property_id:
        q = q.filter(or_(Announcement.property_id.is_(None), Announcement.property_id == property_id))
    else:
        q = q.filter(Announcement.property_id.is_(None))
    q = q.order_by(Announcement.created_at.desc(), Announcement.id.desc())
    if limit:
        q = q.limit(limit)
    return q.all()
