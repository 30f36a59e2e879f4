"""
Property, room and bed inventory.

Bed status is owned by the occupancy rules: a bed only becomes OCCUPIED through
tenant assignment (see ``services.tenants``), and it cannot be made AVAILABLE or
deleted while a resident tenant still points at it.
"""
import logging
import string
from datetime import date
from decimal import Decimal

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..exceptions import ConflictError, DomainError, NotFoundError
from ..models import (
    Property, Room, Bed, BedStatus, Booking, BookingBed, BookingStatus, Tenant, RESIDENT_STATUSES, BEDS_PER_ROOM_TYPE,
)
from ..schemas import PropertyIn, RoomIn, BedIn
from .bookings import add_months
from .currency import to_money

logger = logging.getLogger(__name__)


def get_property(db: Session, property_id: int) -> Property:
    prop = db.get(Property, property_id)
    if not prop:
        raise NotFoundError("Property not found")
    return prop


def get_room(db: Session, room_id: int) -> Room:
    room = db.get(Room, room_id)
    if not room:
        raise NotFoundError("Room not found")
    return room


def get_bed(db: Session, bed_id: int) -> Bed:
    bed = db.get(Bed, bed_id)
    if not bed:
        raise NotFoundError("Bed not found")
    return bed


def _money_or_none(value):
    return to_money(value) if value is not None else None


def _clean(value: str | None) -> str | None:
    return (value or "").strip() or None


# ---- Properties ----

def _apply_property(prop: Property, data: PropertyIn) -> None:
    prop.name = data.name.strip()
    prop.address = data.address.strip()
    prop.city = data.city.strip()
    prop.state = data.state.strip()
    prop.pincode = data.pincode
    prop.description = _clean(data.description)
    prop.amenities = list(data.amenities)
    prop.rules = list(data.rules)
    prop.phone = _clean(data.phone)
    prop.email = data.email
    prop.google_maps_link = data.google_maps_link
    prop.latitude = data.latitude
    prop.longitude = data.longitude
    prop.website = data.website
    prop.facebook = data.facebook
    prop.instagram = data.instagram
    prop.whatsapp = _clean(data.whatsapp)
    for meal in ("breakfast", "lunch", "dinner"):
        setattr(prop, f"{meal}_enabled", bool(getattr(data, f"{meal}_enabled")))
        setattr(prop, f"{meal}_price", _money_or_none(getattr(data, f"{meal}_price")))
        setattr(prop, f"{meal}_menu", _clean(getattr(data, f"{meal}_menu")))


def create_property(db: Session, data: PropertyIn, images: list[str] | None = None) -> Property:
    prop = Property(images=images or [])
    _apply_property(prop, data)
    db.add(prop)
    db.commit()
    db.refresh(prop)
    logger.info("Property %s created (%s)", prop.id, prop.name)
    return prop


def update_property(db: Session, property_id: int, data: PropertyIn, images: list[str] | None = None) -> Property:
    prop = get_property(db, property_id)
    _apply_property(prop, data)
    if images is not None:
        prop.images = images
    db.commit()
    return prop


def delete_property(db: Session, property_id: int) -> None:
    prop = get_property(db, property_id)
    occupied = (
        db.query(Bed)
        .join(Room)
        .filter(Room.property_id == prop.id, Bed.status == BedStatus.OCCUPIED)
        .count()
    )
    if occupied:
        raise DomainError("Cannot delete property with occupied beds")
    db.delete(prop)
    db.commit()
    logger.info("Property %s deleted", property_id)


def toggle_property_status(db: Session, property_id: int) -> Property:
    prop = get_property(db, property_id)
    prop.is_active = not prop.is_active
    db.commit()
    return prop


# ---- Rooms ----

def bed_letters(count: int) -> list[str]:
    """A, B, C ... for the beds created with a room."""
    return list(string.ascii_uppercase[:count])


def _apply_room(room: Room, data: RoomIn) -> None:
    room.property_id = data.property_id
    room.room_number = data.room_number.strip()
    room.floor = data.floor
    room.room_type = data.room_type
    room.has_ac = data.has_ac
    room.has_attached_bath = data.has_attached_bath
    room.has_balcony = data.has_balcony
    room.monthly_rent = _money_or_none(data.monthly_rent)
    room.security_deposit = to_money(data.security_deposit)
    room.daily_price = _money_or_none(data.daily_price) if data.daily_price else None
    room.multi_bed_pricing = (
        {str(k): float(v) for k, v in data.multi_bed_pricing.items()} if data.multi_bed_pricing else None
    )
    room.description = _clean(data.description)
    room.amenities = list(data.amenities)


def create_room(db: Session, data: RoomIn, images: list[str] | None = None) -> Room:
    """Create a room together with its beds, lettered by room type."""
    get_property(db, data.property_id)
    room = Room(images=images or [])
    _apply_room(room, data)
    for letter in bed_letters(BEDS_PER_ROOM_TYPE.get(data.room_type, 1)):
        room.beds.append(Bed(bed_number=letter, status=BedStatus.AVAILABLE))
    db.add(room)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Room {data.room_number} already exists in this property")
    db.refresh(room)
    logger.info("Room %s created with %d beds", room.id, len(room.beds))
    return room


def update_room(db: Session, room_id: int, data: RoomIn, images: list[str] | None = None) -> Room:
    room = get_room(db, room_id)
    _apply_room(room, data)
    if images is not None:
        room.images = images
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Room {data.room_number} already exists in this property")
    return room


def delete_room(db: Session, room_id: int) -> None:
    room = get_room(db, room_id)
    if any(b.status == BedStatus.OCCUPIED for b in room.beds):
        raise DomainError("Cannot delete room with occupied beds")
    db.delete(room)
    db.commit()
    logger.info("Room %s deleted", room_id)


def room_price_for_beds(room: Room, bed_count: int) -> Decimal:
    """Monthly price for taking ``bed_count`` beds of a room."""
    pricing = room.multi_bed_pricing or {}
    if str(bed_count) in pricing:
        return to_money(pricing[str(bed_count)])
    return to_money(room.monthly_rent) * bed_count


# ---- Beds ----

def resident_count(db: Session, bed_id: int) -> int:
    return (
        db.query(Tenant)
        .filter(Tenant.bed_id == bed_id, Tenant.status.in_(RESIDENT_STATUSES))
        .count()
    )


def _check_status_change(db: Session, bed: Bed, status: BedStatus) -> None:
    if status == bed.status:
        return
    if status == BedStatus.OCCUPIED:
        raise DomainError("A bed can only be occupied by assigning a tenant")
    if status == BedStatus.AVAILABLE and resident_count(db, bed.id):
        raise DomainError("Cannot mark bed as available while tenant is assigned")


def create_bed(db: Session, data: BedIn, images: list[str] | None = None) -> Bed:
    get_room(db, data.room_id)
    if data.status == BedStatus.OCCUPIED:
        raise DomainError("A bed can only be occupied by assigning a tenant")
    bed = Bed(
        room_id=data.room_id,
        bed_number=data.bed_number.strip(),
        status=data.status,
        description=_clean(data.description),
        images=images or [],
    )
    db.add(bed)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Bed {data.bed_number} already exists in this room")
    db.refresh(bed)
    return bed


def update_bed(db: Session, bed_id: int, data: BedIn, images: list[str] | None = None) -> Bed:
    bed = get_bed(db, bed_id)
    _check_status_change(db, bed, data.status)
    if bed.room_id != data.room_id and resident_count(db, bed.id):
        raise DomainError("Cannot move bed with active tenant to another room")
    get_room(db, data.room_id)
    bed.room_id = data.room_id
    bed.bed_number = data.bed_number.strip()
    bed.status = data.status
    bed.description = _clean(data.description)
    if images is not None:
        bed.images = images
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Bed {data.bed_number} already exists in this room")
    return bed


def update_bed_status(db: Session, bed_id: int, status: BedStatus) -> Bed:
    bed = get_bed(db, bed_id)
    _check_status_change(db, bed, status)
    bed.status = status
    db.commit()
    logger.info("Bed %s set to %s", bed.id, status.value)
    return bed


def delete_bed(db: Session, bed_id: int) -> None:
    bed = get_bed(db, bed_id)
    if resident_count(db, bed.id):
        raise DomainError("Cannot delete bed with active tenant")
    db.delete(bed)
    db.commit()
    logger.info("Bed %s deleted", bed_id)


def available_beds(db: Session, property_id: int | None = None, room_type=None, has_ac: bool | None = None) -> list[Bed]:
    q = (
        db.query(Bed)
        .join(Room)
        .join(Property)
        .filter(Bed.status == BedStatus.AVAILABLE, Property.is_active.is_(True))
    )
    if property_id:
        q = q.filter(Room.property_id == property_id)
    if room_type:
        q = q.filter(Room.room_type == room_type)
    if has_ac is not None:
        q = q.filter(Room.has_ac.is_(has_ac))
    return q.order_by(Property.name, Room.room_number, Bed.bed_number).all()


# ---- Occupancy by date ----

HOLDING_BOOKING_STATUSES = (BookingStatus.PENDING, BookingStatus.APPROVED)


def room_occupancy(db: Session, room: Room, on_date: date) -> list[dict]:
    """Who holds each bed of ``room`` on ``on_date``.

    Resident tenants hold their bed from check-in until the expected checkout,
    or indefinitely when none is set. Pending and approved bookings hold their
    beds from the requested check-in until the expected checkout, or
    ``duration_months`` after check-in.
    """
    beds = {bed.id: bed for bed in room.beds}
    rows = []

    tenants = (
        db.query(Tenant)
        .filter(Tenant.bed_id.in_(list(beds)), Tenant.status.in_(RESIDENT_STATUSES), Tenant.check_in_date.isnot(None))
        .all()
    )
    for tenant in tenants:
        if tenant.check_in_date <= on_date and (tenant.expected_checkout is None or on_date <= tenant.expected_checkout):
            rows.append({
                "bed": beds[tenant.bed_id],
                "kind": "tenant",
                "name": tenant.name,
                "check_in": tenant.check_in_date,
                "check_out": tenant.expected_checkout,
            })

    bookings = (
        db.query(Booking)
        .outerjoin(BookingBed)
        .filter(
            Booking.status.in_(HOLDING_BOOKING_STATUSES),
            or_(Booking.bed_id.in_(list(beds)), BookingBed.bed_id.in_(list(beds))),
        )
        .all()
    )
    for booking in {b.id: b for b in bookings}.values():
        check_out = booking.expected_checkout or add_months(booking.requested_checkin, booking.duration_months or 1)
        if not booking.requested_checkin <= on_date <= check_out:
            continue
        for bed in booking.beds:
            if bed.id in beds:
                rows.append({
                    "bed": bed,
                    "kind": "booking",
                    "name": f"{booking.name} (booking {booking.status.value})",
                    "check_in": booking.requested_checkin,
                    "check_out": check_out,
                })

    rows.sort(key=lambda row: (row["bed"].bed_number, row["kind"] != "tenant"))
    return rows
