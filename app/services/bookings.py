"""
Public booking requests and their admin workflow.

pending -> approved (beds RESERVED, user account ready) -> converted (tenant
created on the primary bed, beds OCCUPIED). A pending booking may instead be
rejected.
"""
import calendar
import logging
import math
from datetime import date

from sqlalchemy.orm import Session

from ..config import settings
from ..exceptions import DomainError, NotFoundError
from ..models import (
    Bed, BedStatus, Booking, BookingBed, BookingStatus, Tenant, TenantStatus, User, UserRole, RESIDENT_STATUSES,
)
from ..schemas import BookingRequestIn
from ..security import hash_password
from .currency import to_money
from .tenants import release_bed

logger = logging.getLogger(__name__)


def add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return day.replace(year=year, month=month, day=min(day.day, calendar.monthrange(year, month)[1]))


def duration_in_months(duration_months: int | None, duration_days: int | None) -> int:
    if duration_months:
        return duration_months
    if duration_days:
        return math.ceil(duration_days / 30)
    return 1


def get_booking(db: Session, booking_id: int) -> Booking:
    booking = db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


def create_booking(db: Session, data: BookingRequestIn) -> Booking:
    bed_ids = list(dict.fromkeys(data.bed_ids))
    if not bed_ids:
        raise DomainError("At least one bed must be selected")
    beds = db.query(Bed).filter(Bed.id.in_(bed_ids)).all()
    if len(beds) != len(bed_ids):
        raise DomainError("One or more selected beds are no longer available")
    if len({b.room_id for b in beds}) > 1:
        raise DomainError("All beds must be in the same room")
    if any(b.status != BedStatus.AVAILABLE for b in beds):
        raise DomainError("One or more selected beds are no longer available")

    booking = Booking(
        bed_id=bed_ids[0],
        name=data.name.strip(),
        email=(data.email or "").strip() or None,
        phone=data.phone.strip(),
        requested_checkin=data.requested_checkin,
        duration_months=duration_in_months(data.duration_months, data.duration_days),
        expected_checkout=data.expected_checkout,
        ac_selected=data.ac_selected,
        breakfast_selected=data.breakfast_selected,
        lunch_selected=data.lunch_selected,
        dinner_selected=data.dinner_selected,
        advance_amount=to_money(data.advance_amount) if data.advance_amount else None,
        advance_paid=bool(data.advance_amount),
        status=BookingStatus.PENDING,
        admin_notes=data.notes or None,
    )
    booking.booking_beds = [BookingBed(bed_id=bed_id) for bed_id in bed_ids]
    db.add(booking)
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s requested by %s for %d bed(s)", booking.id, booking.phone, len(bed_ids))
    return booking


def approve_booking(db: Session, booking_id: int, admin_notes: str | None = None) -> Booking:
    booking = get_booking(db, booking_id)
    if booking.status != BookingStatus.PENDING:
        raise DomainError("Only pending bookings can be approved")
    beds = booking.beds
    if any(b.status != BedStatus.AVAILABLE for b in beds):
        raise DomainError("One or more beds are no longer available")
    user = db.query(User).filter(User.phone == booking.phone).first()
    if user and user.role != UserRole.TENANT.value:
        raise DomainError("This phone number belongs to a staff account")

    try:
        if not user:
            # Lets the guest log in with their phone number to complete the profile
            user = User(
                name=booking.name,
                phone=booking.phone,
                email=booking.email,
                hashed_password=hash_password(booking.phone),
                role=UserRole.TENANT.value,
            )
            db.add(user)
            db.flush()
        booking.status = BookingStatus.APPROVED
        booking.admin_notes = admin_notes or None
        booking.user_id = user.id
        for bed in beds:
            bed.status = BedStatus.RESERVED
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Booking %s approved, %d bed(s) reserved", booking.id, len(beds))
    return booking


def reject_booking(db: Session, booking_id: int, admin_notes: str | None = None) -> Booking:
    booking = get_booking(db, booking_id)
    if booking.status != BookingStatus.PENDING:
        raise DomainError("Only pending bookings can be rejected")
    booking.status = BookingStatus.REJECTED
    booking.admin_notes = admin_notes or None
    db.commit()
    logger.info("Booking %s rejected", booking.id)
    return booking


def convert_booking_to_tenant(db: Session, booking_id: int) -> Tenant:
    booking = get_booking(db, booking_id)
    if booking.status != BookingStatus.APPROVED:
        raise DomainError("Only approved bookings can be converted to tenants")
    if not booking.user:
        raise DomainError("Booking must have an associated user account. Please approve the booking first.")
    beds = booking.beds
    if not beds:
        raise DomainError("No beds found in booking")
    if any(b.status != BedStatus.RESERVED for b in beds):
        raise DomainError("One or more beds are not reserved for this booking")
    primary_bed = beds[0]

    try:
        tenant = db.query(Tenant).filter(Tenant.user_id == booking.user_id).first()
        if tenant:
            # Same person as an earlier tenancy or a profile saved after approval
            if tenant.status in RESIDENT_STATUSES and tenant.bed_id:
                release_bed(db, tenant.bed_id)
            else:
                tenant.check_in_date = booking.requested_checkin
                tenant.expected_checkout = booking.expected_checkout or add_months(
                    booking.requested_checkin, booking.duration_months
                )
                tenant.notice_given_date = None
                tenant.actual_checkout = None
            tenant.bed_id = primary_bed.id
            tenant.status = TenantStatus.ACTIVE
            tenant.breakfast_subscribed = booking.breakfast_selected or tenant.breakfast_subscribed
            tenant.lunch_subscribed = booking.lunch_selected or tenant.lunch_subscribed
            tenant.dinner_subscribed = booking.dinner_selected or tenant.dinner_subscribed
        else:
            tenant = Tenant(
                user_id=booking.user_id,
                bed_id=primary_bed.id,
                check_in_date=booking.requested_checkin,
                expected_checkout=booking.expected_checkout
                or add_months(booking.requested_checkin, booking.duration_months),
                notice_period_days=settings.DEFAULT_NOTICE_PERIOD_DAYS,
                status=TenantStatus.ACTIVE,
                breakfast_subscribed=booking.breakfast_selected,
                lunch_subscribed=booking.lunch_selected,
                dinner_subscribed=booking.dinner_selected,
            )
            db.add(tenant)
        for bed in beds:
            bed.status = BedStatus.OCCUPIED
        booking.status = BookingStatus.CONVERTED
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(tenant)
    logger.info("Booking %s converted to tenant %s on bed %s", booking.id, tenant.id, primary_bed.id)
    return tenant
