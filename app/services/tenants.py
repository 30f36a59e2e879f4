"""
Tenant lifecycle: check-in, notice, checkout and bed changes.

Every action here keeps the bed and tenant rows consistent inside one commit:
a bed is OCCUPIED exactly when a resident (ACTIVE or NOTICE_PERIOD) tenant
points at it.
"""
import logging
from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session

from ..exceptions import ConflictError, DomainError, NotFoundError, PermissionDenied
from ..models import (
    Bed, BedStatus, Booking, BookingStatus, Tenant, TenantStatus, TenantDocument, User, UserRole, MEALS,
)
from ..schemas import TenantIn, TenantUpdateIn, DocumentIn
from ..security import hash_password

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "date_of_birth", "gender", "blood_group", "emergency_name", "emergency_phone", "emergency_relation",
    "occupation", "workplace_college", "work_address", "notes",
)


def get_tenant(db: Session, tenant_id: int) -> Tenant:
    tenant = db.get(Tenant, tenant_id)
    if not tenant:
        raise NotFoundError("Tenant not found")
    return tenant


def claim_bed(db: Session, bed_id: int, from_status: BedStatus = BedStatus.AVAILABLE) -> Bed:
    """Flip a bed to OCCUPIED only if it is still in ``from_status``.

    The conditional UPDATE makes two concurrent assignments of the same bed
    resolve to one winner.
    """
    claimed = (
        db.query(Bed)
        .filter(Bed.id == bed_id, Bed.status == from_status)
        .update({Bed.status: BedStatus.OCCUPIED}, synchronize_session="fetch")
    )
    if claimed != 1:
        if db.get(Bed, bed_id) is None:
            raise NotFoundError("Bed not found")
        raise ConflictError("Selected bed is not available")
    return db.get(Bed, bed_id)


def release_bed(db: Session, bed_id: int | None) -> None:
    if bed_id is None:
        return
    db.query(Bed).filter(Bed.id == bed_id).update({Bed.status: BedStatus.AVAILABLE}, synchronize_session="fetch")


def create_tenant(db: Session, data: TenantIn) -> Tenant:
    """Create the TENANT user, the tenant and occupy the bed in one transaction."""
    phone = data.phone.strip()
    if db.query(User).filter(User.phone == phone).first():
        raise ConflictError("A user with this phone number already exists")

    try:
        claim_bed(db, data.bed_id)
        user = User(
            name=data.name.strip(),
            phone=phone,
            email=(data.email or "").strip() or None,
            # Tenants log in with their phone number until they change it
            hashed_password=hash_password(phone),
            role=UserRole.TENANT.value,
        )
        db.add(user)
        db.flush()
        tenant = Tenant(
            user_id=user.id,
            bed_id=data.bed_id,
            check_in_date=data.check_in_date or date.today(),
            expected_checkout=data.expected_checkout,
            notice_period_days=data.notice_period_days,
            status=TenantStatus.ACTIVE,
        )
        for field in PROFILE_FIELDS:
            setattr(tenant, field, getattr(data, field))
        db.add(tenant)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(tenant)
    logger.info("Tenant %s created for %s on bed %s", tenant.id, phone, data.bed_id)
    return tenant


def update_tenant(db: Session, tenant_id: int, data: TenantUpdateIn) -> Tenant:
    tenant = get_tenant(db, tenant_id)
    values = data.model_dump(exclude_unset=True)
    if "name" in values and values["name"]:
        tenant.user.name = values.pop("name").strip()
    else:
        values.pop("name", None)
    if "email" in values:
        tenant.user.email = (values.pop("email") or "").strip() or None
    for field, value in values.items():
        if field == "notice_period_days" and value is None:
            continue
        setattr(tenant, field, value)
    db.commit()
    return tenant


def give_notice(db: Session, tenant_id: int, today: date | None = None) -> Tenant:
    """ACTIVE -> NOTICE_PERIOD; the bed stays occupied until checkout."""
    tenant = get_tenant(db, tenant_id)
    if tenant.status != TenantStatus.ACTIVE:
        raise DomainError("Notice can only be given by an active tenant")
    today = today or date.today()
    tenant.status = TenantStatus.NOTICE_PERIOD
    tenant.notice_given_date = today
    tenant.expected_checkout = today + timedelta(days=tenant.notice_period_days)
    db.commit()
    logger.info("Tenant %s gave notice, expected checkout %s", tenant.id, tenant.expected_checkout)
    return tenant


def checkout_tenant(db: Session, tenant_id: int, checkout_date: date | None = None) -> Tenant:
    tenant = get_tenant(db, tenant_id)
    if tenant.status == TenantStatus.CHECKED_OUT:
        raise DomainError("Tenant has already checked out")
    freed_bed = tenant.bed_id
    tenant.status = TenantStatus.CHECKED_OUT
    tenant.actual_checkout = checkout_date or date.today()
    tenant.bed_id = None
    release_bed(db, freed_bed)
    db.commit()
    logger.info("Tenant %s checked out, bed %s freed", tenant.id, freed_bed)
    return tenant


def change_bed(db: Session, tenant_id: int, new_bed_id: int) -> Tenant:
    tenant = get_tenant(db, tenant_id)
    if tenant.status == TenantStatus.CHECKED_OUT:
        raise DomainError("Cannot change bed of a checked out tenant")
    if tenant.bed_id == new_bed_id:
        raise DomainError("Tenant is already assigned to this bed")
    old_bed = tenant.bed_id
    try:
        claim_bed(db, new_bed_id)
        release_bed(db, old_bed)
        tenant.bed_id = new_bed_id
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Tenant %s moved from bed %s to bed %s", tenant.id, old_bed, new_bed_id)
    return tenant


# ---- Documents ----

def upload_document(db: Session, tenant_id: int, data: DocumentIn) -> TenantDocument:
    tenant = get_tenant(db, tenant_id)
    doc = TenantDocument(
        tenant_id=tenant.id,
        document_type=data.document_type,
        document_number=data.document_number.strip(),
        file_url=data.file_url,
        file_name=data.file_name,
        is_verified=False,
    )
    db.add(doc)
    db.commit()
    db.refresh(doc)
    return doc


def _get_document(db: Session, document_id: int) -> TenantDocument:
    doc = db.get(TenantDocument, document_id)
    if not doc:
        raise NotFoundError("Document not found")
    return doc


def verify_document(db: Session, document_id: int) -> TenantDocument:
    doc = _get_document(db, document_id)
    doc.is_verified = True
    doc.verified_at = datetime.utcnow()
    db.commit()
    return doc


def reject_document(db: Session, document_id: int) -> None:
    """A rejected document is removed so the tenant can upload it again."""
    doc = _get_document(db, document_id)
    db.delete(doc)
    db.commit()
    logger.info("Document %s of tenant %s rejected", document_id, doc.tenant_id)


# ---- Meals ----

def update_meal_subscriptions(db: Session, tenant_id: int, breakfast: bool, lunch: bool, dinner: bool) -> Tenant:
    tenant = get_tenant(db, tenant_id)
    if not tenant.bed:
        raise DomainError("Tenant has no bed assigned")
    prop = tenant.bed.room.property
    wanted = {"breakfast": breakfast, "lunch": lunch, "dinner": dinner}
    for meal in MEALS:
        if wanted[meal] and not prop.meal_enabled(meal):
            raise DomainError(f"{meal.title()} is not offered at {prop.name}")
        setattr(tenant, f"{meal}_subscribed", bool(wanted[meal]))
    db.commit()
    return tenant


# ---- Profile completion for approved bookings ----

def approved_booking_for(db: Session, user: User) -> Booking | None:
    return (
        db.query(Booking)
        .filter(Booking.user_id == user.id, Booking.status == BookingStatus.APPROVED)
        .order_by(Booking.created_at.desc())
        .first()
    )


def update_booking_profile(db: Session, user: User, data: TenantUpdateIn) -> Tenant:
    """Save the profile of a user whose booking was approved.

    The tenant row is created without a bed on first save; converting the
    booking later assigns the bed to this same row.
    """
    if user.role != UserRole.TENANT.value:
        raise PermissionDenied("Only tenants can complete a booking profile")
    if not approved_booking_for(db, user):
        raise DomainError("No approved booking found")
    tenant = db.query(Tenant).filter(Tenant.user_id == user.id).first()
    if not tenant:
        tenant = Tenant(user_id=user.id, status=TenantStatus.ACTIVE)
        db.add(tenant)
        db.flush()
    values = data.model_dump(exclude_unset=True)
    values.pop("name", None)
    values.pop("email", None)
    values.pop("expected_checkout", None)
    values.pop("notice_period_days", None)
    for field, value in values.items():
        setattr(tenant, field, value)
    db.commit()
    db.refresh(tenant)
    return tenant
