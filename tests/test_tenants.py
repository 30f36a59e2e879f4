from datetime import date, timedelta

import pytest

from app.exceptions import ConflictError, DomainError, PermissionDenied
from app.models import BedStatus, TenantStatus, User, UserRole
from app.schemas import TenantUpdateIn
from app.security import verify_password
from app.services import inventory, tenants

from conftest import make_property, make_room, make_tenant


def test_create_tenant_occupies_bed_and_creates_login(db, room):
    bed = room.beds[0]
    tenant = make_tenant(db, bed, phone="9876512345", email="asha@example.com")

    assert tenant.status == TenantStatus.ACTIVE
    assert tenant.bed_id == bed.id
    assert inventory.get_bed(db, bed.id).status == BedStatus.OCCUPIED
    assert tenant.user.role == UserRole.TENANT.value
    assert tenant.user.email == "asha@example.com"
    # First login uses the phone number as the password
    assert verify_password("9876512345", tenant.user.hashed_password)


def test_duplicate_phone_is_rejected(db, room, tenant):
    with pytest.raises(ConflictError, match="phone number already exists"):
        make_tenant(db, room.beds[1], phone=tenant.user.phone)


def test_occupied_bed_cannot_take_second_tenant(db, room, tenant):
    with pytest.raises(ConflictError, match="not available"):
        make_tenant(db, room.beds[0], phone="9876500099")
    # Nothing from the failed attempt was kept
    assert db.query(User).filter(User.phone == "9876500099").first() is None


def test_notice_sets_expected_checkout(db, tenant):
    tenant = tenants.give_notice(db, tenant.id, today=date(2024, 3, 1))
    assert tenant.status == TenantStatus.NOTICE_PERIOD
    assert tenant.notice_given_date == date(2024, 3, 1)
    assert tenant.expected_checkout == date(2024, 3, 1) + timedelta(days=30)
    # Still living there
    assert tenant.bed.status == BedStatus.OCCUPIED

    with pytest.raises(DomainError):
        tenants.give_notice(db, tenant.id)


def test_checkout_releases_bed(db, room, tenant):
    bed_id = tenant.bed_id
    tenant = tenants.checkout_tenant(db, tenant.id, date(2024, 4, 30))

    assert tenant.status == TenantStatus.CHECKED_OUT
    assert tenant.actual_checkout == date(2024, 4, 30)
    assert tenant.bed_id is None
    assert inventory.get_bed(db, bed_id).status == BedStatus.AVAILABLE

    with pytest.raises(DomainError, match="already checked out"):
        tenants.checkout_tenant(db, tenant.id)


def test_change_bed_moves_occupancy(db, room, tenant):
    old_bed, new_bed = room.beds[0], room.beds[1]
    tenants.change_bed(db, tenant.id, new_bed.id)

    assert tenants.get_tenant(db, tenant.id).bed_id == new_bed.id
    assert inventory.get_bed(db, old_bed.id).status == BedStatus.AVAILABLE
    assert inventory.get_bed(db, new_bed.id).status == BedStatus.OCCUPIED


def test_change_bed_to_taken_bed_fails(db, room, tenant):
    other = make_tenant(db, room.beds[1], phone="9876500002")
    with pytest.raises(ConflictError):
        tenants.change_bed(db, tenant.id, other.bed_id)
    assert tenants.get_tenant(db, tenant.id).bed_id == room.beds[0].id


def test_meal_subscriptions_follow_property_menu(db):
    prop = make_property(db, breakfast_enabled=True, breakfast_price=1500)
    room = make_room(db, prop)
    tenant = make_tenant(db, room.beds[0])

    tenant = tenants.update_meal_subscriptions(db, tenant.id, True, False, False)
    assert tenant.breakfast_subscribed is True

    with pytest.raises(DomainError, match="Dinner is not offered"):
        tenants.update_meal_subscriptions(db, tenant.id, True, False, True)


def test_update_tenant_profile(db, tenant):
    data = TenantUpdateIn(name="Asha R.", occupation="working", emergency_name="Ravi")
    tenant = tenants.update_tenant(db, tenant.id, data)
    assert tenant.user.name == "Asha R."
    assert tenant.occupation == "working"
    assert tenant.emergency_name == "Ravi"
    assert tenant.notice_period_days == 30


def test_booking_profile_needs_approved_booking(db):
    user = User(name="Guest", phone="9000011111", hashed_password="x", role=UserRole.TENANT.value)
    db.add(user)
    db.commit()
    with pytest.raises(DomainError, match="No approved booking"):
        tenants.update_booking_profile(db, user, TenantUpdateIn(occupation="student"))


def test_booking_profile_is_tenant_only(db, admin):
    with pytest.raises(PermissionDenied):
        tenants.update_booking_profile(db, admin, TenantUpdateIn(occupation="student"))
