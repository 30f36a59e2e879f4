from datetime import date

import pytest

from app.exceptions import DomainError
from app.models import Bed, BedStatus, BookingStatus, Tenant, TenantStatus, User, UserRole
from app.schemas import BookingRequestIn, TenantUpdateIn
from app.security import verify_password
from app.services import bookings, tenants

from conftest import make_room


def request_for(beds, **overrides):
    data = {
        "bed_ids": [b.id for b in beds],
        "name": "Kiran Das",
        "phone": "9123456780",
        "email": "kiran@example.com",
        "requested_checkin": date(2024, 7, 1),
        "duration_months": 6,
        "breakfast_selected": True,
    }
    data.update(overrides)
    return BookingRequestIn(**data)


def test_add_months_clamps_day():
    assert bookings.add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert bookings.add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)


@pytest.mark.parametrize("months, days, expected", [(3, None, 3), (None, 45, 2), (None, 30, 1), (None, None, 1)])
def test_duration_in_months(months, days, expected):
    assert bookings.duration_in_months(months, days) == expected


def test_create_booking(db, room):
    booking = bookings.create_booking(db, request_for(room.beds))
    assert booking.status == BookingStatus.PENDING
    assert booking.bed_id == room.beds[0].id
    assert [b.id for b in booking.beds] == [b.id for b in room.beds]
    # Requests do not hold beds
    assert all(b.status == BedStatus.AVAILABLE for b in room.beds)


def test_booking_beds_must_share_a_room(db, prop, room):
    other = make_room(db, prop, room_number="102")
    with pytest.raises(DomainError, match="same room"):
        bookings.create_booking(db, request_for([room.beds[0], other.beds[0]]))


def test_booking_needs_available_beds(db, room, tenant):
    with pytest.raises(DomainError, match="no longer available"):
        bookings.create_booking(db, request_for(room.beds))


def test_approve_reserves_beds_and_creates_login(db, room):
    booking = bookings.create_booking(db, request_for(room.beds))
    booking = bookings.approve_booking(db, booking.id, "Call before arrival")

    assert booking.status == BookingStatus.APPROVED
    assert booking.admin_notes == "Call before arrival"
    assert all(b.status == BedStatus.RESERVED for b in booking.beds)
    user = db.query(User).filter(User.phone == "9123456780").one()
    assert booking.user_id == user.id
    assert user.role == UserRole.TENANT.value
    assert verify_password("9123456780", user.hashed_password)

    with pytest.raises(DomainError):
        bookings.approve_booking(db, booking.id)
    with pytest.raises(DomainError):
        bookings.reject_booking(db, booking.id)


def test_reject_leaves_beds_free(db, room):
    booking = bookings.create_booking(db, request_for(room.beds[:1]))
    booking = bookings.reject_booking(db, booking.id, "Full")
    assert booking.status == BookingStatus.REJECTED
    assert room.beds[0].status == BedStatus.AVAILABLE


def test_convert_creates_tenant_on_primary_bed(db, room):
    booking = bookings.create_booking(db, request_for(room.beds))
    with pytest.raises(DomainError, match="Only approved bookings"):
        bookings.convert_booking_to_tenant(db, booking.id)
    bookings.approve_booking(db, booking.id)

    tenant = bookings.convert_booking_to_tenant(db, booking.id)
    assert tenant.bed_id == room.beds[0].id
    assert tenant.status == TenantStatus.ACTIVE
    assert tenant.check_in_date == date(2024, 7, 1)
    assert tenant.expected_checkout == date(2025, 1, 1)
    assert tenant.breakfast_subscribed is True
    assert tenant.dinner_subscribed is False
    assert bookings.get_booking(db, booking.id).status == BookingStatus.CONVERTED
    assert all(b.status == BedStatus.OCCUPIED for b in room.beds)


def test_profile_saved_before_conversion_is_reused(db, room):
    booking = bookings.create_booking(db, request_for(room.beds[:1]))
    booking = bookings.approve_booking(db, booking.id)
    user = booking.user

    profile = tenants.update_booking_profile(
        db, user, TenantUpdateIn(occupation="Engineer", emergency_name="Meera", name="Ignored")
    )
    assert profile.bed_id is None
    assert profile.occupation == "Engineer"

    tenant = bookings.convert_booking_to_tenant(db, booking.id)
    assert tenant.id == profile.id
    assert tenant.bed_id == room.beds[0].id
    assert tenant.occupation == "Engineer"
    assert db.query(Tenant).filter(Tenant.user_id == user.id).count() == 1
    assert user.name == "Kiran Das"


def test_resident_moving_through_a_booking_frees_the_old_bed(db, prop, room, tenant):
    old_bed_id = tenant.bed_id
    new_room = make_room(db, prop, room_number="204")
    booking = bookings.create_booking(db, request_for(new_room.beds[:1], phone=tenant.user.phone))
    booking = bookings.approve_booking(db, booking.id)
    assert booking.user_id == tenant.user_id

    moved = bookings.convert_booking_to_tenant(db, booking.id)
    assert moved.id == tenant.id
    assert moved.bed_id == new_room.beds[0].id
    assert moved.check_in_date == date(2024, 1, 10)
    assert db.get(Bed, old_bed_id).status == BedStatus.AVAILABLE
    assert db.query(Tenant).filter(Tenant.bed_id == old_bed_id).count() == 0


def test_returning_tenant_starts_a_fresh_stay(db, prop, room, tenant):
    tenants.give_notice(db, tenant.id, today=date(2024, 4, 1))
    tenants.checkout_tenant(db, tenant.id, date(2024, 5, 1))
    booking = bookings.create_booking(db, request_for(room.beds[1:], phone=tenant.user.phone))
    bookings.approve_booking(db, booking.id)

    back = bookings.convert_booking_to_tenant(db, booking.id)
    assert back.id == tenant.id
    assert back.status == TenantStatus.ACTIVE
    assert back.bed_id == room.beds[1].id
    assert back.check_in_date == date(2024, 7, 1)
    assert back.expected_checkout == date(2025, 1, 1)
    assert back.notice_given_date is None
    assert back.actual_checkout is None
    assert room.beds[0].status == BedStatus.AVAILABLE


def test_staff_phone_cannot_be_approved_as_tenant(db, room, admin):
    booking = bookings.create_booking(db, request_for(room.beds[:1], phone=admin.phone))
    with pytest.raises(DomainError, match="staff account"):
        bookings.approve_booking(db, booking.id)
    assert bookings.get_booking(db, booking.id).status == BookingStatus.PENDING
    assert room.beds[0].status == BedStatus.AVAILABLE
    assert admin.role == UserRole.ADMIN.value
