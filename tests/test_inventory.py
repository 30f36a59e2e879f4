from datetime import date
from decimal import Decimal

import pytest

from app.exceptions import ConflictError, DomainError
from app.models import BedStatus, Room, RoomType
from app.schemas import BedIn, BookingRequestIn, RoomIn
from app.services import bookings, inventory, tenants

from conftest import make_property, make_room, make_tenant


@pytest.mark.parametrize(
    "room_type, letters",
    [
        (RoomType.SINGLE, ["A"]),
        (RoomType.DOUBLE, ["A", "B"]),
        (RoomType.TRIPLE, ["A", "B", "C"]),
        (RoomType.DORMITORY, ["A", "B", "C", "D"]),
    ],
)
def test_room_gets_beds_for_its_type(db, prop, room_type, letters):
    room = make_room(db, prop, room_type=room_type)
    assert [b.bed_number for b in room.beds] == letters
    assert all(b.status == BedStatus.AVAILABLE for b in room.beds)


def test_room_number_is_unique_per_property(db, prop):
    make_room(db, prop, room_number="201")
    with pytest.raises(ConflictError):
        make_room(db, prop, room_number="201")

    other = make_property(db, name="Blue Door PG")
    assert make_room(db, other, room_number="201").room_number == "201"


def test_bed_cannot_be_set_occupied_directly(db, room):
    bed = room.beds[0]
    with pytest.raises(DomainError, match="assigning a tenant"):
        inventory.update_bed_status(db, bed.id, BedStatus.OCCUPIED)
    with pytest.raises(DomainError):
        inventory.create_bed(db, BedIn(room_id=room.id, bed_number="C", status=BedStatus.OCCUPIED))


def test_bed_with_tenant_cannot_be_freed_or_deleted(db, room, tenant):
    bed = room.beds[0]
    with pytest.raises(DomainError, match="Cannot mark bed as available"):
        inventory.update_bed_status(db, bed.id, BedStatus.AVAILABLE)
    with pytest.raises(DomainError, match="Cannot delete bed with active tenant"):
        inventory.delete_bed(db, bed.id)
    with pytest.raises(DomainError, match="Cannot delete room with occupied beds"):
        inventory.delete_room(db, room.id)


def test_bed_can_be_freed_after_checkout(db, room, tenant):
    tenants.checkout_tenant(db, tenant.id)
    bed = inventory.get_bed(db, room.beds[0].id)
    assert bed.status == BedStatus.AVAILABLE
    inventory.delete_bed(db, bed.id)
    assert len(inventory.get_room(db, room.id).beds) == 1


def test_maintenance_and_reserved_statuses(db, room):
    bed = room.beds[1]
    assert inventory.update_bed_status(db, bed.id, BedStatus.MAINTENANCE).status == BedStatus.MAINTENANCE
    assert inventory.update_bed_status(db, bed.id, BedStatus.AVAILABLE).status == BedStatus.AVAILABLE


def test_room_price_for_beds_prefers_multi_bed_pricing(db, prop):
    room = make_room(db, prop, room_type=RoomType.TRIPLE, monthly_rent=7000,
                     multi_bed_pricing={"2": 13000})
    assert inventory.room_price_for_beds(room, 1) == Decimal("7000.00")
    assert inventory.room_price_for_beds(room, 2) == Decimal("13000.00")
    assert inventory.room_price_for_beds(room, 3) == Decimal("21000.00")


def test_available_beds_filters(db, prop):
    ac_room = make_room(db, prop, room_number="101", room_type=RoomType.SINGLE, has_ac=True)
    plain = make_room(db, prop, room_number="102", room_type=RoomType.DOUBLE)
    make_tenant(db, plain.beds[0])

    ids = {b.id for b in inventory.available_beds(db)}
    assert ids == {ac_room.beds[0].id, plain.beds[1].id}
    assert [b.id for b in inventory.available_beds(db, has_ac=True)] == [ac_room.beds[0].id]
    assert [b.id for b in inventory.available_beds(db, room_type=RoomType.DOUBLE)] == [plain.beds[1].id]

    inventory.toggle_property_status(db, prop.id)
    assert inventory.available_beds(db) == []


def test_delete_property_with_occupied_bed_is_rejected(db, prop, room, tenant):
    with pytest.raises(DomainError, match="occupied beds"):
        inventory.delete_property(db, prop.id)


def test_update_room_keeps_beds(db, prop, room):
    data = RoomIn(property_id=prop.id, room_number="101A", room_type=RoomType.DOUBLE, monthly_rent=9000)
    updated = inventory.update_room(db, room.id, data)
    assert updated.room_number == "101A"
    assert updated.monthly_rent == Decimal("9000.00")
    assert len(updated.beds) == 2


def test_room_label_is_a_plain_attribute(db, room):
    assert isinstance(Room.__dict__["label"], property)
    assert room.label == "Room 101"
    assert room.property.name == "Green Nest PG"


def test_room_occupancy_by_date(db, room, tenant):
    booking = bookings.create_booking(db, BookingRequestIn(
        bed_ids=[room.beds[1].id], name="Kiran Das", phone="9123456780",
        requested_checkin=date(2024, 7, 1), duration_months=6,
    ))

    assert inventory.room_occupancy(db, room, date(2024, 1, 5)) == []

    rows = inventory.room_occupancy(db, room, date(2024, 8, 1))
    assert [(r["bed"].bed_number, r["kind"]) for r in rows] == [("A", "tenant"), ("B", "booking")]
    assert rows[0]["name"] == "Asha Rao"
    assert rows[0]["check_out"] is None
    assert rows[1]["check_out"] == date(2025, 1, 1)

    # Bookings stop holding the bed after their stay
    rows = inventory.room_occupancy(db, room, date(2025, 2, 1))
    assert [r["kind"] for r in rows] == ["tenant"]

    bookings.reject_booking(db, booking.id)
    assert [r["kind"] for r in inventory.room_occupancy(db, room, date(2024, 8, 1))] == ["tenant"]


def test_checked_out_tenant_frees_the_date(db, room, tenant):
    tenants.checkout_tenant(db, tenant.id)
    assert inventory.room_occupancy(db, room, date(2024, 3, 1)) == []
