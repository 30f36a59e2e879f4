import pytest

from app.exceptions import DomainError, PermissionDenied
from app.models import MaintenancePriority, MaintenanceStatus
from app.schemas import AnnouncementIn, MaintenanceRequestIn
from app.services import content, tenants
from app.services.accounts import authenticate, change_password
from app.services.maintenance import create_maintenance_request, open_requests_count, update_maintenance_status

from conftest import make_property, make_room, make_tenant


def leak(room_id, **overrides):
    data = {
        "room_id": room_id,
        "category": "Plumbing",
        "priority": MaintenancePriority.HIGH,
        "description": "Bathroom tap is leaking",
    }
    data.update(overrides)
    return MaintenanceRequestIn(**data)


def test_tenant_raises_request_for_own_room(db, room, tenant):
    request = create_maintenance_request(db, tenant, leak(room.id, images=["https://img.example/tap.jpg"]))
    assert request.status == MaintenanceStatus.OPEN
    assert request.tenant_id == tenant.id
    assert request.images == ["https://img.example/tap.jpg"]
    assert open_requests_count(db) == 1


def test_request_for_another_room_is_denied(db, prop, tenant):
    other = make_room(db, prop, room_number="110")
    with pytest.raises(PermissionDenied):
        create_maintenance_request(db, tenant, leak(other.id))


def test_checked_out_tenant_cannot_raise_requests(db, room, tenant):
    tenants.checkout_tenant(db, tenant.id)
    with pytest.raises(DomainError):
        create_maintenance_request(db, tenant, leak(room.id))


def test_resolved_at_follows_status(db, room, tenant):
    request = create_maintenance_request(db, tenant, leak(room.id))

    request = update_maintenance_status(db, request.id, MaintenanceStatus.RESOLVED)
    assert request.resolved_at is not None
    assert open_requests_count(db) == 0

    request = update_maintenance_status(db, request.id, MaintenanceStatus.IN_PROGRESS)
    assert request.resolved_at is None
    assert open_requests_count(db) == 1


def test_announcements_for_tenant(db, prop, tenant):
    elsewhere = make_property(db, name="Lakeside PG")
    content.create_announcement(db, AnnouncementIn(title="Water cut", content="No water on Sunday morning"))
    content.create_announcement(db, AnnouncementIn(property_id=prop.id, title="Pest control", content="Friday 10am"))
    content.create_announcement(db, AnnouncementIn(property_id=elsewhere.id, title="New wifi", content="Ask the warden"))
    hidden = content.create_announcement(db, AnnouncementIn(title="Old notice", content="Ignore this"))
    content.toggle_announcement(db, hidden.id)

    titles = {a.title for a in content.announcements_for_tenant(db, tenant)}
    assert titles == {"Water cut", "Pest control"}


def test_change_password(db, admin):
    with pytest.raises(DomainError, match="Current password is incorrect"):
        change_password(db, admin, "wrong", "new-password")
    with pytest.raises(DomainError, match="at least 6"):
        change_password(db, admin, "admin-pass", "short")

    change_password(db, admin, "admin-pass", "new-password")
    assert authenticate(db, admin.phone, "new-password") == admin
    assert authenticate(db, admin.phone, "admin-pass") is None
