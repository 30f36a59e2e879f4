from datetime import date

from app.models import BedStatus, Bill, BillStatus, Booking, BookingStatus, Payment, PaymentStatus, User, UserRole
from app.security import hash_password
from app.services import billing

from conftest import login


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_dashboard_requires_login(client):
    resp = client.get("/dashboard", follow_redirects=False)
    assert resp.status_code == 307
    assert resp.headers["location"] == "/auth/login"


def test_login_redirects_by_role(client, admin, tenant):
    resp = client.post("/auth/login", data={"phone": admin.phone, "password": "admin-pass"}, follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/dashboard"

    client.cookies.clear()
    # New tenants log in with their phone number
    resp = client.post("/auth/login", data={"phone": "9876500001", "password": "9876500001"}, follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/tenant"


def test_bad_login_shows_form_again(client, admin):
    resp = client.post("/auth/login", data={"phone": admin.phone, "password": "nope"})
    assert resp.status_code == 400
    assert "Invalid phone number or password." in resp.text


def test_admin_pages_render(client, db, admin, tenant):
    login(client, admin)
    billing.create_bill(db, tenant.id, date(2024, 3, 1))
    for url in (
        "/dashboard",
        "/dashboard/properties/",
        "/dashboard/rooms/",
        "/dashboard/beds/",
        "/dashboard/tenants/",
        f"/dashboard/tenants/{tenant.id}",
        "/dashboard/billing/",
        "/dashboard/bookings/",
        "/dashboard/maintenance/",
    ):
        resp = client.get(url)
        assert resp.status_code == 200, url


def test_tenant_cannot_open_dashboard(client, tenant):
    login(client, tenant.user)
    assert client.get("/dashboard", follow_redirects=False).status_code == 403


def test_occupied_status_cannot_be_set_by_hand(client, admin, room):
    login(client, admin)
    resp = client.post(f"/dashboard/beds/{room.beds[0].id}/status", data={"status": "OCCUPIED"}, follow_redirects=False)
    assert resp.status_code == 400
    assert room.beds[0].status == BedStatus.AVAILABLE

    resp = client.post(f"/dashboard/beds/{room.beds[0].id}/status", data={"status": "MAINTENANCE"}, follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == f"/dashboard/rooms/{room.id}"


def test_bill_exports(client, db, admin, tenant):
    login(client, admin)
    bill = billing.create_bill(db, tenant.id, date(2024, 3, 1))

    resp = client.get("/dashboard/billing/export.csv?month=2024-03")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    header, row = resp.text.strip().splitlines()
    assert header.startswith("Bill ID,Tenant,Phone")
    assert row.startswith(f"{bill.id},Asha Rao,9876500001")

    resp = client.get(f"/dashboard/billing/{bill.id}/pdf")
    assert resp.status_code == 200
    assert resp.content.startswith(b"%PDF")


def test_public_booking(client, db, room):
    assert client.get("/").status_code == 200
    assert client.get("/browse").status_code == 200
    assert client.get(f"/rooms/{room.id}").status_code == 200

    resp = client.post(
        "/book",
        data={
            "bed_ids": [str(room.beds[0].id)],
            "name": "Kiran Das",
            "phone": "9123456780",
            "requested_checkin": "2024-07-01",
            "duration_days": "45",
            "breakfast_selected": "on",
        },
        follow_redirects=False,
    )
    assert resp.status_code == 303
    booking = db.query(Booking).one()
    assert resp.headers["location"] == f"/book/success?booking_id={booking.id}"
    assert booking.status == BookingStatus.PENDING
    assert booking.duration_months == 2
    assert booking.breakfast_selected is True


def test_booking_rejects_taken_bed(client, room, tenant):
    resp = client.post(
        "/book",
        data={
            "bed_ids": [str(room.beds[0].id)],
            "name": "Kiran Das",
            "phone": "9123456780",
            "requested_checkin": "2024-07-01",
        },
        follow_redirects=False,
    )
    assert resp.status_code == 400
    assert "no longer available" in resp.text


def test_tenant_portal(client, db, tenant):
    login(client, tenant.user)
    for url in ("/tenant", "/tenant/bills", "/tenant/maintenance", "/tenant/meals", "/tenant/announcements", "/tenant/profile"):
        assert client.get(url).status_code == 200, url


def test_tenant_pays_sent_bill(client, db, tenant):
    bill = billing.create_bill(db, tenant.id, date(2024, 3, 1))
    login(client, tenant.user)
    # Drafts are not visible to tenants
    assert client.get(f"/tenant/bills/{bill.id}").status_code == 404

    billing.send_bill(db, bill.id)
    assert client.get(f"/tenant/bills/{bill.id}").status_code == 200
    resp = client.post(
        f"/tenant/bills/{bill.id}/pay",
        data={"amount": "3000", "payment_method": "UPI", "reference": "UPI-991"},
        follow_redirects=False,
    )
    assert resp.status_code == 303
    db.expire_all()
    payment = db.query(Payment).one()
    assert payment.status == PaymentStatus.PENDING
    assert payment.reference == "UPI-991"
    assert db.get(Bill, bill.id).status == BillStatus.PARTIAL


def test_user_without_tenant_profile_goes_to_welcome(client, db):
    user = User(name="Kiran Das", phone="9123456780", hashed_password=hash_password("x"), role=UserRole.TENANT.value)
    db.add(user)
    db.commit()
    login(client, user)
    resp = client.get("/tenant", follow_redirects=False)
    assert resp.status_code == 307
    assert resp.headers["location"] == "/tenant/welcome"
    assert client.get("/tenant/welcome").status_code == 200


def test_cron_billing(client, tenant):
    resp = client.get("/api/cron/billing", params={"force": "true"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["ran"] is True
    assert body["created"] == 1
    assert body["message"] == "Generated 1 bills"


def test_cron_secret(client, monkeypatch):
    monkeypatch.setattr("app.routers.cron_api.settings.CRON_SECRET", "s3cret")
    resp = client.get("/api/cron/daily")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized"}

    resp = client.get("/api/cron/daily", headers={"Authorization": "Bearer s3cret"})
    assert resp.status_code == 200
    assert resp.json()["success"] is True


def test_room_page_shows_occupancy_for_date(client, admin, room, tenant):
    login(client, admin)
    resp = client.get(f"/dashboard/rooms/{room.id}", params={"date": "2024-02-01"})
    assert resp.status_code == 200
    assert "Occupancy on 01 Feb 2024" in resp.text
    assert "1 of 2 beds free on this date." in resp.text

    resp = client.get(f"/dashboard/rooms/{room.id}", params={"date": "2024-01-01"})
    assert "2 of 2 beds free on this date." in resp.text
