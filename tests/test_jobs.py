from datetime import date, timedelta

from app.models import Bill, BillStatus
from app.services import billing, jobs, tenants

from conftest import make_room, make_tenant


def test_billing_run_waits_for_first_of_month(db, tenant):
    result = jobs.generate_monthly_bills(db, today=date(2024, 5, 14))
    assert result["ran"] is False
    assert result["created"] == 0
    assert db.query(Bill).count() == 0


def test_billing_run_creates_one_bill_per_active_tenant(db, prop, room, tenant):
    second = make_tenant(db, room.beds[1], phone="9876500002")
    tenants.give_notice(db, second.id)

    result = jobs.generate_monthly_bills(db, today=date(2024, 5, 1))
    assert result["ran"] is True
    assert result["billing_month"] == "2024-05-01"
    assert result["created"] == 1
    assert result["errors"] == []

    bill = db.get(Bill, result["bill_ids"][0])
    assert bill.tenant_id == tenant.id
    assert bill.status == BillStatus.DRAFT
    assert bill.due_date == date(2024, 5, 6)

    # Running again the same month creates nothing
    again = jobs.generate_monthly_bills(db, today=date(2024, 5, 1))
    assert again["created"] == 0
    assert again["skipped"] == 1
    assert db.query(Bill).count() == 1


def test_forced_run_reports_tenants_without_rent(db, prop, tenant):
    no_rent = make_room(db, prop, room_number="305", monthly_rent=None)
    broke = make_tenant(db, no_rent.beds[0], phone="9876500003")

    result = jobs.generate_monthly_bills(db, today=date(2024, 5, 20), force=True)
    assert result["ran"] is True
    assert result["created"] == 1
    assert [e["tenant_id"] for e in result["errors"]] == [broke.id]


def test_mark_overdue_bills(db, tenant):
    today = date(2024, 3, 10)
    march = billing.create_bill(db, tenant.id, date(2024, 3, 1))
    billing.send_bill(db, march.id)
    draft = billing.create_bill(db, tenant.id, date(2024, 2, 1))
    not_yet = billing.create_bill(db, tenant.id, date(2024, 4, 1), due_date=today + timedelta(days=1))
    billing.send_bill(db, not_yet.id)
    due_today = billing.create_bill(db, tenant.id, date(2024, 5, 1), due_date=today)
    billing.send_bill(db, due_today.id)

    result = jobs.mark_overdue_bills(db, today)
    assert result == {"count": 1, "bill_ids": [march.id]}
    assert db.get(Bill, march.id).status == BillStatus.OVERDUE
    assert db.get(Bill, draft.id).status == BillStatus.DRAFT
    assert db.get(Bill, not_yet.id).status == BillStatus.SENT
    assert db.get(Bill, due_today.id).status == BillStatus.SENT


def test_payment_reminders_use_window(db, room, tenant):
    today = date(2024, 3, 4)
    soon = billing.create_bill(db, tenant.id, date(2024, 3, 1), due_date=today + timedelta(days=2))
    billing.send_bill(db, soon.id)
    billing.create_bill(db, tenant.id, date(2024, 4, 1), due_date=today + timedelta(days=10))

    result = jobs.send_payment_reminders(db, today)
    assert result["count"] == 1
    [detail] = result["details"]
    assert detail["bill_id"] == soon.id
    assert detail["days_until_due"] == 2
    assert detail["balance"] == 8000.0
    assert detail["phone"] == tenant.user.phone


def test_paid_bills_get_no_reminder(db, tenant):
    today = date(2024, 3, 4)
    bill = billing.create_bill(db, tenant.id, date(2024, 3, 1))
    billing.send_bill(db, bill.id)
    billing.record_payment(db, bill.id, billing.PaymentIn(amount=8000, payment_method="UPI"))
    assert jobs.send_payment_reminders(db, today)["count"] == 0


def test_daily_run_combines_jobs(db, tenant):
    result = jobs.run_daily_maintenance(db, date(2024, 3, 10))
    assert result["date"] == "2024-03-10"
    assert result["mark_overdue"]["count"] == 0
    assert result["payment_reminders"]["count"] == 0
