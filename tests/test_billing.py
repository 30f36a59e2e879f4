from datetime import date
from decimal import Decimal

import pytest

from app.exceptions import ConflictError, DomainError, PermissionDenied
from app.models import BillItemType, BillStatus, PaymentMethod, PaymentStatus
from app.schemas import LineItemIn, PaymentIn
from app.services import billing

from conftest import make_room, make_tenant

MARCH = date(2024, 3, 1)


def pay(amount, method=PaymentMethod.UPI):
    return PaymentIn(amount=amount, payment_method=method, transaction_date=date(2024, 3, 4))


@pytest.fixture()
def bill(db, tenant):
    return billing.create_bill(db, tenant.id, MARCH)


def test_new_bill_has_single_rent_line(db, bill):
    assert bill.status == BillStatus.DRAFT
    assert bill.billing_month == MARCH
    assert bill.due_date == date(2024, 3, 6)
    assert bill.total_amount == Decimal("8000.00")
    assert bill.paid_amount == Decimal("0.00")
    [item] = bill.line_items
    assert item.item_type == BillItemType.RENT
    assert item.description == "Monthly Rent - March 2024"
    assert item.amount == Decimal("8000.00")


def test_bill_month_is_normalised_and_unique(db, tenant, bill):
    with pytest.raises(ConflictError, match="Bill already exists for this month"):
        billing.create_bill(db, tenant.id, date(2024, 3, 17))


def test_bill_needs_room_rent(db, prop):
    room = make_room(db, prop, room_number="301", monthly_rent=None)
    tenant = make_tenant(db, room.beds[0], phone="9876500077")
    with pytest.raises(DomainError, match="No monthly rent"):
        billing.create_bill(db, tenant.id, MARCH)


def test_line_items_keep_total_in_sync(db, bill):
    item = billing.add_line_item(
        db, bill.id, LineItemIn(item_type=BillItemType.FOOD, description="Dinner plan", quantity=1, unit_price=2500)
    )
    assert billing.get_bill(db, bill.id).total_amount == Decimal("10500.00")

    billing.remove_line_item(db, item.id)
    assert billing.get_bill(db, bill.id).total_amount == Decimal("8000.00")


def test_electricity_charge(db, bill, tenant):
    reading = billing.add_electricity_charge(db, bill.id, tenant.bed_id, 1200, 1250, 8)
    assert reading.units_consumed == Decimal("50.00")
    assert reading.total_amount == Decimal("400.00")
    assert reading.added_to_bill_id == bill.id
    bill = billing.get_bill(db, bill.id)
    assert bill.total_amount == Decimal("8400.00")
    assert bill.line_items[-1].item_type == BillItemType.ELECTRICITY

    with pytest.raises(DomainError, match="lower than the previous"):
        billing.add_electricity_charge(db, bill.id, tenant.bed_id, 1300, 1250, 8)


def test_late_fee(db, bill):
    bill = billing.apply_late_fee(db, bill.id, 200)
    assert bill.late_fee_applied == Decimal("200.00")
    assert bill.total_amount == Decimal("8200.00")
    with pytest.raises(DomainError):
        billing.apply_late_fee(db, bill.id, 0)


def test_send_only_from_draft(db, bill):
    bill = billing.send_bill(db, bill.id)
    assert bill.status == BillStatus.SENT
    assert bill.sent_at is not None
    with pytest.raises(DomainError, match="Only draft bills"):
        billing.send_bill(db, bill.id)


def test_partial_then_full_payment(db, bill):
    billing.send_bill(db, bill.id)

    billing.record_payment(db, bill.id, pay(3000))
    bill = billing.get_bill(db, bill.id)
    assert bill.status == BillStatus.PARTIAL
    assert bill.paid_amount == Decimal("3000.00")
    assert billing.bill_balance(bill) == Decimal("5000.00")

    with pytest.raises(DomainError, match="exceeds the bill balance"):
        billing.record_payment(db, bill.id, pay(6000))

    payment = billing.record_payment(db, bill.id, pay(5000, PaymentMethod.CASH))
    assert payment.status == PaymentStatus.SUCCESS
    bill = billing.get_bill(db, bill.id)
    assert bill.status == BillStatus.PAID
    assert billing.bill_balance(bill) == Decimal("0.00")

    with pytest.raises(DomainError):
        billing.record_payment(db, bill.id, pay(1))
    with pytest.raises(DomainError, match="Cannot modify a paid bill"):
        billing.apply_late_fee(db, bill.id, 100)


def test_tenant_reported_payment_is_pending_until_confirmed(db, bill, tenant):
    billing.send_bill(db, bill.id)
    payment = billing.record_tenant_payment(db, tenant, bill.id, pay(8000))
    assert payment.status == PaymentStatus.PENDING
    assert billing.get_bill(db, bill.id).status == BillStatus.PAID

    assert billing.confirm_payment(db, payment.id).status == PaymentStatus.SUCCESS
    with pytest.raises(DomainError):
        billing.confirm_payment(db, payment.id)


def test_tenant_cannot_pay_someone_elses_bill(db, room, bill):
    other = make_tenant(db, room.beds[1], phone="9876500002")
    with pytest.raises(PermissionDenied):
        billing.record_tenant_payment(db, other, bill.id, pay(100))


def test_cancel_rules(db, tenant, bill):
    billing.send_bill(db, bill.id)
    billing.record_payment(db, bill.id, pay(100))
    with pytest.raises(DomainError, match="recorded payments"):
        billing.cancel_bill(db, bill.id)

    april = billing.create_bill(db, tenant.id, date(2024, 4, 1))
    assert billing.cancel_bill(db, april.id).status == BillStatus.CANCELLED
    with pytest.raises(DomainError):
        billing.add_line_item(
            db, april.id, LineItemIn(item_type=BillItemType.OTHER, description="Key", quantity=1, unit_price=50)
        )


def test_mark_overdue_requires_sent_bill(db, bill):
    with pytest.raises(DomainError):
        billing.mark_as_overdue(db, bill.id)
    billing.send_bill(db, bill.id)
    assert billing.mark_as_overdue(db, bill.id).status == BillStatus.OVERDUE
    # Overdue bills still take payments
    billing.record_payment(db, bill.id, pay(8000))
    assert billing.get_bill(db, bill.id).status == BillStatus.PAID


def test_collected_between_counts_payments_in_range(db, bill):
    billing.send_bill(db, bill.id)
    billing.record_payment(db, bill.id, pay(2500))
    assert billing.collected_between(db, date(2024, 3, 1), date(2024, 3, 31)) == Decimal("2500.00")
    assert billing.collected_between(db, date(2024, 4, 1), date(2024, 4, 30)) == Decimal("0.00")
