from datetime import date
from decimal import Decimal

import pytest

from app.exceptions import DomainError, NotFoundError
from app.models import DepositStatus, PaymentMethod
from app.schemas import Deduction
from app.services.deposits import deposit_status, record_security_deposit, refund_security_deposit


@pytest.mark.parametrize(
    "paid, refunded, deductions, expected",
    [
        (10000, 0, 0, DepositStatus.HELD),
        (10000, 4000, 0, DepositStatus.PARTIALLY_REFUNDED),
        (10000, 10000, 0, DepositStatus.REFUNDED),
        (10000, 8500, 1500, DepositStatus.REFUNDED),
        (10000, 0, 10000, DepositStatus.REFUNDED),
        (1000, 800, 200, DepositStatus.REFUNDED),
        (1000, 400, 200, DepositStatus.PARTIALLY_REFUNDED),
        (1000, 0, 200, DepositStatus.HELD),
    ],
)
def test_deposit_status(paid, refunded, deductions, expected):
    assert deposit_status(paid, refunded, deductions) == expected


@pytest.fixture()
def deposit(db, tenant):
    return record_security_deposit(db, tenant.id, 10000, date(2024, 1, 10), PaymentMethod.BANK_TRANSFER)


def test_new_deposit_is_held(deposit):
    assert deposit.status == "held"
    assert deposit.amount_paid == Decimal("10000.00")
    assert deposit.amount_refunded == Decimal("0.00")
    assert deposit.deductions == []


def test_deposit_needs_tenant_and_amount(db, tenant):
    with pytest.raises(NotFoundError):
        record_security_deposit(db, 4242, 5000, None, PaymentMethod.CASH)
    with pytest.raises(DomainError):
        record_security_deposit(db, tenant.id, 0, None, PaymentMethod.CASH)


def test_refund_with_deductions(db, deposit):
    deductions = [Deduction(reason="Broken chair", amount=500), Deduction(reason="Cleaning", amount=1000)]
    deposit = refund_security_deposit(db, deposit.id, 6000, date(2024, 6, 30), PaymentMethod.UPI, deductions)
    assert deposit.status == "partially_refunded"
    assert deposit.deductions == [
        {"reason": "Broken chair", "amount": 500.0},
        {"reason": "Cleaning", "amount": 1000.0},
    ]
    assert deposit.refundable == Decimal("2500.00")

    with pytest.raises(DomainError, match="Refund exceeds the refundable amount"):
        refund_security_deposit(db, deposit.id, 3000, None, PaymentMethod.UPI)

    # Deductions are kept when not given again
    deposit = refund_security_deposit(db, deposit.id, 2500, None, PaymentMethod.UPI)
    assert deposit.status == "refunded"
    assert deposit.amount_refunded == Decimal("8500.00")
    assert len(deposit.deductions) == 2


def test_deductions_cannot_exceed_deposit(db, deposit):
    with pytest.raises(DomainError, match="Deductions exceed"):
        refund_security_deposit(
            db, deposit.id, 0, None, PaymentMethod.CASH, [Deduction(reason="Damage", amount=12000)]
        )
