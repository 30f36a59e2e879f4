from datetime import date
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import User, Tenant, BillStatus, BillItemType, PaymentMethod, RESIDENT_STATUSES
from ..schemas import LineItemIn, PaymentIn
from ..security import require_admin
from ..services import billing
from ..services import reporting
from ..templating import templates

router = APIRouter(prefix="/dashboard/billing", tags=["billing"])


def _parse_month(month: str | None) -> date | None:
    """Accepts YYYY-MM as sent by <input type="month">."""
    if not month:
        return None
    try:
        return date.fromisoformat(f"{month}-01")
    except ValueError:
        return None


@router.get("/", response_class=HTMLResponse)
def bills_index(request: Request, status: BillStatus | None = None, month: str | None = None,
                user: User = Depends(require_admin), db: Session = Depends(get_db)):
    bills = billing.bills_query(db, status, _parse_month(month)).all()
    return templates.TemplateResponse(
        request,
        "billing/index.html",
        {"user": user, "bills": bills, "statuses": list(BillStatus), "status": status, "month": month or ""},
    )


@router.get("/export.csv")
def bills_export_csv(status: BillStatus | None = None, month: str | None = None,
                     user: User = Depends(require_admin), db: Session = Depends(get_db)):
    bills = billing.bills_query(db, status, _parse_month(month)).all()
    csv_data = reporting.generate_bills_csv(bills)
    return Response(
        content=csv_data,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=bills_{month or 'all'}.csv"},
    )


@router.get("/new", response_class=HTMLResponse)
def bills_new(request: Request, tenant_id: int | None = None, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    tenants = (
        db.query(Tenant)
        .filter(Tenant.status.in_(RESIDENT_STATUSES), Tenant.bed_id.isnot(None))
        .order_by(Tenant.id.asc())
        .all()
    )
    return templates.TemplateResponse(
        request,
        "billing/new.html",
        {"user": user, "tenants": tenants, "tenant_id": tenant_id, "this_month": date.today().strftime("%Y-%m")},
    )


@router.post("/new")
def bills_create(tenant_id: int = Form(...), billing_month: str = Form(...), due_date: date | None = Form(None),
                 notes: str | None = Form(None), user: User = Depends(require_admin), db: Session = Depends(get_db)):
    month = _parse_month(billing_month) or date.today().replace(day=1)
    bill = billing.create_bill(db, tenant_id, month, due_date, notes, created_by=user)
    return RedirectResponse(url=f"/dashboard/billing/{bill.id}", status_code=303)


@router.get("/{bill_id}", response_class=HTMLResponse)
def bills_detail(request: Request, bill_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    bill = billing.get_bill(db, bill_id)
    return templates.TemplateResponse(
        request,
        "billing/detail.html",
        {
            "user": user,
            "bill": bill,
            "item_types": list(BillItemType),
            "payment_methods": list(PaymentMethod),
            "today": date.today(),
        },
    )


@router.get("/{bill_id}/pdf")
def bills_pdf(bill_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    bill = billing.get_bill(db, bill_id)
    return Response(
        content=reporting.generate_bill_pdf(bill),
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=bill_{bill.id}.pdf"},
    )


@router.post("/{bill_id}/items")
def bills_add_item(bill_id: int, item_type: BillItemType = Form(...), description: str = Form(...),
                   quantity: float = Form(1), unit_price: float = Form(...),
                   user: User = Depends(require_admin), db: Session = Depends(get_db)):
    data = LineItemIn(item_type=item_type, description=description, quantity=quantity, unit_price=unit_price)
    billing.add_line_item(db, bill_id, data)
    return RedirectResponse(url=f"/dashboard/billing/{bill_id}", status_code=303)


@router.post("/{bill_id}/items/{item_id}/delete")
def bills_remove_item(bill_id: int, item_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    billing.remove_line_item(db, item_id)
    return RedirectResponse(url=f"/dashboard/billing/{bill_id}", status_code=303)


@router.post("/{bill_id}/electricity")
def bills_add_electricity(bill_id: int, previous_reading: float = Form(...), current_reading: float = Form(...),
                          rate_per_unit: float = Form(...), reading_date: date | None = Form(None),
                          user: User = Depends(require_admin), db: Session = Depends(get_db)):
    bill = billing.get_bill(db, bill_id)
    if not bill.tenant.bed_id:
        return HTMLResponse("<h2>Tenant has no bed assigned</h2>", status_code=400)
    billing.add_electricity_charge(db, bill_id, bill.tenant.bed_id, previous_reading, current_reading, rate_per_unit, reading_date)
    return RedirectResponse(url=f"/dashboard/billing/{bill_id}", status_code=303)


@router.post("/{bill_id}/late-fee")
def bills_late_fee(bill_id: int, amount: float = Form(...), user: User = Depends(require_admin), db: Session = Depends(get_db)):
    billing.apply_late_fee(db, bill_id, amount)
    return RedirectResponse(url=f"/dashboard/billing/{bill_id}", status_code=303)


@router.post("/{bill_id}/send")
def bills_send(bill_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    billing.send_bill(db, bill_id)
    return RedirectResponse(url=f"/dashboard/billing/{bill_id}", status_code=303)


@router.post("/{bill_id}/payments")
def bills_record_payment(bill_id: int, amount: float = Form(...), payment_method: PaymentMethod = Form(...),
                         transaction_date: date | None = Form(None), reference: str | None = Form(None),
                         notes: str | None = Form(None), user: User = Depends(require_admin), db: Session = Depends(get_db)):
    data = PaymentIn(amount=amount, payment_method=payment_method, transaction_date=transaction_date,
                     reference=reference, notes=notes)
    billing.record_payment(db, bill_id, data, recorded_by=user)
    return RedirectResponse(url=f"/dashboard/billing/{bill_id}", status_code=303)


@router.post("/{bill_id}/payments/{payment_id}/confirm")
def bills_confirm_payment(bill_id: int, payment_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    billing.confirm_payment(db, payment_id)
    return RedirectResponse(url=f"/dashboard/billing/{bill_id}", status_code=303)


@router.post("/{bill_id}/overdue")
def bills_mark_overdue(bill_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    billing.mark_as_overdue(db, bill_id)
    return RedirectResponse(url=f"/dashboard/billing/{bill_id}", status_code=303)


@router.post("/{bill_id}/cancel")
def bills_cancel(bill_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    billing.cancel_bill(db, bill_id)
    return RedirectResponse(url=f"/dashboard/billing/{bill_id}", status_code=303)
