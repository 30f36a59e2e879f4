from datetime import date
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import User, Tenant, TenantStatus, PaymentMethod
from ..schemas import TenantIn, TenantUpdateIn, Deduction
from ..security import require_admin
from ..services import tenants as tenant_service
from ..services import deposits as deposit_service
from ..services.inventory import available_beds
from ..templating import templates
from .forms import fields

router = APIRouter(prefix="/dashboard/tenants", tags=["tenants"])

PROFILE_FORM_FIELDS = (
    "name", "email", "date_of_birth", "gender", "blood_group", "emergency_name", "emergency_phone",
    "emergency_relation", "occupation", "workplace_college", "work_address", "notes",
)


@router.get("/", response_class=HTMLResponse)
def tenants_index(request: Request, status: TenantStatus | None = None, q: str | None = None,
                  user: User = Depends(require_admin), db: Session = Depends(get_db)):
    query = db.query(Tenant).join(User, Tenant.user_id == User.id)
    if status:
        query = query.filter(Tenant.status == status)
    if q:
        like = f"%{q.strip()}%"
        query = query.filter((User.name.ilike(like)) | (User.phone.ilike(like)))
    tenants = query.order_by(Tenant.created_at.desc()).all()
    return templates.TemplateResponse(
        request,
        "tenants/index.html",
        {"user": user, "tenants": tenants, "statuses": list(TenantStatus), "status": status, "q": q or ""},
    )


@router.get("/new", response_class=HTMLResponse)
def tenants_new(request: Request, bed_id: int | None = None, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    return templates.TemplateResponse(
        request,
        "tenants/new.html",
        {"user": user, "beds": available_beds(db), "bed_id": bed_id},
    )


@router.post("/new")
async def tenants_create(request: Request, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    form = await request.form()
    data = TenantIn(**fields(form, ("bed_id", "phone", "check_in_date", "expected_checkout", "notice_period_days")
                             + PROFILE_FORM_FIELDS))
    tenant = tenant_service.create_tenant(db, data)
    return RedirectResponse(url=f"/dashboard/tenants/{tenant.id}", status_code=303)


@router.get("/{tenant_id}", response_class=HTMLResponse)
def tenants_detail(request: Request, tenant_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    tenant = tenant_service.get_tenant(db, tenant_id)
    return templates.TemplateResponse(
        request,
        "tenants/detail.html",
        {
            "user": user,
            "tenant": tenant,
            "today": date.today(),
            "free_beds": available_beds(db),
            "payment_methods": list(PaymentMethod),
        },
    )


@router.get("/{tenant_id}/edit", response_class=HTMLResponse)
def tenants_edit(request: Request, tenant_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    tenant = tenant_service.get_tenant(db, tenant_id)
    return templates.TemplateResponse(request, "tenants/edit.html", {"user": user, "tenant": tenant})


@router.post("/{tenant_id}/edit")
async def tenants_update(request: Request, tenant_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    form = await request.form()
    data = TenantUpdateIn(**fields(form, PROFILE_FORM_FIELDS + ("expected_checkout", "notice_period_days")))
    tenant_service.update_tenant(db, tenant_id, data)
    return RedirectResponse(url=f"/dashboard/tenants/{tenant_id}", status_code=303)


@router.post("/{tenant_id}/notice")
def tenants_give_notice(tenant_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    tenant_service.give_notice(db, tenant_id)
    return RedirectResponse(url=f"/dashboard/tenants/{tenant_id}", status_code=303)


@router.post("/{tenant_id}/checkout")
def tenants_checkout(tenant_id: int, checkout_date: date | None = Form(None), user: User = Depends(require_admin), db: Session = Depends(get_db)):
    tenant_service.checkout_tenant(db, tenant_id, checkout_date)
    return RedirectResponse(url=f"/dashboard/tenants/{tenant_id}", status_code=303)


@router.post("/{tenant_id}/change-bed")
def tenants_change_bed(tenant_id: int, bed_id: int = Form(...), user: User = Depends(require_admin), db: Session = Depends(get_db)):
    tenant_service.change_bed(db, tenant_id, bed_id)
    return RedirectResponse(url=f"/dashboard/tenants/{tenant_id}", status_code=303)


# ---- Security deposits ----

@router.post("/{tenant_id}/deposits")
def tenants_record_deposit(tenant_id: int, amount: float = Form(...), paid_date: date | None = Form(None),
                           payment_method: PaymentMethod = Form(...), notes: str | None = Form(None),
                           user: User = Depends(require_admin), db: Session = Depends(get_db)):
    deposit_service.record_security_deposit(db, tenant_id, amount, paid_date, payment_method, notes)
    return RedirectResponse(url=f"/dashboard/tenants/{tenant_id}", status_code=303)


@router.post("/{tenant_id}/deposits/{deposit_id}/refund")
async def tenants_refund_deposit(request: Request, tenant_id: int, deposit_id: int,
                                 user: User = Depends(require_admin), db: Session = Depends(get_db)):
    form = await request.form()
    reasons = form.getlist("deduction_reason")
    amounts = form.getlist("deduction_amount")
    deductions = [
        Deduction(reason=reason, amount=value)
        for reason, value in zip(reasons, amounts)
        if reason.strip() and value.strip()
    ]
    values = fields(form, ("amount", "refund_date", "refund_method", "notes"))
    deposit_service.refund_security_deposit(
        db,
        deposit_id,
        values.get("amount") or 0,
        date.fromisoformat(values["refund_date"]) if values.get("refund_date") else None,
        PaymentMethod(values.get("refund_method", PaymentMethod.CASH.value)),
        deductions if form.get("update_deductions") else None,
        values.get("notes"),
    )
    return RedirectResponse(url=f"/dashboard/tenants/{tenant_id}", status_code=303)


# ---- Documents ----

@router.post("/{tenant_id}/documents/{document_id}/verify")
def tenants_verify_document(tenant_id: int, document_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    tenant_service.verify_document(db, document_id)
    return RedirectResponse(url=f"/dashboard/tenants/{tenant_id}", status_code=303)


@router.post("/{tenant_id}/documents/{document_id}/reject")
def tenants_reject_document(tenant_id: int, document_id: int, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    tenant_service.reject_document(db, document_id)
    return RedirectResponse(url=f"/dashboard/tenants/{tenant_id}", status_code=303)
