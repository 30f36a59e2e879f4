from fastapi import APIRouter, Depends, Form, Request, UploadFile, File
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import (
    User, Tenant, Bill, BillStatus, DocumentType, MaintenanceRequest, MaintenanceStatus, MaintenancePriority,
    PaymentMethod,
)
from ..schemas import DocumentIn, MaintenanceRequestIn, PaymentIn, TenantUpdateIn
from ..security import require_tenant, require_user
from ..services import billing, content, tenants as tenant_service
from ..services.maintenance import create_maintenance_request
from ..services.media import save_image
from ..templating import templates
from .forms import fields, save_uploads

router = APIRouter(prefix="/tenant", tags=["tenant"])

OUTSTANDING = (BillStatus.SENT, BillStatus.PARTIAL, BillStatus.OVERDUE)
PROFILE_FIELDS = (
    "date_of_birth", "gender", "blood_group", "occupation", "workplace_college", "work_address",
    "emergency_name", "emergency_phone", "emergency_relation", "notes",
)


def _tenant_bill(db: Session, tenant: Tenant, bill_id: int) -> Bill | None:
    bill = db.get(Bill, bill_id)
    if not bill or bill.tenant_id != tenant.id or bill.status == BillStatus.DRAFT:
        return None
    return bill


@router.get("", response_class=HTMLResponse)
def tenant_home(request: Request, tenant: Tenant = Depends(require_tenant), db: Session = Depends(get_db)):
    outstanding = [b for b in tenant.bills if b.status in OUTSTANDING][:5]
    open_requests = (
        db.query(MaintenanceRequest)
        .filter(
            MaintenanceRequest.tenant_id == tenant.id,
            MaintenanceRequest.status.in_([MaintenanceStatus.OPEN, MaintenanceStatus.IN_PROGRESS]),
        )
        .order_by(MaintenanceRequest.created_at.desc())
        .limit(5)
        .all()
    )
    return templates.TemplateResponse(
        request,
        "tenant/home.html",
        {
            "user": tenant.user,
            "tenant": tenant,
            "outstanding": outstanding,
            "open_requests": open_requests,
            "unverified_documents": [d for d in tenant.documents if not d.is_verified],
            "announcements": content.announcements_for_tenant(db, tenant, limit=5),
        },
    )


# ---- Profile completion after an approved booking ----

@router.get("/welcome", response_class=HTMLResponse)
def tenant_welcome(request: Request, user: User = Depends(require_user), db: Session = Depends(get_db)):
    if user.is_admin:
        return RedirectResponse(url="/dashboard", status_code=303)
    booking = tenant_service.approved_booking_for(db, user)
    return templates.TemplateResponse(
        request,
        "tenant/welcome.html",
        {"user": user, "booking": booking, "tenant": user.tenant, "document_types": list(DocumentType)},
    )


@router.post("/welcome")
async def tenant_welcome_save(request: Request, user: User = Depends(require_user), db: Session = Depends(get_db)):
    form = await request.form()
    tenant_service.update_booking_profile(db, user, TenantUpdateIn(**fields(form, PROFILE_FIELDS)))
    return RedirectResponse(url="/tenant/welcome?saved=1", status_code=303)


# ---- Bills ----

@router.get("/bills", response_class=HTMLResponse)
def tenant_bills(request: Request, tenant: Tenant = Depends(require_tenant)):
    bills = [b for b in tenant.bills if b.status != BillStatus.DRAFT]
    return templates.TemplateResponse(request, "tenant/bills.html", {"user": tenant.user, "tenant": tenant, "bills": bills})


@router.get("/bills/{bill_id}", response_class=HTMLResponse)
def tenant_bill_detail(request: Request, bill_id: int, tenant: Tenant = Depends(require_tenant), db: Session = Depends(get_db)):
    bill = _tenant_bill(db, tenant, bill_id)
    if not bill:
        return HTMLResponse("<h2>Bill not found</h2>", status_code=404)
    return templates.TemplateResponse(
        request,
        "tenant/bill_detail.html",
        {"user": tenant.user, "tenant": tenant, "bill": bill, "payment_methods": list(PaymentMethod)},
    )


@router.post("/bills/{bill_id}/pay")
def tenant_bill_pay(bill_id: int, amount: float = Form(...), payment_method: PaymentMethod = Form(...),
                    reference: str | None = Form(None), tenant: Tenant = Depends(require_tenant), db: Session = Depends(get_db)):
    if not _tenant_bill(db, tenant, bill_id):
        return HTMLResponse("<h2>Bill not found</h2>", status_code=404)
    data = PaymentIn(amount=amount, payment_method=payment_method, reference=reference)
    billing.record_tenant_payment(db, tenant, bill_id, data)
    return RedirectResponse(url=f"/tenant/bills/{bill_id}", status_code=303)


# ---- Maintenance ----

@router.get("/maintenance", response_class=HTMLResponse)
def tenant_maintenance(request: Request, tenant: Tenant = Depends(require_tenant)):
    return templates.TemplateResponse(
        request,
        "tenant/maintenance.html",
        {
            "user": tenant.user,
            "tenant": tenant,
            "maintenance_requests": sorted(tenant.maintenance_requests, key=lambda r: r.created_at, reverse=True),
            "priorities": list(MaintenancePriority),
        },
    )


@router.post("/maintenance")
async def tenant_maintenance_create(request: Request, tenant: Tenant = Depends(require_tenant), db: Session = Depends(get_db)):
    form = await request.form()
    images = await save_uploads(form, "images", "maintenance")
    data = MaintenanceRequestIn(**fields(form, ("room_id", "category", "priority", "description")), images=images)
    create_maintenance_request(db, tenant, data)
    return RedirectResponse(url="/tenant/maintenance", status_code=303)


# ---- Meals ----

@router.get("/meals", response_class=HTMLResponse)
def tenant_meals(request: Request, tenant: Tenant = Depends(require_tenant)):
    prop = tenant.bed.room.property if tenant.bed else None
    return templates.TemplateResponse(request, "tenant/meals.html", {"user": tenant.user, "tenant": tenant, "prop": prop})


@router.post("/meals")
def tenant_meals_save(breakfast: bool = Form(False), lunch: bool = Form(False), dinner: bool = Form(False),
                      tenant: Tenant = Depends(require_tenant), db: Session = Depends(get_db)):
    tenant_service.update_meal_subscriptions(db, tenant.id, breakfast, lunch, dinner)
    return RedirectResponse(url="/tenant/meals", status_code=303)


# ---- Announcements ----

@router.get("/announcements", response_class=HTMLResponse)
def tenant_announcements(request: Request, tenant: Tenant = Depends(require_tenant), db: Session = Depends(get_db)):
    return templates.TemplateResponse(
        request,
        "tenant/announcements.html",
        {"user": tenant.user, "tenant": tenant, "announcements": content.announcements_for_tenant(db, tenant)},
    )


# ---- Profile and documents ----

@router.get("/profile", response_class=HTMLResponse)
def tenant_profile(request: Request, tenant: Tenant = Depends(require_tenant)):
    return templates.TemplateResponse(
        request,
        "tenant/profile.html",
        {"user": tenant.user, "tenant": tenant, "document_types": list(DocumentType)},
    )


@router.post("/profile/documents")
async def tenant_upload_document(document_type: DocumentType = Form(...), document_number: str = Form(...),
                                 file: UploadFile = File(...), tenant: Tenant = Depends(require_tenant),
                                 db: Session = Depends(get_db)):
    url = save_image(await file.read(), file.filename, folder="documents")
    if not url:
        return HTMLResponse("<h2>Upload a JPG, PNG, GIF or WEBP image of the document</h2>", status_code=400)
    data = DocumentIn(document_type=document_type, document_number=document_number, file_url=url, file_name=file.filename or "document")
    tenant_service.upload_document(db, tenant.id, data)
    return RedirectResponse(url="/tenant/profile", status_code=303)
