from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import User, MaintenanceRequest, MaintenanceStatus, MaintenancePriority
from ..security import require_admin
from ..services.maintenance import update_maintenance_status
from ..templating import templates

router = APIRouter(prefix="/dashboard/maintenance", tags=["maintenance"])


@router.get("/", response_class=HTMLResponse)
def maintenance_index(request: Request, status: MaintenanceStatus | None = None, priority: MaintenancePriority | None = None,
                      user: User = Depends(require_admin), db: Session = Depends(get_db)):
    q = db.query(MaintenanceRequest)
    if status:
        q = q.filter(MaintenanceRequest.status == status)
    if priority:
        q = q.filter(MaintenanceRequest.priority == priority)
    requests_ = q.order_by(MaintenanceRequest.created_at.desc()).all()
    return templates.TemplateResponse(
        request,
        "maintenance/index.html",
        {
            "user": user,
            "maintenance_requests": requests_,
            "statuses": list(MaintenanceStatus),
            "priorities": list(MaintenancePriority),
            "status": status,
            "priority": priority,
        },
    )


@router.post("/{request_id}/status")
def maintenance_set_status(request_id: int, status: MaintenanceStatus = Form(...), user: User = Depends(require_admin), db: Session = Depends(get_db)):
    update_maintenance_status(db, request_id, status)
    return RedirectResponse(url="/dashboard/maintenance/", status_code=303)
