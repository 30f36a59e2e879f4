import logging
from datetime import datetime

from sqlalchemy.orm import Session

from ..exceptions import DomainError, NotFoundError, PermissionDenied
from ..models import MaintenanceRequest, MaintenanceStatus, Tenant, RESIDENT_STATUSES
from ..schemas import MaintenanceRequestIn

logger = logging.getLogger(__name__)

CLOSED_STATUSES = (MaintenanceStatus.RESOLVED, MaintenanceStatus.CLOSED)


def create_maintenance_request(db: Session, tenant: Tenant, data: MaintenanceRequestIn) -> MaintenanceRequest:
    """A tenant may only raise requests for the room their bed is in."""
    if tenant.status not in RESIDENT_STATUSES or not tenant.bed:
        raise DomainError("Only tenants with an assigned bed can raise maintenance requests")
    if tenant.bed.room_id != data.room_id:
        raise PermissionDenied("You can only raise requests for your own room")
    request = MaintenanceRequest(
        tenant_id=tenant.id,
        room_id=data.room_id,
        category=data.category.strip(),
        description=data.description.strip(),
        priority=data.priority,
        images=list(data.images),
        status=MaintenanceStatus.OPEN,
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info("Maintenance request %s opened by tenant %s (%s)", request.id, tenant.id, request.priority.value)
    return request


def update_maintenance_status(db: Session, request_id: int, status: MaintenanceStatus) -> MaintenanceRequest:
    request = db.get(MaintenanceRequest, request_id)
    if not request:
        raise NotFoundError("Maintenance request not found")
    request.status = status
    if status in CLOSED_STATUSES:
        request.resolved_at = request.resolved_at or datetime.utcnow()
    else:
        request.resolved_at = None
    db.commit()
    logger.info("Maintenance request %s is now %s", request.id, status.value)
    return request


def open_requests_count(db: Session) -> int:
    return (
        db.query(MaintenanceRequest)
        .filter(MaintenanceRequest.status.in_([MaintenanceStatus.OPEN, MaintenanceStatus.IN_PROGRESS]))
        .count()
    )
