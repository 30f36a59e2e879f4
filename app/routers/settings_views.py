from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session
from ..config import settings
from ..db import get_db
from ..exceptions import DomainError
from ..models import User
from ..security import require_user
from ..services.accounts import change_password
from ..services.currency import get_currency_symbol
from ..templating import templates

router = APIRouter(prefix="/settings", tags=["settings"])


def _context(user: User, **extra) -> dict:
    return {
        "user": user,
        "currency": settings.CURRENCY,
        "currency_symbol": get_currency_symbol(settings.CURRENCY),
        "notice_period_days": settings.DEFAULT_NOTICE_PERIOD_DAYS,
        "bill_due_days": settings.BILL_DUE_DAYS,
        "reminder_window_days": settings.REMINDER_WINDOW_DAYS,
        **extra,
    }


@router.get("", response_class=HTMLResponse)
def settings_page(request: Request, user: User = Depends(require_user)):
    return templates.TemplateResponse(request, "settings.html", _context(user))


@router.post("/password")
def update_password(request: Request, user: User = Depends(require_user), db: Session = Depends(get_db),
                    current_password: str = Form(...), new_password: str = Form(...), confirm_password: str = Form(...)):
    if new_password != confirm_password:
        return templates.TemplateResponse(
            request, "settings.html", _context(user, error="New passwords do not match."), status_code=400
        )
    try:
        change_password(db, user, current_password, new_password)
    except DomainError as e:
        return templates.TemplateResponse(request, "settings.html", _context(user, error=e.message), status_code=400)
    return templates.TemplateResponse(request, "settings.html", _context(user, message="Password updated successfully."))
