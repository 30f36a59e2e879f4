import logging
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from ..db import get_db
from ..models import User
from ..security import set_session, clear_session, get_current_user_id
from ..config import settings
from ..limiter import limiter
from ..services.accounts import authenticate
from ..templating import templates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def home_for(user: User) -> str:
    return "/dashboard" if user.is_admin else "/tenant"


@router.get("/login", response_class=HTMLResponse)
def login_form(request: Request, db: Session = Depends(get_db)):
    uid = get_current_user_id(request)
    user = db.get(User, uid) if uid else None
    if user:
        return RedirectResponse(url=home_for(user), status_code=303)
    return templates.TemplateResponse(
        request,
        "auth/login.html",
        {"error": request.query_params.get("error"), "msg": request.query_params.get("msg")},
    )


@router.post("/login")
@limiter.limit(settings.RATE_LIMIT_AUTH)
def login(request: Request, phone: str = Form(...), password: str = Form(...), db: Session = Depends(get_db)):
    user = authenticate(db, phone, password)
    if not user:
        logger.info("Failed login for phone %s", phone)
        return templates.TemplateResponse(
            request,
            "auth/login.html",
            {"error": "Invalid phone number or password.", "phone": phone},
            status_code=400,
        )
    resp = RedirectResponse(url=home_for(user), status_code=303)
    set_session(resp, user.id)
    return resp


@router.post("/logout")
def logout():
    resp = RedirectResponse(url="/auth/login?msg=You have been logged out.", status_code=303)
    clear_session(resp)
    return resp
