import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError
from starlette.middleware.sessions import SessionMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import settings
from .db import SessionLocal
from .exceptions import DomainError
from .limiter import limiter
from .routers import auth_views, dashboard_views, properties_views, rooms_views, beds_views
from .routers import tenants_views, billing_views, bookings_views, maintenance_views, content_views
from .routers import settings_views, tenant_portal, public_views, cron_api, uploads_api
from .services.accounts import ensure_default_admin
from .templating import templates

# --- Logging configuration ---
_level = logging.DEBUG if settings.DEBUG else logging.INFO
logging.basicConfig(
    level=_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
# Align uvicorn loggers with our level (useful under Docker Compose)
for _name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(_name).setLevel(_level)
logger = logging.getLogger("app.startup")
logger.info("Starting %s (DEBUG=%s)", settings.APP_NAME, settings.DEBUG)

app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    description=(
        f"{settings.APP_NAME}: paying-guest accommodation management.\n\n"
        "Server-rendered dashboard and tenant portal, plus the JSON cron and upload endpoints under /api."
    ),
    openapi_tags=[
        {
            "name": "cron",
            "description": "Billing jobs for an external scheduler. Bearer CRON_SECRET when configured.",
        }
    ],
)

# Add session middleware
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    max_age=settings.SESSION_MAX_AGE_DAYS * 24 * 60 * 60 # days in seconds
)

@app.on_event("startup")
def startup_event():
    """Runs startup tasks, like ensuring a default admin exists."""
    logger.info("Running startup tasks...")
    db = SessionLocal()
    try:
        ensure_default_admin(db)
    finally:
        db.close()
    logger.info("Startup tasks complete.")


# Add the limiter to the app state
app.state.limiter = limiter
# Add the exception handler for rate limit exceeded errors
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def _error_response(request: Request, message: str, status_code: int):
    if request.url.path.startswith("/api/"):
        return JSONResponse({"error": message}, status_code=status_code)
    return templates.TemplateResponse(
        request,
        "error.html",
        {"message": message, "status_code": status_code},
        status_code=status_code,
    )


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error_response(request, exc.message, exc.status_code)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{field}: {err.get('msg')}" if field else err.get("msg", "Invalid value"))
    return _error_response(request, "; ".join(messages) or "Invalid input", 400)


app.include_router(public_views.router)
app.include_router(auth_views.router)
app.include_router(dashboard_views.router)
app.include_router(properties_views.router)
app.include_router(rooms_views.router)
app.include_router(beds_views.router)
app.include_router(tenants_views.router)
app.include_router(billing_views.router)
app.include_router(bookings_views.router)
app.include_router(maintenance_views.router)
app.include_router(content_views.router)
app.include_router(settings_views.router)
app.include_router(tenant_portal.router)
app.include_router(cron_api.router)
app.include_router(uploads_api.router)

app.mount("/static", StaticFiles(directory="app/static", check_dir=False), name="static")

@app.get("/healthz")
@limiter.exempt
def healthz():
    return {"status": "ok"}


@app.get("/login", include_in_schema=False)
@limiter.exempt
def login_redirect():
    return RedirectResponse(url="/auth/login")
