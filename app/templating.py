from fastapi.templating import Jinja2Templates
from .config import settings
from .services.currency import format_amount

def money_filter(value) -> str:
    """A Jinja2 filter rendering an amount in the configured currency."""
    return format_amount(value, settings.CURRENCY)

# Create a single, shared Jinja2Templates instance
templates = Jinja2Templates(directory="app/templates")
templates.env.filters["money"] = money_filter
templates.env.globals["app_name"] = settings.APP_NAME
