import logging
import datetime
import requests
from ..config import settings
from ..models import Bill
from ..schemas import PaymentReminder
from ..templating import templates
from .currency import format_amount

logger = logging.getLogger(__name__)


def mailgun_configured() -> bool:
    return bool(settings.MAILGUN_API_KEY and settings.MAILGUN_DOMAIN)


def _send_email(to: str, subject: str, template_name: str, context: dict) -> bool:
    """Send an HTML email through the Mailgun API. Returns True when accepted."""
    if not mailgun_configured():
        logger.warning("Mailgun API key or domain not configured. Skipping email.")
        return False

    body = templates.get_template(template_name).render({
        **context,
        "app_name": settings.APP_NAME,
        "base_url": settings.BASE_URL,
        "current_year": datetime.datetime.now().year,
    })

    mailgun_url = f"https://api.mailgun.net/v3/{settings.MAILGUN_DOMAIN}/messages"
    auth = ("api", settings.MAILGUN_API_KEY)
    data = {
        "from": f"{settings.APP_NAME} <{settings.MAIL_FROM}>",
        "to": [to],
        "subject": subject,
        "html": body,
    }

    try:
        response = requests.post(mailgun_url, auth=auth, data=data, timeout=10)
        response.raise_for_status()
        logger.info(f"Email '{subject}' sent to {to} via Mailgun.")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to send email '{subject}' to {to} via Mailgun: {e}")
        return False


def send_payment_reminder(reminder: PaymentReminder) -> None:
    """Log the reminder and email it when the tenant has an address on file."""
    balance = format_amount(reminder.balance, settings.CURRENCY)
    logger.info(
        "Payment reminder: tenant=%s phone=%s bill=%s balance=%s due_in=%s day(s)",
        reminder.tenant, reminder.phone, reminder.bill_id, balance, reminder.days_until_due,
    )
    if not reminder.email or not mailgun_configured():
        return
    _send_email(
        reminder.email,
        f"Payment reminder: {balance} due {reminder.due_date.strftime('%d %b %Y')}",
        "emails/payment_reminder.html",
        {"reminder": reminder, "balance": balance},
    )


def send_bill_notification(bill: Bill) -> None:
    tenant = bill.tenant
    total = format_amount(bill.total_amount, settings.CURRENCY)
    logger.info("Bill %s sent to tenant %s (%s), total %s", bill.id, tenant.name, tenant.user.phone, total)
    if not tenant.user.email or not mailgun_configured():
        return
    _send_email(
        tenant.user.email,
        f"Your bill for {bill.billing_month.strftime('%B %Y')}",
        "emails/bill_sent.html",
        {"bill": bill, "tenant": tenant, "total": total},
    )
