# elitehome/utils/email.py

from datetime import datetime
from html import escape
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from fastapi.concurrency import run_in_threadpool
from elitehome.core.config import settings
from elitehome.core.logger import logger


def new_quote_html(quote: dict) -> str:
    def safe(v):
        return escape(str(v if v is not None else ""))

    return f"""
    <div style="font-family: Arial, sans-serif;">
      <h2>New Quote Request</h2>
      <p><b>Name:</b> {safe(quote.get("name"))}</p>
      <p><b>Email:</b> {safe(quote.get("email"))}</p>
      <p><b>Phone:</b> {safe(quote.get("phone"))}</p>
      <p><b>Service:</b> {safe(quote.get("paint_type"))}</p>
      <p><b>Address:</b> {safe(quote.get("address"))}</p>
      <p><b>Estimate:</b> NZD {safe(quote.get("estimated_price"))}</p>
      <p><b>Message:</b><br>{safe(quote.get("message"))}</p>
      <hr/>
      <p><small>Sent {datetime.utcnow().strftime("%Y-%m-%d %H:%M")} UTC</small></p>
    </div>
    """


async def send_new_quote_email(quote: dict):
    if not settings.SENDGRID_API_KEY:
        raise RuntimeError("SENDGRID_API_KEY is not set")
    recipients = settings.admin_email_list
    if not recipients:
        raise RuntimeError("ADMIN_EMAILS is not configured")

    message = Mail(
        from_email=(settings.FROM_EMAIL, settings.FROM_NAME),
        to_emails=recipients,
        subject=f"New Quote: {quote.get('name') or 'Customer'} - {quote.get('paint_type') or 'Service'}",
        html_content=new_quote_html(quote),
    )
    if quote.get("email"):
        message.reply_to = quote["email"]

    sg = SendGridAPIClient(settings.SENDGRID_API_KEY)
    response = await run_in_threadpool(sg.send, message)
    logger.info("[SENDGRID] New quote email status: %s", response.status_code)
    return response


async def notify_admins_of_quote(quote: dict):
    """Background task: a failed email never affects the stored quote."""
    try:
        await send_new_quote_email(quote)
    except Exception as e:
        logger.error("New quote email failed: %s", e, exc_info=True)
