# mailer.py
import asyncio
import html
import logging
import smtplib
from email.message import EmailMessage

import config

logger = logging.getLogger(__name__)


class SmtpMailer:
    def __init__(self, host=None, port=None, user=None, password=None, sender=None, starttls=None):
        self.host = host if host is not None else config.SMTP_HOST
        self.port = port or config.SMTP_PORT
        self.user = user if user is not None else config.SMTP_USER
        self.password = password if password is not None else config.SMTP_PASSWORD
        self.sender = sender or config.SMTP_FROM
        self.starttls = config.SMTP_STARTTLS if starttls is None else starttls

    def _send_sync(self, message):
        with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
            if self.starttls:
                smtp.starttls()
            if self.user:
                smtp.login(self.user, self.password or "")
            smtp.send_message(message)

    async def send(self, to, subject, html_body, text_body):
        if not self.host:
            logger.warning(f"SMTP not configured, email to {to} not sent: {subject}")
            return False
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text_body)
        message.add_alternative(html_body, subtype="html")
        try:
            await asyncio.to_thread(self._send_sync, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email to {to} failed: {e}")
            return False
        logger.info(f"Email sent to {to}: {subject}")
        return True


def render_email(title, current_response, quote, category, scheduled_for):
    """Returns (subject, html, text) for a fired reminder."""
    subject = f"Rude Reminder: {title}"
    when = scheduled_for.strftime("%Y-%m-%d %H:%M UTC")
    category = getattr(category, "value", category)
    text_lines = [
        "Your Rude Reminder",
        "",
        current_response,
        "",
    ]
    if quote:
        text_lines += [quote, ""]
    text_lines += [f"Category: {category}", f"Originally scheduled for: {when}"]
    esc = html.escape
    quote_html = f"<blockquote>{esc(quote)}</blockquote>" if quote else ""
    html_body = (
        "<html><body>"
        f"<h2>{esc(title)}</h2>"
        f"<p><strong>{esc(current_response)}</strong></p>"
        f"{quote_html}"
        f"<p>Category: {esc(str(category))}</p>"
        f"<p>Originally scheduled for: {esc(when)}</p>"
        "</body></html>"
    )
    return subject, html_body, "\n".join(text_lines)
