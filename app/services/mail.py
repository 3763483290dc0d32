"""Outgoing email: Jinja2 rendering and SMTP delivery."""

import logging
import smtplib
from email.message import EmailMessage
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.config import get_settings

logger = logging.getLogger("budget_keeper")

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def get_template_dir() -> Path:
    """TEMPLATE_DIR, relative paths resolved against the project root."""
    template_dir = Path(get_settings().TEMPLATE_DIR)
    if not template_dir.is_absolute():
        template_dir = PROJECT_ROOT / template_dir
    return template_dir


@lru_cache
def _get_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(get_template_dir())),
        autoescape=select_autoescape(["html"]),
    )


def render_template(name: str, **context: Any) -> str:
    """Render a template from the template directory."""
    return _get_environment().get_template(name).render(**context)


class Mailer:
    """Sends multipart (text + html) emails.

    With ``MAIL_BACKEND=console`` messages are written to the application log
    instead of being delivered, which is what development and tests use.
    """

    def __init__(self) -> None:
        settings = get_settings()
        self.backend = settings.MAIL_BACKEND
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.sender = settings.SMTP_FROM
        self.use_tls = settings.SMTP_USE_TLS

    def build_message(self, to: str, subject: str, text: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text)
        msg.add_alternative(html, subtype="html")
        return msg

    def send(self, to: str, subject: str, text: str, html: str) -> bool:
        """Send an email. Returns False if delivery failed; failures are logged, not raised."""
        if self.backend != "smtp":
            logger.info("MAIL to=%s subject=%s\n%s", to, subject, text)
            return True

        msg = self.build_message(to, subject, text, html)
        try:
            with smtplib.SMTP(self.host, self.port) as server:
                if self.use_tls:
                    server.starttls()
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send '%s' email to %s", subject, to)
            return False
        return True


_mailer: Mailer | None = None


def get_mailer() -> Mailer:
    """Get singleton mailer instance."""
    global _mailer
    if _mailer is None:
        _mailer = Mailer()
    return _mailer
