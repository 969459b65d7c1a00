from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Protocol, Tuple

logger = logging.getLogger(__name__)

REGISTRATION = "registration"
RENEWAL = "renewal"


class EmailSender(Protocol):
    def send(self, to_address: str, subject: str, body: str) -> bool:
        """Deliver one plain-text email. Returns False on failure (never raises)."""

        raise NotImplementedError


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int = 587
    user: str = ""
    password: str = ""
    use_tls: bool = True
    sender: str = ""


class SmtpEmailSender:
    def __init__(self, config: SmtpConfig, *, timeout: float = 10.0):
        self._config = config
        self._timeout = timeout

    def send(self, to_address: str, subject: str, body: str) -> bool:
        message = EmailMessage()
        message["From"] = self._config.sender or self._config.user
        message["To"] = to_address
        message["Subject"] = subject
        message.set_content(body)

        try:
            with smtplib.SMTP(self._config.host, self._config.port, timeout=self._timeout) as server:
                if self._config.use_tls:
                    server.starttls()
                if self._config.user:
                    server.login(self._config.user, self._config.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError):
            logger.exception("Email delivery to %s failed", to_address)
            return False
        return True


class LoggingEmailSender:
    """Development sender: writes the email to the log instead of delivering it."""

    def send(self, to_address: str, subject: str, body: str) -> bool:
        logger.info("[email] TO: %s SUBJECT: %s\n%s", to_address, subject, body)
        return True


def build_activation_email(school_name: str, code: str, kind: str) -> Tuple[str, str]:
    if kind == REGISTRATION:
        subject = "تفعيل حساب المدرسة - نظام الخطط"
        intro = "شكراً لتسجيلكم في نظام الخطط الأسبوعية."
    else:
        subject = "تجديد الاشتراك - نظام الخطط"
        intro = "تم استلام طلب تجديد الاشتراك."

    body = (
        f"عزيزي مدير مدرسة {school_name}،\n\n"
        f"{intro}\n\n"
        "كود التفعيل الخاص بك هو:\n"
        f">> {code} <<\n\n"
        "يرجى استخدام هذا الكود لتفعيل الحساب.\n\n"
        "مع تحيات،\n"
        "إدارة النظام\n"
    )
    return subject, body
