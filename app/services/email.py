"""
Outgoing email: verification links, password reset links and comment notifications.

SmtpEmailDispatcher delivers through an SMTP relay. LogEmailDispatcher is used when
EMAIL_ENABLED is false (local development) and only logs the message metadata.
Failures raise EmailDeliveryError; callers decide whether that fails the request.
"""

import logging
import smtplib
from abc import ABC, abstractmethod
from email.message import EmailMessage
from typing import TYPE_CHECKING, Protocol
from urllib.parse import urlencode

from app.core.errors import EmailDeliveryError

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


class EmailDispatcher(Protocol):
    def send_verification_email(self, address: str, display_name: str, token: str) -> None: ...

    def send_password_reset_email(self, address: str, display_name: str, token: str) -> None: ...

    def send_comment_notification(
        self,
        address: str,
        display_name: str,
        post_title: str,
        commenter_name: str,
        comment_content: str,
    ) -> None: ...


def _link(frontend_url: str, path: str, token: str) -> str:
    return f"{frontend_url.rstrip('/')}/{path}?{urlencode({'token': token})}"


class _BaseDispatcher(ABC):
    """Builds the plain-text messages; subclasses implement _deliver."""

    def __init__(self, frontend_url: str, sender: str) -> None:
        self.frontend_url = frontend_url
        self.sender = sender

    @abstractmethod
    def _deliver(self, to: str, subject: str, body: str) -> None: ...

    def send_verification_email(self, address: str, display_name: str, token: str) -> None:
        url = _link(self.frontend_url, "verify-email", token)
        body = (
            f"Hi {display_name},\n\n"
            "Thanks for registering. Confirm your email address by opening this link:\n\n"
            f"{url}\n\n"
            "If you didn't create an account, ignore this email.\n"
        )
        self._deliver(address, "Verify your email", body)

    def send_password_reset_email(self, address: str, display_name: str, token: str) -> None:
        url = _link(self.frontend_url, "reset-password", token)
        body = (
            f"Hi {display_name},\n\n"
            "A password reset was requested for your account. Choose a new password here:\n\n"
            f"{url}\n\n"
            "The link expires in 1 hour. If you didn't request a reset, ignore this email.\n"
        )
        self._deliver(address, "Reset your password", body)

    def send_comment_notification(
        self,
        address: str,
        display_name: str,
        post_title: str,
        commenter_name: str,
        comment_content: str,
    ) -> None:
        body = (
            f"Hi {display_name},\n\n"
            f'{commenter_name} left a comment on your post "{post_title}":\n\n'
            f"{comment_content}\n\n"
            "Log in to view and respond.\n"
        )
        self._deliver(address, "New comment on your post", body)


class SmtpEmailDispatcher(_BaseDispatcher):
    def __init__(
        self,
        frontend_url: str,
        sender: str,
        host: str,
        port: int,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        super().__init__(frontend_url, sender)
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def _deliver(self, to: str, subject: str, body: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username and self.password:
                    smtp.login(self.username, self.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                "Email delivery failed",
                extra={"subject": subject, "smtp_host": self.host, "reason": str(e)[:200]},
            )
            raise EmailDeliveryError("Failed to send email") from e
        logger.info("Email sent", extra={"subject": subject})


class LogEmailDispatcher(_BaseDispatcher):
    def _deliver(self, to: str, subject: str, body: str) -> None:
        logger.info(
            "Email delivery disabled; message not sent",
            extra={"subject": subject, "body_length": len(body)},
        )


def build_email_dispatcher(settings: "Settings") -> EmailDispatcher:
    if not settings.EMAIL_ENABLED:
        return LogEmailDispatcher(settings.FRONTEND_URL, settings.EMAIL_FROM)
    return SmtpEmailDispatcher(
        frontend_url=settings.FRONTEND_URL,
        sender=settings.EMAIL_FROM,
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD.get_secret_value() if settings.SMTP_PASSWORD else None,
        use_tls=settings.SMTP_USE_TLS,
        timeout=settings.SMTP_TIMEOUT_SEC,
    )


def notify_comment(
    dispatcher: EmailDispatcher,
    address: str,
    display_name: str,
    post_title: str,
    commenter_name: str,
    comment_content: str,
) -> bool:
    """Best-effort comment notification: any failure is logged and reported as False."""
    try:
        dispatcher.send_comment_notification(
            address, display_name, post_title, commenter_name, comment_content
        )
    except EmailDeliveryError as e:
        logger.warning("Comment notification not delivered", extra={"reason": e.message})
        return False
    except Exception:
        logger.exception("Comment notification failed unexpectedly")
        return False
    return True
