"""SMTP mail adapter and the transactional messages the app sends."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

from yang.config import Settings, get_settings
from yang.exceptions import MailDeliveryError

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 30

_LAYOUT = """\
<div style="font-family: Arial, sans-serif; line-height: 1.5; color: #111;">
{body}
  <p style="margin-top: 32px;">Thank you,<br/>The {brand} team</p>
</div>
"""


class Mailer:
    """Sends HTML mail through the configured SMTP server."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.smtp_user and self.settings.smtp_pass)

    def send(self, to: str, subject: str, html: str) -> None:
        """Deliver one message.

        Raises:
            MailDeliveryError: SMTP is not configured or the server rejected the message.
        """
        if not self.is_configured:
            logger.warning("SMTP credentials are not configured; skipping email send")
            raise MailDeliveryError()

        sender = self.settings.mail_sender
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = sender
        msg["To"] = to
        msg.attach(MIMEText(html, "html", "utf-8"))

        smtp_class = smtplib.SMTP_SSL if self.settings.smtp_secure else smtplib.SMTP
        try:
            with smtp_class(
                self.settings.smtp_host, self.settings.smtp_port, timeout=SMTP_TIMEOUT_SECONDS
            ) as smtp:
                if not self.settings.smtp_secure:
                    smtp.starttls()
                smtp.login(self.settings.smtp_user, self.settings.smtp_pass)
                smtp.sendmail(sender, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Mail send error for '{subject}': {e}")
            raise MailDeliveryError() from e

        logger.info(f"Sent '{subject}'")


def get_mailer() -> Mailer:
    """Get a mailer instance."""
    return Mailer()


def _subject(settings: Settings, text: str) -> str:
    return f"[{settings.mail_brand}] {text}"


def _render(settings: Settings, body: str) -> str:
    return _LAYOUT.format(body=body, brand=escape(settings.mail_brand))


def reset_link_message(settings: Settings, reset_url: str, ttl_minutes: int) -> tuple[str, str]:
    """Subject and HTML body of the password reset mail."""
    url = escape(reset_url, quote=True)
    body = f"""\
  <p>Hello,</p>
  <p>Click the button below to reset your password. This link is valid for {ttl_minutes} minutes.</p>
  <p style="margin: 24px 0;">
    <a href="{url}" style="display: inline-block; padding: 10px 18px; background: #111; color: #fff; text-decoration: none; border-radius: 6px;">Reset password</a>
  </p>
  <p>If the button does not work, copy this link into your browser:</p>
  <p style="word-break: break-all; color: #555;">{url}</p>
  <p>If you did not request this, you can ignore this email.</p>"""
    return _subject(settings, "Reset your password"), _render(settings, body)


def change_code_message(
    settings: Settings, code: str, username: str | None, ttl_minutes: int
) -> tuple[str, str]:
    """Subject and HTML body of the password change verification code mail."""
    greeting = f"Hello, {escape(username)}." if username else "Hello."
    body = f"""\
  <p>{greeting}</p>
  <p>Your verification code for changing your password is:</p>
  <p style="font-size: 24px; font-weight: bold; letter-spacing: 6px; margin: 24px 0;">{code}</p>
  <p>Enter it within {ttl_minutes} minutes; after that it expires automatically.</p>
  <p>If you did not request this, change your password right away and review your account activity.</p>"""
    return _subject(settings, "Password change verification code"), _render(settings, body)


def password_changed_message(settings: Settings) -> tuple[str, str]:
    """Subject and HTML body of the notice sent after a password change."""
    body = """\
  <p>Hello,</p>
  <p>The password of your account was just changed.</p>
  <p>If this was not you, reset your password immediately and review your account activity.</p>"""
    return _subject(settings, "Your password was changed"), _render(settings, body)
