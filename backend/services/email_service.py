"""Email service for transactional emails.

Providers:
- console: Logs emails (development and tests)
- smtp: Standard SMTP delivery

Messages are built inline (password reset code, course completion, contact
form forwarding). Every user supplied value is escaped before it reaches
the HTML body, and sends are retried with exponential backoff. Failures
are logged and reported as False; callers never abort their own work
because an email did not go out.
"""

import html
import re
import smtplib
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from loguru import logger

from models.config import settings


class EmailProvider(ABC):
    """Abstract base class for email providers."""

    @abstractmethod
    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> bool:
        """Send an email."""
        pass


class SMTPProvider(EmailProvider):
    """SMTP email provider."""

    def __init__(self) -> None:
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.from_email = settings.SMTP_FROM_EMAIL
        self.from_name = settings.SMTP_FROM_NAME
        self.use_tls = settings.SMTP_USE_TLS
        self.use_ssl = settings.SMTP_USE_SSL

    def _connect(self) -> smtplib.SMTP:
        if self.use_ssl:
            # Implicit SSL (port 465)
            return smtplib.SMTP_SSL(self.host, self.port, timeout=30)
        server = smtplib.SMTP(self.host, self.port, timeout=30)
        if self.use_tls:
            # STARTTLS (port 587)
            server.starttls()
        return server

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> bool:
        """Send email via SMTP (implicit SSL or STARTTLS per settings)."""
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            logger.debug(
                f"SMTP: Connecting to {self.host}:{self.port} "
                f"(SSL={self.use_ssl}, TLS={self.use_tls})"
            )
            server = self._connect()
            try:
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.sendmail(self.from_email, to_email, msg.as_string())
            finally:
                server.quit()

            logger.info(f"Email sent successfully to {to_email}")
            return True

        except smtplib.SMTPRecipientsRefused as e:
            logger.error(f"SMTP: Recipients refused - {e.recipients}")
            return False
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP: Authentication failed - {e.smtp_code}: {e.smtp_error}")
            return False
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to_email}: {e}")
            return False


class ConsoleProvider(EmailProvider):
    """Console email provider for development/testing."""

    def send(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> bool:
        """Log email to console."""
        clean_html = re.sub(r"<[^>]+>", "", html_body)[:500]
        logger.info(
            f"\n{'=' * 60}\n"
            f"EMAIL (Console Provider - Development Mode)\n"
            f"{'=' * 60}\n"
            f"To: {to_email}\n"
            f"Subject: {subject}\n"
            f"{'-' * 60}\n"
            f"PLAIN TEXT:\n{text_body}\n"
            f"{'-' * 60}\n"
            f"HTML (preview):\n{clean_html}\n"
            f"{'=' * 60}\n"
        )
        return True


def get_email_provider() -> EmailProvider:
    """Get the configured email provider."""
    provider_name = settings.EMAIL_PROVIDER.lower()

    if provider_name == "smtp":
        return SMTPProvider()
    elif provider_name == "console":
        return ConsoleProvider()
    else:
        logger.warning(f"Unknown email provider '{provider_name}', using console")
        return ConsoleProvider()


class EmailService:
    """High-level email service building the platform's messages."""

    @staticmethod
    def _sanitize_display_name(name: str) -> str:
        """
        Sanitize a user's name for safe use in emails.

        Args:
            name: Raw name from user input

        Returns:
            Name without markup, at most 100 characters
        """
        if not name:
            return "Learner"
        sanitized = re.sub(r"<[^>]+>", "", name)
        sanitized = sanitized.strip()[:100]
        return sanitized if sanitized else "Learner"

    @staticmethod
    def _escape_template_vars(text: str) -> str:
        """HTML-escape a value before inserting it into an HTML body."""
        return html.escape(str(text))

    @classmethod
    def _send_with_retry(
        cls,
        send_func: Callable[[], bool],
        max_attempts: int = 3,
        base_delay: float = 1.0,
    ) -> bool:
        """
        Send email with exponential backoff retry.

        Args:
            send_func: Function that sends the email and returns success status
            max_attempts: Maximum number of send attempts
            base_delay: Base delay in seconds (doubles each retry)

        Returns:
            True if email sent successfully, False after all attempts fail
        """
        for attempt in range(max_attempts):
            try:
                if send_func():
                    return True
            except Exception as e:
                logger.warning(f"Email send attempt {attempt + 1} failed: {e}")

            if attempt < max_attempts - 1:
                delay = base_delay * (2**attempt)
                logger.info(f"Retrying email in {delay}s...")
                time.sleep(delay)

        logger.error(f"Email send failed after {max_attempts} attempts")
        return False

    @classmethod
    def send_password_reset_otp(
        cls,
        to_email: str,
        otp: str,
        name: str,
        expires_minutes: int = 5,
    ) -> bool:
        """
        Send the one-time code that starts a password reset.

        Args:
            to_email: Recipient email
            otp: Numeric one-time code
            name: Recipient's name
            expires_minutes: Code lifetime shown in the message

        Returns:
            True if the email was sent
        """
        app_name = settings.PROJECT_NAME
        safe_name = cls._sanitize_display_name(name)
        text_body, html_body = cls._build_password_reset_inline(
            otp, safe_name, expires_minutes, app_name
        )
        subject = f"Password reset code - {app_name}"
        provider = get_email_provider()

        return cls._send_with_retry(
            lambda: provider.send(to_email, subject, html_body, text_body)
        )

    @classmethod
    def _build_password_reset_inline(
        cls,
        otp: str,
        name: str,
        expires_minutes: int,
        app_name: str,
    ) -> tuple[str, str]:
        """Build the password reset email (text, html)."""
        text = f"""Hello {name},

Your {app_name} password reset code is: {otp}

This code expires in {expires_minutes} minutes.

If you did not ask to reset your password, you can ignore this email.

- The {app_name} team
"""
        safe_name = cls._escape_template_vars(name)
        safe_app = cls._escape_template_vars(app_name)
        html_body = f"""<!DOCTYPE html>
<html>
<body style="font-family: Arial, sans-serif; color: #1f2937;">
  <h2>{safe_app}</h2>
  <p>Hello {safe_name},</p>
  <p>Your password reset code is:</p>
  <p style="font-size: 28px; font-weight: bold; letter-spacing: 6px;">{otp}</p>
  <p>This code expires in {expires_minutes} minutes.</p>
  <p style="color: #6b7280;">If you did not ask to reset your password,
  you can ignore this email.</p>
  <p style="color: #9ca3af; font-size: 12px;">&copy; {datetime.now().year} {safe_app}</p>
</body>
</html>"""
        return text, html_body

    @classmethod
    def send_course_completion(
        cls,
        to_email: str,
        name: str,
        course_title: str,
        certificate_path: str,
    ) -> bool:
        """
        Congratulate a learner who completed a course.

        Args:
            to_email: Recipient email
            name: Learner's name
            course_title: Title of the completed course
            certificate_path: Public path of the issued certificate

        Returns:
            True if the email was sent
        """
        app_name = settings.PROJECT_NAME
        safe_name = cls._sanitize_display_name(name)
        text_body, html_body = cls._build_completion_inline(
            safe_name, course_title, certificate_path, app_name
        )
        subject = f"Congratulations on completing {course_title[:80]}"
        provider = get_email_provider()

        return cls._send_with_retry(
            lambda: provider.send(to_email, subject, html_body, text_body)
        )

    @classmethod
    def _build_completion_inline(
        cls,
        name: str,
        course_title: str,
        certificate_path: str,
        app_name: str,
    ) -> tuple[str, str]:
        """Build the course completion email (text, html)."""
        text = f"""Hello {name},

Congratulations! You have completed "{course_title}" on {app_name}.

Your certificate is available at: {certificate_path}

Keep learning,
- The {app_name} team
"""
        safe_name = cls._escape_template_vars(name)
        safe_title = cls._escape_template_vars(course_title)
        safe_path = cls._escape_template_vars(certificate_path)
        safe_app = cls._escape_template_vars(app_name)
        html_body = f"""<!DOCTYPE html>
<html>
<body style="font-family: Arial, sans-serif; color: #1f2937;">
  <h2>{safe_app}</h2>
  <p>Hello {safe_name},</p>
  <p>Congratulations! You have completed <strong>{safe_title}</strong>.</p>
  <p>Your certificate is available at <a href="{safe_path}">{safe_path}</a>.</p>
  <p>Keep learning,<br>The {safe_app} team</p>
</body>
</html>"""
        return text, html_body

    @classmethod
    def send_contact_notification(
        cls,
        to_email: str,
        sender_name: str,
        sender_email: str,
        subject: str,
        message: str,
    ) -> bool:
        """
        Forward a contact form message to the platform admin.

        Returns:
            True if the email was sent
        """
        app_name = settings.PROJECT_NAME
        text_body = f"""New contact form message

From: {sender_name} <{sender_email}>
Subject: {subject}

{message}

- {app_name}
"""
        html_body = f"""<!DOCTYPE html>
<html>
<body style="font-family: Arial, sans-serif; color: #1f2937;">
  <h2>New contact form message</h2>
  <p><strong>From:</strong> {cls._escape_template_vars(sender_name)}
  &lt;{cls._escape_template_vars(sender_email)}&gt;</p>
  <p><strong>Subject:</strong> {cls._escape_template_vars(subject)}</p>
  <p style="white-space: pre-wrap;">{cls._escape_template_vars(message)}</p>
</body>
</html>"""
        email_subject = f"[{app_name}] Contact: {subject[:80]}"
        provider = get_email_provider()

        return cls._send_with_retry(
            lambda: provider.send(to_email, email_subject, html_body, text_body)
        )
