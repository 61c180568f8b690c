"""
Email service: SMTP notifications for the translation workflow.
Sending is best-effort: failures are logged and reported as False.
"""
import aiosmtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


async def send_email(to: list[str], subject: str, body: str) -> bool:
    """Send an HTML email via SMTP."""
    if not to:
        return False
    try:
        msg = MIMEMultipart()
        msg["From"] = settings.EMAIL_FROM
        msg["To"] = ", ".join(to)
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "html"))

        await aiosmtplib.send(
            msg,
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER or None,
            password=settings.SMTP_PASSWORD or None,
            start_tls=True,
        )
    except (aiosmtplib.SMTPException, OSError) as exc:
        logger.error("Email send failed", extra={"event": "email_failed", "subject": subject, "error": str(exc)})
        return False

    logger.info("Email sent", extra={"event": "email_sent", "subject": subject, "recipients": len(to)})
    return True


async def send_translation_ready_email(
    document_title: str,
    version_no: int,
    target_lang: str,
    segment_count: int,
    recipients: list[str] | None = None,
) -> bool:
    """Tell reviewers a translation is waiting for approval."""
    if not settings.NOTIFY_TRANSLATION_READY:
        return False
    to = recipients if recipients is not None else settings.translation_ready_recipients
    subject = f"[{settings.APP_NAME}] {document_title} v{version_no}: {target_lang.upper()} translation ready"
    body = (
        f"<p>The {target_lang.upper()} translation of <strong>{document_title}</strong> "
        f"(version {version_no}) is ready for review.</p>"
        f"<p>{segment_count} segment(s) translated. Approval is required before export.</p>"
    )
    return await send_email(to, subject, body)
