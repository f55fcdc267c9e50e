import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional

from app.core.config import settings

logger = logging.getLogger(__name__)


def _render(body: str) -> str:
    return f"""
    <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <div style="max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #eee;">
                <h2 style="color: #1e3a8a; text-align: center;">{settings.SCHOOL_NAME}</h2>
                {body}
                <hr style="border: 0; border-top: 1px solid #eee; margin: 20px 0;" />
                <p style="font-size: 12px; color: #777; text-align: center;">
                    This is an automated message from the {settings.SCHOOL_NAME} admissions office.
                </p>
            </div>
        </body>
    </html>
    """


def send_email(email_to: str, subject: str, html_content: str) -> bool:
    if not settings.SMTP_HOST:
        logger.info("SMTP_HOST not configured, not sending %r to %s", subject, email_to)
        return False

    message = MIMEMultipart("alternative")
    message["Subject"] = subject
    message["From"] = f"{settings.EMAILS_FROM_NAME or settings.SCHOOL_NAME} <{settings.EMAILS_FROM_EMAIL}>"
    message["To"] = email_to
    message.attach(MIMEText(html_content, "html"))

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT or 587) as server:
            if settings.SMTP_TLS:
                server.starttls()
            if settings.SMTP_USER:
                server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            server.sendmail(settings.EMAILS_FROM_EMAIL, email_to, message.as_string())
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.warning("Failed to send email to %s: %s", email_to, e)
        return False


def send_application_approved_email(
    email_to: str, first_name: str, student_id: str, temporary_password: str
) -> bool:
    body = f"""
        <p>Dear {first_name},</p>
        <p>Congratulations! Your application has been approved.</p>
        <p>Your student ID is <strong>{student_id}</strong>. Log in with this email address
        and the temporary password below, then complete your profile.</p>
        <div style="background-color: #f3f4f6; padding: 16px; text-align: center; font-size: 20px; font-weight: bold; color: #1e3a8a; margin: 20px 0;">
            {temporary_password}
        </div>
    """
    return send_email(email_to, f"{settings.SCHOOL_NAME} - Application Approved", _render(body))


def send_application_rejected_email(
    email_to: str, first_name: str, comments: Optional[str] = None
) -> bool:
    reason = f"<p>Reviewer comments: {comments}</p>" if comments else ""
    body = f"""
        <p>Dear {first_name},</p>
        <p>Thank you for applying. After careful review we are unable to offer you a place this year.</p>
        {reason}
    """
    return send_email(email_to, f"{settings.SCHOOL_NAME} - Application Outcome", _render(body))
