import logging
import smtplib
from email.mime.text import MIMEText

from matchmaking.config import settings

logger = logging.getLogger(__name__)


def get_reset_link(reset_token: str) -> str:
    return f"{settings.RESET_PASSWORD_URL}?token={reset_token}"


def send_email(to_email: str, subject: str, body: str) -> None:
    msg = MIMEText(body)
    msg["Subject"] = subject
    msg["From"] = settings.FROM_EMAIL
    msg["To"] = to_email

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
        server.starttls()
        server.login(settings.SMTP_USER, settings.SMTP_PASS)
        server.send_message(msg)


def send_password_reset_email(to_email: str, reset_token: str) -> None:
    link = get_reset_link(reset_token)
    body = (
        "We received a request to reset your password.\n\n"
        f"Use the link below to choose a new one:\n{link}\n\n"
        "If you didn't request this, you may ignore this email."
    )
    send_email(to_email, "Reset your Jetta Matchmaking password", body)
    logger.info("Password reset email sent to %s", to_email)
