import smtplib
from email.message import EmailMessage

from flask import current_app

APP_NAME = "ShuttleSlot"


def _smtp_settings() -> dict:
    cfg = current_app.config
    username = cfg.get("SMTP_USERNAME")
    return {
        "host": cfg.get("SMTP_HOST"),
        "port": cfg.get("SMTP_PORT", 587),
        "username": username,
        "password": cfg.get("SMTP_PASSWORD"),
        "from_email": cfg.get("SMTP_FROM_EMAIL") or username,
        "use_tls": cfg.get("SMTP_USE_TLS", True),
    }


def send_email(to_email: str, subject: str, body: str):
    """Returns (sent, error). Never raises on delivery problems."""
    smtp = _smtp_settings()
    if not smtp["host"] or not smtp["from_email"]:
        current_app.logger.warning("Email to %s not sent: SMTP is not configured", to_email)
        return False, "Email not configured"

    msg = EmailMessage()
    msg["From"] = f"{APP_NAME} <{smtp['from_email']}>"
    msg["To"] = to_email
    msg["Subject"] = f"[{APP_NAME}] {subject}"
    msg.set_content(body)

    try:
        with smtplib.SMTP(smtp["host"], smtp["port"], timeout=10) as server:
            if smtp["use_tls"]:
                server.starttls()
            if smtp["username"] and smtp["password"]:
                server.login(smtp["username"], smtp["password"])
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        current_app.logger.error("Email to %s failed: %s", to_email, exc)
        return False, str(exc)

    current_app.logger.info("Email '%s' sent to %s", subject, to_email)
    return True, None


def send_password_reset_email(user, reset_url: str, ttl_seconds: int):
    body = (
        f"Hi {user.name},\n\n"
        "We received a request to reset your password. Use the link below to choose a new one:\n\n"
        f"{reset_url}\n\n"
        f"This link expires in {ttl_seconds // 60} minutes. If you did not ask for a reset, ignore this email.\n\n"
        f"{APP_NAME}"
    )
    return send_email(user.email, "Reset your password", body)
