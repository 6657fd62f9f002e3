import logging
import smtplib
from email.message import EmailMessage
from urllib.parse import urlsplit

log = logging.getLogger(__name__)

SUBJECT = "passnap - Import Summary"


def build_message(notify, body: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = f"passnap <{notify.mailrise_from}>"
    msg["To"] = f"User <{notify.mailrise_rcpt}>"
    msg["Subject"] = SUBJECT
    msg.set_content(body)
    return msg


def send_notification(notify, body: str) -> bool:
    if not notify.enabled:
        log.debug("Notifications are disabled. Skipping.")
        return False
    if not notify.complete:
        log.warning("Notification variables not set. Skipping notification.")
        return False

    url = urlsplit(notify.mailrise_url)
    log.info("Sending email notification...")
    try:
        with smtplib.SMTP(url.hostname or "localhost", url.port or 25, timeout=30) as smtp:
            smtp.send_message(build_message(notify, body))
    except (OSError, smtplib.SMTPException) as e:
        log.error("Failed to send notification: %s", e)
        return False
    log.info("Email notification sent.")
    return True
