# barbershop/notifications.py

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from . import email_templates
from .config import Settings

logger = logging.getLogger(__name__)


class EmailNotifier:
    """Sends booking and contact emails over SMTP.

    When SMTP is not configured every send is logged and skipped. Send
    errors are raised so the retry runner can try again.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        if not settings.email_configured:
            logger.info("Email service not configured - will log emails instead")

    @property
    def is_configured(self) -> bool:
        return self.settings.email_configured

    def _send(self, to: str, subject: str, html_content: str, reply_to: str = None) -> None:
        s = self.settings
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f'"{s.shop_name}" <{s.email_user}>'
        msg["To"] = to
        if reply_to:
            msg["Reply-To"] = reply_to
        msg.attach(MIMEText(html_content, "html"))

        if s.email_port == 465:
            server = smtplib.SMTP_SSL(s.email_host, s.email_port, context=ssl.create_default_context(), timeout=30)
        else:
            server = smtplib.SMTP(s.email_host, s.email_port, timeout=30)
        with server:
            if s.email_port != 465 and s.email_use_tls:
                server.starttls(context=ssl.create_default_context())
            server.login(s.email_user, s.email_pass)
            server.sendmail(s.email_user, [to], msg.as_string())

    def send_booking_confirmation(self, appointment) -> None:
        if not self.is_configured:
            logger.info(f"Email not configured - would send confirmation to {appointment.email} for {appointment.id}")
            return

        html = email_templates.booking_confirmation(
            self.settings.shop_name,
            name=appointment.name,
            service=appointment.service,
            date=appointment.date,
            time=appointment.time,
            notes=appointment.notes,
        )
        self._send(appointment.email, f"Appointment Confirmation - {self.settings.shop_name}", html)
        logger.info(f"Confirmation email sent for appointment {appointment.id}")

    def send_contact_notification(self, contact) -> None:
        if not self.is_configured or not self.settings.admin_email:
            logger.info(f"Email not configured - would forward contact form from {contact.email}")
            return

        html = email_templates.contact_notification(
            self.settings.shop_name,
            name=contact.name,
            email=contact.email,
            phone=contact.phone,
            subject=contact.subject,
            message=contact.message,
        )
        self._send(self.settings.admin_email, f"Contact Form: {contact.subject}", html, reply_to=contact.email)
        logger.info("Contact email sent")
