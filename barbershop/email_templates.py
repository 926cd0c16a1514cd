# barbershop/email_templates.py

from html import escape

THEME = {
    "header_bg": "#2c3e50",
    "page_bg": "#f8f9fa",
    "card_bg": "#ffffff",
    "success": "#27ae60",
    "muted": "#7f8c8d",
}


def _wrap(shop_name: str, subtitle: str, body: str) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <div style="background-color: {THEME['header_bg']}; color: white; padding: 20px; text-align: center;">
        <h1 style="margin: 0;">{escape(shop_name)}</h1>
        <p style="margin: 10px 0 0 0;">{subtitle}</p>
      </div>
      <div style="padding: 30px; background-color: {THEME['page_bg']};">
        {body}
      </div>
    </div>
    """


def booking_confirmation(shop_name: str, name: str, service: str, date: str, time: str, notes: str = "") -> str:
    notes_line = f"<p><strong>Notes:</strong> {escape(notes)}</p>" if notes else ""
    body = f"""
        <h2 style="color: {THEME['header_bg']};">Hello {escape(name)},</h2>
        <p>Your appointment has been confirmed! Here are the details:</p>
        <div style="background-color: {THEME['card_bg']}; padding: 20px; border-radius: 8px; margin: 20px 0;">
          <h3 style="color: {THEME['header_bg']}; margin-top: 0;">Appointment Details</h3>
          <p><strong>Service:</strong> {escape(service)}</p>
          <p><strong>Date:</strong> {escape(date)}</p>
          <p><strong>Time:</strong> {escape(time)}</p>
          <p><strong>Status:</strong> <span style="color: {THEME['success']};">Confirmed</span></p>
          {notes_line}
        </div>
        <p>If you need to reschedule or cancel, please contact us as soon as possible.</p>
        <p>We look forward to seeing you!</p>
        <p style="color: {THEME['muted']}; font-size: 14px; text-align: center; margin-top: 30px;">
          {escape(shop_name)} Team
        </p>
    """
    return _wrap(shop_name, "Appointment Confirmation", body)


def contact_notification(shop_name: str, name: str, email: str, phone: str, subject: str, message: str) -> str:
    phone_line = f"<p><strong>Phone:</strong> {escape(phone)}</p>" if phone else ""
    body = f"""
        <h3 style="color: {THEME['header_bg']};">From: {escape(name)}</h3>
        <p><strong>Email:</strong> {escape(email)}</p>
        {phone_line}
        <p><strong>Subject:</strong> {escape(subject)}</p>
        <div style="background-color: {THEME['card_bg']}; padding: 20px; border-radius: 8px; margin: 20px 0;">
          <h4 style="margin-top: 0;">Message:</h4>
          <p style="white-space: pre-wrap;">{escape(message)}</p>
        </div>
    """
    return _wrap(shop_name, "New Contact Form Submission", body)
