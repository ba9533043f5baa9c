"""
Business notification and client acknowledgement messages for an inquiry.

Both messages are multipart/alternative (plain text + HTML). User supplied
values are escaped in the HTML part and stripped of CR/LF in headers.
"""
from datetime import datetime
from email.message import EmailMessage
from email.utils import formataddr
from html import escape

from models.inquiry import InquiryPayload

ACCENT = "#4BB543"


def sanitize_header_value(value: str) -> str:
    # Prevent header injection
    return (value or "").replace("\r", "").replace("\n", " ").strip()


def format_timestamp(now: datetime) -> str:
    return now.strftime("%m/%d/%Y, %I:%M:%S %p %Z").strip()


def _footer_html(now: datetime, brand: str, lead: str) -> str:
    return f"""
      <div style="background-color: #f0f0f0; padding: 15px; text-align: center; font-size: 12px; color: #777;">
        <p>{lead}</p>
        <p>&copy; {now.year} {escape(brand)}. All rights reserved.</p>
      </div>"""


# ---- business notification --------------------------------------------------


def business_subject(payload: InquiryPayload) -> str:
    return sanitize_header_value(f"New Inquiry: {payload.service} - {payload.name}")


def business_text(payload: InquiryPayload, brand: str, now: datetime) -> str:
    lines = [
        "New Client Inquiry",
        "",
        f"Service: {payload.service}",
        f"Name:    {payload.name}",
        f"Email:   {payload.email}",
    ]
    if payload.phone:
        lines.append(f"Phone:   {payload.phone}")
    lines += [
        "",
        "Message:",
        payload.message or "",
        "",
        f"This email was sent from your website contact form. Received at {format_timestamp(now)}",
        f"(c) {now.year} {brand}. All rights reserved.",
    ]
    return "\n".join(lines)


def business_html(payload: InquiryPayload, brand: str, now: datetime) -> str:
    name = escape(payload.name or "")
    email = escape(payload.email or "")
    service = escape(payload.service or "")
    message = escape(payload.message or "")

    phone_row = ""
    if payload.phone:
        phone = escape(payload.phone)
        phone_row = f"""
            <tr>
              <td style="padding: 8px 0; color: #666;">Phone:</td>
              <td style="padding: 8px 0;"><a href="tel:{phone}" style="color: {ACCENT}; text-decoration: none;">{phone}</a></td>
            </tr>"""

    footer = _footer_html(
        now,
        brand,
        f"This email was sent from your website contact form. Received at {escape(format_timestamp(now))}",
    )
    return f"""
    <div style="font-family: 'Arial', sans-serif; max-width: 600px; margin: 0 auto; border: 1px solid #e0e0e0; border-radius: 8px; overflow: hidden;">
      <div style="background-color: {ACCENT}; padding: 20px; text-align: center;">
        <h1 style="color: white; margin: 0;">New Client Inquiry</h1>
      </div>
      <div style="padding: 25px; background-color: #f9f9f9;">
        <h2 style="color: #333; border-bottom: 1px solid #e0e0e0; padding-bottom: 10px;">{service} Package</h2>
        <div style="margin-bottom: 20px;">
          <h3 style="color: {ACCENT}; margin-bottom: 5px;">Client Information</h3>
          <table style="width: 100%; border-collapse: collapse;">
            <tr>
              <td style="padding: 8px 0; width: 30%; color: #666;">Name:</td>
              <td style="padding: 8px 0; font-weight: 500;">{name}</td>
            </tr>
            <tr>
              <td style="padding: 8px 0; color: #666;">Email:</td>
              <td style="padding: 8px 0;"><a href="mailto:{email}" style="color: {ACCENT}; text-decoration: none;">{email}</a></td>
            </tr>{phone_row}
          </table>
        </div>
        <div style="margin-bottom: 20px; background-color: white; padding: 15px; border-radius: 5px; border: 1px solid #e0e0e0;">
          <h3 style="color: {ACCENT}; margin-top: 0;">Message Details</h3>
          <p style="white-space: pre-line; line-height: 1.6; color: #444;">{message}</p>
        </div>
        <div style="text-align: center; margin-top: 25px;">
          <a href="mailto:{email}" style="display: inline-block; background-color: {ACCENT}; color: white; padding: 12px 25px; text-decoration: none; border-radius: 4px; font-weight: bold;">Reply to Client</a>
        </div>
      </div>{footer}
    </div>
    """.strip()


def build_business_email(
    payload: InquiryPayload, sender: str, operator: str, brand: str, now: datetime
) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = formataddr((f"{brand} Contact Form", sender))
    msg["To"] = operator
    # may be non-ASCII
    msg["Reply-To"] = sanitize_header_value(payload.email)
    msg["Subject"] = business_subject(payload)
    msg.set_content(business_text(payload, brand, now))
    msg.add_alternative(business_html(payload, brand, now), subtype="html")
    return msg


# ---- client acknowledgement -------------------------------------------------


def client_subject(brand: str) -> str:
    return sanitize_header_value(f"Thank you for your inquiry - {brand}")


def client_text(payload: InquiryPayload, brand: str, now: datetime) -> str:
    return "\n".join([
        f"Hi {payload.name},",
        "",
        f"Thank you for reaching out about our {payload.service} services.",
        "We have received your message and will get back to you within 24-48 hours.",
        "",
        "Your message:",
        payload.message or "",
        "",
        f"- The {brand} Team",
        "",
        f"Sent {format_timestamp(now)}. (c) {now.year} {brand}. All rights reserved.",
    ])


def client_html(payload: InquiryPayload, brand: str, now: datetime) -> str:
    footer = _footer_html(now, brand, f"Sent {escape(format_timestamp(now))}")
    return f"""
    <div style="font-family: 'Arial', sans-serif; max-width: 600px; margin: 0 auto; border: 1px solid #e0e0e0; border-radius: 8px; overflow: hidden;">
      <div style="background-color: {ACCENT}; padding: 20px; text-align: center;">
        <h1 style="color: white; margin: 0;">Thank You, {escape(payload.name or "")}!</h1>
      </div>
      <div style="padding: 25px; background-color: #f9f9f9;">
        <p style="line-height: 1.6; color: #444;">Thank you for reaching out about our <b>{escape(payload.service or "")}</b> services.</p>
        <p style="line-height: 1.6; color: #444;">We have received your message and will get back to you within 24-48 hours.</p>
        <div style="margin-top: 20px; background-color: white; padding: 15px; border-radius: 5px; border: 1px solid #e0e0e0;">
          <h3 style="color: {ACCENT}; margin-top: 0;">Your Message</h3>
          <p style="white-space: pre-line; line-height: 1.6; color: #444;">{escape(payload.message or "")}</p>
        </div>
        <p style="margin-top: 25px; color: #444;">&mdash; The {escape(brand)} Team</p>
      </div>{footer}
    </div>
    """.strip()


def build_client_email(payload: InquiryPayload, sender: str, brand: str, now: datetime) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = formataddr((brand, sender))
    msg["To"] = sanitize_header_value(payload.email)
    msg["Reply-To"] = sender
    msg["Subject"] = client_subject(brand)
    msg.set_content(client_text(payload, brand, now))
    msg.add_alternative(client_html(payload, brand, now), subtype="html")
    return msg
