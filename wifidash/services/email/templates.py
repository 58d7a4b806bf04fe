"""
HTML bodies for transactional email. All interpolated values are escaped.
"""
from __future__ import annotations

from html import escape

from pydantic import BaseModel

BRAND = "WiFi Dashboard"


class EmailTemplate(BaseModel):
    subject: str
    html: str

    model_config = {"frozen": True}


def _layout(heading: str, body: str, button_url: str | None = None, button_label: str = "") -> str:
    button = ""
    if button_url:
        button = (
            f'<p style="text-align:center;margin:32px 0">'
            f'<a href="{escape(button_url, quote=True)}" '
            f'style="background:#2563eb;color:#fff;padding:12px 24px;border-radius:6px;text-decoration:none">'
            f"{escape(button_label)}</a></p>"
        )
    return (
        '<div style="font-family:Arial,sans-serif;max-width:600px;margin:0 auto;padding:24px">'
        f'<h2 style="color:#1f2937">{escape(heading)}</h2>'
        f"{body}{button}"
        f'<p style="color:#6b7280;font-size:12px">&copy; {BRAND}</p>'
        "</div>"
    )


def payment_reminder(user_name: str, due_date: str, dashboard_url: str) -> EmailTemplate:
    body = (
        f"<p>Hello {escape(user_name)},</p>"
        f"<p>Your WiFi service plan expires on <strong>{escape(due_date)}</strong>. "
        "Please submit your next payment to avoid service interruption.</p>"
    )
    return EmailTemplate(
        subject=f"Payment Reminder - {BRAND}",
        html=_layout("Payment Reminder", body, f"{dashboard_url}/dashboard/next-payments", "View upcoming payments"),
    )


def notification(user_name: str, title: str, message: str, dashboard_url: str) -> EmailTemplate:
    body = f"<p>Hello {escape(user_name)},</p><p>{escape(message)}</p>"
    return EmailTemplate(
        subject=f"{title} - {BRAND}",
        html=_layout(title, body, f"{dashboard_url}/dashboard/notifications", "Open dashboard"),
    )


def contact_query_notice(
    full_name: str,
    email: str,
    subject: str,
    message: str,
    phone: str | None = None,
    company: str | None = None,
) -> EmailTemplate:
    rows = [("Name", full_name), ("Email", email), ("Phone", phone), ("Company", company), ("Subject", subject)]
    details = "".join(
        f"<tr><td><strong>{label}</strong></td><td>{escape(value)}</td></tr>"
        for label, value in rows
        if value
    )
    body = f"<table>{details}</table><p>{escape(message)}</p>"
    return EmailTemplate(
        subject=f"New Contact Query: {subject} - {BRAND}",
        html=_layout("New Contact Query", body),
    )
