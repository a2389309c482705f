"""Admin email notification for new contact messages, sent through the Resend API."""

import os
import logging

import requests

from portfolio_api.input_validation import escape_html

DEFAULT_RESEND_API_URL = "https://api.resend.com/emails"
DEFAULT_FROM_ADDRESS = "Portfolio Contact <onboarding@resend.dev>"
REQUEST_TIMEOUT_SECONDS = 10


def build_notification_email(name: str, email: str, message: str) -> dict:
    """
    Build the subject and HTML body for a contact notification.
    Every user-supplied value is HTML-escaped before it is embedded.
    """
    escaped_name = escape_html(name)
    escaped_email = escape_html(email)
    escaped_message = escape_html(message)

    html_body = f"""
<h2>New Contact Form Submission</h2>
<p><strong>Name:</strong> {escaped_name}</p>
<p><strong>Email:</strong> {escaped_email}</p>
<p><strong>Message:</strong></p>
<p>{escaped_message}</p>
"""
    return {
        "subject": f"New Contact Message from {escaped_name}",
        "html": html_body,
    }


def send_contact_notification(name: str, email: str, message: str) -> bool:
    """
    Email the site admin about a new contact message.

    Disabled (returns False) unless RESEND_API_KEY and ADMIN_EMAIL are set.
    Never raises: provider and network failures are logged and reported as False.
    """
    api_key = os.environ.get("RESEND_API_KEY")
    admin_email = os.environ.get("ADMIN_EMAIL")

    if not api_key or not admin_email:
        logging.info("Resend API key or admin email not configured; skipping contact notification")
        return False

    api_url = os.environ.get("RESEND_API_URL", DEFAULT_RESEND_API_URL)
    content = build_notification_email(name, email, message)
    payload = {
        "from": os.environ.get("CONTACT_EMAIL_FROM", DEFAULT_FROM_ADDRESS),
        "to": [admin_email],
        "subject": content["subject"],
        "html": content["html"],
    }

    try:
        response = requests.post(
            api_url,
            json=payload,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        logging.error(f"Failed to send contact notification email: {str(e)}")
        return False

    if not response.ok:
        logging.error(f"Email provider rejected contact notification ({response.status_code}): {response.text[:500]}")
        return False

    logging.info(f"Contact notification email sent for message from {email}")
    return True
