"""
Input validation and sanitization utilities.
Each validator returns the normalized value or raises ValueError with a
message suitable for showing to the user.
"""

import re
import html
from typing import Any


# Maximum lengths for contact form fields
MAX_NAME_LENGTH = 100
MAX_EMAIL_LENGTH = 255
MAX_MESSAGE_LENGTH = 1000

# Blog slugs
MAX_SLUG_LENGTH = 100
SLUG_PATTERN = re.compile(r'^[a-z0-9-]+$')

# local@domain.tld with no whitespace and a single @
EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def _encodes_as_utf8(text: str) -> bool:
    """False for strings holding lone surrogates, which JSON allows but storage cannot encode."""
    try:
        text.encode('utf-8')
    except UnicodeEncodeError:
        return False
    return True


def validate_contact_name(name: Any) -> str:
    """Name must be a string, non-empty after trimming, at most 100 characters."""
    if not isinstance(name, str) or not name.strip() or len(name) > MAX_NAME_LENGTH:
        raise ValueError(f"Name must be between 1 and {MAX_NAME_LENGTH} characters")
    if not _encodes_as_utf8(name):
        raise ValueError("Name contains invalid characters")
    return name.strip()


def validate_contact_email(email: Any) -> str:
    """
    Validate email address format and length.

    Returns:
        Normalized email (trimmed, lowercase)
    """
    if not isinstance(email, str) or len(email) > MAX_EMAIL_LENGTH:
        raise ValueError(f"Email must be no more than {MAX_EMAIL_LENGTH} characters")

    email = email.strip()
    if not EMAIL_PATTERN.match(email) or not _encodes_as_utf8(email):
        raise ValueError("Invalid email format")

    return email.lower()


def validate_contact_message(message: Any) -> str:
    """Message must be a string, non-empty after trimming, at most 1000 characters."""
    if not isinstance(message, str) or not message.strip() or len(message) > MAX_MESSAGE_LENGTH:
        raise ValueError(f"Message must be between 1 and {MAX_MESSAGE_LENGTH} characters")
    if not _encodes_as_utf8(message):
        raise ValueError("Message contains invalid characters")
    return message.strip()


def validate_slug(slug: str) -> str:
    """Slugs are lowercase letters, digits and hyphens."""
    slug = (slug or "").strip()
    if not slug or len(slug) > MAX_SLUG_LENGTH:
        raise ValueError(f"Slug must be between 1 and {MAX_SLUG_LENGTH} characters")
    if not SLUG_PATTERN.match(slug):
        raise ValueError("Slug must contain only lowercase letters, numbers, and hyphens")
    return slug


def escape_html(text: str) -> str:
    """Escape < > & \" ' so user text can be embedded in an HTML document."""
    return html.escape(text or "", quote=True)
