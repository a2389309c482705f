"""Contact form intake: rate limiting, validation, storage and admin notification."""

import json
import logging
import math
from datetime import datetime, timedelta

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, Response, status
from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portfolio_api.auth.database import get_db
from portfolio_api.contact.database import ContactMessage
from portfolio_api.contact.notifications import send_contact_notification
from portfolio_api.contact.schemas import ContactRequest, ContactResponse, first_error_message
from portfolio_api.rate_limit_utils import InMemoryRateLimiter, get_client_ip

router = APIRouter(prefix="/api/contact", tags=["contact"])

# Rate limiting configuration
MAX_REQUESTS_PER_WINDOW = 5
RATE_LIMIT_WINDOW = timedelta(hours=1)

RATE_LIMIT_MESSAGE = "Too many requests. Please try again later."

# The contact form is embedded on any origin, so its responses are fully permissive
CONTACT_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

# Per-process limiter; the persisted-row check below is the cross-instance guard
_contact_rate_limiter = InMemoryRateLimiter(
    max_requests=MAX_REQUESTS_PER_WINDOW,
    window_seconds=RATE_LIMIT_WINDOW.total_seconds(),
)


def get_contact_rate_limiter() -> InMemoryRateLimiter:
    """Dependency returning the process-wide contact form rate limiter."""
    return _contact_rate_limiter


def _error(status_code: int, message: str, headers: dict = None, **extra) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"error": message, **extra},
        headers={**CONTACT_CORS_HEADERS, **(headers or {})},
    )


def _rate_limited(retry_after: int) -> HTTPException:
    return _error(
        status.HTTP_429_TOO_MANY_REQUESTS,
        RATE_LIMIT_MESSAGE,
        headers={"Retry-After": str(retry_after), "Access-Control-Expose-Headers": "Retry-After"},
        retry_after=retry_after,
    )


async def _parse_json_body(request: Request):
    body = await request.body()
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError):
        raise _error(status.HTTP_400_BAD_REQUEST, "Invalid JSON in request body")


def check_recent_submissions(db: Session, email: str, now: datetime) -> int:
    """
    Database-backed limit by email address, shared by every instance.

    Returns 0 if the email may submit, otherwise the seconds until the oldest
    submission in the window leaves it. A failing query is logged and skipped.
    """
    window_start = now - RATE_LIMIT_WINDOW
    try:
        count, oldest = db.query(
            func.count(ContactMessage.id),
            func.min(ContactMessage.created_at),
        ).filter(
            ContactMessage.email == email,
            ContactMessage.created_at >= window_start,
        ).one()
    except SQLAlchemyError as e:
        logging.warning(f"Failed to check recent contact submissions: {str(e)}")
        db.rollback()
        return 0

    if (count or 0) < MAX_REQUESTS_PER_WINDOW:
        return 0

    retry_after = math.ceil(((oldest or now) + RATE_LIMIT_WINDOW - now).total_seconds())
    return max(retry_after, 1)


def notify_admin(name: str, email: str, message: str) -> None:
    """Send the admin notification; nothing here may affect the response."""
    try:
        send_contact_notification(name, email, message)
    except Exception as e:
        logging.error(f"Unexpected error while sending contact notification: {str(e)}", exc_info=True)


@router.options("/submit", include_in_schema=False)
async def contact_preflight():
    """CORS preflight for the contact form."""
    return Response(status_code=status.HTTP_200_OK, headers=CONTACT_CORS_HEADERS)


@router.post("/submit", response_model=ContactResponse, status_code=status.HTTP_200_OK)
async def submit_contact_form(
    request: Request,
    response: Response,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    rate_limiter: InMemoryRateLimiter = Depends(get_contact_rate_limiter),
):
    """
    Store a contact form message and notify the site admin.

    - Max 5 messages per hour per client address (in memory, per instance)
    - Max 5 messages per hour per email address (database, all instances)
    - Email notification is best-effort and never changes the response
    """
    # Malformed bodies are rejected before any state is touched
    body = await _parse_json_body(request)

    client_ip = get_client_ip(request)
    result = rate_limiter.check(client_ip)
    if not result.allowed:
        logging.warning(f"Contact rate limit exceeded for client: {client_ip}")
        raise _rate_limited(result.retry_after)

    if not isinstance(body, dict):
        raise _error(status.HTTP_400_BAD_REQUEST, "Invalid request body")

    try:
        contact_data = ContactRequest.model_validate(body)
    except ValidationError as e:
        raise _error(status.HTTP_400_BAD_REQUEST, first_error_message(e))

    logging.info(f"Received contact message from: {contact_data.email}")

    now = datetime.utcnow()
    retry_after = check_recent_submissions(db, contact_data.email, now)
    if retry_after:
        logging.warning(f"Database rate limit exceeded for email: {contact_data.email}")
        raise _rate_limited(retry_after)

    try:
        db.add(ContactMessage(
            name=contact_data.name,
            email=contact_data.email,
            message=contact_data.message,
            created_at=now,
        ))
        db.commit()
    except Exception as e:
        # Driver errors are not always wrapped in SQLAlchemyError
        db.rollback()
        logging.error(f"Failed to save contact message: {str(e)}", exc_info=True)
        raise _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to process request")

    logging.info("Contact message saved to database")

    background_tasks.add_task(notify_admin, contact_data.name, contact_data.email, contact_data.message)

    response.headers.update(CONTACT_CORS_HEADERS)
    return ContactResponse(success=True, message="Message received")
