"""Pydantic schemas for contact API."""

from datetime import datetime
from typing import Any, List

from pydantic import BaseModel, Field, ValidationError, field_validator

from portfolio_api.input_validation import (
    validate_contact_name,
    validate_contact_email,
    validate_contact_message,
)


class ContactRequest(BaseModel):
    """
    Contact form submission.

    Fields are checked in declaration order by "before" validators so the first
    error always names the first bad field, including missing or non-string ones.
    """
    name: str = Field(None, validate_default=True, description="Your name")
    email: str = Field(None, validate_default=True, description="Your email address")
    message: str = Field(None, validate_default=True, description="Your message (1-1000 characters)")

    @field_validator('name', mode='before')
    @classmethod
    def validate_name_field(cls, v: Any) -> str:
        return validate_contact_name(v)

    @field_validator('email', mode='before')
    @classmethod
    def validate_email_field(cls, v: Any) -> str:
        return validate_contact_email(v)

    @field_validator('message', mode='before')
    @classmethod
    def validate_message_field(cls, v: Any) -> str:
        return validate_contact_message(v)


def first_error_message(exc: ValidationError) -> str:
    """Human-readable reason for the first failed field."""
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    original = (first.get("ctx") or {}).get("error")
    if original is not None:
        return str(original)
    return first.get("msg", "Invalid request body")


class ContactResponse(BaseModel):
    """Schema for contact form response."""
    success: bool
    message: str


class ContactMessageResponse(BaseModel):
    """A stored contact message, as shown in the admin console."""
    id: str
    name: str
    email: str
    message: str
    created_at: datetime

    class Config:
        from_attributes = True


class ContactMessageListResponse(BaseModel):
    messages: List[ContactMessageResponse]
    total: int
