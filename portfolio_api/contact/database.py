"""Database model for contact form submissions."""

from sqlalchemy import Column, String, Text, DateTime, Index
from datetime import datetime
import uuid

# Import Base from auth database to use the same declarative base
from portfolio_api.auth.database import Base


class ContactMessage(Base):
    """One contact form submission. Rows are created only by the contact form."""
    __tablename__ = "contact_messages"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)  # stored lowercase
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    __table_args__ = (
        Index('idx_contact_messages_email_created', 'email', 'created_at'),
    )
