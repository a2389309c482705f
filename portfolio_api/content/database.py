"""Database models for portfolio content managed from the admin console."""

from sqlalchemy import Column, String, Boolean, Date, DateTime, Integer, Text, JSON, Index
from datetime import datetime
import uuid

# Import Base from auth database to use the same declarative base
from portfolio_api.auth.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Project(Base):
    """Portfolio project card."""
    __tablename__ = "projects"

    id = Column(String, primary_key=True, default=_uuid)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    image_url = Column(String, nullable=True)
    demo_url = Column(String, nullable=True)
    github_url = Column(String, nullable=True)
    technologies = Column(JSON, nullable=False, default=list)  # List of technology names
    featured = Column(Boolean, default=False, nullable=False)
    display_order = Column(Integer, default=0, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class BlogPost(Base):
    """Blog post; only published posts are visible on the public site."""
    __tablename__ = "blog_posts"

    id = Column(String, primary_key=True, default=_uuid)
    title = Column(String(200), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    excerpt = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)  # Sanitized HTML
    image_url = Column(String, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    published = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('idx_blog_posts_published_created', 'published', 'created_at'),
    )


class Certification(Base):
    """Professional certification or CTF result."""
    __tablename__ = "certifications"

    id = Column(String, primary_key=True, default=_uuid)
    title = Column(String(200), nullable=False)
    issuer = Column(String(200), nullable=False)
    issue_date = Column(Date, nullable=False)
    credential_id = Column(String, nullable=True)
    credential_url = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    certification_type = Column(String, default="professional", nullable=False)  # 'professional' or 'ctf'
    display_order = Column(Integer, default=0, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Skill(Base):
    """Skill grouped by category with a proficiency level."""
    __tablename__ = "skills"

    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False)
    category = Column(String(100), nullable=False)
    proficiency = Column(String, default="intermediate", nullable=False)  # beginner, intermediate, advanced, expert
    icon_name = Column(String, nullable=True)
    display_order = Column(Integer, default=0, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Achievement(Base):
    __tablename__ = "achievements"

    id = Column(String, primary_key=True, default=_uuid)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    date = Column(Date, nullable=False)
    icon_name = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    display_order = Column(Integer, default=0, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Resume(Base):
    """Downloadable resume; the most recently updated row is the current one."""
    __tablename__ = "resume"

    id = Column(String, primary_key=True, default=_uuid)
    file_url = Column(String, nullable=False)
    file_name = Column(String, nullable=False)
    file_size = Column(Integer, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False, index=True)
