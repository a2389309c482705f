"""Pydantic schemas for portfolio content API."""

import datetime as dt
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from portfolio_api.content.html_sanitizer import sanitize_html
from portfolio_api.input_validation import validate_slug

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 5000
MAX_EXCERPT_LENGTH = 500
MAX_BLOG_CONTENT_LENGTH = 100_000
MAX_URL_LENGTH = 2048
MAX_TAGS = 20
MAX_TAG_LENGTH = 50


class CertificationType(str, Enum):
    """Certification type enumeration."""
    PROFESSIONAL = "professional"
    CTF = "ctf"


class Proficiency(str, Enum):
    """Skill proficiency enumeration."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


def clean_text(value: Optional[str], label: str, max_length: int) -> str:
    """Trim a required text field and enforce its length."""
    if value is None:
        raise ValueError(f"{label} is required")
    value = value.strip()
    if not value:
        raise ValueError(f"{label} is required")
    if len(value) > max_length:
        raise ValueError(f"{label} must be less than {max_length} characters")
    return value


def clean_url(value: Optional[str]) -> Optional[str]:
    """Empty strings clear the URL; anything else must be an absolute http(s) URL."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if len(value) > MAX_URL_LENGTH:
        raise ValueError(f"URL must be less than {MAX_URL_LENGTH} characters")
    if not value.lower().startswith(("http://", "https://")):
        raise ValueError("URL must start with http:// or https://")
    return value


def clean_string_list(value: Any, label: str) -> List[str]:
    """Accept a list or a comma-separated string; trims and drops empty items."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list):
        raise ValueError(f"{label} must be a list of strings")
    items = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"{label} must be a list of strings")
        item = item.strip()
        if not item:
            continue
        if len(item) > MAX_TAG_LENGTH:
            raise ValueError(f"Each entry in {label.lower()} must be less than {MAX_TAG_LENGTH} characters")
        items.append(item)
    if len(items) > MAX_TAGS:
        raise ValueError(f"{label} can have at most {MAX_TAGS} entries")
    return items


def clean_blog_content(value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise ValueError("Content is required")
    if len(value) > MAX_BLOG_CONTENT_LENGTH:
        raise ValueError("Content is too long")
    return sanitize_html(value)


# Projects

class ProjectCreate(BaseModel):
    """Schema for creating a project."""
    title: str
    description: str
    image_url: Optional[str] = None
    demo_url: Optional[str] = None
    github_url: Optional[str] = None
    technologies: List[str] = Field(default_factory=list)
    featured: bool = False
    display_order: int = 0

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return clean_text(v, "Title", MAX_TITLE_LENGTH)

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        return clean_text(v, "Description", MAX_DESCRIPTION_LENGTH)

    @field_validator('image_url', 'demo_url', 'github_url')
    @classmethod
    def validate_urls(cls, v):
        return clean_url(v)

    @field_validator('technologies', mode='before')
    @classmethod
    def validate_technologies(cls, v):
        return clean_string_list(v, "Technologies")


class ProjectUpdate(BaseModel):
    """Schema for a partial project update; omitted fields are left unchanged."""
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    demo_url: Optional[str] = None
    github_url: Optional[str] = None
    technologies: Optional[List[str]] = None
    featured: Optional[bool] = None
    display_order: Optional[int] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return clean_text(v, "Title", MAX_TITLE_LENGTH)

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        return clean_text(v, "Description", MAX_DESCRIPTION_LENGTH)

    @field_validator('image_url', 'demo_url', 'github_url')
    @classmethod
    def validate_urls(cls, v):
        return clean_url(v)

    @field_validator('technologies', mode='before')
    @classmethod
    def validate_technologies(cls, v):
        return clean_string_list(v, "Technologies")


class ProjectResponse(BaseModel):
    id: str
    title: str
    description: str
    image_url: Optional[str] = None
    demo_url: Optional[str] = None
    github_url: Optional[str] = None
    technologies: List[str] = []
    featured: bool
    display_order: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Blog posts

class BlogPostCreate(BaseModel):
    """Schema for creating a blog post. Content is sanitized HTML."""
    title: str
    slug: str
    excerpt: str
    content: str
    image_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    published: bool = False

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return clean_text(v, "Title", MAX_TITLE_LENGTH)

    @field_validator('slug')
    @classmethod
    def validate_slug_field(cls, v):
        return validate_slug(v)

    @field_validator('excerpt')
    @classmethod
    def validate_excerpt(cls, v):
        return clean_text(v, "Excerpt", MAX_EXCERPT_LENGTH)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        return clean_blog_content(v)

    @field_validator('image_url')
    @classmethod
    def validate_image_url(cls, v):
        return clean_url(v)

    @field_validator('tags', mode='before')
    @classmethod
    def validate_tags(cls, v):
        return clean_string_list(v, "Tags")


class BlogPostUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    tags: Optional[List[str]] = None
    published: Optional[bool] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return clean_text(v, "Title", MAX_TITLE_LENGTH)

    @field_validator('slug')
    @classmethod
    def validate_slug_field(cls, v):
        if v is None:
            raise ValueError("Slug is required")
        return validate_slug(v)

    @field_validator('excerpt')
    @classmethod
    def validate_excerpt(cls, v):
        return clean_text(v, "Excerpt", MAX_EXCERPT_LENGTH)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        return clean_blog_content(v)

    @field_validator('image_url')
    @classmethod
    def validate_image_url(cls, v):
        return clean_url(v)

    @field_validator('tags', mode='before')
    @classmethod
    def validate_tags(cls, v):
        return clean_string_list(v, "Tags")


class BlogPostResponse(BaseModel):
    id: str
    title: str
    slug: str
    excerpt: str
    content: str
    image_url: Optional[str] = None
    tags: List[str] = []
    published: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Certifications

class CertificationCreate(BaseModel):
    title: str
    issuer: str
    issue_date: date
    credential_id: Optional[str] = Field(None, max_length=200)
    credential_url: Optional[str] = None
    image_url: Optional[str] = None
    certification_type: CertificationType = CertificationType.PROFESSIONAL
    display_order: int = 0

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return clean_text(v, "Title", MAX_TITLE_LENGTH)

    @field_validator('issuer')
    @classmethod
    def validate_issuer(cls, v):
        return clean_text(v, "Issuer", MAX_TITLE_LENGTH)

    @field_validator('credential_url', 'image_url')
    @classmethod
    def validate_urls(cls, v):
        return clean_url(v)


class CertificationUpdate(BaseModel):
    title: Optional[str] = None
    issuer: Optional[str] = None
    issue_date: Optional[date] = None
    credential_id: Optional[str] = Field(None, max_length=200)
    credential_url: Optional[str] = None
    image_url: Optional[str] = None
    certification_type: Optional[CertificationType] = None
    display_order: Optional[int] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return clean_text(v, "Title", MAX_TITLE_LENGTH)

    @field_validator('issuer')
    @classmethod
    def validate_issuer(cls, v):
        return clean_text(v, "Issuer", MAX_TITLE_LENGTH)

    @field_validator('credential_url', 'image_url')
    @classmethod
    def validate_urls(cls, v):
        return clean_url(v)


class CertificationResponse(BaseModel):
    id: str
    title: str
    issuer: str
    issue_date: date
    credential_id: Optional[str] = None
    credential_url: Optional[str] = None
    image_url: Optional[str] = None
    certification_type: str
    display_order: int
    created_at: datetime

    class Config:
        from_attributes = True


# Skills

class SkillCreate(BaseModel):
    name: str
    category: str
    proficiency: Proficiency = Proficiency.INTERMEDIATE
    icon_name: Optional[str] = Field(None, max_length=100)
    display_order: int = 0

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return clean_text(v, "Name", 100)

    @field_validator('category')
    @classmethod
    def validate_category(cls, v):
        return clean_text(v, "Category", 100)


class SkillUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    proficiency: Optional[Proficiency] = None
    icon_name: Optional[str] = Field(None, max_length=100)
    display_order: Optional[int] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return clean_text(v, "Name", 100)

    @field_validator('category')
    @classmethod
    def validate_category(cls, v):
        return clean_text(v, "Category", 100)


class SkillResponse(BaseModel):
    id: str
    name: str
    category: str
    proficiency: str
    icon_name: Optional[str] = None
    display_order: int
    created_at: datetime

    class Config:
        from_attributes = True


# Achievements

class AchievementCreate(BaseModel):
    title: str
    description: str
    date: dt.date
    icon_name: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = None
    display_order: int = 0

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return clean_text(v, "Title", MAX_TITLE_LENGTH)

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        return clean_text(v, "Description", MAX_DESCRIPTION_LENGTH)

    @field_validator('image_url')
    @classmethod
    def validate_image_url(cls, v):
        return clean_url(v)


class AchievementUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[dt.date] = None
    icon_name: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = None
    display_order: Optional[int] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return clean_text(v, "Title", MAX_TITLE_LENGTH)

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        return clean_text(v, "Description", MAX_DESCRIPTION_LENGTH)

    @field_validator('image_url')
    @classmethod
    def validate_image_url(cls, v):
        return clean_url(v)


class AchievementResponse(BaseModel):
    id: str
    title: str
    description: str
    date: dt.date
    icon_name: Optional[str] = None
    image_url: Optional[str] = None
    display_order: int
    created_at: datetime

    class Config:
        from_attributes = True


# Resume

class ResumeUpdate(BaseModel):
    """Replaces the current resume record (file uploaded separately)."""
    file_url: str
    file_name: str = Field(..., min_length=1, max_length=255)
    file_size: Optional[int] = Field(None, ge=0)

    @field_validator('file_url')
    @classmethod
    def validate_file_url(cls, v):
        url = clean_url(v)
        if url is None:
            raise ValueError("File URL is required")
        return url


class ResumeResponse(BaseModel):
    id: str
    file_url: str
    file_name: str
    file_size: Optional[int] = None
    updated_at: datetime

    class Config:
        from_attributes = True


class PortfolioSnapshot(BaseModel):
    """Everything the public site renders, in one response."""
    projects: List[ProjectResponse]
    blog_posts: List[BlogPostResponse]
    certifications: List[CertificationResponse]
    skills: List[SkillResponse]
    achievements: List[AchievementResponse]
    resume: Optional[ResumeResponse] = None
