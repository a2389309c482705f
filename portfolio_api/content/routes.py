"""Public, read-only portfolio content routes used by the site front end."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from portfolio_api.auth.database import get_db
from portfolio_api.content.database import Achievement, BlogPost, Certification, Project, Resume, Skill
from portfolio_api.content.schemas import (
    AchievementResponse,
    BlogPostResponse,
    CertificationResponse,
    CertificationType,
    PortfolioSnapshot,
    ProjectResponse,
    ResumeResponse,
    SkillResponse,
)

router = APIRouter(prefix="/api/portfolio", tags=["portfolio"])


def list_projects(db: Session, featured: Optional[bool] = None) -> List[Project]:
    query = db.query(Project)
    if featured is not None:
        query = query.filter(Project.featured == featured)
    return query.order_by(Project.display_order, Project.created_at).all()


def list_published_posts(db: Session, tag: Optional[str] = None) -> List[BlogPost]:
    """Published posts, newest first. Tag matching is case-insensitive."""
    posts = db.query(BlogPost).filter(BlogPost.published.is_(True)).order_by(BlogPost.created_at.desc()).all()
    if tag:
        # Tags are a JSON list, so filter in Python to stay portable across databases
        wanted = tag.strip().lower()
        posts = [post for post in posts if wanted in {t.lower() for t in (post.tags or [])}]
    return posts


def list_certifications(db: Session, certification_type: Optional[CertificationType] = None) -> List[Certification]:
    query = db.query(Certification)
    if certification_type is not None:
        query = query.filter(Certification.certification_type == certification_type.value)
    return query.order_by(Certification.display_order, Certification.issue_date.desc()).all()


def list_skills(db: Session, category: Optional[str] = None) -> List[Skill]:
    query = db.query(Skill)
    if category:
        query = query.filter(Skill.category == category)
    return query.order_by(Skill.display_order, Skill.name).all()


def list_achievements(db: Session) -> List[Achievement]:
    return db.query(Achievement).order_by(Achievement.display_order, Achievement.date.desc()).all()


def get_current_resume(db: Session) -> Optional[Resume]:
    return db.query(Resume).order_by(Resume.updated_at.desc()).first()


@router.get("", response_model=PortfolioSnapshot)
async def get_portfolio(db: Session = Depends(get_db)):
    """Everything the public site shows, in a single request."""
    resume = get_current_resume(db)
    return PortfolioSnapshot(
        projects=[ProjectResponse.model_validate(p) for p in list_projects(db)],
        blog_posts=[BlogPostResponse.model_validate(p) for p in list_published_posts(db)],
        certifications=[CertificationResponse.model_validate(c) for c in list_certifications(db)],
        skills=[SkillResponse.model_validate(s) for s in list_skills(db)],
        achievements=[AchievementResponse.model_validate(a) for a in list_achievements(db)],
        resume=ResumeResponse.model_validate(resume) if resume else None,
    )


@router.get("/projects", response_model=List[ProjectResponse])
async def get_projects(
    featured: Optional[bool] = Query(None),
    db: Session = Depends(get_db)
):
    return list_projects(db, featured)


@router.get("/skills", response_model=List[SkillResponse])
async def get_skills(
    category: Optional[str] = Query(None, max_length=100),
    db: Session = Depends(get_db)
):
    return list_skills(db, category)


@router.get("/certifications", response_model=List[CertificationResponse])
async def get_certifications(
    certification_type: Optional[CertificationType] = Query(None, alias="type"),
    db: Session = Depends(get_db)
):
    return list_certifications(db, certification_type)


@router.get("/achievements", response_model=List[AchievementResponse])
async def get_achievements(db: Session = Depends(get_db)):
    return list_achievements(db)


@router.get("/blog", response_model=List[BlogPostResponse])
async def get_blog_posts(
    tag: Optional[str] = Query(None, max_length=50),
    db: Session = Depends(get_db)
):
    """Published blog posts, newest first."""
    return list_published_posts(db, tag)


@router.get("/blog/{slug}", response_model=BlogPostResponse)
async def get_blog_post(slug: str, db: Session = Depends(get_db)):
    """A single published blog post by slug. Drafts are not found."""
    post = db.query(BlogPost).filter(
        BlogPost.slug == slug,
        BlogPost.published.is_(True)
    ).first()
    if not post:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Blog post not found"
        )
    return post


@router.get("/resume", response_model=ResumeResponse)
async def get_resume(db: Session = Depends(get_db)):
    resume = get_current_resume(db)
    if not resume:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No resume uploaded"
        )
    return resume
