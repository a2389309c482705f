"""Admin routes for managing portfolio content, contact messages and uploads."""

import logging
import os
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portfolio_api.admin.dependencies import verify_admin
from portfolio_api.auth.database import get_db, User
from portfolio_api.contact.database import ContactMessage
from portfolio_api.contact.schemas import ContactMessageListResponse
from portfolio_api.content.database import Achievement, BlogPost, Certification, Project, Resume, Skill
from portfolio_api.content.schemas import (
    AchievementCreate,
    AchievementResponse,
    AchievementUpdate,
    BlogPostCreate,
    BlogPostResponse,
    BlogPostUpdate,
    CertificationCreate,
    CertificationResponse,
    CertificationUpdate,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    ResumeResponse,
    ResumeUpdate,
    SkillCreate,
    SkillResponse,
    SkillUpdate,
)
from portfolio_api.storage.uploads import store_upload

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(verify_admin)])


class UploadResponse(BaseModel):
    url: str
    file_name: str
    file_size: int


def _get_or_404(db: Session, model, item_id: str, label: str):
    item = db.query(model).filter(model.id == item_id).first()
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{label} not found"
        )
    return item


def _apply_updates(item, changes: BaseModel) -> None:
    """Copy the fields the client sent onto the row. Null never overwrites a required column."""
    columns = item.__table__.columns
    for field, value in changes.model_dump(exclude_unset=True, mode="python").items():
        if value is None and not columns[field].nullable:
            continue
        setattr(item, field, getattr(value, "value", value))


DEFAULT_CONFLICT = "Conflicts with an existing record"


def _commit(db: Session, conflict_detail: str = DEFAULT_CONFLICT) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logging.warning(f"Admin write rejected by database constraint: {str(e.orig)}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=conflict_detail
        )


def _create(db: Session, model, data: BaseModel, conflict_detail: str = DEFAULT_CONFLICT):
    values = {key: getattr(value, "value", value) for key, value in data.model_dump().items()}
    item = model(**values)
    db.add(item)
    _commit(db, conflict_detail)
    db.refresh(item)
    return item


def _delete(db: Session, model, item_id: str, label: str) -> None:
    item = _get_or_404(db, model, item_id, label)
    db.delete(item)
    db.commit()
    logging.info(f"{label} {item_id} deleted")


# Projects

@router.get("/projects", response_model=List[ProjectResponse])
async def admin_list_projects(db: Session = Depends(get_db)):
    return db.query(Project).order_by(Project.display_order, Project.created_at).all()


@router.post("/projects", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(project_data: ProjectCreate, db: Session = Depends(get_db)):
    return _create(db, Project, project_data)


@router.patch("/projects/{project_id}", response_model=ProjectResponse)
async def update_project(project_id: str, project_data: ProjectUpdate, db: Session = Depends(get_db)):
    project = _get_or_404(db, Project, project_id, "Project")
    _apply_updates(project, project_data)
    _commit(db)
    db.refresh(project)
    return project


@router.delete("/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str, db: Session = Depends(get_db)):
    _delete(db, Project, project_id, "Project")
    return None


# Blog posts

BLOG_SLUG_CONFLICT = "A blog post with this slug already exists"


@router.get("/blog", response_model=List[BlogPostResponse])
async def admin_list_blog_posts(db: Session = Depends(get_db)):
    """All blog posts including drafts, newest first."""
    return db.query(BlogPost).order_by(BlogPost.created_at.desc()).all()


@router.post("/blog", response_model=BlogPostResponse, status_code=status.HTTP_201_CREATED)
async def create_blog_post(post_data: BlogPostCreate, db: Session = Depends(get_db)):
    return _create(db, BlogPost, post_data, BLOG_SLUG_CONFLICT)


@router.patch("/blog/{post_id}", response_model=BlogPostResponse)
async def update_blog_post(post_id: str, post_data: BlogPostUpdate, db: Session = Depends(get_db)):
    post = _get_or_404(db, BlogPost, post_id, "Blog post")
    _apply_updates(post, post_data)
    _commit(db, BLOG_SLUG_CONFLICT)
    db.refresh(post)
    return post


@router.delete("/blog/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_blog_post(post_id: str, db: Session = Depends(get_db)):
    _delete(db, BlogPost, post_id, "Blog post")
    return None


# Certifications

@router.get("/certifications", response_model=List[CertificationResponse])
async def admin_list_certifications(db: Session = Depends(get_db)):
    return db.query(Certification).order_by(Certification.display_order, Certification.issue_date.desc()).all()


@router.post("/certifications", response_model=CertificationResponse, status_code=status.HTTP_201_CREATED)
async def create_certification(certification_data: CertificationCreate, db: Session = Depends(get_db)):
    return _create(db, Certification, certification_data)


@router.patch("/certifications/{certification_id}", response_model=CertificationResponse)
async def update_certification(
    certification_id: str,
    certification_data: CertificationUpdate,
    db: Session = Depends(get_db)
):
    certification = _get_or_404(db, Certification, certification_id, "Certification")
    _apply_updates(certification, certification_data)
    _commit(db)
    db.refresh(certification)
    return certification


@router.delete("/certifications/{certification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_certification(certification_id: str, db: Session = Depends(get_db)):
    _delete(db, Certification, certification_id, "Certification")
    return None


# Skills

@router.get("/skills", response_model=List[SkillResponse])
async def admin_list_skills(db: Session = Depends(get_db)):
    return db.query(Skill).order_by(Skill.display_order, Skill.name).all()


@router.post("/skills", response_model=SkillResponse, status_code=status.HTTP_201_CREATED)
async def create_skill(skill_data: SkillCreate, db: Session = Depends(get_db)):
    return _create(db, Skill, skill_data)


@router.patch("/skills/{skill_id}", response_model=SkillResponse)
async def update_skill(skill_id: str, skill_data: SkillUpdate, db: Session = Depends(get_db)):
    skill = _get_or_404(db, Skill, skill_id, "Skill")
    _apply_updates(skill, skill_data)
    _commit(db)
    db.refresh(skill)
    return skill


@router.delete("/skills/{skill_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_skill(skill_id: str, db: Session = Depends(get_db)):
    _delete(db, Skill, skill_id, "Skill")
    return None


# Achievements

@router.get("/achievements", response_model=List[AchievementResponse])
async def admin_list_achievements(db: Session = Depends(get_db)):
    return db.query(Achievement).order_by(Achievement.display_order, Achievement.date.desc()).all()


@router.post("/achievements", response_model=AchievementResponse, status_code=status.HTTP_201_CREATED)
async def create_achievement(achievement_data: AchievementCreate, db: Session = Depends(get_db)):
    return _create(db, Achievement, achievement_data)


@router.patch("/achievements/{achievement_id}", response_model=AchievementResponse)
async def update_achievement(
    achievement_id: str,
    achievement_data: AchievementUpdate,
    db: Session = Depends(get_db)
):
    achievement = _get_or_404(db, Achievement, achievement_id, "Achievement")
    _apply_updates(achievement, achievement_data)
    _commit(db)
    db.refresh(achievement)
    return achievement


@router.delete("/achievements/{achievement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_achievement(achievement_id: str, db: Session = Depends(get_db)):
    _delete(db, Achievement, achievement_id, "Achievement")
    return None


# Resume

@router.put("/resume", response_model=ResumeResponse)
async def replace_resume(resume_data: ResumeUpdate, db: Session = Depends(get_db)):
    """Make the given file the current resume, replacing any previous record."""
    db.query(Resume).delete()
    resume = Resume(
        file_url=resume_data.file_url,
        file_name=resume_data.file_name,
        file_size=resume_data.file_size,
    )
    db.add(resume)
    db.commit()
    db.refresh(resume)
    logging.info(f"Resume replaced with {resume.file_name}")
    return resume


# Contact messages

@router.get("/messages", response_model=ContactMessageListResponse)
async def list_contact_messages(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """Contact form messages, newest first."""
    query = db.query(ContactMessage).order_by(ContactMessage.created_at.desc())
    total = query.count()
    messages = query.offset(offset).limit(limit).all()
    return {"messages": messages, "total": total}


@router.delete("/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contact_message(message_id: str, db: Session = Depends(get_db)):
    _delete(db, ContactMessage, message_id, "Message")
    return None


# Uploads

@router.post("/uploads/{bucket}", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    bucket: str,
    request: Request,
    file: UploadFile = File(...),
    admin_user: User = Depends(verify_admin),
):
    """
    Upload an image (project-images, blog-images) or a resume PDF (resumes).
    Returns the public URL of the stored file.
    """
    try:
        relative_path, size = store_upload(bucket, file)
    except HTTPException:
        raise
    except OSError as e:
        logging.error(f"Error storing upload in {bucket}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store file"
        )

    # Construct full URL
    if os.environ.get("DYNO"):  # Heroku
        scheme = request.headers.get("X-Forwarded-Proto", "https")
        host = request.headers.get("Host", request.url.hostname)
        base_url = f"{scheme}://{host}"
    else:  # Localhost
        base_url = str(request.base_url).rstrip('/')

    logging.info(f"Admin {admin_user.id} uploaded {relative_path}")
    # The stored name, never the client-supplied one
    stored_name = relative_path.rsplit('/', 1)[-1]
    return UploadResponse(
        url=f"{base_url}/uploads/{relative_path}",
        file_name=stored_name,
        file_size=size,
    )
