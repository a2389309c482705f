"""Database setup and configuration."""

from sqlalchemy import create_engine, Column, String, DateTime, ForeignKey
from sqlalchemy.orm import declarative_base, sessionmaker, relationship
from sqlalchemy.pool import StaticPool
from datetime import datetime
import logging
import os
import uuid

from dotenv import load_dotenv

# Load environment variables from .env file (for local development)
load_dotenv()

# DATABASE_URL should be set as an environment variable (e.g., from Heroku)
DATABASE_URL = os.environ.get("DATABASE_URL")

if not DATABASE_URL:
    raise ValueError(
        "DATABASE_URL environment variable is required. "
        "Please set it to your PostgreSQL connection string."
    )

# Heroku uses postgres:// but SQLAlchemy 2.0+ requires postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

if DATABASE_URL.startswith("sqlite"):
    # Local runs and tests: one shared connection so in-memory data survives across sessions
    engine_kwargs = {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool,
    }
else:
    # PostgreSQL connection pool configuration
    engine_kwargs = {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_recycle": 3600,  # Recycle connections after 1 hour
    }

engine = create_engine(DATABASE_URL, **engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


class User(Base):
    """Account that can sign in to the admin console."""
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_login = Column(DateTime, nullable=True)

    admin = relationship("AdminUser", back_populates="user", uselist=False, cascade="all, delete-orphan")


class AdminUser(Base):
    """Grants admin console access to a user (one row per admin)."""
    __tablename__ = "admin_users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="admin")


def is_admin(user: User) -> bool:
    """True if the user has an admin_users row."""
    return user is not None and user.admin is not None


def init_db():
    """Initialize database tables for every feature module."""
    from sqlalchemy.exc import IntegrityError, ProgrammingError

    # Register the feature tables on the shared Base before create_all
    import portfolio_api.contact.database  # noqa: F401
    import portfolio_api.content.database  # noqa: F401

    try:
        # Use checkfirst=True to avoid errors if tables already exist
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logging.info("Database tables initialized successfully")
    except (IntegrityError, ProgrammingError) as e:
        # Duplicate type/constraint errors happen when types already exist
        error_str = str(e)
        if "pg_type_typname_nsp_index" in error_str or "duplicate key" in error_str.lower():
            logging.info("Database types already exist, skipping type creation (safe to ignore)")
        else:
            logging.warning(f"Database integrity/programming error (may be safe to ignore): {error_str}")


def get_db():
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
