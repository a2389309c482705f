"""Authentication routes: admin console login, token refresh and current user."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from portfolio_api.auth.auth import create_access_token, create_refresh_token, verify_password, verify_token
from portfolio_api.auth.database import get_db, is_admin, User
from portfolio_api.auth.dependencies import get_current_user
from portfolio_api.auth.schemas import LoginRequest, RefreshRequest, TokenResponse, UserResponse
from portfolio_api.rate_limit_utils import InMemoryRateLimiter, get_client_ip

router = APIRouter(prefix="/api/auth", tags=["auth"])

# 10 login attempts per 15 minutes per client address
LOGIN_MAX_ATTEMPTS = 10
LOGIN_WINDOW_SECONDS = 15 * 60

_login_rate_limiter = InMemoryRateLimiter(
    max_requests=LOGIN_MAX_ATTEMPTS,
    window_seconds=LOGIN_WINDOW_SECONDS,
)


def get_login_rate_limiter() -> InMemoryRateLimiter:
    """Dependency returning the process-wide login rate limiter."""
    return _login_rate_limiter


@router.post("/login", response_model=TokenResponse)
async def login(
    request: Request,
    login_data: LoginRequest,
    db: Session = Depends(get_db),
    rate_limiter: InMemoryRateLimiter = Depends(get_login_rate_limiter),
):
    """Sign in with email and password; returns access and refresh tokens."""
    client_ip = get_client_ip(request)
    result = rate_limiter.check(client_ip)
    if not result.allowed:
        logging.warning(f"Login rate limit exceeded for client: {client_ip}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts. Please try again later.",
            headers={"Retry-After": str(result.retry_after)},
        )

    email = login_data.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()

    # Same error for unknown email and wrong password
    if not user or not verify_password(login_data.password, user.password_hash):
        logging.info(f"Failed login attempt for {email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    user.last_login = datetime.utcnow()
    db.commit()

    logging.info(f"User {user.id} logged in")
    return TokenResponse(
        access_token=create_access_token({"sub": user.id}),
        refresh_token=create_refresh_token({"sub": user.id}),
        user_id=user.id,
        email=user.email,
        is_admin=is_admin(user),
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh_access_token(refresh_data: RefreshRequest, db: Session = Depends(get_db)):
    """Exchange a refresh token for a new access token."""
    payload = verify_token(refresh_data.refresh_token, token_type="refresh")
    user = None
    if payload and payload.get("sub"):
        user = db.query(User).filter(User.id == payload["sub"]).first()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TokenResponse(
        access_token=create_access_token({"sub": user.id}),
        user_id=user.id,
        email=user.email,
        is_admin=is_admin(user),
    )


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the signed-in user."""
    return UserResponse(
        id=current_user.id,
        email=current_user.email,
        is_admin=is_admin(current_user),
        created_at=current_user.created_at,
        last_login=current_user.last_login,
    )
