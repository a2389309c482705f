"""Admin authentication dependencies."""

from fastapi import Depends, HTTPException, status
from portfolio_api.auth.database import User, is_admin
from portfolio_api.auth.dependencies import get_current_user


def verify_admin(current_user: User = Depends(get_current_user)) -> User:
    """
    Verify admin access: the bearer token must belong to a user listed in admin_users.

    Returns the current user if the check passes.
    Raises HTTPException 401 (via get_current_user) or 403 otherwise.
    """
    if not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required. Your account does not have admin privileges."
        )

    return current_user
