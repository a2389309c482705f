"""Authentication utilities: password hashing and JWT token generation."""

import bcrypt
from jose import JWTError, jwt
from datetime import datetime, timedelta
import logging
import os

# JWT settings
SECRET_KEY = os.environ.get("SECRET_KEY")
if not SECRET_KEY:
    logging.warning(
        "SECRET_KEY environment variable is not set. "
        "JWT token operations will fail. "
        "Please set SECRET_KEY to a secure random string."
    )
ALGORITHM = "HS256"
# Access tokens are short-lived (15 minutes)
ACCESS_TOKEN_EXPIRE_MINUTES = 15
# Refresh tokens are long-lived (30 days)
REFRESH_TOKEN_EXPIRE_DAYS = 30

# Bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    """Encode a password, truncated to bcrypt's limit without splitting a character."""
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > BCRYPT_MAX_BYTES:
        truncated = password_bytes[:BCRYPT_MAX_BYTES]
        # Remove any incomplete trailing bytes
        while truncated and truncated[-1] & 0x80 and not (truncated[-1] & 0x40):
            truncated = truncated[:-1]
        password_bytes = truncated
    return password_bytes


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(_password_bytes(password), salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode('utf-8'))
    except ValueError:
        # Malformed hash stored in the database
        return False


def _create_token(data: dict, expire: datetime, token_type: str) -> str:
    if not SECRET_KEY:
        raise ValueError(
            "SECRET_KEY environment variable is required for token creation. "
            "Please set it to a secure random string (e.g., generate with: python -c 'import secrets; print(secrets.token_urlsafe(32))')"
        )
    to_encode = data.copy()
    to_encode.update({"exp": expire, "type": token_type})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(data: dict, expires_delta: timedelta = None) -> str:
    """Create a JWT access token (short-lived)."""
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    return _create_token(data, expire, "access")


def create_refresh_token(data: dict) -> str:
    """Create a JWT refresh token (long-lived)."""
    expire = datetime.utcnow() + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
    return _create_token(data, expire, "refresh")


def verify_token(token: str, token_type: str = None) -> dict:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token string
        token_type: Optional token type to verify ("access" or "refresh")

    Returns:
        Decoded token payload or None if invalid
    """
    if not SECRET_KEY:
        logging.error("SECRET_KEY is not set. Cannot verify token.")
        return None
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if token_type and payload.get("type") != token_type:
        return None
    return payload
