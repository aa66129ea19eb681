"""
Password hashing (bcrypt) and access tokens (JWT, HS256).
Tokens carry the principal: sub (user id), username, role.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from showcase.schemas.auth import Principal

ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a bcrypt hash. Malformed hashes never verify."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(principal: Principal, secret: str, expires_hours: int) -> str:
    """Signed token for the principal, valid for expires_hours."""
    expire = datetime.now(timezone.utc) + timedelta(hours=expires_hours)
    claims = {
        "sub": principal.id,
        "username": principal.username,
        "role": principal.role,
        "exp": expire,
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def decode_access_token(token: str, secret: str) -> Optional[Principal]:
    """Principal from a valid token; None if the signature, expiry or claims are bad."""
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError:
        return None
    try:
        return Principal(id=payload["sub"], username=payload["username"], role=payload["role"])
    except (KeyError, ValueError):
        return None
