"""Password hashing, admin JWT issue/verify and the FastAPI auth dependency."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.config import settings
from app.errors import AuthError
from app.models.admin import Admin

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    """Hash a plaintext password with a per-password bcrypt salt"""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash"""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(admin_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed token carrying the administrator id"""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=settings.JWT_EXPIRE_HOURS))
    payload = {"adminId": admin_id, "iat": now, "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the administrator id from a token, or raise AuthError"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected admin token: {e}")
        raise AuthError()

    admin_id = payload.get("adminId")
    if not admin_id:
        raise AuthError()
    return admin_id


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Admin:
    """Resolve the bearer token to an existing administrator"""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthError()

    admin_id = decode_access_token(credentials.credentials)
    try:
        admin = await Admin.get(ObjectId(admin_id))
    except InvalidId:
        raise AuthError()

    if not admin:
        raise AuthError()
    return admin
