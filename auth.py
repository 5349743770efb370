"""
Admin dashboard authentication.

A single admin account is configured through ADMIN_USERNAME/ADMIN_PASSWORD.
A successful login issues an HS256 JWT stored in the HTTP-only "admin-token"
cookie; API clients may send the same token as a Bearer header instead.
"""

import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Cookie, Depends, Header, HTTPException
from jose import JWTError, jwt

import config

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
COOKIE_NAME = "admin-token"


def check_credentials(username: str, password: str) -> bool:
    if not config.ADMIN_USERNAME or not config.ADMIN_PASSWORD:
        logger.error("❌ ADMIN_USERNAME and ADMIN_PASSWORD must be set to enable admin login")
        return False
    user_ok = hmac.compare_digest(username.encode(), config.ADMIN_USERNAME.encode())
    pass_ok = hmac.compare_digest(password.encode(), config.ADMIN_PASSWORD.encode())
    return user_ok and pass_ok


def create_admin_token(username: str, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=config.JWT_EXPIRATION_HOURS))
    payload = {
        "sub": "admin",
        "username": username,
        "role": "admin",
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=ALGORITHM)


def verify_token(token: Optional[str]) -> Optional[Dict[str, Any]]:
    if not token:
        return None
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"Token verification failed: {e}")
        return None


def get_token(
    admin_token: Optional[str] = Cookie(default=None, alias=COOKIE_NAME),
    authorization: Optional[str] = Header(default=None),
) -> Optional[str]:
    # Cookie first (dashboard), then Bearer header (scripts)
    if admin_token:
        return admin_token
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return None


def require_admin(token: Optional[str] = Depends(get_token)) -> Dict[str, Any]:
    payload = verify_token(token)
    if payload is None or payload.get("role") != "admin":
        raise HTTPException(status_code=401, detail="Unauthorized")
    return payload
