import hmac
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from nyonjo.core.config import settings

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def verify_admin_credentials(email: str, password: str) -> bool:
    if not hmac.compare_digest(email.strip().lower(), settings.ADMIN_EMAIL.lower()):
        return False
    if settings.ADMIN_PASSWORD_HASH:
        return verify_password(password, settings.ADMIN_PASSWORD_HASH)
    return hmac.compare_digest(password, settings.ADMIN_PASSWORD)


def _millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def create_admin_session(now: Optional[datetime] = None) -> Dict[str, Any]:
    """Build the admin session blob and the bearer token that carries it.

    ``timestamp`` and ``expires`` are epoch milliseconds, matching what the
    admin frontend keeps in local storage.
    """
    now = now or datetime.now(timezone.utc)
    expires_at = now + timedelta(hours=settings.ADMIN_SESSION_HOURS)
    session = {"id": "admin", "timestamp": _millis(now), "expires": _millis(expires_at)}
    token = jwt.encode(
        {"sub": "admin", "iat": now, "exp": expires_at},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    return {"session": session, "access_token": token}


def decode_admin_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the token claims, or None when the token is invalid or expired."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("sub") != "admin":
        return None
    return payload
