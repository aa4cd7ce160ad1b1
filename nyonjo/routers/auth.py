import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel

from nyonjo.core.exceptions import AuthError, ValidationError
from nyonjo.core.security import create_admin_session, decode_admin_token, verify_admin_credentials

logger = logging.getLogger(__name__)

router = APIRouter()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/admin/login", auto_error=False)


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


@router.post("/login")
def login(credentials: LoginRequest):
    """Check the admin credential pair and hand back a session plus bearer token."""
    if not credentials.email or not credentials.password:
        raise ValidationError("Email and password required")

    if not verify_admin_credentials(credentials.email, credentials.password):
        logger.warning("Failed admin login for %s", credentials.email)
        raise AuthError("Invalid credentials")

    issued = create_admin_session()
    logger.info("Admin logged in")
    return {
        "success": True,
        "message": "Login successful",
        "session": issued["session"],
        "access_token": issued["access_token"],
        "token_type": "bearer",
    }


async def get_current_admin(token: Optional[str] = Depends(oauth2_scheme)) -> Dict[str, Any]:
    if not token:
        raise AuthError("Unauthorized")
    claims = decode_admin_token(token)
    if claims is None:
        raise AuthError("Session expired or invalid")
    return claims
