import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException, status

from scavenger_hunt.core.config import Settings
from scavenger_hunt.infrastructure.security.jwt_service import create_access_token
from scavenger_hunt.presentation.dependencies import get_app_settings
from scavenger_hunt.presentation.schemas.admin_schema import AdminLogin, TokenOut

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenOut)
def admin_login(credentials: AdminLogin, settings: Settings = Depends(get_app_settings)):
    username_ok = secrets.compare_digest(credentials.username, settings.ADMIN_USERNAME)
    password_ok = secrets.compare_digest(credentials.password, settings.ADMIN_PASSWORD)
    if not (username_ok and password_ok):
        logger.warning(f"Failed admin login for username={credentials.username!r}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    token = create_access_token(
        {"sub": credentials.username, "role": "ADMIN"},
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        expires_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )
    logger.info(f"Admin {credentials.username} logged in")
    return TokenOut(access_token=token)
