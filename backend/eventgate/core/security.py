"""
Caller identity from bearer tokens issued by the identity provider.

This service never authenticates users itself: it only verifies the JWT
signature and reads two claims:
  - sub:  the user id the request acts for
  - role: "organizer" unlocks invitation, check-in and waitlist endpoints
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from eventgate.core.config import get_settings
from eventgate.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

bearer_scheme = HTTPBearer(auto_error=False)


class Principal(BaseModel):
    user_id: int
    role: Optional[str] = None

    @property
    def is_organizer(self) -> bool:
        return self.role == settings.ORGANIZER_ROLE


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Mint a token the way the identity provider does. Used by tests and load scripts."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=30))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Principal:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return Principal(user_id=int(payload["sub"]), role=payload.get("role"))
    except (JWTError, KeyError, TypeError, ValueError) as e:
        logger.warning("token_rejected", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return decode_access_token(credentials.credentials)


async def get_current_user_id(principal: Principal = Depends(get_current_principal)) -> int:
    return principal.user_id


async def require_organizer(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.is_organizer:
        logger.warning("organizer_required", user_id=principal.user_id, role=principal.role)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Organizer privileges required",
        )
    return principal
