"""
Auth module: session-token issuance/verification and the FastAPI dependencies
that gate every API route.

Sessions are stateless HS256 JWTs carrying only identity ({sub: user id,
username}). The token is proof of identity, never of authority: the caller's
role is re-read from the users table on every gated request, so a demoted
admin loses admin capability immediately rather than when the token expires.
"""

import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import structlog
from fastapi import Depends, Request, Response
from jose import jwt, JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from authtracker.config import Settings, get_settings
from authtracker.database import get_db
from authtracker.exceptions import Forbidden, Unauthorized
from authtracker.services.credential_store import CredentialStore, UserIdentity, get_credential_store

ALGORITHM = "HS256"

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SessionClaims:
    """Verified identity payload of a session token."""
    user_id: int
    username: str
    expires_at: int


class SessionIssuer:
    def __init__(self, secret: str, ttl_seconds: Optional[int] = None):
        self._secret = secret
        self.ttl_seconds = get_settings().token_expire_seconds if ttl_seconds is None else ttl_seconds

    def issue(self, identity: UserIdentity, issued_at: Optional[float] = None) -> str:
        """Create a signed token for ``identity`` valid for ``ttl_seconds``."""
        now = int(time.time() if issued_at is None else issued_at)
        payload = {
            "sub": str(identity.id),
            "username": identity.username,
            "iat": now,
            "exp": now + self.ttl_seconds,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> Optional[SessionClaims]:
        """Decode and validate a token. Returns None if invalid, malformed or expired."""
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require_exp": True, "require_sub": True},
            )
            return SessionClaims(
                user_id=int(payload["sub"]),
                username=str(payload["username"]),
                expires_at=int(payload["exp"]),
            )
        except (JWTError, KeyError, TypeError, ValueError):
            return None


@lru_cache()
def get_session_issuer() -> SessionIssuer:
    settings = get_settings()
    return SessionIssuer(settings.session_secret, settings.token_expire_seconds)


# ---------------------------------------------------------------------------
# Cookie transport
# ---------------------------------------------------------------------------

def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.token_expire_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    # Overwrite with an already-expired empty value.
    response.set_cookie(
        key=settings.session_cookie_name,
        value="",
        max_age=0,
        expires=0,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
    )


def extract_token(request: Request, settings: Settings) -> Optional[str]:
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:] or None
    return None


# ---------------------------------------------------------------------------
# Authorization gate
# ---------------------------------------------------------------------------

async def get_session_claims(
    request: Request,
    issuer: SessionIssuer = Depends(get_session_issuer),
    settings: Settings = Depends(get_settings),
) -> SessionClaims:
    """FastAPI dependency: require a valid session. Raises Unauthorized otherwise."""
    token = extract_token(request, settings)
    if not token:
        raise Unauthorized()
    claims = issuer.verify(token)
    if claims is None:
        raise Unauthorized("Invalid or expired session")
    return claims


async def get_current_user(
    claims: SessionClaims = Depends(get_session_claims),
    db: AsyncSession = Depends(get_db),
    store: CredentialStore = Depends(get_credential_store),
) -> UserIdentity:
    """
    FastAPI dependency. Resolves the session to the user's *current* row;
    the role on the returned identity is whatever the store says right now.
    """
    user = await store.get_user(db, claims.user_id)
    if user is None:
        logger.info("session_user_missing", user_id=claims.user_id)
        raise Unauthorized("Session user no longer exists")
    return user


def require_role(user: UserIdentity, role: str) -> UserIdentity:
    if user.role != role:
        logger.info("role_check_failed", user_id=user.id, required=role, actual=user.role)
        raise Forbidden()
    return user


async def require_admin(user: UserIdentity = Depends(get_current_user)) -> UserIdentity:
    return require_role(user, "admin")
