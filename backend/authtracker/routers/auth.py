import structlog
from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from authtracker.auth import (
    SessionIssuer,
    clear_session_cookie,
    get_current_user,
    get_session_issuer,
    set_session_cookie,
)
from authtracker.config import Settings, get_settings
from authtracker.database import get_db
from authtracker.exceptions import InvalidCredentials
from authtracker.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MeResponse,
    SuccessResponse,
)
from authtracker.schemas.user import UserResponse
from authtracker.services.credential_store import CredentialStore, UserIdentity, get_credential_store

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    store: CredentialStore = Depends(get_credential_store),
    issuer: SessionIssuer = Depends(get_session_issuer),
    settings: Settings = Depends(get_settings),
):
    try:
        user = await store.verify_password(db, body.username, body.password)
    except InvalidCredentials:
        logger.info("login_failed", username=body.username)
        raise

    set_session_cookie(response, issuer.issue(user), settings)
    logger.info("login_succeeded", user_id=user.id, username=user.username, role=user.role)
    return LoginResponse(user=UserResponse.model_validate(user))


@router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response, settings: Settings = Depends(get_settings)):
    clear_session_cookie(response, settings)
    return SuccessResponse()


@router.get("/me", response_model=MeResponse)
async def me(current_user: UserIdentity = Depends(get_current_user)):
    return MeResponse(user=UserResponse.model_validate(current_user))


@router.post("/change-password", response_model=SuccessResponse)
async def change_password(
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    store: CredentialStore = Depends(get_credential_store),
    current_user: UserIdentity = Depends(get_current_user),
):
    await store.change_password(db, current_user.id, body.current_password, body.new_password)
    await db.commit()
    return SuccessResponse()
