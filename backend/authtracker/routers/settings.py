from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from authtracker.auth import get_current_user
from authtracker.database import get_db
from authtracker.schemas.auth import SuccessResponse
from authtracker.schemas.settings import SettingUpdate
from authtracker.services.credential_store import UserIdentity
from authtracker.services.settings_service import settings_service

router = APIRouter()


@router.get("")
async def get_settings_map(
    db: AsyncSession = Depends(get_db),
    current_user: UserIdentity = Depends(get_current_user),
):
    return await settings_service.get_all(db)


@router.post("", response_model=SuccessResponse)
async def save_setting(
    data: SettingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserIdentity = Depends(get_current_user),
):
    await settings_service.put(db, data.key, data.value)
    await db.commit()
    return SuccessResponse()
