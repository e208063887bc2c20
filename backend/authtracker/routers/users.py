from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from authtracker.auth import require_admin
from authtracker.database import get_db
from authtracker.schemas.auth import SuccessResponse
from authtracker.schemas.stats import EmployeeStats
from authtracker.schemas.user import UserCreate, UserCreated, UserResponse, UserUpdate
from authtracker.services.credential_store import CredentialStore, UserIdentity, get_credential_store
from authtracker.services.stats_service import stats_service

# Every route here is admin-only.
router = APIRouter()


@router.get("", response_model=list[UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    store: CredentialStore = Depends(get_credential_store),
    current_user: UserIdentity = Depends(require_admin),
):
    return await store.list_users(db)


@router.get("/stats", response_model=list[EmployeeStats])
async def employee_stats(
    db: AsyncSession = Depends(get_db),
    current_user: UserIdentity = Depends(require_admin),
):
    return await stats_service.employee_stats(db)


@router.post("", response_model=UserCreated)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
    store: CredentialStore = Depends(get_credential_store),
    current_user: UserIdentity = Depends(require_admin),
):
    user = await store.create_user(db, data.username, data.password, data.role)
    await db.commit()
    return UserCreated(id=user.id)


@router.patch("/{user_id}", response_model=SuccessResponse)
async def update_user(
    user_id: int,
    data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    store: CredentialStore = Depends(get_credential_store),
    current_user: UserIdentity = Depends(require_admin),
):
    await store.update_user(db, user_id, **data.model_dump(exclude_unset=True))
    await db.commit()
    return SuccessResponse()


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    store: CredentialStore = Depends(get_credential_store),
    current_user: UserIdentity = Depends(require_admin),
):
    await store.delete_user(db, user_id)
    await db.commit()
    return SuccessResponse()
