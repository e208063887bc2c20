from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from authtracker.auth import get_current_user, require_admin
from authtracker.database import get_db
from authtracker.schemas.auth import SuccessResponse
from authtracker.schemas.record import RecordCreate, RecordCreated, RecordResponse, RecordUpdate
from authtracker.schemas.stats import RecordStats
from authtracker.services.credential_store import UserIdentity
from authtracker.services.record_service import record_service
from authtracker.services.stats_service import stats_service

router = APIRouter()

# Employees see and edit every record, not just their own. Ownership is
# used for stats attribution only.


@router.get("", response_model=list[RecordResponse])
async def list_records(
    db: AsyncSession = Depends(get_db),
    current_user: UserIdentity = Depends(get_current_user),
):
    return await record_service.list_active(db)


@router.get("/deleted", response_model=list[RecordResponse])
async def list_deleted_records(
    db: AsyncSession = Depends(get_db),
    current_user: UserIdentity = Depends(get_current_user),
):
    return await record_service.list_trashed(db)


@router.get("/stats", response_model=RecordStats)
async def record_stats(
    db: AsyncSession = Depends(get_db),
    current_user: UserIdentity = Depends(get_current_user),
):
    return await stats_service.record_stats(db)


@router.get("/{record_id}", response_model=RecordResponse)
async def get_record(
    record_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserIdentity = Depends(get_current_user),
):
    return await record_service.get(db, record_id)


@router.post("", response_model=RecordCreated)
async def create_record(
    data: RecordCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserIdentity = Depends(get_current_user),
):
    record_id = await record_service.create(db, data.model_dump(), owner_user_id=current_user.id)
    await db.commit()
    return RecordCreated(id=record_id)


@router.put("/{record_id}", response_model=SuccessResponse)
async def update_record(
    record_id: int,
    data: RecordUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserIdentity = Depends(get_current_user),
):
    await record_service.update(db, record_id, data.model_dump())
    await db.commit()
    return SuccessResponse()


@router.delete("/{record_id}", response_model=SuccessResponse)
async def soft_delete_record(
    record_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserIdentity = Depends(require_admin),
):
    await record_service.soft_delete(db, record_id)
    await db.commit()
    return SuccessResponse()


@router.post("/{record_id}/restore", response_model=SuccessResponse)
async def restore_record(
    record_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserIdentity = Depends(get_current_user),
):
    await record_service.restore(db, record_id)
    await db.commit()
    return SuccessResponse()


@router.delete("/{record_id}/permanent", response_model=SuccessResponse)
async def purge_record(
    record_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserIdentity = Depends(require_admin),
):
    await record_service.purge(db, record_id)
    await db.commit()
    return SuccessResponse()
