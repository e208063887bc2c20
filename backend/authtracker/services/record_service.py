from enum import Enum

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from authtracker.exceptions import InvalidRecordState, NotFound
from authtracker.models.record import AuthRecord
from authtracker.time_utils import utc_now

logger = structlog.get_logger(__name__)

# Columns a create/update payload may set. Identity and lifecycle columns
# (id, is_deleted, user_id, created_at, updated_at) are owned by the manager.
EDITABLE_FIELDS = (
    "visit_type",
    "insurance",
    "insurance_id",
    "patient_name",
    "dob",
    "account_number",
    "p_r",
    "doctor_name",
    "procedure_codes",
    "dx_codes",
    "status",
    "request_initiated",
    "insurance_portal_name",
    "rep_name",
    "phone_number",
    "auth_case_number",
    "ref_number",
    "date_worked",
    "call_time_spent",
    "checklist",
    "notes",
)


class RecordState(str, Enum):
    ACTIVE = "active"
    TRASHED = "trashed"

    @property
    def is_deleted(self) -> bool:
        return self is RecordState.TRASHED

    @classmethod
    def of(cls, record: AuthRecord) -> "RecordState":
        return cls.TRASHED if record.is_deleted else cls.ACTIVE


def _editable(fields: dict) -> dict:
    values = {name: fields.get(name) for name in EDITABLE_FIELDS}
    if not values["status"]:
        values["status"] = "Pending"
    return values


class RecordLifecycleManager:
    """
    Owns authorization records and their ACTIVE -> TRASHED -> purged lifecycle.

    Every transition is a single UPDATE/DELETE conditioned on the row's
    current state; purge only ever matches trashed rows.
    """

    async def list_active(self, db: AsyncSession) -> list[AuthRecord]:
        result = await db.execute(
            select(AuthRecord)
            .where(AuthRecord.is_deleted.is_(False))
            .order_by(AuthRecord.date_worked.desc().nulls_last(), AuthRecord.id.desc())
        )
        return list(result.scalars().all())

    async def list_trashed(self, db: AsyncSession) -> list[AuthRecord]:
        result = await db.execute(
            select(AuthRecord)
            .where(AuthRecord.is_deleted.is_(True))
            .order_by(AuthRecord.updated_at.desc(), AuthRecord.id.desc())
        )
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, record_id: int) -> AuthRecord:
        record = await db.get(AuthRecord, record_id, populate_existing=True)
        if record is None:
            raise NotFound(f"Record {record_id} not found")
        return record

    async def create(self, db: AsyncSession, fields: dict, owner_user_id: int) -> int:
        now = utc_now()
        record = AuthRecord(
            **_editable(fields),
            is_deleted=False,
            user_id=owner_user_id,
            created_at=now,
            updated_at=now,
        )
        db.add(record)
        await db.flush()
        logger.info("record_created", record_id=record.id, user_id=owner_user_id, status=record.status)
        return record.id

    async def update(self, db: AsyncSession, record_id: int, fields: dict) -> None:
        """Full-field overwrite of an active record's editable columns."""
        result = await db.execute(
            update(AuthRecord)
            .where(AuthRecord.id == record_id, AuthRecord.is_deleted.is_(False))
            .values(**_editable(fields), updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            record = await self.get(db, record_id)
            raise InvalidRecordState(record.id, "record_trashed")
        logger.info("record_updated", record_id=record_id, status=fields.get("status"))

    async def _transition(self, db: AsyncSession, record_id: int, source: RecordState, target: RecordState) -> bool:
        """Flip ``source`` -> ``target``. Returns False when the record is already in ``target``."""
        result = await db.execute(
            update(AuthRecord)
            .where(AuthRecord.id == record_id, AuthRecord.is_deleted.is_(source.is_deleted))
            .values(is_deleted=target.is_deleted, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            return True
        # Nothing matched: either no such record, or it is already in the target state.
        await self.get(db, record_id)
        return False

    async def soft_delete(self, db: AsyncSession, record_id: int) -> None:
        changed = await self._transition(db, record_id, RecordState.ACTIVE, RecordState.TRASHED)
        logger.info("record_soft_deleted", record_id=record_id, changed=changed)

    async def restore(self, db: AsyncSession, record_id: int) -> None:
        changed = await self._transition(db, record_id, RecordState.TRASHED, RecordState.ACTIVE)
        logger.info("record_restored", record_id=record_id, changed=changed)

    async def purge(self, db: AsyncSession, record_id: int) -> None:
        """Irreversibly remove a trashed record. Active records are never touched."""
        result = await db.execute(
            delete(AuthRecord)
            .where(AuthRecord.id == record_id, AuthRecord.is_deleted.is_(True))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            record = await self.get(db, record_id)
            logger.warning("record_purge_rejected", record_id=record_id, state=RecordState.of(record).value)
            raise InvalidRecordState(record.id, "record_not_trashed")
        logger.info("record_purged", record_id=record_id)


record_service = RecordLifecycleManager()
