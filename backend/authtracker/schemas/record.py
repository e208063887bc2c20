import json
from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Any, Literal, Optional

from authtracker.models.record import RECORD_STATUSES

RecordStatus = Literal[RECORD_STATUSES]


class RecordFields(BaseModel):
    """Editable columns of an authorization record (full-field payload)."""
    visit_type: Optional[str] = None
    insurance: Optional[str] = None
    insurance_id: Optional[str] = None
    patient_name: Optional[str] = None
    dob: Optional[str] = None
    account_number: Optional[str] = None
    p_r: Optional[str] = None
    doctor_name: Optional[str] = None
    procedure_codes: Optional[str] = None
    dx_codes: Optional[str] = None
    status: RecordStatus = "Pending"
    request_initiated: Optional[str] = None
    insurance_portal_name: Optional[str] = None
    rep_name: Optional[str] = None
    phone_number: Optional[str] = None
    auth_case_number: Optional[str] = None
    ref_number: Optional[str] = None
    date_worked: Optional[str] = None
    call_time_spent: Optional[str] = None
    checklist: Optional[Any] = None
    notes: Optional[str] = None

    @field_validator("checklist", mode="before")
    @classmethod
    def serialize_checklist(cls, value: Any) -> Optional[str]:
        # Mappings are serialized; strings are kept verbatim, well-formed or not.
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value)


class RecordCreate(RecordFields):
    pass


class RecordUpdate(RecordFields):
    pass


class RecordResponse(BaseModel):
    id: int
    visit_type: Optional[str] = None
    insurance: Optional[str] = None
    insurance_id: Optional[str] = None
    patient_name: Optional[str] = None
    dob: Optional[str] = None
    account_number: Optional[str] = None
    p_r: Optional[str] = None
    doctor_name: Optional[str] = None
    procedure_codes: Optional[str] = None
    dx_codes: Optional[str] = None
    status: str
    request_initiated: Optional[str] = None
    insurance_portal_name: Optional[str] = None
    rep_name: Optional[str] = None
    phone_number: Optional[str] = None
    auth_case_number: Optional[str] = None
    ref_number: Optional[str] = None
    date_worked: Optional[str] = None
    call_time_spent: Optional[str] = None
    checklist: Optional[str] = None
    notes: Optional[str] = None
    is_deleted: bool
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RecordCreated(BaseModel):
    id: int
