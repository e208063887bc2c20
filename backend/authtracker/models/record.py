from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean
from authtracker.database import Base
from authtracker.time_utils import utc_now


RECORD_STATUSES = (
    "Pending",
    "Approved",
    "Denied",
    "Not Required",
    "Follow Up",
    "Cancelled",
    "Not Covered",
)


class AuthRecord(Base):
    __tablename__ = "auth_records"

    id = Column(Integer, primary_key=True, index=True)

    # Visit / patient / insurance identity
    visit_type = Column(String(100))
    insurance = Column(String(200))
    insurance_id = Column(String(100))
    patient_name = Column(String(200))
    dob = Column(String(20))
    account_number = Column(String(100))
    p_r = Column(String(50))
    doctor_name = Column(String(200))
    procedure_codes = Column(Text)
    dx_codes = Column(Text)

    # Workflow tracking
    status = Column(String(20), nullable=False, default="Pending", index=True)
    request_initiated = Column(String(20))
    insurance_portal_name = Column(String(200))
    rep_name = Column(String(200))
    phone_number = Column(String(50))
    auth_case_number = Column(String(100))
    ref_number = Column(String(100))
    date_worked = Column(String(20))
    call_time_spent = Column(String(50))
    checklist = Column(Text)  # serialized {item: bool}; opaque to the server
    notes = Column(Text)

    # Lifecycle
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    user_id = Column(Integer, index=True)  # creator; never reassigned
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now)
