from pydantic import BaseModel


class RecordStats(BaseModel):
    total: int
    pending: int
    approved: int
    denied: int
    not_required: int
    follow_up: int
    cancelled: int
    not_covered: int
    submitted_today: int


class EmployeeStats(BaseModel):
    id: int
    username: str
    role: str
    today: int
    this_week: int
    this_month: int
    ytd: int
