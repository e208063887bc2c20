from pydantic import BaseModel, Field
from typing import Literal, Optional

Role = Literal["admin", "employee"]


class UserResponse(BaseModel):
    id: int
    username: str
    role: str

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)
    role: Role = "employee"


class UserUpdate(BaseModel):
    username: Optional[str] = Field(default=None, min_length=1, max_length=100)
    password: Optional[str] = None
    role: Optional[Role] = None


class UserCreated(BaseModel):
    success: bool = True
    id: int
