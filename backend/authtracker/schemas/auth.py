from pydantic import BaseModel, ConfigDict, Field

from authtracker.schemas.user import UserResponse


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    success: bool = True
    user: UserResponse


class MeResponse(BaseModel):
    user: UserResponse


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword", min_length=1)


class SuccessResponse(BaseModel):
    success: bool = True
