from pydantic import BaseModel, Field
from typing import Optional


class SettingUpdate(BaseModel):
    key: str = Field(..., min_length=1, max_length=200)
    value: Optional[str] = None
