from authtracker.models.user import User
from authtracker.models.record import AuthRecord
from authtracker.models.setting import Setting

__all__ = ["User", "AuthRecord", "Setting"]
