from sessionlog.models.user import User
from sessionlog.models.user_log import UserLog

__all__ = ["User", "UserLog"]
