from .status_history import StatusHistory
from .latest_status import LatestStatus
from .user_profile import UserProfile
from .activity import Activity
from .status_template import StatusTemplate

__all__ = [
    "StatusHistory",
    "LatestStatus",
    "UserProfile",
    "Activity",
    "StatusTemplate",
]
