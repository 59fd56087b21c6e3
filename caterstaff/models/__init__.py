from caterstaff.models.announcement import Announcement, FormResponse
from caterstaff.models.confirmation import ConfirmationRequest, ConfirmationSession
from caterstaff.models.event import Event, EventStatus, EventType
from caterstaff.models.notification import Notification
from caterstaff.models.settings import StaffRatioSettings
from caterstaff.models.team_member import TeamMember

__all__ = [
    "Announcement",
    "ConfirmationRequest",
    "ConfirmationSession",
    "Event",
    "EventStatus",
    "EventType",
    "FormResponse",
    "Notification",
    "StaffRatioSettings",
    "TeamMember",
]
