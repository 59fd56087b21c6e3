"""Event model for catering engagements.

This module defines the Event model. The staffing workflow only reads
an event: guest count and type drive the requirement, date, time and
venue appear in messages sent to staff.
"""

import datetime as dt
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, Relationship, SQLModel

from caterstaff.staffing.requirements import Override, override_from_quote

if TYPE_CHECKING:
    from caterstaff.models.announcement import Announcement
    from caterstaff.models.confirmation import ConfirmationSession


class EventType(str, Enum):
    WEDDING = "wedding"
    CORPORATE = "corporate"
    PRIVATE = "private"
    OTHER = "other"


class EventStatus(str, Enum):
    PROSPECT = "prospect"
    QUOTE_SENT = "quote_sent"
    APPOINTMENT = "appointment"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Event(SQLModel, table=True):
    """A catering event that needs staff.

    Attributes:
        id: Unique identifier (UUID).
        name: Display name, e.g. "Mariage Dupont".
        date: Day of the event.
        time: Free-text time of day ("19h - 2h"), if known.
        venue: Where the event takes place, if known.
        guest_count: Number of guests, never negative.
        event_type: Free-text type. Usually one of the EventType values,
            but French labels such as "Anniversaire 50 ans" are accepted
            and matched by the requirement calculator.
        status: Commercial lifecycle status (EventStatus value).
        staff_servers: Headcount entered by hand on the quote, if any.
        staff_chefs: Same, for chefs.
        staff_bartenders: Same, for bartenders.
        staff_head_waiter: Same, for the head waiter.
        custom_roles: Extra roles entered by the operator (name -> count).
        created_at: When the event was recorded.
        sessions: Confirmation rounds opened for this event.
        announcements: Staffing announcements broadcast for this event.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    date: dt.date
    time: str | None = None
    venue: str | None = None
    guest_count: int = Field(default=0, ge=0)
    event_type: str = Field(default=EventType.OTHER.value)
    status: str = Field(default=EventStatus.PROSPECT.value, index=True)

    staff_servers: int | None = None
    staff_chefs: int | None = None
    staff_bartenders: int | None = None
    staff_head_waiter: int | None = None
    custom_roles: dict = Field(default_factory=dict, sa_column=Column(JSON))

    created_at: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.UTC))

    # Relationships
    sessions: list["ConfirmationSession"] = Relationship(back_populates="event")
    announcements: list["Announcement"] = Relationship(back_populates="event")

    @property
    def staffing_override(self) -> Override:
        """Manual headcount from the quote, or None when not entered."""
        return override_from_quote(
            self.staff_servers,
            self.staff_chefs,
            self.staff_bartenders,
            self.staff_head_waiter,
        )
