"""Announcement and public form response models.

An Announcement is a staffing call broadcast to the whole team for an
event, with a public form link. Anyone receiving it can answer through
the form, producing FormResponse rows.
"""

from datetime import UTC, datetime
from secrets import token_urlsafe
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from caterstaff.models.event import Event


class Announcement(SQLModel, table=True):
    """A staffing call for an event.

    Attributes:
        id: Unique identifier (UUID).
        event_id: Foreign key to the Event being staffed.
        token: Unguessable token used in the public form URL.
        message_content: Message template, may contain placeholders
            such as {{date}} or {{lien_formulaire}}.
        staff_needs: Snapshot of role -> count saved with the
            announcement. Once sent it is what the gauges compare
            against, even if the computed requirement changes later.
        status: "draft" or "sent".
        sent_at: When the announcement was sent.
        created_at: When the announcement was created.
        event: Reference to the parent Event object.
        responses: Answers submitted through the public form.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    event_id: UUID = Field(foreign_key="event.id", index=True)
    token: str = Field(default_factory=lambda: token_urlsafe(16), index=True, unique=True)
    message_content: str = ""
    staff_needs: dict = Field(default_factory=dict, sa_column=Column(JSON))
    status: str = Field(default="draft")
    sent_at: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationships
    event: Optional["Event"] = Relationship(back_populates="announcements")
    responses: list["FormResponse"] = Relationship(back_populates="announcement")


class FormResponse(SQLModel, table=True):
    """An answer submitted through an announcement's public form.

    Attributes:
        id: Unique identifier (UUID).
        announcement_id: Foreign key to the Announcement answered.
        first_name: First name typed by the respondent.
        role: Role key or custom role name the respondent applied for.
        available: Whether the respondent is available.
        phone: Contact phone, required when available.
        submitted_at: When the answer was (last) submitted.
        announcement: Reference to the parent Announcement object.
    """
    __tablename__ = "form_response"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    announcement_id: UUID = Field(foreign_key="announcement.id", index=True)
    first_name: str
    role: str
    available: bool
    phone: str | None = None
    submitted_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationships
    announcement: Optional["Announcement"] = Relationship(back_populates="responses")
