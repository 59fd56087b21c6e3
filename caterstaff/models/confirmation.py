"""Confirmation session and request models.

A ConfirmationSession is one round of staffing requests for an event,
shared with staff through a single public link. Each ConfirmationRequest
tracks one person's answer within that round.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlmodel import Field, Relationship, SQLModel

from caterstaff.core.clock import as_utc
from caterstaff.staffing.state import (
    RequestState,
    RequestStatus,
    columns_from_state,
    state_from_columns,
)

if TYPE_CHECKING:
    from caterstaff.models.event import Event
    from caterstaff.models.team_member import TeamMember


class ConfirmationSession(SQLModel, table=True):
    """A time-boxed round of staffing requests for one event.

    Sessions are never edited after creation; sending a new round means
    opening a new session.

    Attributes:
        id: Unique identifier (UUID), also the public link token.
        event_id: Foreign key to the Event being staffed.
        created_at: When the round was opened.
        expires_at: After this instant the public link stops accepting
            answers. Always strictly after created_at.
        event: Reference to the parent Event object.
        requests: One request per person asked, plus walk-in answers.
    """
    __tablename__ = "confirmation_session"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    event_id: UUID = Field(foreign_key="event.id", index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    expires_at: datetime

    # Relationships
    event: Optional["Event"] = Relationship(back_populates="sessions")
    requests: list["ConfirmationRequest"] = Relationship(back_populates="session")

    def is_expired(self, now: datetime) -> bool:
        return as_utc(now) > as_utc(self.expires_at)


class ConfirmationRequest(SQLModel, table=True):
    """One person's invitation within a confirmation session.

    Status columns are only ever written through ``apply_state`` with a
    state produced by ``caterstaff.staffing.state.transition``, which
    keeps ``responded_at`` set exactly when the status is confirmed or
    declined.

    Attributes:
        id: Unique identifier (UUID).
        session_id: Foreign key to the parent ConfirmationSession.
        team_member_id: Person asked. None for walk-in respondents who
            answered through the public link without being in the
            directory.
        status: One of "not_contacted", "pending", "confirmed", "declined".
        sent_at: When the request was marked as sent to the person.
        responded_at: When the answer was recorded.
        responded_by: "operator" or "public", whoever recorded the answer.
        respondent_firstname: First name typed on the public page.
        respondent_lastname: Last name typed on the public page.
        created_at: When the request row was created.
        session: Reference to the parent ConfirmationSession.
        team_member: Reference to the TeamMember, if any.
    """
    __tablename__ = "confirmation_request"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    session_id: UUID = Field(foreign_key="confirmation_session.id", index=True)
    team_member_id: UUID | None = Field(default=None, foreign_key="teammember.id", index=True)
    status: str = Field(default=RequestStatus.PENDING.value, index=True)
    sent_at: datetime | None = None
    responded_at: datetime | None = None
    responded_by: str | None = None
    respondent_firstname: str | None = None
    respondent_lastname: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationships
    session: Optional["ConfirmationSession"] = Relationship(back_populates="requests")
    team_member: Optional["TeamMember"] = Relationship()

    @property
    def state(self) -> RequestState:
        return state_from_columns(
            self.status,
            as_utc(self.sent_at),
            as_utc(self.responded_at),
            self.responded_by,
        )

    def apply_state(self, state: RequestState) -> None:
        for column, value in columns_from_state(state).items():
            setattr(self, column, value)

    @property
    def display_name(self) -> str:
        """Directory name, or the name typed by a walk-in respondent."""
        if self.team_member is not None:
            return self.team_member.name
        parts = [self.respondent_firstname, self.respondent_lastname]
        return " ".join(p for p in parts if p) or "Inconnu"

    @property
    def role(self) -> str | None:
        return self.team_member.role if self.team_member is not None else None
