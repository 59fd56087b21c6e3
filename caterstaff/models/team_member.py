"""Team member model.

Team members are the people the caterer can call on for an event.
They are referenced by confirmation requests but never owned by them.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class TeamMember(SQLModel, table=True):
    """A person in the caterer's staff directory.

    Attributes:
        id: Unique identifier (UUID).
        name: Full display name. The public confirmation page matches
            respondents against it.
        phone: Phone number used for WhatsApp links.
        role: Free-text role ("Serveuse", "Chef cuisinier", ...), mapped
            to a role key when computing gauges.
        hourly_rate: Hourly pay rate.
        skills: Free-form skill tags.
        created_at: When the member was added.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(index=True)
    phone: str | None = None
    role: str | None = None
    hourly_rate: float = Field(default=0)
    skills: list = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
