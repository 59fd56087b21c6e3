"""Operator notification model."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class Notification(SQLModel, table=True):
    """A message shown in the operator's notification list.

    Attributes:
        id: Unique identifier (UUID).
        account_id: Account the notification is for.
        type: Kind of notification, e.g. "pending_confirmations".
        message: Text shown to the operator.
        action_url: Page the notification links to.
        source_id: Entity the notification is about (a session id for
            pending confirmation reminders), used to avoid duplicates.
        read: Whether the operator has dismissed it.
        created_at: When it was raised.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    account_id: int = Field(default=1, index=True)
    type: str
    message: str
    action_url: str | None = None
    source_id: UUID | None = Field(default=None, index=True)
    read: bool = Field(default=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
