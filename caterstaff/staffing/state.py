"""Lifecycle of a single confirmation request.

A request is in exactly one of four states:

    NotContacted -> Pending(sent_at) -> Confirmed(responded_at, by)
                                     -> Declined(responded_at, by)

Both the operator screen and the public confirmation link feed commands
into ``transition()``. It is the only place that decides what happens
when a request has already been answered: the first recorded decision
wins, repeating it is a no-op, and a different later decision is
reported as a conflict and discarded.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class RequestStatus(str, Enum):
    NOT_CONTACTED = "not_contacted"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"


class Decision(str, Enum):
    CONFIRMED = "confirmed"
    DECLINED = "declined"


class Responder(str, Enum):
    OPERATOR = "operator"
    PUBLIC = "public"


class PublicOutcome(str, Enum):
    """What the public confirmation page tells the respondent."""

    CONFIRMED = "confirmed"
    DECLINED = "declined"
    ALREADY_RESPONDED = "already_responded"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"


# States


@dataclass(frozen=True)
class NotContacted:
    status = RequestStatus.NOT_CONTACTED


@dataclass(frozen=True)
class Pending:
    sent_at: datetime | None = None
    status = RequestStatus.PENDING


@dataclass(frozen=True)
class Confirmed:
    responded_at: datetime
    by: Responder
    status = RequestStatus.CONFIRMED


@dataclass(frozen=True)
class Declined:
    responded_at: datetime
    by: Responder
    status = RequestStatus.DECLINED


RequestState = NotContacted | Pending | Confirmed | Declined
Answered = Confirmed | Declined


# Commands


@dataclass(frozen=True)
class MarkSent:
    pass


@dataclass(frozen=True)
class OperatorDecision:
    decision: Decision


@dataclass(frozen=True)
class PublicAnswer:
    decision: Decision


@dataclass(frozen=True)
class Reset:
    pass


Command = MarkSent | OperatorDecision | PublicAnswer | Reset


@dataclass(frozen=True)
class Transition:
    """Result of applying a command.

    Attributes:
        state: State after the command. Equal to the input state when
            nothing changed.
        changed: True if the state must be written back.
        conflict: True if an operator decision disagreed with the
            decision already recorded.
    """

    state: RequestState
    changed: bool
    conflict: bool = False


def is_answered(state: RequestState) -> bool:
    return isinstance(state, (Confirmed, Declined))


def answered(decision: Decision, at: datetime, by: Responder) -> Answered:
    if decision == Decision.CONFIRMED:
        return Confirmed(responded_at=at, by=by)
    return Declined(responded_at=at, by=by)


def transition(state: RequestState, command: Command, now: datetime) -> Transition:
    """Apply a command to a request state."""
    if isinstance(command, Reset):
        if isinstance(state, Pending) and state.sent_at is None:
            return Transition(state, changed=False)
        return Transition(Pending(), changed=True)

    if isinstance(command, MarkSent):
        if isinstance(state, NotContacted):
            return Transition(Pending(sent_at=now), changed=True)
        if isinstance(state, Pending) and state.sent_at is None:
            return Transition(Pending(sent_at=now), changed=True)
        return Transition(state, changed=False)

    if isinstance(command, OperatorDecision):
        if is_answered(state):
            same = state.status.value == command.decision.value
            return Transition(state, changed=False, conflict=not same)
        return Transition(answered(command.decision, now, Responder.OPERATOR), changed=True)

    if isinstance(command, PublicAnswer):
        # Only a request still waiting on its answer can be answered
        # through the public link.
        if isinstance(state, Pending):
            return Transition(answered(command.decision, now, Responder.PUBLIC), changed=True)
        return Transition(state, changed=False)

    raise TypeError(f"Unknown command: {command!r}")


def state_from_columns(
    status: str,
    sent_at: datetime | None,
    responded_at: datetime | None,
    responded_by: str | None,
) -> RequestState:
    """Rebuild a state from the persisted columns of a request row."""
    status = RequestStatus(status)
    if status == RequestStatus.NOT_CONTACTED:
        return NotContacted()
    if status == RequestStatus.PENDING:
        return Pending(sent_at=sent_at)
    if responded_at is None:
        raise ValueError(f"Answered request without responded_at (status={status.value})")
    by = Responder(responded_by or Responder.OPERATOR.value)
    if status == RequestStatus.CONFIRMED:
        return Confirmed(responded_at=responded_at, by=by)
    return Declined(responded_at=responded_at, by=by)


def columns_from_state(state: RequestState) -> dict:
    """Column values for a state.

    ``sent_at`` is only included for Pending states; answering a request
    keeps the time it was sent.
    """
    if isinstance(state, NotContacted):
        return {"status": state.status.value, "responded_at": None, "responded_by": None}
    if isinstance(state, Pending):
        return {
            "status": state.status.value,
            "sent_at": state.sent_at,
            "responded_at": None,
            "responded_by": None,
        }
    return {
        "status": state.status.value,
        "responded_at": state.responded_at,
        "responded_by": state.by.value,
    }
