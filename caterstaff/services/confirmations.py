"""Confirmation sessions and the answers recorded against them.

All status changes go through ``caterstaff.staffing.state.transition``
and are written with a conditional UPDATE guarded on the status that
was read. If another writer got there first (the operator clicking
"refused" while the person is submitting the public form), the update
matches no row, the request is re-read and the command is evaluated
again against what is now stored. The first recorded answer therefore
always wins and retries never double-apply.
"""
import logging
from collections.abc import Iterable
from datetime import timedelta
from uuid import UUID

from sqlalchemy import update
from sqlmodel import Session, select

from caterstaff.core.clock import Clock, as_utc
from caterstaff.core.config import settings
from caterstaff.models import ConfirmationRequest, ConfirmationSession, Event, TeamMember
from caterstaff.staffing.errors import (
    Expired,
    InvalidTransition,
    NotFound,
    StaffingError,
    ValidationError,
)
from caterstaff.staffing.state import (
    Command,
    Decision,
    MarkSent,
    OperatorDecision,
    Pending,
    PublicAnswer,
    PublicOutcome,
    RequestState,
    RequestStatus,
    Reset,
    Responder,
    Transition,
    answered,
    columns_from_state,
    transition,
)

logger = logging.getLogger(__name__)

# Attempts at a conditional write before giving up on a contended request
MAX_WRITE_ATTEMPTS = 3


def create_session(
    session: Session,
    event_id: UUID,
    team_member_ids: Iterable[UUID],
    clock: Clock,
    window_days: int | None = None,
) -> ConfirmationSession:
    """Open a confirmation round for an event.

    One pending request is created per team member. The session and its
    requests are committed together; on any failure nothing is kept.
    """
    member_ids = list(dict.fromkeys(team_member_ids))
    if not member_ids:
        raise ValidationError("At least one team member is required")

    window = settings.confirmation_window_days if window_days is None else window_days
    if window <= 0:
        raise ValidationError(f"Confirmation window must be positive, got {window} days")

    if session.get(Event, event_id) is None:
        raise NotFound(f"Event {event_id} not found")

    found = set(
        session.exec(select(TeamMember.id).where(TeamMember.id.in_(member_ids))).all()
    )
    unknown = [str(member_id) for member_id in member_ids if member_id not in found]
    if unknown:
        raise NotFound(f"Team members not found: {', '.join(unknown)}")

    now = clock.now()
    confirmation_session = ConfirmationSession(
        event_id=event_id,
        created_at=now,
        expires_at=now + timedelta(days=window),
    )
    try:
        session.add(confirmation_session)
        for member_id in member_ids:
            session.add(
                ConfirmationRequest(
                    session_id=confirmation_session.id,
                    team_member_id=member_id,
                    status=RequestStatus.PENDING.value,
                    created_at=now,
                )
            )
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Failed to create confirmation session for event {event_id}: {e}")
        raise

    session.refresh(confirmation_session)
    logger.info(
        f"Confirmation session {confirmation_session.id} opened for event {event_id} "
        f"with {len(member_ids)} requests"
    )
    return confirmation_session


def get_open_session(session: Session, session_id: UUID, clock: Clock) -> ConfirmationSession:
    """Session that still accepts public answers."""
    confirmation_session = session.get(ConfirmationSession, session_id)
    if confirmation_session is None:
        raise NotFound(f"Confirmation session {session_id} not found")
    if confirmation_session.is_expired(clock.now()):
        raise Expired(f"Confirmation session {session_id} expired")
    return confirmation_session


def get_request(session: Session, request_id: UUID) -> ConfirmationRequest:
    request = session.get(ConfirmationRequest, request_id)
    if request is None:
        raise NotFound(f"Confirmation request {request_id} not found")
    return request


def _compare_and_set(
    session: Session,
    request: ConfirmationRequest,
    expected: RequestState,
    new: RequestState,
    extra_values: dict | None = None,
) -> bool:
    """Write ``new`` only if the stored row still holds ``expected``."""
    statement = (
        update(ConfirmationRequest)
        .where(ConfirmationRequest.id == request.id)
        .where(ConfirmationRequest.status == expected.status.value)
    )
    if isinstance(expected, Pending) and expected.sent_at is None:
        statement = statement.where(ConfirmationRequest.sent_at.is_(None))

    values = columns_from_state(new)
    values.update(extra_values or {})
    result = session.exec(statement.values(**values))
    session.commit()
    return result.rowcount == 1


def _apply(
    session: Session,
    request: ConfirmationRequest,
    command: Command,
    clock: Clock,
    extra_values: dict | None = None,
) -> Transition:
    """Run a command against a request and persist the result."""
    for _ in range(MAX_WRITE_ATTEMPTS):
        current = request.state
        result = transition(current, command, clock.now())
        if not result.changed:
            return result
        if _compare_and_set(session, request, current, result.state, extra_values):
            session.refresh(request)
            return result
        logger.info(f"Request {request.id} changed concurrently, re-evaluating")
        session.refresh(request)
    raise StaffingError(f"Could not update request {request.id}: too many concurrent writes")


def mark_sent(session: Session, request_id: UUID, clock: Clock) -> ConfirmationRequest:
    """Record that the request was sent. No-op if already sent or answered."""
    request = get_request(session, request_id)
    result = _apply(session, request, MarkSent(), clock)
    if result.changed:
        logger.info(f"Request {request_id} marked as sent")
    return request


def record_operator_decision(
    session: Session,
    request_id: UUID,
    decision: Decision,
    clock: Clock,
) -> ConfirmationRequest:
    """Record a decision entered by the operator.

    Allowed whether or not the session has expired. Repeating the
    decision already stored is a no-op that keeps the original
    responded_at. A different decision on an answered request raises
    InvalidTransition and leaves the stored decision untouched.
    """
    request = get_request(session, request_id)
    result = _apply(session, request, OperatorDecision(Decision(decision)), clock)
    if result.conflict:
        logger.warning(
            f"Ignored '{Decision(decision).value}' for request {request_id}: "
            f"already {request.status}"
        )
        raise InvalidTransition(
            f"Request already answered '{request.status}'", current_status=request.status
        )
    if result.changed:
        logger.info(f"Request {request_id} set to {request.status} by operator")
    return request


def reset_request(session: Session, request_id: UUID, clock: Clock) -> ConfirmationRequest:
    """Put a request back to pending, discarding any answer."""
    request = get_request(session, request_id)
    result = _apply(session, request, Reset(), clock)
    if result.changed:
        logger.info(f"Request {request_id} reset to pending")
    return request


def _name_matches(member_name: str, first_name: str, last_name: str) -> bool:
    name = member_name.lower()
    return first_name.lower() in name or last_name.lower() in name


def find_matching_request(
    requests: Iterable[ConfirmationRequest], first_name: str, last_name: str
) -> ConfirmationRequest | None:
    """Directory request a public respondent most likely is.

    A member whose name contains either typed name matches. Members
    containing both names are preferred, then creation order.
    """
    candidates = [
        request
        for request in requests
        if request.team_member is not None
        and _name_matches(request.team_member.name, first_name, last_name)
    ]
    if not candidates:
        return None

    def rank(request: ConfirmationRequest):
        name = request.team_member.name.lower()
        full = first_name.lower() in name and last_name.lower() in name
        return (0 if full else 1, as_utc(request.created_at), str(request.id))

    return min(candidates, key=rank)


def _find_walk_in(
    requests: Iterable[ConfirmationRequest], first_name: str, last_name: str
) -> ConfirmationRequest | None:
    for request in requests:
        if request.team_member_id is not None:
            continue
        if (
            (request.respondent_firstname or "").lower() == first_name.lower()
            and (request.respondent_lastname or "").lower() == last_name.lower()
        ):
            return request
    return None


def record_public_response(
    session: Session,
    session_id: UUID,
    first_name: str,
    last_name: str,
    decision: Decision,
    clock: Clock,
) -> PublicOutcome:
    """Record an answer submitted through the public confirmation link.

    Unknown and expired sessions are reported before the names are
    validated or matched. An unmatched respondent
    is recorded as a new walk-in request, directly answered.
    """
    confirmation_session = session.get(ConfirmationSession, session_id)
    if confirmation_session is None:
        return PublicOutcome.NOT_FOUND

    now = clock.now()
    if confirmation_session.is_expired(now):
        logger.info(f"Answer rejected, session {session_id} expired")
        return PublicOutcome.EXPIRED

    first_name = (first_name or "").strip()
    last_name = (last_name or "").strip()
    if not first_name or not last_name:
        raise ValidationError("First name and last name are required")
    decision = Decision(decision)

    requests = confirmation_session.requests
    respondent = {"respondent_firstname": first_name, "respondent_lastname": last_name}
    answer_outcome = (
        PublicOutcome.CONFIRMED if decision == Decision.CONFIRMED else PublicOutcome.DECLINED
    )

    match = find_matching_request(requests, first_name, last_name)
    if match is not None:
        result = _apply(session, match, PublicAnswer(decision), clock, extra_values=respondent)
        if not result.changed:
            return PublicOutcome.ALREADY_RESPONDED
        logger.info(f"Request {match.id} answered '{decision.value}' through public link")
        return answer_outcome

    if _find_walk_in(requests, first_name, last_name) is not None:
        return PublicOutcome.ALREADY_RESPONDED

    walk_in = ConfirmationRequest(
        session_id=confirmation_session.id,
        team_member_id=None,
        created_at=now,
        **respondent,
    )
    walk_in.apply_state(answered(decision, now, Responder.PUBLIC))
    session.add(walk_in)
    session.commit()
    logger.info(
        f"Walk-in answer '{decision.value}' recorded for session {session_id} "
        f"({first_name} {last_name})"
    )
    return answer_outcome


def list_event_requests(session: Session, event_id: UUID) -> list[ConfirmationRequest]:
    """Every request of every session opened for the event, oldest first."""
    statement = (
        select(ConfirmationRequest)
        .join(ConfirmationSession)
        .where(ConfirmationSession.event_id == event_id)
        .order_by(ConfirmationSession.created_at, ConfirmationRequest.created_at)
    )
    return list(session.exec(statement).all())


def current_requests(requests: Iterable[ConfirmationRequest]) -> list[ConfirmationRequest]:
    """Latest request per team member; walk-in requests are all kept.

    A member asked again in a newer session is only counted once, with
    the request from the most recent session.
    """
    latest: dict = {}
    walk_ins = []
    for request in requests:
        if request.team_member_id is None:
            walk_ins.append(request)
            continue
        previous = latest.get(request.team_member_id)
        if previous is None or _recency(request) >= _recency(previous):
            latest[request.team_member_id] = request
    return list(latest.values()) + walk_ins


def _recency(request: ConfirmationRequest):
    return (as_utc(request.session.created_at), as_utc(request.created_at))
