"""Operator reminders for confirmation requests left unanswered."""
import logging
from datetime import timedelta

from sqlmodel import Session, select

from caterstaff.core.clock import Clock
from caterstaff.models import ConfirmationRequest, ConfirmationSession, Notification
from caterstaff.staffing.state import RequestStatus

logger = logging.getLogger(__name__)

NOTIFICATION_TYPE = "pending_confirmations"


def reminder_text(pending_count: int, event_name: str) -> str:
    if pending_count > 1:
        return f'{pending_count} personnes n\'ont pas encore répondu pour "{event_name}"'
    return f'1 personne n\'a pas encore répondu pour "{event_name}"'


def create_pending_reminders(
    session: Session,
    clock: Clock,
    delay_hours: int,
    account_id: int = 1,
) -> int:
    """Notify the operator about sessions with requests pending too long.

    One notification per session, counting its requests still pending
    after ``delay_hours``. A session is only ever notified once; expired
    sessions are skipped since nobody can answer them any more.

    Returns the number of notifications created.
    """
    now = clock.now()
    cutoff = now - timedelta(hours=delay_hours)

    pending = session.exec(
        select(ConfirmationRequest)
        .where(ConfirmationRequest.status == RequestStatus.PENDING.value)
        .where(ConfirmationRequest.created_at < cutoff)
    ).all()

    by_session: dict = {}
    for request in pending:
        by_session.setdefault(request.session_id, []).append(request)

    already_notified = set(
        session.exec(
            select(Notification.source_id)
            .where(Notification.type == NOTIFICATION_TYPE)
            .where(Notification.source_id.in_(list(by_session)))
        ).all()
    ) if by_session else set()

    created = 0
    for session_id, requests in by_session.items():
        if session_id in already_notified:
            continue
        confirmation_session = session.get(ConfirmationSession, session_id)
        if confirmation_session is None or confirmation_session.is_expired(now):
            continue
        event = confirmation_session.event
        session.add(
            Notification(
                account_id=account_id,
                type=NOTIFICATION_TYPE,
                message=reminder_text(len(requests), event.name if event else "un événement"),
                action_url=f"/events/{confirmation_session.event_id}/staffing",
                source_id=session_id,
                created_at=now,
            )
        )
        created += 1

    if created:
        session.commit()
    logger.info(f"Pending confirmation check: {created} notification(s) created")
    return created
