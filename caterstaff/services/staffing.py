"""Staffing overview for an event.

Pulls together the requirement, the roster gauges, follow-up messages,
replacement suggestions and date conflicts shown on the event staffing
screen.
"""
from datetime import datetime
from uuid import UUID

from sqlmodel import Session, select

from caterstaff.core.clock import Clock, as_utc
from caterstaff.core.config import settings
from caterstaff.models import ConfirmationRequest, ConfirmationSession, Event, TeamMember
from caterstaff.services.confirmations import current_requests, list_event_requests
from caterstaff.services.ratio_settings import get_ratio_settings
from caterstaff.staffing.escalation import (
    TIER_LABELS,
    escalation_tier,
    format_event_date,
    hours_since,
    member_reminder_message,
    role_shortfall_messages,
    whatsapp_link,
)
from caterstaff.staffing.reliability import RequestRecord, compute_member_stats, rank_replacements
from caterstaff.staffing.requirements import (
    StaffRequirement,
    calculate_staff_needs,
    merge_custom_roles,
)
from caterstaff.staffing.roster import RosterSummary, StaffingRow, aggregate_roster
from caterstaff.staffing.state import RequestStatus

RELIABILITY_WINDOW_MONTHS = 3


def event_requirement(session: Session, event: Event) -> StaffRequirement:
    """Headcount needed per role, including the event's custom roles."""
    ratio_settings = get_ratio_settings(session, settings.account_id)
    requirement = calculate_staff_needs(
        event.guest_count,
        event.event_type,
        ratio_settings,
        event.staffing_override,
    )
    return merge_custom_roles(requirement, event.custom_roles)


def staffing_rows(requests: list[ConfirmationRequest]) -> list[StaffingRow]:
    return [
        StaffingRow(role=request.role, status=RequestStatus(request.status), name=request.display_name)
        for request in requests
    ]


def event_roster(session: Session, event: Event) -> tuple[StaffRequirement, RosterSummary]:
    requirement = event_requirement(session, event)
    requests = current_requests(list_event_requests(session, event.id))
    return requirement, aggregate_roster(requirement, staffing_rows(requests))


def confirmation_link(session_id: UUID) -> str:
    return f"{settings.public_base_url.rstrip('/')}/confirm/{session_id}"


def latest_session(session: Session, event_id: UUID) -> ConfirmationSession | None:
    statement = (
        select(ConfirmationSession)
        .where(ConfirmationSession.event_id == event_id)
        .order_by(ConfirmationSession.created_at.desc())
    )
    return session.exec(statement).first()


def _round_sent_at(confirmation_session: ConfirmationSession) -> datetime:
    """When the round went out: earliest sent request, else session creation."""
    sent = [as_utc(r.sent_at) for r in confirmation_session.requests if r.sent_at is not None]
    return min(sent) if sent else as_utc(confirmation_session.created_at)


def pending_follow_ups(requests: list[ConfirmationRequest], event: Event, now: datetime) -> list[dict]:
    """Per-person reminders for requests still waiting on an answer."""
    follow_ups = []
    for request in requests:
        if request.status != RequestStatus.PENDING.value:
            continue
        hours = hours_since(request.sent_at, now)
        tier = escalation_tier(hours)
        member = request.team_member
        message = member_reminder_message(request.display_name, event.name, hours)
        follow_ups.append({
            "request_id": str(request.id),
            "name": request.display_name,
            "role": request.role,
            "phone": member.phone if member else None,
            "hours_since_sent": hours,
            "tier": tier.value,
            "tier_label": TIER_LABELS[tier],
            "message": message,
            "whatsapp_url": whatsapp_link(member.phone if member else None, message),
        })
    return follow_ups


def _months_ago(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, 28)
    return moment.replace(year=year, month=month, day=day)


def team_stats(session: Session, clock: Clock) -> dict:
    """Reliability stats per team member over the last three months."""
    now = clock.now()
    since = _months_ago(now, RELIABILITY_WINDOW_MONTHS)
    statement = (
        select(ConfirmationRequest)
        .where(ConfirmationRequest.team_member_id.is_not(None))
        .where(ConfirmationRequest.created_at >= since)
    )
    records = [
        RequestRecord(
            team_member_id=request.team_member_id,
            status=RequestStatus(request.status),
            created_at=request.created_at,
            sent_at=request.sent_at,
            responded_at=request.responded_at,
        )
        for request in session.exec(statement).all()
    ]
    return compute_member_stats(records, now)


def replacement_suggestions(
    session: Session,
    requests: list[ConfirmationRequest],
    stats: dict,
    now: datetime,
    auto_replace_after_hours: int,
) -> list[dict]:
    """Replacements for people who declined or left a request unanswered too long."""
    asked = {request.team_member_id for request in requests if request.team_member_id}
    members = session.exec(select(TeamMember)).all()
    suggestions = []
    for request in requests:
        if request.team_member is None:
            continue
        declined = request.status == RequestStatus.DECLINED.value
        overdue = (
            request.status == RequestStatus.PENDING.value
            and request.sent_at is not None
            and hours_since(request.sent_at, now) >= auto_replace_after_hours
        )
        if not (declined or overdue):
            continue
        candidates = rank_replacements(request.role, members, asked, stats)
        if not candidates:
            continue
        suggestions.append({
            "request_id": str(request.id),
            "replacing": request.display_name,
            "reason": "declined" if declined else "no_answer",
            "role": request.role,
            "candidates": [
                {"id": str(member.id), "name": member.name, "role": member.role,
                 **(stats[member.id].to_dict() if member.id in stats else {})}
                for member in candidates
            ],
        })
    return suggestions


def date_conflicts(session: Session, event: Event) -> list[dict]:
    """Team members already confirmed on another event the same day."""
    statement = (
        select(ConfirmationRequest, Event)
        .join(ConfirmationSession, ConfirmationRequest.session_id == ConfirmationSession.id)
        .join(Event, ConfirmationSession.event_id == Event.id)
        .where(Event.date == event.date)
        .where(Event.id != event.id)
        .where(ConfirmationRequest.status == RequestStatus.CONFIRMED.value)
        .where(ConfirmationRequest.team_member_id.is_not(None))
    )
    return [
        {
            "team_member_id": str(request.team_member_id),
            "name": request.display_name,
            "event_id": str(other.id),
            "event_name": other.name,
        }
        for request, other in session.exec(statement).all()
    ]


def staffing_overview(session: Session, event: Event, clock: Clock) -> dict:
    """Everything the staffing screen shows for one event."""
    now = clock.now()
    requirement = event_requirement(session, event)
    requests = current_requests(list_event_requests(session, event.id))
    roster = aggregate_roster(requirement, staffing_rows(requests))

    round_session = latest_session(session, event.id)
    role_follow_ups = []
    if round_session is not None:
        role_follow_ups = role_shortfall_messages(
            roster,
            _round_sent_at(round_session),
            now,
            event.date,
            confirmation_link(round_session.id),
        )

    ratio_settings = get_ratio_settings(session, settings.account_id)
    stats = team_stats(session, clock)

    return {
        "event_id": str(event.id),
        "requirement": requirement,
        "roster": roster.to_dict(),
        "session": (
            {
                "id": str(round_session.id),
                "link": confirmation_link(round_session.id),
                "expires_at": as_utc(round_session.expires_at).isoformat(),
                "expired": round_session.is_expired(now),
            }
            if round_session is not None
            else None
        ),
        "requests": [
            {
                "id": str(request.id),
                "name": request.display_name,
                "role": request.role,
                "status": request.status,
                "walk_in": request.team_member_id is None,
                "sent_at": as_utc(request.sent_at).isoformat() if request.sent_at else None,
                "responded_at": (
                    as_utc(request.responded_at).isoformat() if request.responded_at else None
                ),
            }
            for request in requests
        ],
        "role_follow_ups": role_follow_ups,
        "member_follow_ups": pending_follow_ups(requests, event, now),
        "replacements": replacement_suggestions(
            session, requests, stats, now, ratio_settings.auto_replace_after_hours
        ),
        "conflicts": date_conflicts(session, event),
    }


def invitation_message(event: Event, link: str) -> str:
    """Message sent to the team when a confirmation round opens."""
    return (
        "Bonjour l'équipe 👋\n\n"
        "Nous recherchons du personnel pour :\n"
        f"📅 {format_event_date(event.date)}\n"
        f"📍 {event.venue or 'Lieu à confirmer'}\n"
        f"🍽️ {event.name}\n\n"
        "Confirmez votre disponibilité ici (2 secondes) :\n"
        f"👉 {link}\n\n"
        "Merci !"
    )
