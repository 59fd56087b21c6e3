"""Staffing announcements and the public availability form.

An announcement is the "we need people" message broadcast to the whole
team. It carries a snapshot of the staff needs taken when it was saved,
and a public form where anyone can say whether they are available.
"""
import logging
import re
from uuid import UUID

from sqlmodel import Session, func, select

from caterstaff.core.clock import Clock, as_utc
from caterstaff.core.config import settings
from caterstaff.models import Announcement, Event, FormResponse
from caterstaff.staffing.errors import NotFound, ValidationError
from caterstaff.staffing.escalation import format_event_date, role_shortfall_messages
from caterstaff.staffing.roles import RoleKey, is_standard_role
from caterstaff.staffing.roster import RosterSummary, StaffingRow, aggregate_roster
from caterstaff.staffing.state import RequestStatus

logger = logging.getLogger(__name__)

STATUS_SENT = "sent"

ANNOUNCEMENT_ROLE_LABELS = {
    RoleKey.SERVERS.value: "Serveurs",
    RoleKey.CHEFS.value: "Chefs",
    RoleKey.BARTENDERS.value: "Barmans",
    RoleKey.HEAD_WAITER.value: "Maître d'hôtel",
}

EVENT_TYPE_LABELS = {
    "wedding": "Mariage",
    "mariage": "Mariage",
    "corporate": "Corporate",
    "birthday": "Anniversaire",
    "anniversaire": "Anniversaire",
    "private": "Réception privée",
    "other": "Événement",
}

PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def form_url(announcement: Announcement) -> str:
    return f"{settings.public_base_url.rstrip('/')}/repondre/{announcement.token}"


def default_message(staff_needs: dict[str, int]) -> str:
    """Template used until the operator writes their own."""
    wanted = "\n".join(
        f"• {count} {ANNOUNCEMENT_ROLE_LABELS.get(role, role)}"
        for role, count in staff_needs.items()
        if count > 0
    )
    return (
        "👋 Bonjour l'équipe !\n\n"
        "Nous avons besoin de personnel pour :\n"
        "📅 {{date}}\n"
        "📍 {{lieu}}\n"
        "⏰ {{horaire}}\n"
        "👥 {{convives}} convives\n\n"
        f"Postes recherchés :\n{wanted}\n\n"
        "👇 Cliquez ici pour confirmer votre disponibilité :\n"
        "{{lien_formulaire}}"
    )


def resolve_message(text: str, event: Event, link: str) -> str:
    """Fill the {{...}} placeholders of a message. Unknown ones are kept."""
    values = {
        "date": format_event_date(event.date),
        "lieu": event.venue or "Lieu à confirmer",
        "type": EVENT_TYPE_LABELS.get((event.event_type or "").lower(), event.event_type or ""),
        "horaire": event.time or "À confirmer",
        "convives": str(event.guest_count or 0),
        "lien_formulaire": link,
    }
    return PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), text)


def latest_announcement(session: Session, event_id: UUID) -> Announcement | None:
    statement = (
        select(Announcement)
        .where(Announcement.event_id == event_id)
        .order_by(Announcement.created_at.desc())
    )
    return session.exec(statement).first()


def _clean_needs(staff_needs: dict[str, int]) -> dict[str, int]:
    cleaned = {}
    for role, count in staff_needs.items():
        role = role.strip()
        if role:
            cleaned[role] = max(0, int(count))
    return cleaned


def save_announcement(
    session: Session,
    event: Event,
    staff_needs: dict[str, int],
    clock: Clock,
    message: str | None = None,
    send: bool = False,
) -> Announcement:
    """Create or update the event's announcement.

    Saving never un-sends an announcement. Sending stamps sent_at with
    the current time, so follow-ups restart from the latest send.
    """
    needs = _clean_needs(staff_needs)
    announcement = latest_announcement(session, event.id)
    now = clock.now()
    if announcement is None:
        announcement = Announcement(event_id=event.id, created_at=now)

    announcement.staff_needs = needs
    announcement.message_content = message if message else (
        announcement.message_content or default_message(needs)
    )
    if send:
        announcement.status = STATUS_SENT
        announcement.sent_at = now

    session.add(announcement)
    session.commit()
    session.refresh(announcement)
    logger.info(
        f"Announcement {announcement.id} for event {event.id} saved "
        f"({announcement.status}, {sum(needs.values())} people needed)"
    )
    return announcement


def get_by_token(session: Session, token: str) -> Announcement:
    announcement = session.exec(select(Announcement).where(Announcement.token == token)).first()
    if announcement is None:
        raise NotFound("Announcement not found")
    return announcement


def open_roles(announcement: Announcement) -> list[str]:
    return [role for role, count in (announcement.staff_needs or {}).items() if count > 0]


def submit_form_response(
    session: Session,
    token: str,
    first_name: str,
    role: str,
    available: bool,
    clock: Clock,
    phone: str | None = None,
) -> FormResponse:
    """Record an answer from the public form.

    A second answer with the same first name and role replaces the
    first one instead of counting the person twice.
    """
    announcement = get_by_token(session, token)

    first_name = (first_name or "").strip()
    role = (role or "").strip()
    phone = (phone or "").strip() or None
    if not first_name:
        raise ValidationError("First name is required")
    if not role:
        raise ValidationError("Role is required")
    roles = open_roles(announcement)
    if roles and role not in roles:
        raise ValidationError(f"Unknown role: {role}")
    if available and not phone:
        raise ValidationError("Phone is required when available")

    existing = session.exec(
        select(FormResponse)
        .where(FormResponse.announcement_id == announcement.id)
        .where(func.lower(FormResponse.first_name) == first_name.lower())
        .where(FormResponse.role == role)
    ).first()

    now = clock.now()
    if existing is not None:
        existing.available = available
        existing.phone = phone
        existing.submitted_at = now
        response = existing
    else:
        response = FormResponse(
            announcement_id=announcement.id,
            first_name=first_name,
            role=role,
            available=available,
            phone=phone,
            submitted_at=now,
        )
    session.add(response)
    session.commit()
    session.refresh(response)
    logger.info(
        f"Form response for announcement {announcement.id}: {first_name} / {role} "
        f"({'available' if available else 'unavailable'})"
    )
    return response


def announcement_roster(announcement: Announcement) -> RosterSummary:
    """Gauges against the saved snapshot, counting available answers."""
    rows = [
        StaffingRow(
            role=response.role,
            status=RequestStatus.CONFIRMED if response.available else RequestStatus.DECLINED,
            name=response.first_name,
        )
        for response in announcement.responses
    ]
    return aggregate_roster(announcement.staff_needs or {}, rows)


def announcement_tracking(announcement: Announcement, clock: Clock) -> dict:
    """Tracking view of a sent announcement: gauges, answers and follow-ups."""
    event = announcement.event
    roster = announcement_roster(announcement)
    follow_ups = []
    if announcement.status == STATUS_SENT and announcement.sent_at is not None:
        follow_ups = role_shortfall_messages(
            roster,
            as_utc(announcement.sent_at),
            clock.now(),
            event.date,
            form_url(announcement),
        )
    return {
        "id": str(announcement.id),
        "status": announcement.status,
        "sent_at": as_utc(announcement.sent_at).isoformat() if announcement.sent_at else None,
        "form_url": form_url(announcement),
        "staff_needs": announcement.staff_needs,
        "message": resolve_message(announcement.message_content, event, form_url(announcement)),
        "roster": roster.to_dict(),
        "responses": [
            {
                "first_name": response.first_name,
                "role": response.role,
                "available": response.available,
                "phone": response.phone,
                "submitted_at": as_utc(response.submitted_at).isoformat(),
            }
            for response in sorted(
                announcement.responses, key=lambda r: as_utc(r.submitted_at), reverse=True
            )
        ],
        "follow_ups": follow_ups,
    }


def role_display(role: str) -> str:
    if is_standard_role(role):
        return ANNOUNCEMENT_ROLE_LABELS[role]
    return role
