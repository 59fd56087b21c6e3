"""Public pages answered by staff, without login.

``/confirm/{session_id}`` is the link shared when a confirmation round
opens. ``/repondre/{token}`` is the availability form of an
announcement. Both answer with plain pages whatever happens, never
with an error payload.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from sqlmodel import Session

from caterstaff.core.clock import Clock, get_clock
from caterstaff.core.database import get_session
from caterstaff.models import ConfirmationSession
from caterstaff.routes.utils import templates
from caterstaff.services.announcements import (
    get_by_token,
    open_roles,
    role_display,
    submit_form_response,
)
from caterstaff.services.confirmations import get_open_session, record_public_response
from caterstaff.staffing.errors import Expired, NotFound, ValidationError
from caterstaff.staffing.escalation import format_event_date
from caterstaff.staffing.state import Decision, PublicOutcome

router = APIRouter(tags=["public"])

OUTCOME_PAGES = {
    PublicOutcome.NOT_FOUND: (
        "Lien invalide",
        "Ce lien de confirmation n'existe pas ou a été supprimé.",
    ),
    PublicOutcome.EXPIRED: (
        "Lien expiré",
        "Ce lien n'est plus valide. Contactez directement l'organisateur.",
    ),
    PublicOutcome.ALREADY_RESPONDED: (
        "Déjà répondu",
        "Vous avez déjà répondu à cette demande. Merci !",
    ),
    PublicOutcome.CONFIRMED: (
        "Parfait {first_name} !",
        "L'organisateur a été notifié. À bientôt !",
    ),
    PublicOutcome.DECLINED: (
        "Pas de problème {first_name} !",
        "Merci d'avoir répondu !",
    ),
}

AVAILABILITY_CHOICES = {"true": True, "false": False}

OUTCOME_STATUS_CODES = {
    PublicOutcome.NOT_FOUND: 404,
    PublicOutcome.EXPIRED: 410,
}


def _parse_session_id(session_id: str) -> UUID | None:
    try:
        return UUID(session_id)
    except ValueError:
        return None


def _parse_decision(value: str) -> Decision | None:
    try:
        return Decision(value)
    except ValueError:
        return None


def _outcome_page(request: Request, outcome: PublicOutcome, first_name: str = ""):
    title, text = OUTCOME_PAGES[outcome]
    return templates.TemplateResponse(
        request,
        "confirm_outcome.html",
        {
            "outcome": outcome.value,
            "title": title.format(first_name=first_name),
            "text": text,
        },
        status_code=OUTCOME_STATUS_CODES.get(outcome, 200),
    )


def _confirm_form(
    request: Request,
    confirmation_session: ConfirmationSession,
    error: str | None = None,
    first_name: str = "",
    last_name: str = "",
    status_code: int = 200,
):
    event = confirmation_session.event
    return templates.TemplateResponse(
        request,
        "confirm.html",
        {
            "event": event,
            "event_date": format_event_date(event.date),
            "session_id": confirmation_session.id,
            "error": error,
            "first_name": first_name,
            "last_name": last_name,
        },
        status_code=status_code,
    )


@router.get("/confirm/{session_id}", response_class=HTMLResponse)
async def confirm_page(
    session_id: str,
    request: Request,
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """Confirmation page for a round, or why it can no longer be answered."""
    parsed = _parse_session_id(session_id)
    if parsed is None:
        return _outcome_page(request, PublicOutcome.NOT_FOUND)
    try:
        confirmation_session = get_open_session(session, parsed, clock)
    except NotFound:
        return _outcome_page(request, PublicOutcome.NOT_FOUND)
    except Expired:
        return _outcome_page(request, PublicOutcome.EXPIRED)
    return _confirm_form(request, confirmation_session)


@router.post("/confirm/{session_id}", response_class=HTMLResponse)
async def confirm_submit(
    session_id: str,
    request: Request,
    first_name: str = Form(""),
    last_name: str = Form(""),
    decision: str = Form(""),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    Record an answer from the public confirmation page.

    Blank names or a missing answer re-display the form. Any other case
    ends on one of the canned outcome pages.
    """
    parsed = _parse_session_id(session_id)
    if parsed is None:
        return _outcome_page(request, PublicOutcome.NOT_FOUND)

    try:
        confirmation_session = get_open_session(session, parsed, clock)
    except NotFound:
        return _outcome_page(request, PublicOutcome.NOT_FOUND)
    except Expired:
        return _outcome_page(request, PublicOutcome.EXPIRED)

    answer = _parse_decision(decision)
    if answer is None:
        return _confirm_form(
            request,
            confirmation_session,
            error="Merci de choisir une réponse.",
            first_name=first_name,
            last_name=last_name,
            status_code=422,
        )

    try:
        outcome = record_public_response(session, parsed, first_name, last_name, answer, clock)
    except ValidationError:
        return _confirm_form(
            request,
            confirmation_session,
            error="Merci d'indiquer votre prénom et votre nom.",
            first_name=first_name,
            last_name=last_name,
            status_code=422,
        )
    return _outcome_page(request, outcome, first_name.strip())


def _repondre_form(
    request: Request,
    announcement,
    error: str | None = None,
    values: dict | None = None,
    status_code: int = 200,
):
    event = announcement.event
    return templates.TemplateResponse(
        request,
        "repondre.html",
        {
            "event": event,
            "event_date": format_event_date(event.date),
            "token": announcement.token,
            "roles": [(role, role_display(role)) for role in open_roles(announcement)],
            "error": error,
            "values": values or {},
        },
        status_code=status_code,
    )


def _invalid_link(request: Request):
    return templates.TemplateResponse(
        request,
        "confirm_outcome.html",
        {
            "outcome": PublicOutcome.NOT_FOUND.value,
            "title": "Lien invalide",
            "text": "Ce lien n'existe pas ou a été supprimé.",
        },
        status_code=404,
    )


@router.get("/repondre/{token}", response_class=HTMLResponse)
async def repondre_page(
    token: str,
    request: Request,
    session: Session = Depends(get_session),
):
    """Availability form of an announcement."""
    try:
        announcement = get_by_token(session, token)
    except NotFound:
        return _invalid_link(request)
    return _repondre_form(request, announcement)


@router.post("/repondre/{token}", response_class=HTMLResponse)
async def repondre_submit(
    token: str,
    request: Request,
    first_name: str = Form(""),
    role: str = Form(""),
    available: str = Form(""),
    phone: str | None = Form(None),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """Record an answer to an announcement's availability form."""
    try:
        announcement = get_by_token(session, token)
    except NotFound:
        return _invalid_link(request)

    if available not in AVAILABILITY_CHOICES:
        return _repondre_form(
            request,
            announcement,
            error="Merci d'indiquer si tu es disponible.",
            values={"first_name": first_name, "role": role, "phone": phone or ""},
            status_code=422,
        )
    is_available = AVAILABILITY_CHOICES[available]

    try:
        submit_form_response(session, token, first_name, role, is_available, clock, phone=phone)
    except ValidationError as e:
        return _repondre_form(
            request,
            announcement,
            error=str(e),
            values={"first_name": first_name, "role": role, "phone": phone or ""},
            status_code=422,
        )

    if is_available:
        text = "Ta réponse a bien été enregistrée. Tu recevras une confirmation de l'équipe."
    else:
        text = "Merci d'avoir répondu. On se retrouve pour un prochain événement !"
    return templates.TemplateResponse(
        request,
        "confirm_outcome.html",
        {
            "outcome": "available" if is_available else "unavailable",
            "title": f"Merci {first_name.strip()} !",
            "text": text,
        },
    )
