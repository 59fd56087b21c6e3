"""Operator routes for confirmation rounds and individual requests."""
from uuid import UUID

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlmodel import Session

from caterstaff.core.clock import Clock, as_utc, get_clock
from caterstaff.core.database import get_session
from caterstaff.models import ConfirmationRequest
from caterstaff.routes.utils import wants_json
from caterstaff.services.confirmations import (
    create_session,
    mark_sent,
    record_operator_decision,
    reset_request,
)
from caterstaff.services.staffing import confirmation_link, invitation_message
from caterstaff.staffing.escalation import whatsapp_link
from caterstaff.staffing.state import Decision

router = APIRouter(tags=["confirmations"])


def request_to_dict(request: ConfirmationRequest) -> dict:
    return {
        "id": str(request.id),
        "session_id": str(request.session_id),
        "team_member_id": str(request.team_member_id) if request.team_member_id else None,
        "name": request.display_name,
        "status": request.status,
        "sent_at": as_utc(request.sent_at).isoformat() if request.sent_at else None,
        "responded_at": as_utc(request.responded_at).isoformat() if request.responded_at else None,
        "responded_by": request.responded_by,
    }


def _staffing_redirect(request: ConfirmationRequest) -> RedirectResponse:
    return RedirectResponse(f"/events/{request.session.event_id}/staffing", status_code=303)


@router.post("/events/{event_id}/sessions")
async def open_session(
    event_id: UUID,
    request: Request,
    team_member_ids: list[UUID] = Form(...),
    window_days: int | None = Form(None),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    Open a confirmation round for the selected team members.

    Returns the public link to share and a ready-made WhatsApp message
    pointing at it.
    """
    confirmation_session = create_session(
        session, event_id, team_member_ids, clock, window_days=window_days
    )
    link = confirmation_link(confirmation_session.id)
    message = invitation_message(confirmation_session.event, link)

    if wants_json(request):
        return JSONResponse(
            {
                "session_id": str(confirmation_session.id),
                "link": link,
                "expires_at": as_utc(confirmation_session.expires_at).isoformat(),
                "message": message,
                "whatsapp_url": whatsapp_link(None, message),
                "requests": [request_to_dict(r) for r in confirmation_session.requests],
            },
            status_code=201,
        )
    return RedirectResponse(f"/events/{event_id}/staffing", status_code=303)


@router.post("/requests/{request_id}/sent")
async def request_sent(
    request_id: UUID,
    request: Request,
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """Record that the request was sent to the person."""
    confirmation_request = mark_sent(session, request_id, clock)
    if wants_json(request):
        return request_to_dict(confirmation_request)
    return _staffing_redirect(confirmation_request)


@router.post("/requests/{request_id}/decision")
async def request_decision(
    request_id: UUID,
    request: Request,
    decision: Decision = Form(...),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    Record the person's answer on their behalf.

    Answers with 409 when the request already holds the other decision.
    """
    confirmation_request = record_operator_decision(session, request_id, decision, clock)
    if wants_json(request):
        return request_to_dict(confirmation_request)
    return _staffing_redirect(confirmation_request)


@router.post("/requests/{request_id}/reset")
async def request_reset(
    request_id: UUID,
    request: Request,
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """Put the request back to pending so it can be answered again."""
    confirmation_request = reset_request(session, request_id, clock)
    if wants_json(request):
        return request_to_dict(confirmation_request)
    return _staffing_redirect(confirmation_request)
