"""Operator routes for staffing announcements."""
from uuid import UUID

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from caterstaff.core.clock import Clock, get_clock
from caterstaff.core.database import get_session
from caterstaff.routes.events import get_event_or_404
from caterstaff.routes.utils import wants_json
from caterstaff.services.announcements import (
    announcement_tracking,
    default_message,
    latest_announcement,
    save_announcement,
)
from caterstaff.services.staffing import event_requirement

router = APIRouter(prefix="/events", tags=["announcements"])


@router.get("/{event_id}/announcement")
async def get_announcement(
    event_id: UUID,
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    Current announcement for the event.

    Before anything is saved, returns a draft built from the computed
    requirement and the default message.
    """
    event = get_event_or_404(session, event_id)
    announcement = latest_announcement(session, event.id)
    if announcement is None:
        needs = event_requirement(session, event)
        return {
            "id": None,
            "status": None,
            "staff_needs": needs,
            "message": default_message(needs),
        }
    return announcement_tracking(announcement, clock)


@router.post("/{event_id}/announcement")
async def post_announcement(
    event_id: UUID,
    request: Request,
    roles: list[str] = Form([]),
    counts: list[int] = Form([]),
    message: str | None = Form(None),
    send: bool = Form(False),
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    Save the announcement, and send it when ``send`` is set.

    Staff needs are given as parallel ``roles`` / ``counts`` lists. When
    none are given the computed requirement is used.
    """
    event = get_event_or_404(session, event_id)
    if roles:
        staff_needs = dict(zip(roles, counts))
    else:
        staff_needs = event_requirement(session, event)

    announcement = save_announcement(
        session, event, staff_needs, clock, message=message or None, send=send
    )

    if wants_json(request):
        return announcement_tracking(announcement, clock)
    return RedirectResponse(f"/events/{event_id}/staffing", status_code=303)
