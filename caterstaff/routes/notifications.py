"""Operator notification routes."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlmodel import Session, select

from caterstaff.core.clock import as_utc
from caterstaff.core.config import settings
from caterstaff.core.database import get_session
from caterstaff.models import Notification
from caterstaff.routes.utils import wants_json

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    unread: bool = False,
    session: Session = Depends(get_session),
):
    """List notifications, newest first."""
    statement = (
        select(Notification)
        .where(Notification.account_id == settings.account_id)
        .order_by(Notification.created_at.desc())
    )
    if unread:
        statement = statement.where(Notification.read == False)  # noqa: E712
    return [
        {
            "id": str(n.id),
            "type": n.type,
            "message": n.message,
            "action_url": n.action_url,
            "read": n.read,
            "created_at": as_utc(n.created_at).isoformat(),
        }
        for n in session.exec(statement).all()
    ]


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: UUID,
    request: Request,
    session: Session = Depends(get_session),
):
    """Dismiss a notification."""
    notification = session.get(Notification, notification_id)
    if not notification or notification.account_id != settings.account_id:
        raise HTTPException(status_code=404, detail="Notification not found")

    notification.read = True
    session.add(notification)
    session.commit()

    if wants_json(request):
        return {"id": str(notification.id), "read": True}
    return RedirectResponse(notification.action_url or "/events", status_code=303)
