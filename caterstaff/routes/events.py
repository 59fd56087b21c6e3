"""Event routes: creating events and viewing their staffing."""
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from sqlmodel import Session, select

from caterstaff.core.clock import Clock, get_clock
from caterstaff.core.database import get_session
from caterstaff.models import Event, EventStatus, EventType
from caterstaff.routes.utils import templates, wants_json
from caterstaff.services.staffing import event_requirement, event_roster, staffing_overview
from caterstaff.staffing.escalation import format_event_date
from caterstaff.staffing.roles import role_label

router = APIRouter(prefix="/events", tags=["events"])


def get_event_or_404(session: Session, event_id: UUID) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def event_to_dict(event: Event) -> dict:
    return {
        "id": str(event.id),
        "name": event.name,
        "date": event.date.isoformat(),
        "time": event.time,
        "venue": event.venue,
        "guest_count": event.guest_count,
        "event_type": event.event_type,
        "status": event.status,
        "custom_roles": event.custom_roles or {},
    }


@router.get("")
async def list_events(
    status: EventStatus | None = None,
    session: Session = Depends(get_session),
):
    """
    List events, soonest first.

    Cancelled and completed events are included only when explicitly
    requested through the status filter.
    """
    statement = select(Event).order_by(Event.date)
    if status is not None:
        statement = statement.where(Event.status == status.value)
    else:
        statement = statement.where(
            Event.status.not_in([EventStatus.CANCELLED.value, EventStatus.COMPLETED.value])
        )
    return [event_to_dict(event) for event in session.exec(statement).all()]


@router.post("")
async def create_event(
    request: Request,
    name: str = Form(...),
    event_date: date = Form(..., alias="date"),
    guest_count: int = Form(0, ge=0),
    event_type: str = Form(EventType.OTHER.value),
    status: EventStatus = Form(EventStatus.PROSPECT),
    time: str | None = Form(None),
    venue: str | None = Form(None),
    staff_servers: int | None = Form(None, ge=0),
    staff_chefs: int | None = Form(None, ge=0),
    staff_bartenders: int | None = Form(None, ge=0),
    staff_head_waiter: int | None = Form(None, ge=0),
    session: Session = Depends(get_session),
):
    """
    Create an event.

    The staff_* fields carry headcount entered by hand on the quote. As
    soon as servers or chefs is given, the entered numbers replace the
    computed requirement for all four standard roles.
    """
    event = Event(
        name=name.strip(),
        date=event_date,
        time=time or None,
        venue=venue or None,
        guest_count=guest_count,
        event_type=event_type.strip() or EventType.OTHER.value,
        status=status.value,
        staff_servers=staff_servers,
        staff_chefs=staff_chefs,
        staff_bartenders=staff_bartenders,
        staff_head_waiter=staff_head_waiter,
    )
    session.add(event)
    session.commit()
    session.refresh(event)

    if wants_json(request):
        return JSONResponse(event_to_dict(event), status_code=201)
    return RedirectResponse(f"/events/{event.id}/staffing", status_code=303)


@router.get("/{event_id}")
async def event_detail(event_id: UUID, session: Session = Depends(get_session)):
    """Return a single event."""
    return event_to_dict(get_event_or_404(session, event_id))


@router.post("/{event_id}/custom-roles")
async def set_custom_role(
    event_id: UUID,
    request: Request,
    role: str = Form(...),
    count: int = Form(..., ge=0),
    session: Session = Depends(get_session),
):
    """
    Add, change or remove an extra role for the event.

    A count of 0 removes the role. Custom roles are added on top of the
    computed standard roles.
    """
    event = get_event_or_404(session, event_id)
    name = role.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Role name is required")

    custom_roles = dict(event.custom_roles or {})
    if count == 0:
        custom_roles.pop(name, None)
    else:
        custom_roles[name] = count
    # Reassign so the JSON column is flagged as modified
    event.custom_roles = custom_roles
    session.add(event)
    session.commit()

    if wants_json(request):
        return {"custom_roles": custom_roles}
    return RedirectResponse(f"/events/{event_id}/staffing", status_code=303)


@router.get("/{event_id}/requirement")
async def event_staff_requirement(event_id: UUID, session: Session = Depends(get_session)):
    """Headcount needed per role for the event."""
    event = get_event_or_404(session, event_id)
    return event_requirement(session, event)


@router.get("/{event_id}/roster")
async def event_staff_roster(event_id: UUID, session: Session = Depends(get_session)):
    """Confirmed, pending and missing people per role."""
    event = get_event_or_404(session, event_id)
    requirement, roster = event_roster(session, event)
    return {"requirement": requirement, **roster.to_dict()}


@router.get("/{event_id}/staffing", response_class=HTMLResponse)
async def event_staffing(
    event_id: UUID,
    request: Request,
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    Staffing screen for an event.

    Shows gauges per role, who was asked and how they answered, the
    follow-up messages to send, replacement suggestions for people who
    declined, and team members already booked elsewhere that day.
    Returns the same data as JSON for AJAX requests.
    """
    event = get_event_or_404(session, event_id)
    overview = staffing_overview(session, event, clock)

    if wants_json(request):
        return JSONResponse(overview)

    return templates.TemplateResponse(
        request,
        "staffing.html",
        {
            "event": event,
            "event_date": format_event_date(event.date),
            "overview": overview,
            "role_label": role_label,
        },
    )
