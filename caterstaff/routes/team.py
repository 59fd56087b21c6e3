"""Team directory routes."""
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlmodel import Session, select

from caterstaff.core.clock import Clock, get_clock
from caterstaff.core.database import get_session
from caterstaff.models import TeamMember
from caterstaff.routes.utils import wants_json
from caterstaff.services.staffing import team_stats
from caterstaff.staffing.reliability import MemberStats

router = APIRouter(prefix="/team", tags=["team"])


def member_to_dict(member: TeamMember) -> dict:
    return {
        "id": str(member.id),
        "name": member.name,
        "phone": member.phone,
        "role": member.role,
        "hourly_rate": member.hourly_rate,
        "skills": member.skills or [],
    }


@router.get("")
async def list_members(
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """
    List team members, most reliable first.

    Reliability is the share of confirmed answers over the last three
    months. Members with no history are ranked as 50%.
    """
    stats = team_stats(session, clock)
    members = session.exec(select(TeamMember)).all()
    ranked = sorted(
        members,
        key=lambda m: (-(stats.get(m.id) or MemberStats()).reliability, m.name.lower()),
    )
    return [
        {**member_to_dict(m), "stats": (stats.get(m.id) or MemberStats()).to_dict()}
        for m in ranked
    ]


@router.post("")
async def create_member(
    request: Request,
    name: str = Form(...),
    phone: str | None = Form(None),
    role: str | None = Form(None),
    hourly_rate: float = Form(0, ge=0),
    skills: str = Form(""),
    session: Session = Depends(get_session),
):
    """
    Add a team member.

    Skills are given as a comma-separated list.
    """
    member = TeamMember(
        name=name.strip(),
        phone=(phone or "").strip() or None,
        role=(role or "").strip() or None,
        hourly_rate=hourly_rate,
        skills=[s.strip() for s in skills.split(",") if s.strip()],
    )
    session.add(member)
    session.commit()
    session.refresh(member)

    if wants_json(request):
        return JSONResponse(member_to_dict(member), status_code=201)
    return RedirectResponse("/team", status_code=303)
