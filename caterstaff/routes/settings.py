"""Staff ratio settings routes."""
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from caterstaff.core.config import settings
from caterstaff.core.database import get_session
from caterstaff.routes.utils import wants_json
from caterstaff.services.ratio_settings import (
    EDITABLE_FIELDS,
    get_ratio_settings,
    upsert_ratio_settings,
)

router = APIRouter(prefix="/settings", tags=["settings"])


def ratios_to_dict(record) -> dict:
    return {name: getattr(record, name) for name in EDITABLE_FIELDS}


@router.get("/staffing")
async def read_staffing_settings(session: Session = Depends(get_session)):
    """
    Current staff ratio settings.

    Returns the defaults when the account has never saved any.
    """
    return ratios_to_dict(get_ratio_settings(session, settings.account_id))


@router.post("/staffing")
async def update_staffing_settings(
    request: Request,
    guests_per_server: int | None = Form(None, gt=0),
    guests_per_chef: int | None = Form(None, gt=0),
    guests_per_bartender: int | None = Form(None, gt=0),
    head_waiter_enabled: bool | None = Form(None),
    coeff_wedding: float | None = Form(None, gt=0),
    coeff_corporate: float | None = Form(None, gt=0),
    coeff_birthday: float | None = Form(None, gt=0),
    auto_replace_after_hours: int | None = Form(None, ge=0),
    session: Session = Depends(get_session),
):
    """
    Save staff ratio settings.

    Fields left out keep their current value.
    """
    record = upsert_ratio_settings(
        session,
        settings.account_id,
        guests_per_server=guests_per_server,
        guests_per_chef=guests_per_chef,
        guests_per_bartender=guests_per_bartender,
        head_waiter_enabled=head_waiter_enabled,
        coeff_wedding=coeff_wedding,
        coeff_corporate=coeff_corporate,
        coeff_birthday=coeff_birthday,
        auto_replace_after_hours=auto_replace_after_hours,
    )

    if wants_json(request):
        return ratios_to_dict(record)
    return RedirectResponse("/settings/staffing", status_code=303)
