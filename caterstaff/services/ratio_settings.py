"""Read and update the per-account staff ratio settings."""
import logging

from sqlmodel import Session, select

from caterstaff.models import StaffRatioSettings

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "guests_per_server",
    "guests_per_chef",
    "guests_per_bartender",
    "head_waiter_enabled",
    "coeff_wedding",
    "coeff_corporate",
    "coeff_birthday",
    "auto_replace_after_hours",
)


def get_ratio_settings(session: Session, account_id: int) -> StaffRatioSettings:
    """Stored settings for the account, or unsaved defaults if none exist."""
    stored = session.exec(
        select(StaffRatioSettings).where(StaffRatioSettings.account_id == account_id)
    ).first()
    if stored is not None:
        return stored
    return StaffRatioSettings(account_id=account_id)


def upsert_ratio_settings(session: Session, account_id: int, **values) -> StaffRatioSettings:
    """Create or update the account's settings.

    Only known fields are written; None values leave the current value
    in place.
    """
    unknown = set(values) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

    record = get_ratio_settings(session, account_id)
    for name, value in values.items():
        if value is not None:
            setattr(record, name, value)

    session.add(record)
    session.commit()
    session.refresh(record)
    logger.info(f"Staff ratio settings saved for account {account_id}")
    return record
