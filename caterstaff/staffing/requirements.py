"""Staffing requirement calculator.

Turns an event's guest count and type into the number of people needed
per standard role, using the account's ratio settings.
"""
import math
from dataclasses import dataclass
from typing import Protocol

from caterstaff.staffing.errors import ValidationError
from caterstaff.staffing.roles import RoleKey

# Used when a stored ratio is missing or not positive
DEFAULT_GUESTS_PER_SERVER = 25
DEFAULT_GUESTS_PER_CHEF = 60
DEFAULT_GUESTS_PER_BARTENDER = 80

StaffRequirement = dict[str, int]


class RatioSettings(Protocol):
    guests_per_server: int
    guests_per_chef: int
    guests_per_bartender: int
    head_waiter_enabled: bool
    coeff_wedding: float
    coeff_corporate: float
    coeff_birthday: float


@dataclass(frozen=True)
class ExplicitOverride:
    """Headcount entered by hand, used verbatim for all four roles."""

    servers: int = 0
    chefs: int = 0
    bartenders: int = 0
    head_waiter: int = 0


Override = ExplicitOverride | None


def override_from_quote(
    servers: int | None,
    chefs: int | None,
    bartenders: int | None = None,
    head_waiter: int | None = None,
) -> Override:
    """Build an override from nullable per-role columns.

    An override exists as soon as servers or chefs is set. Bartenders and
    head waiter alone do not trigger it. Roles left unset default to 0.
    """
    if servers is None and chefs is None:
        return None
    return ExplicitOverride(
        servers=servers or 0,
        chefs=chefs or 0,
        bartenders=bartenders or 0,
        head_waiter=head_waiter or 0,
    )


def event_type_coefficient(event_type: str | None, settings: RatioSettings) -> float:
    """Server coefficient for an event type, matched case-insensitively."""
    # A stored 0 or None counts as unset and uses the default.
    normalized = (event_type or "").lower()
    if "mariage" in normalized or "wedding" in normalized:
        return float(settings.coeff_wedding or 1.2)
    if "corporate" in normalized:
        return float(settings.coeff_corporate or 1.0)
    if "anniversaire" in normalized or "birthday" in normalized:
        return float(settings.coeff_birthday or 1.1)
    return 1.0


def _ratio(value: int | float | None, default: int) -> float:
    return value if value and value > 0 else default


def calculate_staff_needs(
    guest_count: int,
    event_type: str | None,
    settings: RatioSettings,
    override: Override = None,
) -> StaffRequirement:
    """Compute required headcount per standard role.

    Only servers are scaled by the event type coefficient. The head
    waiter follows the settings flag even for an empty event.
    """
    if guest_count < 0:
        raise ValidationError(f"Guest count cannot be negative: {guest_count}")

    if override is not None:
        return {
            RoleKey.SERVERS.value: max(0, override.servers),
            RoleKey.CHEFS.value: max(0, override.chefs),
            RoleKey.BARTENDERS.value: max(0, override.bartenders),
            RoleKey.HEAD_WAITER.value: max(0, override.head_waiter),
        }

    coefficient = event_type_coefficient(event_type, settings)
    per_server = _ratio(settings.guests_per_server, DEFAULT_GUESTS_PER_SERVER)
    per_chef = _ratio(settings.guests_per_chef, DEFAULT_GUESTS_PER_CHEF)
    per_bartender = _ratio(settings.guests_per_bartender, DEFAULT_GUESTS_PER_BARTENDER)

    return {
        RoleKey.SERVERS.value: math.ceil(guest_count / per_server * coefficient),
        RoleKey.CHEFS.value: math.ceil(guest_count / per_chef),
        RoleKey.BARTENDERS.value: math.ceil(guest_count / per_bartender),
        RoleKey.HEAD_WAITER.value: 1 if settings.head_waiter_enabled else 0,
    }


def merge_custom_roles(
    requirement: StaffRequirement, custom_roles: dict[str, int] | None
) -> StaffRequirement:
    """Return a new requirement with operator-entered custom roles added."""
    merged = dict(requirement)
    for name, count in (custom_roles or {}).items():
        name = name.strip()
        if not name:
            continue
        merged[name] = merged.get(name, 0) + max(0, int(count))
    return merged
