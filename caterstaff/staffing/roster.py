"""Roster aggregation: requirement versus actual answers.

Everything here is recomputed from the list of rows on each call, so
the gauges can never drift from the requests they are built from.
"""
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from caterstaff.staffing.requirements import StaffRequirement
from caterstaff.staffing.roles import RoleClassifier, classify_role, is_standard_role
from caterstaff.staffing.state import RequestStatus


class GaugeStatus(str, Enum):
    FULL = "full"
    UNFILLED = "unfilled"
    PARTIAL = "partial"


@dataclass(frozen=True)
class StaffingRow:
    """One person asked for an event, reduced to what the gauges need."""

    role: str | None
    status: RequestStatus
    name: str | None = None


@dataclass(frozen=True)
class RoleGauge:
    role: str
    needed: int
    confirmed: int = 0
    pending: int = 0
    declined: int = 0
    confirmed_names: tuple[str, ...] = ()

    @property
    def missing(self) -> int:
        return max(0, self.needed - self.confirmed)

    @property
    def status(self) -> GaugeStatus:
        return gauge_status(self.needed, self.confirmed)


@dataclass(frozen=True)
class RosterSummary:
    roles: dict[str, RoleGauge] = field(default_factory=dict)

    @property
    def total_needed(self) -> int:
        return sum(gauge.needed for gauge in self.roles.values())

    @property
    def total_confirmed(self) -> int:
        return sum(gauge.confirmed for gauge in self.roles.values())

    @property
    def total_pending(self) -> int:
        return sum(gauge.pending for gauge in self.roles.values())

    @property
    def total_declined(self) -> int:
        return sum(gauge.declined for gauge in self.roles.values())

    @property
    def total_missing(self) -> int:
        return sum(gauge.missing for gauge in self.roles.values())

    def shortfalls(self) -> list[RoleGauge]:
        """Roles that still need people, in requirement order."""
        return [gauge for gauge in self.roles.values() if gauge.missing > 0]

    def to_dict(self) -> dict:
        return {
            "roles": {
                key: {
                    "needed": gauge.needed,
                    "confirmed": gauge.confirmed,
                    "pending": gauge.pending,
                    "declined": gauge.declined,
                    "missing": gauge.missing,
                    "status": gauge.status.value,
                    "confirmed_names": list(gauge.confirmed_names),
                }
                for key, gauge in self.roles.items()
            },
            "total_needed": self.total_needed,
            "total_confirmed": self.total_confirmed,
            "total_pending": self.total_pending,
            "total_declined": self.total_declined,
            "total_missing": self.total_missing,
        }


def gauge_status(needed: int, confirmed: int) -> GaugeStatus:
    """Colour class of a role gauge."""
    if confirmed >= needed:
        return GaugeStatus.FULL
    if confirmed == 0:
        return GaugeStatus.UNFILLED
    return GaugeStatus.PARTIAL


def bucket_for(
    role: str | None,
    custom_roles: Iterable[str] = (),
    classify: RoleClassifier = classify_role,
) -> str:
    """Requirement key a row is counted under.

    Custom role names are matched exactly (ignoring case) before the
    standard classifier runs.
    """
    normalized = (role or "").strip().lower()
    for custom in custom_roles:
        if custom.strip().lower() == normalized:
            return custom
    return classify(role).value


def aggregate_roster(
    requirement: StaffRequirement,
    rows: Iterable[StaffingRow],
    classify: RoleClassifier = classify_role,
) -> RosterSummary:
    """Count answers per role against the requirement.

    Roles with rows but no requirement entry still get a gauge with
    ``needed == 0`` so no answer is silently dropped from the totals.
    """
    custom_roles = [key for key in requirement if not is_standard_role(key)]
    counts: dict[str, dict[str, int]] = {
        key: {"confirmed": 0, "pending": 0, "declined": 0} for key in requirement
    }
    names: dict[str, list[str]] = {key: [] for key in requirement}

    for row in rows:
        key = bucket_for(row.role, custom_roles, classify)
        bucket = counts.setdefault(key, {"confirmed": 0, "pending": 0, "declined": 0})
        status = RequestStatus(row.status)
        if status == RequestStatus.CONFIRMED:
            bucket["confirmed"] += 1
            if row.name:
                names.setdefault(key, []).append(row.name)
        elif status == RequestStatus.DECLINED:
            bucket["declined"] += 1
        elif status == RequestStatus.PENDING:
            bucket["pending"] += 1

    return RosterSummary(
        roles={
            key: RoleGauge(
                role=key,
                needed=max(0, requirement.get(key, 0)),
                confirmed=bucket["confirmed"],
                pending=bucket["pending"],
                declined=bucket["declined"],
                confirmed_names=tuple(names.get(key, ())),
            )
            for key, bucket in counts.items()
        }
    )
