"""Team member reliability and replacement ranking."""
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from caterstaff.core.clock import as_utc
from caterstaff.staffing.state import RequestStatus

# Score given to members with no answered request yet
DEFAULT_RELIABILITY = 50


@dataclass(frozen=True)
class RequestRecord:
    """A past confirmation request, as seen by the statistics."""

    team_member_id: object
    status: RequestStatus
    created_at: datetime
    sent_at: datetime | None = None
    responded_at: datetime | None = None


@dataclass
class MemberStats:
    total: int = 0
    confirmed: int = 0
    events_month: int = 0
    avg_response_minutes: float = 0.0
    _response_samples: int = 0

    @property
    def reliability(self) -> int:
        if self.total == 0:
            return DEFAULT_RELIABILITY
        return round(self.confirmed / self.total * 100)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "confirmed": self.confirmed,
            "reliability": self.reliability,
            "events_month": self.events_month,
            "avg_response_minutes": round(self.avg_response_minutes, 1),
        }


def compute_member_stats(records: Iterable[RequestRecord], now: datetime) -> dict:
    """Reliability per team member.

    Only answered requests count towards reliability. ``events_month``
    counts every request created since the first day of the current
    month, answered or not.
    """
    now = as_utc(now)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    stats: dict = {}

    for record in records:
        if record.team_member_id is None:
            continue
        member = stats.setdefault(record.team_member_id, MemberStats())
        status = RequestStatus(record.status)

        if as_utc(record.created_at) >= month_start:
            member.events_month += 1

        if status not in (RequestStatus.CONFIRMED, RequestStatus.DECLINED):
            continue
        member.total += 1
        if status == RequestStatus.CONFIRMED:
            member.confirmed += 1

        if record.sent_at and record.responded_at:
            minutes = (as_utc(record.responded_at) - as_utc(record.sent_at)).total_seconds() / 60
            samples = member._response_samples
            member.avg_response_minutes = (member.avg_response_minutes * samples + minutes) / (samples + 1)
            member._response_samples = samples + 1

    return stats


def roles_compatible(candidate_role: str | None, target_role: str | None) -> bool:
    """True when either role label contains the other, ignoring case."""
    candidate = (candidate_role or "").strip().lower()
    target = (target_role or "").strip().lower()
    if not candidate or not target:
        return False
    return candidate in target or target in candidate


def rank_replacements(
    target_role: str | None,
    members: Iterable,
    excluded_ids: set,
    stats: dict,
    limit: int = 3,
) -> list:
    """Best replacements for someone who declined.

    Candidates share the role, have not been asked already, and are
    ordered by reliability (high first), then events this month (fewest
    first), then average response time (fastest first).
    """
    candidates = [
        member
        for member in members
        if member.id not in excluded_ids and roles_compatible(member.role, target_role)
    ]

    def sort_key(member):
        member_stats = stats.get(member.id) or MemberStats()
        return (
            -member_stats.reliability,
            member_stats.events_month,
            member_stats.avg_response_minutes,
        )

    return sorted(candidates, key=sort_key)[:limit]
