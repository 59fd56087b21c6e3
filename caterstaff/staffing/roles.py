"""Role keys and classification of free-text role labels.

Team members carry a free-text role ("Serveuse", "Chef cuisinier",
"Barman", ...). Gauges are computed per RoleKey, so each label has to
be mapped onto a key. Labels that match nothing land in the default
bucket, which is SERVERS unless the caller injects another default.
"""
from collections.abc import Callable
from enum import Enum


class RoleKey(str, Enum):
    SERVERS = "servers"
    CHEFS = "chefs"
    BARTENDERS = "bartenders"
    HEAD_WAITER = "head_waiter"


STANDARD_ROLES: tuple[RoleKey, ...] = (
    RoleKey.SERVERS,
    RoleKey.CHEFS,
    RoleKey.BARTENDERS,
    RoleKey.HEAD_WAITER,
)

# Checked in order, first match wins
ROLE_PATTERNS: tuple[tuple[RoleKey, tuple[str, ...]], ...] = (
    (RoleKey.SERVERS, ("serveur", "serveuse")),
    (RoleKey.BARTENDERS, ("barman", "barmaid")),
    (RoleKey.CHEFS, ("chef", "cuisinier")),
    (RoleKey.HEAD_WAITER, ("maître d'hôtel", "maitre", "maître")),
)

# (singular, plural) labels used in messages sent to staff
ROLE_LABELS: dict[RoleKey, tuple[str, str]] = {
    RoleKey.SERVERS: ("serveur", "serveurs"),
    RoleKey.CHEFS: ("chef", "chefs"),
    RoleKey.BARTENDERS: ("barman", "barmans"),
    RoleKey.HEAD_WAITER: ("maître d'hôtel", "maîtres d'hôtel"),
}

RoleClassifier = Callable[[str | None], RoleKey]


def classify_role(label: str | None, default: RoleKey = RoleKey.SERVERS) -> RoleKey:
    """Map a free-text role label to a RoleKey.

    A label that already is a role key ("bartenders") maps to itself.
    Otherwise matching is a lower-cased substring test against
    ROLE_PATTERNS. Anything unmatched, including an empty label, returns
    ``default``.
    """
    normalized = (label or "").strip().lower()
    for key in STANDARD_ROLES:
        if normalized == key.value:
            return key
    if normalized:
        for key, patterns in ROLE_PATTERNS:
            if any(pattern in normalized for pattern in patterns):
                return key
    return default


def role_label(role: RoleKey | str, count: int = 1) -> str:
    """Human label for a role, pluralized when count > 1.

    Custom role names are returned as entered.
    """
    try:
        key = RoleKey(role)
    except ValueError:
        return str(role)
    singular, plural = ROLE_LABELS[key]
    return plural if count > 1 else singular


def is_standard_role(role: str) -> bool:
    return role in {key.value for key in STANDARD_ROLES}
