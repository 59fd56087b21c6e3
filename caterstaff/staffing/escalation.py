"""Follow-up tiers and message text.

The longer a request or announcement has gone unanswered, the firmer
the follow-up. Tiers use half-open hour intervals:

    [0, 12)   neutral
    [12, 24)  normal
    [24, 48)  urgent
    [48, inf) very urgent

Nothing is sent from here: callers get text back and copy it or open a
WhatsApp link with it.
"""
import math
import re
from datetime import date, datetime
from enum import Enum
from urllib.parse import quote

from caterstaff.core.clock import as_utc
from caterstaff.staffing.roles import role_label
from caterstaff.staffing.roster import RosterSummary

MONTHS_FR = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)
WEEKDAYS_FR = ("lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche")


class EscalationTier(str, Enum):
    NEUTRAL = "neutral"
    NORMAL = "normal"
    URGENT = "urgent"
    VERY_URGENT = "very urgent"


TIER_LABELS = {
    EscalationTier.NEUTRAL: "Neutre",
    EscalationTier.NORMAL: "Normal",
    EscalationTier.URGENT: "Urgent",
    EscalationTier.VERY_URGENT: "Très urgent",
}


def hours_since(sent_at: datetime | None, now: datetime) -> int:
    """Whole hours elapsed since sent_at, never negative.

    A request that was never sent counts as sent just now.
    """
    if sent_at is None:
        return 0
    elapsed = (as_utc(now) - as_utc(sent_at)).total_seconds() / 3600
    return max(0, math.floor(elapsed))


def escalation_tier(hours: float) -> EscalationTier:
    if hours < 12:
        return EscalationTier.NEUTRAL
    if hours < 24:
        return EscalationTier.NORMAL
    if hours < 48:
        return EscalationTier.URGENT
    return EscalationTier.VERY_URGENT


def format_event_date(value: date | None) -> str:
    """French long date, e.g. "samedi 14 juin 2025"."""
    if value is None:
        return "date à confirmer"
    return f"{WEEKDAYS_FR[value.weekday()]} {value.day} {MONTHS_FR[value.month - 1]} {value.year}"


def follow_up_message(
    tier: EscalationTier,
    missing: int,
    role: str,
    event_date: date | None,
    link: str,
) -> str:
    """Follow-up text for one role that is still short of people."""
    label = role_label(role, missing)
    missing_word = "manquants" if missing > 1 else "manquant"
    when = format_event_date(event_date)

    if tier == EscalationTier.NEUTRAL:
        return (
            f"📢 Rappel : nous cherchons encore {missing} {label} pour le {when}. "
            f"Répondez via le lien ci-dessous !\n\n🔗 {link}"
        )
    if tier == EscalationTier.NORMAL:
        return (
            f"⚠️ Il nous manque encore {missing} {label} pour le {when}. "
            f"Merci de répondre rapidement !\n\n🔗 {link}"
        )
    if tier == EscalationTier.URGENT:
        return (
            f"🔴 URGENT : {missing} {label} {missing_word} pour le {when} ! "
            f"Répondez au plus vite svp !\n\n🔗 {link}"
        )
    return (
        f"🔴 TRÈS URGENT : {missing} {label} {missing_word} pour le {when}. "
        f"Sans réponse aujourd'hui nous devrons trouver d'autres renforts. "
        f"Répondez immédiatement !\n\n🔗 {link}"
    )


def role_shortfall_messages(
    summary: RosterSummary,
    sent_at: datetime | None,
    now: datetime,
    event_date: date | None,
    link: str,
) -> list[dict]:
    """One follow-up per role that is still missing people."""
    hours = hours_since(sent_at, now)
    tier = escalation_tier(hours)
    return [
        {
            "role": gauge.role,
            "missing": gauge.missing,
            "hours_since_sent": hours,
            "tier": tier.value,
            "tier_label": TIER_LABELS[tier],
            "message": follow_up_message(tier, gauge.missing, gauge.role, event_date, link),
        }
        for gauge in summary.shortfalls()
    ]


def member_reminder_message(name: str, event_name: str, hours: float) -> str:
    """Reminder addressed to one person who has not answered yet."""
    first_name = (name or "").split(" ")[0] or name
    tier = escalation_tier(hours)
    if tier == EscalationTier.NEUTRAL:
        return (
            f"Bonjour {first_name} 👋 Petit rappel concernant {event_name}. "
            f"Pourrais-tu confirmer ta disponibilité quand tu as un moment ? Merci !"
        )
    if tier == EscalationTier.NORMAL:
        return (
            f"{first_name}, nous avons besoin de ta confirmation pour {event_name}. "
            f"Merci de répondre rapidement OUI ou NON 🙏"
        )
    if tier == EscalationTier.URGENT:
        return (
            f"{first_name}, nous avons besoin de ta confirmation urgente pour {event_name} ! "
            f"Réponds OUI ou NON rapidement svp 🙏"
        )
    return (
        f"{first_name}, URGENT : nous devons absolument avoir ta réponse pour {event_name}. "
        f"Sans retour de ta part, nous devrons trouver un remplaçant. "
        f"Merci de confirmer IMMÉDIATEMENT."
    )


def whatsapp_link(phone: str | None, text: str) -> str:
    """wa.me deep link, addressed to a phone number when one is given.

    French numbers written with a leading 0 get the 33 country code.
    """
    encoded = quote(text, safe="")
    if not phone:
        return f"https://wa.me/?text={encoded}"
    digits = re.sub(r"\s", "", phone)
    digits = re.sub(r"^0", "33", digits).lstrip("+")
    return f"https://wa.me/{digits}?text={encoded}"
