#!/usr/bin/env python3
"""
One-off script to list unanswered confirmation requests and raise reminders.

Runs the same check as the background scheduler, once, and prints each
open confirmation round that still has people waiting to answer.

Usage:
    python scripts/check_pending.py [--dry-run]

Options:
    --dry-run    List pending requests without creating notifications
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlmodel import Session, select

from caterstaff.core.clock import SystemClock, as_utc
from caterstaff.core.config import settings
from caterstaff.core.database import create_db_and_tables, engine
from caterstaff.models import ConfirmationSession
from caterstaff.services.reminders import create_pending_reminders
from caterstaff.staffing.escalation import escalation_tier, hours_since
from caterstaff.staffing.state import RequestStatus


def main(dry_run: bool = False):
    """Print pending requests per open round, then create reminders."""
    create_db_and_tables()
    clock = SystemClock()
    now = clock.now()

    with Session(engine) as session:
        statement = select(ConfirmationSession).order_by(ConfirmationSession.created_at)
        open_sessions = [s for s in session.exec(statement).all() if not s.is_expired(now)]

        if not open_sessions:
            print("No open confirmation rounds.")
            return

        for confirmation_session in open_sessions:
            pending = [
                r for r in confirmation_session.requests
                if r.status == RequestStatus.PENDING.value
            ]
            if not pending:
                continue
            event = confirmation_session.event
            print(f"\n{event.name} ({event.date}), link expires {as_utc(confirmation_session.expires_at):%Y-%m-%d %H:%M}")
            for request in pending:
                hours = hours_since(request.sent_at, now)
                sent = "not sent" if request.sent_at is None else f"{hours}h, {escalation_tier(hours).value}"
                print(f"  - {request.display_name}: {sent}")

        if dry_run:
            print("\nDry run, no notification created.")
            return

        created = create_pending_reminders(
            session, clock, settings.reminder_delay_hours, account_id=settings.account_id
        )
        print(f"\nComplete: {created} notification(s) created")


if __name__ == "__main__":
    dry_run = "--dry-run" in sys.argv
    main(dry_run=dry_run)
