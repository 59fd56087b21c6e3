"""Tests for pending confirmation reminders."""

from sqlmodel import Session, select

from caterstaff.core.scheduler import pending_reminders_job
from caterstaff.models import Event, Notification
from caterstaff.services.confirmations import create_session, record_operator_decision
from caterstaff.services.reminders import create_pending_reminders
from caterstaff.staffing.state import Decision


class TestCreatePendingReminders:
    """Tests for create_pending_reminders."""

    def test_nothing_before_delay(self, session: Session, wedding: Event, team, clock):
        """Test nothing before delay."""
        create_session(session, wedding.id, [team["julie"].id], clock)
        clock.advance(hours=23)
        assert create_pending_reminders(session, clock, 24) == 0

    def test_one_notification_per_session(self, session: Session, wedding: Event, team, clock):
        """Test one notification per session."""
        confirmation_session = create_session(
            session, wedding.id, [team["julie"].id, team["marc"].id, team["paul"].id], clock
        )
        record_operator_decision(
            session, confirmation_session.requests[0].id, Decision.CONFIRMED, clock
        )
        clock.advance(hours=25)

        assert create_pending_reminders(session, clock, 24) == 1
        notification = session.exec(select(Notification)).one()
        assert notification.message == '2 personnes n\'ont pas encore répondu pour "Mariage Dupont"'
        assert notification.action_url == f"/events/{wedding.id}/staffing"
        assert notification.source_id == confirmation_session.id

        # Already notified
        clock.advance(hours=5)
        assert create_pending_reminders(session, clock, 24) == 0

    def test_expired_sessions_skipped(self, session: Session, wedding: Event, team, clock):
        """Test expired sessions skipped."""
        create_session(session, wedding.id, [team["julie"].id], clock, window_days=1)
        clock.advance(days=2)
        assert create_pending_reminders(session, clock, 24) == 0


class TestReminderJob:
    """Tests for the scheduled job wrapper."""

    def test_job_logs_failures(self, monkeypatch, caplog):
        """Test job logs failures."""
        def broken(*args, **kwargs):
            raise RuntimeError("database locked")

        monkeypatch.setattr("caterstaff.core.scheduler.create_pending_reminders", broken)
        pending_reminders_job()
        assert "database locked" in caplog.text
