"""Tests for database models."""

from datetime import UTC, date, datetime, timedelta

from sqlmodel import Session

from caterstaff.models import (
    Announcement,
    ConfirmationRequest,
    ConfirmationSession,
    Event,
    StaffRatioSettings,
    TeamMember,
)
from caterstaff.staffing.requirements import ExplicitOverride
from caterstaff.staffing.state import Confirmed, Pending, Responder


class TestEventModel:
    """Tests for the Event model."""

    def test_create_event(self, session: Session):
        """Test creating a basic event."""
        event = Event(name="Cocktail", date=date(2025, 7, 1), guest_count=40)
        session.add(event)
        session.commit()
        session.refresh(event)

        assert event.id is not None
        assert event.status == "prospect"
        assert event.custom_roles == {}

    def test_staffing_override(self):
        """Test the staffing override is built from the quote columns."""
        event = Event(name="Cocktail", date=date(2025, 7, 1), staff_chefs=2)
        assert event.staffing_override == ExplicitOverride(servers=0, chefs=2)
        assert Event(name="Cocktail", date=date(2025, 7, 1)).staffing_override is None


class TestConfirmationModels:
    """Tests for confirmation sessions and requests."""

    def test_session_expiry(self, session: Session, wedding: Event):
        """Test a session reports expiry against a given instant."""
        created = datetime(2025, 6, 1, tzinfo=UTC)
        confirmation_session = ConfirmationSession(
            event_id=wedding.id, created_at=created, expires_at=created + timedelta(days=7)
        )
        session.add(confirmation_session)
        session.commit()
        session.refresh(confirmation_session)

        assert not confirmation_session.is_expired(created + timedelta(days=7))
        assert confirmation_session.is_expired(created + timedelta(days=7, seconds=1))

    def test_request_state_round_trip(self, session: Session, wedding: Event):
        """Test request state round trip."""
        confirmation_session = ConfirmationSession(
            event_id=wedding.id, expires_at=datetime.now(UTC) + timedelta(days=1)
        )
        member = TeamMember(name="Julie Martin", role="Serveuse")
        session.add(confirmation_session)
        session.add(member)
        session.commit()

        sent = datetime(2025, 6, 1, 9, tzinfo=UTC)
        request = ConfirmationRequest(session_id=confirmation_session.id, team_member_id=member.id)
        request.apply_state(Pending(sent_at=sent))
        request.apply_state(Confirmed(responded_at=sent + timedelta(hours=2), by=Responder.PUBLIC))
        session.add(request)
        session.commit()
        session.refresh(request)

        assert request.state == Confirmed(responded_at=sent + timedelta(hours=2), by=Responder.PUBLIC)
        assert request.sent_at is not None
        assert request.role == "Serveuse"
        assert request.display_name == "Julie Martin"

    def test_walk_in_display_name(self):
        """Test walk in display name."""
        request = ConfirmationRequest(
            session_id=None, respondent_firstname="Nina", respondent_lastname="Dubois"
        )
        assert request.display_name == "Nina Dubois"
        assert request.role is None


class TestSettingsModel:
    """Tests for staff ratio settings."""

    def test_defaults(self):
        """Test the ratio settings defaults."""
        ratios = StaffRatioSettings()
        assert (ratios.guests_per_server, ratios.guests_per_chef, ratios.guests_per_bartender) == (25, 60, 80)
        assert ratios.head_waiter_enabled is True
        assert ratios.auto_replace_after_hours == 12


class TestAnnouncementModel:
    """Tests for announcements."""

    def test_token_generated(self, session: Session, wedding: Event):
        """Test a new announcement gets a public token."""
        first = Announcement(event_id=wedding.id)
        second = Announcement(event_id=wedding.id)
        session.add(first)
        session.add(second)
        session.commit()
        assert first.token and first.token != second.token
        assert first.status == "draft"
