"""Tests for the request state transitions."""

from datetime import UTC, datetime, timedelta

import pytest

from caterstaff.staffing.state import (
    Confirmed,
    Decision,
    Declined,
    MarkSent,
    NotContacted,
    OperatorDecision,
    Pending,
    PublicAnswer,
    Reset,
    Responder,
    columns_from_state,
    state_from_columns,
    transition,
)

NOW = datetime(2025, 6, 2, 9, 0, tzinfo=UTC)
EARLIER = NOW - timedelta(hours=5)


class TestTransition:
    """Tests for the transition function."""

    def test_mark_sent_from_not_contacted(self):
        """Test mark sent from not contacted."""
        result = transition(NotContacted(), MarkSent(), NOW)
        assert result.changed
        assert result.state == Pending(sent_at=NOW)

    def test_mark_sent_keeps_first_send_time(self):
        """Test mark sent keeps first send time."""
        result = transition(Pending(sent_at=EARLIER), MarkSent(), NOW)
        assert not result.changed
        assert result.state == Pending(sent_at=EARLIER)

    def test_mark_sent_on_answered_is_noop(self):
        """Test mark sent on answered is noop."""
        state = Confirmed(responded_at=EARLIER, by=Responder.PUBLIC)
        assert transition(state, MarkSent(), NOW).state == state

    def test_operator_decision_from_pending(self):
        """Test operator decision from pending."""
        result = transition(Pending(sent_at=EARLIER), OperatorDecision(Decision.DECLINED), NOW)
        assert result.state == Declined(responded_at=NOW, by=Responder.OPERATOR)

    def test_operator_decision_from_not_contacted(self):
        """Test operator decision from not contacted."""
        result = transition(NotContacted(), OperatorDecision(Decision.CONFIRMED), NOW)
        assert result.state == Confirmed(responded_at=NOW, by=Responder.OPERATOR)

    def test_same_decision_twice_keeps_first_time(self):
        """Test same decision twice keeps first time."""
        state = Confirmed(responded_at=EARLIER, by=Responder.OPERATOR)
        result = transition(state, OperatorDecision(Decision.CONFIRMED), NOW)
        assert not result.changed
        assert not result.conflict
        assert result.state.responded_at == EARLIER

    def test_different_decision_is_a_conflict(self):
        """Test different decision is a conflict."""
        state = Confirmed(responded_at=EARLIER, by=Responder.PUBLIC)
        result = transition(state, OperatorDecision(Decision.DECLINED), NOW)
        assert result.conflict
        assert result.state == state

    def test_public_answer_only_from_pending(self):
        """Test public answer only from pending."""
        assert transition(Pending(), PublicAnswer(Decision.CONFIRMED), NOW).changed
        assert not transition(NotContacted(), PublicAnswer(Decision.CONFIRMED), NOW).changed
        answered = Declined(responded_at=EARLIER, by=Responder.OPERATOR)
        result = transition(answered, PublicAnswer(Decision.CONFIRMED), NOW)
        assert not result.changed
        assert not result.conflict

    @pytest.mark.parametrize(
        "state",
        [
            NotContacted(),
            Pending(sent_at=EARLIER),
            Confirmed(responded_at=EARLIER, by=Responder.PUBLIC),
            Declined(responded_at=EARLIER, by=Responder.OPERATOR),
        ],
    )
    def test_reset_always_ends_pending(self, state):
        """Test reset always ends pending."""
        result = transition(state, Reset(), NOW)
        assert result.state == Pending()

    def test_reset_of_fresh_pending_is_noop(self):
        """Test reset of fresh pending is noop."""
        assert not transition(Pending(), Reset(), NOW).changed


class TestColumns:
    """Tests for mapping states to and from row columns."""

    def test_answered_state_keeps_sent_at(self):
        """Test answered state keeps sent at."""
        columns = columns_from_state(Confirmed(responded_at=NOW, by=Responder.PUBLIC))
        assert "sent_at" not in columns
        assert columns == {"status": "confirmed", "responded_at": NOW, "responded_by": "public"}

    def test_pending_clears_answer(self):
        """Test pending clears answer."""
        columns = columns_from_state(Pending(sent_at=EARLIER))
        assert columns["responded_at"] is None
        assert columns["sent_at"] == EARLIER

    def test_read_back(self):
        """Test a row is read back into its state."""
        assert state_from_columns("declined", EARLIER, NOW, "operator") == Declined(
            responded_at=NOW, by=Responder.OPERATOR
        )
        assert state_from_columns("pending", EARLIER, None, None) == Pending(sent_at=EARLIER)

    def test_answered_row_without_time_rejected(self):
        """Test answered row without time rejected."""
        with pytest.raises(ValueError):
            state_from_columns("confirmed", None, None, None)
