"""Tests for the reminder sweep (selection window, isolation, at-most-once marking)."""

import pytest
from datetime import datetime, timedelta
from unittest.mock import MagicMock

from quiethours.engine.sweep import run_sweep, SweepSelectionError

SWEEP_NOW = datetime(2024, 1, 1, 10, 0, 0)


class TestSweepWindow:
    """Test which blocks a sweep selects."""

    def test_selects_block_starting_within_lookahead(self, block_repository, fake_notifier, make_block):
        """A block starting at T+9min is due for a 10 minute lookahead."""
        block = make_block(timedelta(minutes=9))

        result = run_sweep(block_repository, fake_notifier, lookahead_minutes=10, now=SWEEP_NOW)

        assert result.blocks_found == 1
        assert result.reminders_sent == 1
        assert result.errors == []
        fake_notifier.resolve_contact.assert_called_once_with(block.user_id)

    def test_skips_block_beyond_lookahead(self, block_repository, fake_notifier, make_block):
        """A block starting at T+11min is not yet due."""
        make_block(timedelta(minutes=11))

        result = run_sweep(block_repository, fake_notifier, lookahead_minutes=10, now=SWEEP_NOW)

        assert result.blocks_found == 0
        fake_notifier.deliver.assert_not_called()

    def test_skips_block_already_started(self, block_repository, fake_notifier, make_block):
        """A block that started at T-1min is never selected."""
        make_block(timedelta(minutes=-1))

        result = run_sweep(block_repository, fake_notifier, lookahead_minutes=10, now=SWEEP_NOW)

        assert result.blocks_found == 0

    def test_window_edges_are_inclusive(self, block_repository, fake_notifier, make_block):
        """Blocks starting exactly at now and exactly at now + lookahead are both due."""
        make_block(timedelta(0))
        make_block(timedelta(minutes=10))

        result = run_sweep(block_repository, fake_notifier, lookahead_minutes=10, now=SWEEP_NOW)

        assert result.blocks_found == 2
        assert result.reminders_sent == 2

    def test_result_timestamp_is_sweep_time(self, block_repository, fake_notifier):
        result = run_sweep(block_repository, fake_notifier, now=SWEEP_NOW)
        assert result.timestamp == SWEEP_NOW

    def test_rejects_non_positive_lookahead(self, block_repository, fake_notifier):
        with pytest.raises(ValueError):
            run_sweep(block_repository, fake_notifier, lookahead_minutes=0, now=SWEEP_NOW)


class TestSweepAtMostOnce:
    """Test that a block is reminded at most once."""

    def test_marks_block_after_delivery(self, block_repository, fake_notifier, make_block, test_user_id):
        block = make_block(timedelta(minutes=5))

        run_sweep(block_repository, fake_notifier, now=SWEEP_NOW)

        stored = block_repository.get_by_id(test_user_id, block.block_id)
        assert stored.reminder_sent is True

    def test_second_sweep_finds_nothing(self, block_repository, fake_notifier, make_block):
        """Running twice with no new blocks yields an empty second sweep."""
        make_block(timedelta(minutes=3))
        make_block(timedelta(minutes=7))

        first = run_sweep(block_repository, fake_notifier, now=SWEEP_NOW)
        second = run_sweep(block_repository, fake_notifier, now=SWEEP_NOW)

        assert first.blocks_found == 2
        assert first.reminders_sent == 2
        assert second.blocks_found == 0
        assert second.reminders_sent == 0
        assert fake_notifier.deliver.call_count == 2

    def test_marked_block_never_reselected_while_in_window(self, block_repository, fake_notifier, make_block):
        """Later sweeps that still cover the block's start never pick it up again."""
        make_block(timedelta(minutes=9))
        run_sweep(block_repository, fake_notifier, now=SWEEP_NOW)

        for minutes_later in (1, 3, 5, 8):
            result = run_sweep(block_repository, fake_notifier, now=SWEEP_NOW + timedelta(minutes=minutes_later))
            assert result.blocks_found == 0

        assert fake_notifier.deliver.call_count == 1


class TestSweepFailureIsolation:
    """Test that per-block failures are recorded and never abort the pass."""

    def test_contact_failure_for_one_block(self, block_repository, fake_notifier, make_block):
        """Three due blocks, the second owner's contact fails: two sent, one error."""
        make_block(timedelta(minutes=1))
        second = make_block(timedelta(minutes=2), user_id="other-user-456")
        make_block(timedelta(minutes=3))
        fake_notifier.resolve_contact.side_effect = (
            lambda user_id: None if user_id == "other-user-456" else f"{user_id}@example.com"
        )

        result = run_sweep(block_repository, fake_notifier, now=SWEEP_NOW)

        assert result.blocks_found == 3
        assert result.reminders_sent == 2
        assert result.errors == [f"User not found or no email for block {second.block_id}"]
        assert fake_notifier.deliver.call_count == 2

    def test_unresolved_block_is_retried_next_sweep(self, block_repository, fake_notifier, make_block, test_user_id):
        block = make_block(timedelta(minutes=8))
        fake_notifier.resolve_contact.side_effect = RuntimeError("identity service down")

        first = run_sweep(block_repository, fake_notifier, now=SWEEP_NOW)
        assert first.reminders_sent == 0
        assert block_repository.get_by_id(test_user_id, block.block_id).reminder_sent is False

        fake_notifier.resolve_contact.side_effect = None
        fake_notifier.resolve_contact.return_value = "test@example.com"
        second = run_sweep(block_repository, fake_notifier, now=SWEEP_NOW + timedelta(minutes=1))

        assert second.blocks_found == 1
        assert second.reminders_sent == 1

    def test_delivery_failure_leaves_block_unmarked(self, block_repository, fake_notifier, make_block, test_user_id):
        block = make_block(timedelta(minutes=4))
        fake_notifier.deliver.return_value = False

        result = run_sweep(block_repository, fake_notifier, now=SWEEP_NOW)

        assert result.reminders_sent == 0
        assert result.errors == [f"Failed to send email for block {block.block_id}"]
        assert block_repository.get_by_id(test_user_id, block.block_id).reminder_sent is False

    def test_delivery_exception_is_recorded(self, block_repository, fake_notifier, make_block):
        block = make_block(timedelta(minutes=4))
        fake_notifier.deliver.side_effect = RuntimeError("boom")

        result = run_sweep(block_repository, fake_notifier, now=SWEEP_NOW)

        assert result.errors == [f"Error processing block {block.block_id}: boom"]

    def test_block_deleted_mid_sweep_records_mark_failure(self, block_repository, fake_notifier, make_block, test_user_id):
        """The email went out but the block vanished before it could be marked."""
        block = make_block(timedelta(minutes=2))

        def deliver_then_delete(address, subject, body):
            block_repository.delete(test_user_id, block.block_id)
            return True

        fake_notifier.deliver.side_effect = deliver_then_delete

        result = run_sweep(block_repository, fake_notifier, now=SWEEP_NOW)

        assert result.blocks_found == 1
        assert result.reminders_sent == 0
        assert result.errors == [f"Failed to mark reminder as sent for block {block.block_id}"]

    def test_mark_exception_is_recorded(self, fake_notifier, make_block, block_repository):
        block = make_block(timedelta(minutes=2))
        store = MagicMock()
        store.find_due.return_value = [block]
        store.mark_reminder_sent.side_effect = RuntimeError("database is locked")

        result = run_sweep(store, fake_notifier, now=SWEEP_NOW)

        assert result.reminders_sent == 0
        assert result.errors == [f"Failed to mark reminder as sent for block {block.block_id}: database is locked"]


class TestSweepSelectionFailure:
    """Test that only a failed selection propagates."""

    def test_selection_failure_raises(self, fake_notifier):
        store = MagicMock()
        store.find_due.side_effect = RuntimeError("storage unavailable")

        with pytest.raises(SweepSelectionError):
            run_sweep(store, fake_notifier, now=SWEEP_NOW)

        fake_notifier.resolve_contact.assert_not_called()


class TestSweepRendering:
    """Test what the sweep hands to the notifier."""

    def test_delivers_rendered_reminder(self, block_repository, fake_notifier, make_block, test_user_id):
        make_block(timedelta(minutes=6), duration_min=45)

        run_sweep(block_repository, fake_notifier, lookahead_minutes=10, now=SWEEP_NOW)

        address, subject, body = fake_notifier.deliver.call_args[0]
        assert address == f"{test_user_id}@example.com"
        assert "10 Minute Reminder" in subject
        assert "45 minutes" in body
