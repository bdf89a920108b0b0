"""
Unit tests for the frame scheduler and self-clearing feedback slots.
"""

import pytest

from snapfit.game.feedback import FrameScheduler, TimedSlot


class TestFrameScheduler:
    """Tests for FrameScheduler."""

    def test_callback_fires_once_delay_elapsed(self):
        scheduler = FrameScheduler()
        fired = []
        scheduler.schedule(1.0, lambda: fired.append("a"))
        assert scheduler.advance(0.5) == 0
        assert fired == []
        assert scheduler.advance(0.5) == 1
        assert fired == ["a"]
        assert scheduler.advance(5.0) == 0
        assert fired == ["a"]

    def test_callbacks_fire_in_due_order(self):
        scheduler = FrameScheduler()
        fired = []
        scheduler.schedule(2.0, lambda: fired.append("late"))
        scheduler.schedule(1.0, lambda: fired.append("early"))
        scheduler.schedule(1.0, lambda: fired.append("early-second"))
        scheduler.advance(3.0)
        assert fired == ["early", "early-second", "late"]

    def test_cancelled_callback_does_not_fire(self):
        scheduler = FrameScheduler()
        fired = []
        handle = scheduler.schedule(1.0, lambda: fired.append("a"))
        handle.cancel()
        scheduler.advance(2.0)
        assert fired == []
        assert not handle.active
        assert scheduler.pending == 0

    def test_callback_can_cancel_later_one(self):
        scheduler = FrameScheduler()
        fired = []
        second = scheduler.schedule(2.0, lambda: fired.append("second"))
        scheduler.schedule(1.0, second.cancel)
        scheduler.advance(3.0)
        assert fired == []

    def test_cancel_all(self):
        scheduler = FrameScheduler()
        scheduler.schedule(1.0, lambda: None)
        scheduler.schedule(2.0, lambda: None)
        scheduler.cancel_all()
        assert scheduler.pending == 0
        assert scheduler.advance(5.0) == 0

    def test_negative_values_raise_error(self):
        scheduler = FrameScheduler()
        with pytest.raises(ValueError):
            scheduler.schedule(-1.0, lambda: None)
        with pytest.raises(ValueError):
            scheduler.advance(-0.5)


class TestTimedSlot:
    """Tests for TimedSlot."""

    def test_value_clears_after_duration(self):
        scheduler = FrameScheduler()
        slot = TimedSlot(scheduler, 2.0)
        slot.set("hello")
        scheduler.advance(1.5)
        assert slot.value == "hello"
        scheduler.advance(0.5)
        assert slot.value is None

    def test_new_value_supersedes_pending_clear(self):
        scheduler = FrameScheduler()
        slot = TimedSlot(scheduler, 2.0)
        slot.set("first")
        scheduler.advance(1.5)
        slot.set("second")
        scheduler.advance(1.0)
        assert slot.value == "second"
        scheduler.advance(1.0)
        assert slot.value is None

    def test_on_clear_receives_cleared_value(self):
        scheduler = FrameScheduler()
        cleared = []
        slot = TimedSlot(scheduler, 1.0, on_clear=cleared.append)
        slot.set("x")
        scheduler.advance(1.0)
        assert cleared == ["x"]

    def test_manual_clear_cancels_timer(self):
        scheduler = FrameScheduler()
        cleared = []
        slot = TimedSlot(scheduler, 1.0, on_clear=cleared.append)
        slot.set("x")
        slot.clear()
        assert slot.value is None
        assert scheduler.pending == 0
        scheduler.advance(2.0)
        assert cleared == ["x"]
