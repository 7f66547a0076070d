"""Tests for the in-memory deduplication tracker."""

import threading

import pytest

from error_dashboard.tracker import ErrorTracker

from tests.conftest import FakeClock


class TestIsDuplicate:
    def test_unknown_message_is_not_duplicate(self, tracker: ErrorTracker) -> None:
        assert tracker.is_duplicate("disk full") is False

    def test_recorded_message_within_max_age_is_duplicate(
        self, tracker: ErrorTracker, clock: FakeClock
    ) -> None:
        tracker.record("disk full")
        clock.advance(5)

        assert tracker.is_duplicate("disk full") is True

    def test_expired_message_is_not_duplicate(
        self, tracker: ErrorTracker, clock: FakeClock
    ) -> None:
        tracker.record("disk full")
        clock.advance(6)

        assert tracker.is_duplicate("disk full") is False

    def test_check_does_not_record(self, tracker: ErrorTracker) -> None:
        tracker.is_duplicate("disk full")

        assert "disk full" not in tracker
        assert tracker.is_duplicate("disk full") is False

    def test_messages_are_independent(self, tracker: ErrorTracker) -> None:
        tracker.record("a")

        assert tracker.is_duplicate("a") is True
        assert tracker.is_duplicate("b") is False

    def test_clock_skew_keeps_entry_fresh(
        self, tracker: ErrorTracker, clock: FakeClock
    ) -> None:
        tracker.record("disk full")
        clock.advance(-120)

        assert tracker.is_duplicate("disk full") is True

    def test_per_call_max_age(self, tracker: ErrorTracker, clock: FakeClock) -> None:
        tracker.record("disk full")
        clock.advance(10)

        assert tracker.is_duplicate("disk full", max_age_seconds=30) is True
        assert tracker.is_duplicate("disk full") is False

    def test_second_granularity(self, clock: FakeClock) -> None:
        clock.now = 100.9
        tracker = ErrorTracker(1, clock=clock)
        tracker.record("m")
        clock.now = 102.0

        # Stored at 100, now 102: two whole seconds old.
        assert tracker.is_duplicate("m") is False


class TestRecord:
    def test_record_overwrites_timestamp(
        self, tracker: ErrorTracker, clock: FakeClock
    ) -> None:
        tracker.record("disk full")
        clock.advance(6)
        tracker.record("disk full")
        clock.advance(3)

        assert tracker.is_duplicate("disk full") is True
        assert len(tracker) == 1

    def test_record_evicts_expired_entries(
        self, tracker: ErrorTracker, clock: FakeClock
    ) -> None:
        tracker.record("old")
        clock.advance(10)
        tracker.record("new")

        assert "old" not in tracker
        assert "new" in tracker

    def test_record_uses_per_call_max_age_for_eviction(
        self, tracker: ErrorTracker, clock: FakeClock
    ) -> None:
        # tracker default window is 5 s
        tracker.record("old")
        clock.advance(10)
        tracker.record("new", max_age_seconds=60)

        assert "old" in tracker
        assert tracker.is_duplicate("old", max_age_seconds=60) is True

    def test_capacity_evicts_least_recently_recorded(self, clock: FakeClock) -> None:
        tracker = ErrorTracker(60, clock=clock, max_entries=2)
        tracker.record("a")
        tracker.record("b")
        tracker.record("a")
        tracker.record("c")

        assert len(tracker) == 2
        assert "b" not in tracker
        assert "a" in tracker
        assert "c" in tracker


class TestPrune:
    def test_prune_removes_only_expired(
        self, tracker: ErrorTracker, clock: FakeClock
    ) -> None:
        tracker.record("old")
        clock.advance(4)
        tracker.record("recent")
        clock.advance(2)

        removed = tracker.prune()

        assert removed == 1
        assert "old" not in tracker
        assert "recent" in tracker


class TestMaxAge:
    def test_max_age_setter_changes_window(
        self, tracker: ErrorTracker, clock: FakeClock
    ) -> None:
        tracker.record("disk full")
        clock.advance(8)
        tracker.max_age_seconds = 10

        assert tracker.is_duplicate("disk full") is True

    @pytest.mark.parametrize("value", [0, -1])
    def test_rejects_non_positive_max_age(self, value: float) -> None:
        with pytest.raises(ValueError):
            ErrorTracker(value)

    def test_rejects_non_positive_capacity(self) -> None:
        with pytest.raises(ValueError):
            ErrorTracker(5, max_entries=0)


class TestThreadSafety:
    def test_concurrent_record_and_check(self, clock: FakeClock) -> None:
        tracker = ErrorTracker(60, clock=clock)
        errors: list[BaseException] = []

        def worker(n: int) -> None:
            try:
                for i in range(200):
                    message = f"worker-{n}-{i}"
                    tracker.record(message)
                    assert tracker.is_duplicate(message) is True
                    tracker.prune()
            except BaseException as e:  # surfaced by the assertion below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(tracker) == 8 * 200
        assert all(
            tracker.is_duplicate(f"worker-{n}-{i}")
            for n in range(8)
            for i in range(200)
        )
