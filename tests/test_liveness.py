from __future__ import annotations

from pingwatch.core import LivenessTracker
from pingwatch.models import Device, Direction, TransitionEvent


def _tracker(threshold: int = 3) -> tuple[LivenessTracker, dict[str, int]]:
    setting = {"threshold": threshold}
    return LivenessTracker(lambda: setting["threshold"]), setting


def test_misses_count_up_and_reset_on_success():
    tracker, _ = _tracker()
    for k in range(1, 6):
        tracker.record_probe_result(1, False)
        assert tracker.consecutive_misses(1) == k

    tracker.record_probe_result(1, True)
    assert tracker.consecutive_misses(1) == 0


def test_down_fires_once_at_threshold():
    tracker, _ = _tracker(3)
    events = [tracker.record_probe_result(1, False) for _ in range(6)]

    assert events[:2] == [None, None]
    assert events[2] == TransitionEvent(device_id=1, direction=Direction.DOWN)
    assert events[3:] == [None, None, None]
    assert not tracker.is_reachable(1)


def test_up_fires_once_after_down():
    tracker, _ = _tracker(2)
    tracker.record_probe_result(1, False)
    tracker.record_probe_result(1, False)

    assert tracker.record_probe_result(1, True) == TransitionEvent(
        device_id=1, direction=Direction.UP
    )
    assert tracker.record_probe_result(1, True) is None
    assert tracker.is_reachable(1)


def test_steady_reachable_device_never_notifies():
    tracker, _ = _tracker()
    assert all(tracker.record_probe_result(1, True) is None for _ in range(5))


def test_first_failed_probe_waits_for_threshold():
    # Older revisions reported DOWN on the very first failed probe of a new
    # device; the hysteresis applies to first observations too.
    tracker, _ = _tracker(3)
    assert tracker.record_probe_result(7, False) is None
    assert tracker.is_reachable(7)


def test_first_failed_probe_with_threshold_one_is_down():
    tracker, _ = _tracker(1)
    event = tracker.record_probe_result(7, False)
    assert event == TransitionEvent(device_id=7, direction=Direction.DOWN)


def test_first_successful_probe_is_not_an_up_transition():
    tracker, _ = _tracker(1)
    assert tracker.record_probe_result(7, True) is None


def test_intermittent_loss_below_threshold_does_not_flap():
    tracker, _ = _tracker(3)
    outcomes = [False, False, True, False, False, True, False]
    assert all(tracker.record_probe_result(1, ok) is None for ok in outcomes)


def test_threshold_is_read_live():
    tracker, setting = _tracker(5)
    for _ in range(3):
        assert tracker.record_probe_result(1, False) is None

    setting["threshold"] = 4
    event = tracker.record_probe_result(1, False)
    assert event is not None and event.direction is Direction.DOWN


def test_closed_tracker_discards_results():
    tracker, _ = _tracker(1)
    tracker.close()
    assert tracker.record_probe_result(1, False) is None
    assert tracker.consecutive_misses(1) == 0


def test_sync_tracks_new_devices_and_forgets_removed_ones():
    tracker, _ = _tracker()
    a = Device(id=1, name="a", address="10.0.0.1")
    b = Device(id=2, name="b", address="10.0.0.2")

    tracker.sync([a, b])
    record = tracker.record(2)
    assert record is not None and record.consecutive_misses == 0

    tracker.record_probe_result(1, False)
    tracker.sync([a])
    assert tracker.record(2) is None
    assert tracker.consecutive_misses(1) == 1


def test_unknown_device_reads_as_reachable():
    tracker, _ = _tracker()
    assert tracker.is_reachable(99)
    assert tracker.consecutive_misses(99) == 0


def test_partition_splits_up_and_down():
    tracker, _ = _tracker(1)
    a = Device(id=1, name="a", address="10.0.0.1")
    b = Device(id=2, name="b", address="10.0.0.2")
    tracker.record_probe_result(2, False)

    up, down = tracker.partition([a, b])
    assert up == [a]
    assert down == [b]
