import pytest

from mock_tracker import MockUDPTracker, standard_handler


@pytest.fixture
def mock_tracker():
    trackers = []

    def factory(handler=None):
        tracker = MockUDPTracker(handler or standard_handler()).start()
        trackers.append(tracker)
        return tracker

    yield factory

    for tracker in trackers:
        tracker.stop()
