from core.events.topics import OverlayTopic, PublishesOverlayEvents
from modules.los.results import LOSMode
from modules.los.system import LineOfSightSystem
from tests.helpers.events import RecordingBus


def test_topic_names_are_stable():
    assert OverlayTopic.OVERLAY_CHANGED.value == "OverlayChanged"
    assert OverlayTopic.OBSERVERS_CHANGED.value == "ObserversChanged"
    assert OverlayTopic.SCAN_COMPLETED.value == "ScanCompleted"
    assert OverlayTopic("ScanCompleted") is OverlayTopic.SCAN_COMPLETED


def test_any_object_with_publish_is_a_publisher():
    assert isinstance(RecordingBus(), PublishesOverlayEvents)
    assert not isinstance(object(), PublishesOverlayEvents)


def test_combined_scan_publishes_every_observer(open_grid, simple_model):
    bus = RecordingBus()
    los = LineOfSightSystem(open_grid, simple_model, event_bus=bus)
    combined = los.combined_scan([(1, 1), (8, 8)], LOSMode.STATIC, 2)
    assert bus.events == [
        (
            OverlayTopic.SCAN_COMPLETED,
            {"observers": ((1, 1), (8, 8)), "cell_count": len(combined)},
        )
    ]


def test_no_publisher_means_no_events(open_grid, simple_model):
    los = LineOfSightSystem(open_grid, simple_model)
    assert los.scan((1, 1), LOSMode.STATIC, 2)
