import pytest

from memoassist.events import Event, TaskEventBus, default_bus


def test_publish_calls_handlers_in_order_and_returns_results():
    bus = TaskEventBus()
    calls = []

    def first(task):
        calls.append(("first", task))
        return 1

    def second(task):
        calls.append(("second", task))
        return 2

    bus.subscribe(Event.TASK_ADDED, first)
    bus.subscribe(Event.TASK_ADDED, second)
    assert bus.publish(Event.TASK_ADDED, "t") == [1, 2]
    assert calls == [("first", "t"), ("second", "t")]


def test_events_are_separate():
    bus = TaskEventBus()
    seen = []
    bus.subscribe(Event.TASK_DELETED, seen.append)
    assert bus.publish(Event.TASK_ADDED, "x") == []
    assert seen == []


def test_publish_without_arguments():
    bus = TaskEventBus()
    counter = []
    bus.subscribe(Event.DATABASE_CHANGED, lambda: counter.append(True))
    bus.publish(Event.DATABASE_CHANGED)
    bus.publish(Event.DATABASE_CHANGED)
    assert len(counter) == 2


def test_unsubscribe_stops_delivery():
    bus = TaskEventBus()
    seen = []
    bus.subscribe(Event.TASK_CHANGED, seen.append)
    bus.unsubscribe(Event.TASK_CHANGED, seen.append)
    bus.publish(Event.TASK_CHANGED, 5)
    assert seen == []


def test_unsubscribe_unknown_handler_raises():
    bus = TaskEventBus()
    with pytest.raises(ValueError):
        bus.unsubscribe(Event.TASK_CHANGED, print)


def test_default_bus_is_shared():
    received = []

    def handler(value):
        received.append(value)
        return "handled"

    default_bus().subscribe(Event.TASK_CHANGED, handler)
    try:
        results = default_bus().publish(Event.TASK_CHANGED, "shared")
    finally:
        default_bus().unsubscribe(Event.TASK_CHANGED, handler)
    assert received == ["shared"]
    assert "handled" in results