"""
Tests for the event bus.

These tests verify the pub/sub mechanism observers use to follow engine
outcomes.
"""

import pytest
from engine.event_bus import Event, EventBus
from engine.events import EventTypes


class TestEvent:
    """Tests for Event class."""

    def test_create_event(self):
        event = Event(event_type="TestEvent", payload={"key": "value"}, source="test")

        assert event.event_type == "TestEvent"
        assert event.source == "test"
        assert event.payload == {"key": "value"}
        assert event.event_id is not None
        assert event.timestamp is not None

    def test_event_ids_are_unique(self):
        event1 = Event(event_type="Test", payload={})
        event2 = Event(event_type="Test", payload={})

        assert event1.event_id != event2.event_id

    def test_event_str(self):
        event = Event(event_type="SaleRecorded", payload={})

        str_repr = str(event)
        assert "SaleRecorded" in str_repr
        assert "state-engine" in str_repr


class TestEventBus:
    """Tests for EventBus pub/sub functionality."""

    @pytest.fixture
    def bus(self):
        return EventBus()

    def test_subscribe_and_publish(self, bus: EventBus):
        received = []
        bus.subscribe("TestEvent", received.append)

        count = bus.publish(Event(event_type="TestEvent", payload={"data": 123}))

        assert count == 1
        assert received[0].payload["data"] == 123

    def test_other_types_are_not_delivered(self, bus: EventBus):
        received = []
        bus.subscribe("A", received.append)

        bus.publish(Event(event_type="B", payload={}))

        assert received == []

    def test_subscribe_all(self, bus: EventBus):
        received = []
        bus.subscribe_all(received.append)

        bus.publish(Event(event_type="A", payload={}))
        bus.publish(Event(event_type="B", payload={}))

        assert [e.event_type for e in received] == ["A", "B"]

    def test_unsubscribe(self, bus: EventBus):
        received = []
        bus.subscribe("A", received.append)

        assert bus.unsubscribe("A", received.append) is True
        assert bus.unsubscribe("A", received.append) is False

        bus.publish(Event(event_type="A", payload={}))
        assert received == []

    def test_failing_handler_does_not_stop_others(self, bus: EventBus):
        received = []

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe("A", broken)
        bus.subscribe("A", received.append)

        assert bus.publish(Event(event_type="A", payload={})) == 2
        assert len(received) == 1

    def test_event_log(self, bus: EventBus):
        bus.publish(Event(event_type="A", payload={}))
        bus.set_logging(False)
        bus.publish(Event(event_type="B", payload={}))

        assert [e.event_type for e in bus.get_event_log()] == ["A"]
        bus.clear_event_log()
        assert bus.get_event_log() == []

    def test_event_log_is_bounded(self):
        bus = EventBus(max_log_size=2)

        for name in ("A", "B", "C"):
            bus.publish(Event(event_type=name, payload={}))

        assert [e.event_type for e in bus.get_event_log()] == ["B", "C"]

    def test_subscriber_count(self, bus: EventBus):
        bus.subscribe("A", lambda e: None)
        bus.subscribe("A", lambda e: None)

        assert bus.get_subscriber_count("A") == 2
        bus.clear_subscribers()
        assert bus.get_subscriber_count("A") == 0


class TestEngineEvents:
    """The engine publishes exactly one event per operation."""

    def test_one_event_per_operation(self, engine, event_bus: EventBus):
        engine.add_category("A", "📦")
        engine.delete_category("1")
        engine.add_sale("p3", 99)
        engine.delete_product("ghost")

        assert [e.event_type for e in event_bus.get_event_log()] == [
            EventTypes.CATEGORY_CREATED,
            EventTypes.CATEGORY_DELETE_BLOCKED,
            EventTypes.SALE_INSUFFICIENT_STOCK,
            EventTypes.PRODUCT_DELETE_NOT_FOUND,
        ]

    def test_observer_sees_applied_state(self, engine, event_bus: EventBus):
        """Handlers run after the change is in place."""
        seen = []
        event_bus.subscribe(
            EventTypes.SALE_RECORDED,
            lambda e: seen.append(engine.get_product(e.payload["product_id"]).stock),
        )

        engine.add_sale("p3", 2)

        assert seen == [6]

    def test_failing_observer_cannot_undo_a_sale(self, engine, event_bus: EventBus):
        def broken(event):
            raise RuntimeError("view crashed")

        event_bus.subscribe_all(broken)

        result = engine.add_sale("p3", 2)

        assert result.success is True
        assert engine.get_product("p3").stock == 6
