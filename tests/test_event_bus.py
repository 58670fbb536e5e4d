"""Tests for the in-memory synchronous EventBus."""

import logging

from postseason.core.event_bus import EventBus


class TestEventBusPublish:
    def test_publish_no_subscribers(self):
        bus = EventBus()
        count = bus.publish("test.event", {"key": "value"})
        assert count == 0

    def test_publish_to_typed_subscriber(self):
        bus = EventBus()

        with bus.subscribe("test.event") as sub:
            bus.publish("test.event", {"n": 1})
            event = sub.get()

        assert event is not None
        assert event["type"] == "test.event"
        assert event["data"]["n"] == 1

    def test_publish_to_wildcard_subscriber(self):
        bus = EventBus()

        with bus.subscribe(None) as sub:
            bus.publish("playoffs.game_completed", {"id": "g-1"})
            bus.publish("playoffs.series_completed", {"id": "s-1"})
            received = sub.drain()

        assert [e["type"] for e in received] == [
            "playoffs.game_completed",
            "playoffs.series_completed",
        ]

    def test_typed_subscriber_filters(self):
        bus = EventBus()

        with bus.subscribe("playoffs.game_completed") as sub:
            bus.publish("playoffs.phase_changed", {"to_phase": "finals"})
            bus.publish("playoffs.game_completed", {"id": "g-1"})

            event = sub.get()
            assert event["type"] == "playoffs.game_completed"
            assert sub.get() is None

    def test_publish_returns_delivery_count(self):
        bus = EventBus()
        bus.on("a", lambda e: None)
        with bus.subscribe("a"), bus.subscribe(None):
            assert bus.publish("a", {}) == 3
            assert bus.publish("b", {}) == 1


class TestEventBusHandlers:
    def test_handlers_receive_events_in_order(self):
        bus = EventBus()
        received = []
        bus.on(None, received.append)
        for n in range(3):
            bus.publish("tick", {"n": n})
        assert [e["data"]["n"] for e in received] == [0, 1, 2]

    def test_off_removes_handler(self):
        bus = EventBus()
        received = []
        bus.on("tick", received.append)
        bus.off("tick", received.append)
        bus.off("tick", received.append)  # unknown handlers are ignored
        bus.publish("tick", {})
        assert received == []
        assert bus.subscriber_count == 0

    def test_failing_handler_does_not_block_others(self, caplog):
        bus = EventBus()
        received = []

        def broken(envelope):
            raise RuntimeError("boom")

        bus.on("tick", broken)
        bus.on("tick", received.append)
        with caplog.at_level(logging.ERROR):
            count = bus.publish("tick", {})

        assert count == 1
        assert len(received) == 1
        assert "event_handler_failed" in caplog.text


class TestEventBusSubscription:
    def test_subscriber_count(self):
        bus = EventBus()
        assert bus.subscriber_count == 0

        with bus.subscribe("a"):
            assert bus.subscriber_count == 1
            with bus.subscribe("b"):
                assert bus.subscriber_count == 2
            assert bus.subscriber_count == 1
        assert bus.subscriber_count == 0

    def test_wildcard_subscriber_count(self):
        bus = EventBus()
        with bus.subscribe(None):
            assert bus.subscriber_count == 1
        assert bus.subscriber_count == 0

    def test_unsubscribed_gets_nothing(self):
        bus = EventBus()
        sub = bus.subscribe("a")
        with sub:
            pass
        bus.publish("a", {})
        assert len(sub) == 0

    def test_full_subscriber_drops_and_warns(self, caplog):
        bus = EventBus()
        with bus.subscribe("a", max_size=2) as sub, caplog.at_level(logging.WARNING):
            for n in range(3):
                bus.publish("a", {"n": n})
            assert [e["data"]["n"] for e in sub] == [0, 1]
        assert "Dropping event a for slow subscriber" in caplog.text
