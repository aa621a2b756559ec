# tests/unit/core/test_player_event_bus.py
"""Tests for PlayerEventBus."""

import pytest

from playbridge.contracts.events import PlayerEvent, TimeParams
from playbridge.core.events import PlayerEventBus
from playbridge.telemetry.protocols import PlayerHandle


class TestPlayerEventBus:
    def test_satisfies_player_handle(self) -> None:
        assert isinstance(PlayerEventBus(), PlayerHandle)

    def test_subscribe_and_emit(self) -> None:
        bus = PlayerEventBus()
        received: list[TimeParams] = []

        bus.on(PlayerEvent.TIME, received.append)
        bus.emit(PlayerEvent.TIME, TimeParams(position=1.0, duration=10.0))

        assert received == [TimeParams(position=1.0, duration=10.0)]

    def test_handlers_called_in_subscription_order(self) -> None:
        bus = PlayerEventBus()
        order: list[str] = []

        bus.on(PlayerEvent.COMPLETE, lambda _p: order.append("first"))
        bus.on(PlayerEvent.COMPLETE, lambda _p: order.append("second"))
        bus.emit(PlayerEvent.COMPLETE)

        assert order == ["first", "second"]

    def test_string_event_names_accepted(self) -> None:
        bus = PlayerEventBus()
        received: list[object] = []

        bus.on("item-ready", received.append)  # type: ignore[arg-type]
        bus.emit(PlayerEvent.ITEM_READY, {"index": 0})

        assert received == [{"index": 0}]

    def test_emit_without_handlers_is_noop(self) -> None:
        PlayerEventBus().emit(PlayerEvent.SEEKED)

    def test_off_for_unknown_handler_is_safe(self) -> None:
        bus = PlayerEventBus()
        bus.off(PlayerEvent.TIME, print)
        bus.on(PlayerEvent.TIME, len)
        bus.off(PlayerEvent.TIME, print)

        assert bus.handler_count(PlayerEvent.TIME) == 1

    def test_off_removes_one_registration(self) -> None:
        bus = PlayerEventBus()
        received: list[object] = []
        bus.on(PlayerEvent.SEEKED, received.append)
        bus.on(PlayerEvent.SEEKED, received.append)

        bus.off(PlayerEvent.SEEKED, received.append)
        bus.emit(PlayerEvent.SEEKED, "x")

        assert received == ["x"]

    def test_handler_may_unsubscribe_during_dispatch(self) -> None:
        bus = PlayerEventBus()
        calls: list[str] = []

        def once(_payload: object) -> None:
            calls.append("once")
            bus.off(PlayerEvent.TIME, once)

        bus.on(PlayerEvent.TIME, once)
        bus.on(PlayerEvent.TIME, lambda _p: calls.append("always"))
        bus.emit(PlayerEvent.TIME)
        bus.emit(PlayerEvent.TIME)

        assert calls == ["once", "always", "always"]

    def test_handler_exceptions_propagate(self) -> None:
        bus = PlayerEventBus()

        def boom(_payload: object) -> None:
            raise RuntimeError("handler failed")

        bus.on(PlayerEvent.COMPLETE, boom)
        with pytest.raises(RuntimeError, match="handler failed"):
            bus.emit(PlayerEvent.COMPLETE)

    def test_duration(self) -> None:
        bus = PlayerEventBus(duration=90.0)
        assert bus.get_duration() == 90.0
        bus.set_duration(120.0)
        assert bus.get_duration() == 120.0

    def test_handler_count(self) -> None:
        bus = PlayerEventBus()
        bus.on(PlayerEvent.TIME, len)
        bus.on(PlayerEvent.SEEK, len)

        assert bus.handler_count() == 2
        assert bus.handler_count(PlayerEvent.SEEK) == 1
        assert bus.handler_count(PlayerEvent.COMPLETE) == 0
