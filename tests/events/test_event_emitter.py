"""
Tests for the event system.

This module contains tests for the EventEmitter class to ensure it provides
the expected behavior for event handling.
"""

from unittest.mock import MagicMock

from cardwar.events import EventEmitter, EventPriority, WarEventType


def test_on_with_string_event_type():
    """Test subscribing to an event with a string event type."""
    emitter = EventEmitter()
    callback = MagicMock()

    unsubscribe = emitter.on("test_event", callback)

    test_data = {"value": "test"}
    emitter.emit("test_event", test_data)
    callback.assert_called_once_with(test_data)

    # Unsubscribe and emit again
    unsubscribe()
    emitter.emit("test_event", {"value": "test2"})
    callback.assert_called_once()


def test_enum_and_name_are_interchangeable():
    emitter = EventEmitter()
    callback = MagicMock()

    emitter.on(WarEventType.ROUND_COMPLETE, callback)
    emitter.emit("ROUND_COMPLETE", {"result": None})

    callback.assert_called_once_with({"result": None})


def test_emit_without_data_sends_empty_dict():
    emitter = EventEmitter()
    callback = MagicMock()
    emitter.on(WarEventType.WAR_COMPLETED, callback)

    emitter.emit(WarEventType.WAR_COMPLETED)

    callback.assert_called_once_with({})


def test_priority_order():
    """Higher priority handlers run first."""
    emitter = EventEmitter()
    calls = []

    emitter.on("evt", lambda data: calls.append("low"), EventPriority.LOW)
    emitter.on("evt", lambda data: calls.append("critical"), EventPriority.CRITICAL)
    emitter.on("evt", lambda data: calls.append("normal"))
    emitter.on("evt", lambda data: calls.append("high"), EventPriority.HIGH)

    emitter.emit("evt")

    assert calls == ["critical", "high", "normal", "low"]


def test_once():
    """Test subscribing to an event for a single occurrence."""
    emitter = EventEmitter()
    callback = MagicMock()

    emitter.once(WarEventType.GAME_ENDED, callback)
    emitter.emit(WarEventType.GAME_ENDED, {"winner": None})
    emitter.emit(WarEventType.GAME_ENDED, {"winner": None})

    callback.assert_called_once()
    assert emitter.listener_count(WarEventType.GAME_ENDED) == 0


def test_on_any_receives_event_name_and_data():
    emitter = EventEmitter()
    callback = MagicMock()

    unsubscribe = emitter.on_any(callback)
    emitter.emit(WarEventType.SERVER_ERROR, {"message": "boom"})

    callback.assert_called_once_with(("SERVER_ERROR", {"message": "boom"}))
    unsubscribe()
    emitter.emit(WarEventType.SERVER_ERROR, {"message": "again"})
    callback.assert_called_once()


def test_handler_error_does_not_stop_delivery():
    emitter = EventEmitter()
    failing = MagicMock(side_effect=RuntimeError("handler bug"))
    callback = MagicMock()

    emitter.on("evt", failing, EventPriority.HIGH)
    emitter.on("evt", callback)
    emitter.emit("evt", {"x": 1})

    failing.assert_called_once()
    callback.assert_called_once_with({"x": 1})


def test_same_callback_subscribed_twice_unsubscribes_separately():
    emitter = EventEmitter()
    callback = MagicMock()

    first = emitter.on("evt", callback)
    emitter.on("evt", callback)
    first()
    emitter.emit("evt")

    callback.assert_called_once()


def test_listener_count_and_remove_all():
    emitter = EventEmitter()
    emitter.on(WarEventType.ROUND_STARTED, MagicMock())
    emitter.on(WarEventType.ROUND_COMPLETE, MagicMock())
    emitter.on_any(MagicMock())

    assert emitter.listener_count(WarEventType.ROUND_STARTED) == 1
    assert emitter.listener_count() == 3

    emitter.remove_all_listeners(WarEventType.ROUND_STARTED)
    assert emitter.listener_count(WarEventType.ROUND_STARTED) == 0

    emitter.remove_all_listeners()
    assert emitter.listener_count() == 0
