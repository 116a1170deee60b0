"""
Event system for cardwar.

The orchestrator publishes phase changes and round results through an
``EventEmitter`` that it receives at construction time. Presentation code
subscribes with ``on`` and keeps the returned unsubscribe function for as
long as it wants to listen.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, Optional, Union
import logging
import threading
from enum import Enum

# Create a logger for the event system
logger = logging.getLogger("cardwar.events")


class EventPriority(Enum):
    """Priority levels for event handlers."""

    LOW = 0
    NORMAL = 1
    HIGH = 2
    CRITICAL = 3


class WarEventType(Enum):
    """
    Events published by a War session.

    Payloads:
        GAME_STATE_CHANGED: {"new_phase", "previous_phase"}
        ROUND_STARTED: {"round_number"}
        ROUND_COMPLETE: {"result"}
        WAR_STARTED: {"war_depth"}
        WAR_COMPLETED: {}
        SERVER_ERROR: {"message"}
        GAME_STARTED: {"state"}
        GAME_ENDED: {"winner", "abandoned", "state"}
    """

    GAME_STATE_CHANGED = "game_state_changed"
    ROUND_STARTED = "round_started"
    ROUND_COMPLETE = "round_complete"
    WAR_STARTED = "war_started"
    WAR_COMPLETED = "war_completed"
    SERVER_ERROR = "server_error"
    GAME_STARTED = "game_started"
    GAME_ENDED = "game_ended"


class EventEmitter:
    """
    Event emitter with priority-ordered subscriptions.

    Features:
    - Subscriptions return an unsubscribe function
    - Allows once-only subscriptions
    - Supports subscribing to all events with event type filtering in handler
    - Handler errors are logged and never stop delivery to other handlers
    """

    def __init__(self):
        """Initialize the event emitter."""
        self._listeners = defaultdict(list)
        self._global_listeners = []
        self._listener_lock = threading.RLock()

    def on(
        self,
        event_type: Union[str, Enum],
        callback: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable[[], None]:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to subscribe to (string or enum)
            callback: Function to call when event occurs, signature: fn(event_data)
            priority: Priority level for this handler

        Returns:
            Unsubscribe function that can be called to remove this subscription
        """
        event_type = self._key(event_type)
        handler = {"callback": callback, "priority": priority.value}

        with self._listener_lock:
            # Insert handler in order of priority (higher numbers first)
            handlers = self._listeners[event_type]
            for i, existing in enumerate(handlers):
                if existing["priority"] < priority.value:
                    handlers.insert(i, handler)
                    break
            else:
                handlers.append(handler)

        def unsubscribe():
            with self._listener_lock:
                handlers = self._listeners[event_type]
                for i, existing in enumerate(handlers):
                    if existing is handler:
                        handlers.pop(i)
                        break

        return unsubscribe

    def once(
        self,
        event_type: Union[str, Enum],
        callback: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable[[], None]:
        """
        Subscribe to an event type for a single occurrence.

        Returns:
            Unsubscribe function that can be called to remove this subscription
        """
        unsubscribe_ref = []

        def one_time_handler(event_data):
            try:
                callback(event_data)
            finally:
                # Unsubscribe in any case, even if callback raises an exception
                if unsubscribe_ref:
                    unsubscribe_ref[0]()

        unsubscribe_ref.append(self.on(event_type, one_time_handler, priority))
        return unsubscribe_ref[0]

    def on_any(
        self, callback: Callable, priority: EventPriority = EventPriority.NORMAL
    ) -> Callable[[], None]:
        """
        Subscribe to all events.

        Args:
            callback: Function to call for any event, signature: fn((event_type, event_data))
            priority: Priority level for this handler

        Returns:
            Unsubscribe function that can be called to remove this subscription
        """
        handler = {"callback": callback, "priority": priority.value}

        with self._listener_lock:
            for i, existing in enumerate(self._global_listeners):
                if existing["priority"] < priority.value:
                    self._global_listeners.insert(i, handler)
                    break
            else:
                self._global_listeners.append(handler)

        def unsubscribe():
            with self._listener_lock:
                for i, existing in enumerate(self._global_listeners):
                    if existing is handler:
                        self._global_listeners.pop(i)
                        break

        return unsubscribe

    def emit(self, event_type: Union[str, Enum], data: Optional[Dict[str, Any]] = None) -> None:
        """
        Emit an event to all registered listeners.

        Args:
            event_type: The type of event to emit
            data: The data to include with the event
        """
        event_type = self._key(event_type)
        data = data if data is not None else {}

        handlers_to_call = []

        with self._listener_lock:
            for handler in self._listeners.get(event_type, []):
                handlers_to_call.append((handler["callback"], data))

            for handler in self._global_listeners:
                handlers_to_call.append((handler["callback"], (event_type, data)))

        # Call handlers outside of the lock to avoid deadlocks
        for callback, args in handlers_to_call:
            try:
                callback(args)
            except Exception as e:
                logger.error(
                    f"Error in event handler for {event_type}: {e}", exc_info=True
                )

    def listener_count(self, event_type: Optional[Union[str, Enum]] = None) -> int:
        """Number of handlers for one event type, or for all of them."""
        with self._listener_lock:
            if event_type is None:
                return sum(len(h) for h in self._listeners.values()) + len(
                    self._global_listeners
                )
            return len(self._listeners.get(self._key(event_type), []))

    def remove_all_listeners(
        self, event_type: Optional[Union[str, Enum]] = None
    ) -> None:
        """
        Remove all listeners for a specific event type or all events.

        Args:
            event_type: Optional event type. If None, removes all listeners for all events.
        """
        with self._listener_lock:
            if event_type is None:
                self._listeners.clear()
                self._global_listeners.clear()
            else:
                self._listeners[self._key(event_type)].clear()

    @staticmethod
    def _key(event_type: Union[str, Enum]) -> str:
        # Enums are keyed by name so "ROUND_COMPLETE" and the enum are interchangeable
        if isinstance(event_type, Enum):
            return event_type.name
        return event_type
