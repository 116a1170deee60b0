"""
Event system for cardwar.

This package provides the event emitter that connects a War session to the
presentation layer.
"""

from cardwar.events.emitter import EventEmitter, EventPriority, WarEventType

__all__ = ["EventEmitter", "EventPriority", "WarEventType"]
