"""
Presentation adapters for cardwar.

This package provides adapters that subscribe to a session's events and
render them to a platform (console, a transcript file, or memory for tests).
"""

from cardwar.adapters.base import PlatformAdapter
from cardwar.adapters.cli import CLIAdapter
from cardwar.adapters.dummy import DummyAdapter
from cardwar.adapters.transcript import TranscriptAdapter

__all__ = ["PlatformAdapter", "CLIAdapter", "DummyAdapter", "TranscriptAdapter"]
