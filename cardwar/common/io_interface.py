"""
This module contains the IOInterface abstract base class and its implementations.
"""

from abc import ABC, abstractmethod
from typing import List


class IOInterface(ABC):
    """
    Abstract base class for an output channel.

    Adapters write their text through an IOInterface so the same rendering
    code can target the console or a list captured in tests.
    """

    @abstractmethod
    def output(self, message: str) -> None:
        """Output a message to the interface."""
        pass


class DummyIOInterface(IOInterface):
    """Discards everything. Used for silent batch runs."""

    def output(self, message: str) -> None:
        pass


class TestIOInterface(IOInterface):
    """Keeps every message in ``self.output_messages`` for inspection."""

    __test__ = False

    def __init__(self):
        self.output_messages: List[str] = []

    def output(self, message: str) -> None:
        self.output_messages.append(message)


class ConsoleIOInterface(IOInterface):
    """Writes to standard output."""

    def output(self, message: str) -> None:
        print(message)
