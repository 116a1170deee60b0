"""
Simulated remote boundary for cardwar.

This package provides the in-process War server, the response envelope it
returns, and the retry controller that calls it.
"""

from cardwar.network.response import ErrorKind, ServerResponse
from cardwar.network.retry import RetryController, backoff_delay, is_retryable_error
from cardwar.network.server import SimulatedWarServer

__all__ = [
    "ErrorKind",
    "ServerResponse",
    "RetryController",
    "backoff_delay",
    "is_retryable_error",
    "SimulatedWarServer",
]
