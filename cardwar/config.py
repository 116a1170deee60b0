"""
Configuration for a cardwar session.

All knobs live in one flat, frozen ``WarConfig``. ``WarConfig.from_dict``
merges a user-supplied dictionary over the defaults and accepts either the
snake_case field names or the camelCase option names used by clients
(``minNetworkDelay``, ``errorChance`` and so on).
"""

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Optional


class InvalidConfigError(ValueError):
    """Raised when a configuration value is out of range."""

    pass


# Client-facing option names mapped to WarConfig fields
OPTION_ALIASES = {
    "minNetworkDelay": "min_network_delay",
    "maxNetworkDelay": "max_network_delay",
    "timeoutChance": "timeout_chance",
    "errorChance": "error_chance",
    "timeoutDuration": "timeout_duration",
    "maxRetryAttempts": "max_retry_attempts",
    "retryBaseDelay": "retry_base_delay",
    "retryMaxDelay": "retry_max_delay",
    "warSettleDelay": "war_settle_delay",
    "roundSettleDelay": "round_settle_delay",
}


@dataclass(frozen=True)
class WarConfig:
    """
    Tunable settings for the simulated server, retries and phase timing.

    Attributes:
        min_network_delay: Lower bound of the simulated latency, in seconds
        max_network_delay: Upper bound of the simulated latency, in seconds
        timeout_chance: Probability that a call times out instead of running
        error_chance: Probability that a call fails with a server error
        timeout_duration: How long a simulated timeout takes, in seconds
        max_retry_attempts: Attempts per logical operation, first one included
        retry_base_delay: Base of the exponential backoff, in seconds
        retry_max_delay: Upper bound of a single backoff wait, in seconds
        war_settle_delay: Pause in the War phase before play resumes
        round_settle_delay: Pause in the RoundComplete phase before play resumes
    """

    min_network_delay: float = 0.1
    max_network_delay: float = 2.0
    timeout_chance: float = 0.02
    error_chance: float = 0.05
    timeout_duration: float = 5.0
    max_retry_attempts: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 10.0
    war_settle_delay: float = 1.0
    round_settle_delay: float = 0.5

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check every value is usable.

        Raises:
            InvalidConfigError: If a value is negative, a probability is
                outside [0, 1], the delay bounds are inverted or the retry
                budget is below one attempt.
        """
        for name in (
            "min_network_delay",
            "max_network_delay",
            "timeout_duration",
            "retry_base_delay",
            "retry_max_delay",
            "war_settle_delay",
            "round_settle_delay",
        ):
            if getattr(self, name) < 0:
                raise InvalidConfigError(f"{name} must not be negative")

        for name in ("timeout_chance", "error_chance"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidConfigError(f"{name} must be between 0 and 1, got {value}")

        if self.min_network_delay > self.max_network_delay:
            raise InvalidConfigError(
                "min_network_delay must not exceed max_network_delay"
            )

        if self.max_retry_attempts < 1:
            raise InvalidConfigError("max_retry_attempts must be at least 1")

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]] = None) -> "WarConfig":
        """
        Build a config from defaults updated with ``config``.

        Unknown keys are rejected so that typos do not silently fall back to
        defaults.
        """
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}

        for key, value in (config or {}).items():
            name = OPTION_ALIASES.get(key, key)
            if name not in known:
                raise InvalidConfigError(f"Unknown configuration option: {key}")
            values[name] = value

        return cls(**values)

    def with_overrides(self, **overrides: Any) -> "WarConfig":
        """Return a copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
