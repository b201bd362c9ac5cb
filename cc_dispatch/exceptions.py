"""Custom exceptions for cc-dispatch.

Classification itself never raises: every ambiguous or unsupported
argument degrades to running the job locally. These exceptions cover
configuration and programming errors only.
"""


class DispatchError(Exception):
    """Base exception for all cc-dispatch errors."""


class ConfigError(DispatchError):
    """Raised when an environment setting has an unusable value."""

    def __init__(self, name: str, value: str, expected: str):
        self.name = name
        self.value = value
        super().__init__(f"Invalid value {value!r} for {name}: expected {expected}")


class RuleConflictError(DispatchError):
    """Raised when two classification rules are registered under one name."""
