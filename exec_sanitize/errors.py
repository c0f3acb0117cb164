"""Custom exception hierarchy for exec-sanitize."""

from __future__ import annotations


class ExecSanitizeError(Exception):
    """Base exception for exec-sanitize failures."""


class ConfigurationError(ExecSanitizeError):
    """Raised when rules or settings are inconsistent."""


class ArgumentError(ConfigurationError):
    """Raised when the command line does not follow the flag grammar."""


class PatternCompileError(ExecSanitizeError):
    """Raised when a pattern cannot be compiled into a regular expression.

    Attributes
    ----------
    pattern : str
        The pattern text handed to :func:`re.compile`.
    """

    def __init__(self, pattern: str, reason: str) -> None:
        msg = f"error parsing pattern {pattern!r}: {reason}"
        super().__init__(msg)
        self.pattern = pattern


class LogPersistenceError(ExecSanitizeError):
    """Raised in strict mode when a matched value cannot be persisted."""

    def __init__(self, key: str, last_exception: Exception) -> None:
        msg = f"failed to persist correlation log entry {key}: {last_exception}"
        super().__init__(msg)
        self.key = key
        self.last_exception = last_exception


class CommandNotFoundError(ExecSanitizeError):
    """Raised when the child command cannot be located."""


class CommandStartError(ExecSanitizeError):
    """Raised when the child command exists but cannot be started."""


__all__ = [
    "ArgumentError",
    "CommandNotFoundError",
    "CommandStartError",
    "ConfigurationError",
    "ExecSanitizeError",
    "LogPersistenceError",
    "PatternCompileError",
]
