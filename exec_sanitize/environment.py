"""Settings read from ``EXEC_SANITIZE_*`` environment variables."""

from __future__ import annotations

import dataclasses as dc
import logging
import os
import typing as t
from pathlib import Path

from ._validators import validate_positive_int
from .errors import ConfigurationError

if t.TYPE_CHECKING:
    import collections.abc as cabc

EXEC_SANITIZE_LOG_DIR_ENV = "EXEC_SANITIZE_LOG_DIR"
EXEC_SANITIZE_CHUNK_SIZE_ENV = "EXEC_SANITIZE_CHUNK_SIZE"
EXEC_SANITIZE_STRICT_LOG_ENV = "EXEC_SANITIZE_STRICT_LOG"
EXEC_SANITIZE_LOG_LEVEL_ENV = "EXEC_SANITIZE_LOG_LEVEL"

DEFAULT_CHUNK_SIZE: t.Final[int] = 32 * 1024
DEFAULT_LOG_LEVEL: t.Final[str] = "WARNING"

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"", "0", "false", "no", "off"})


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    msg = f"{name} must be a boolean flag, got {raw!r}"
    raise ConfigurationError(msg)


def _parse_chunk_size(raw: str) -> int:
    try:
        value = int(raw)
        validate_positive_int(value, name=EXEC_SANITIZE_CHUNK_SIZE_ENV)
    except (TypeError, ValueError) as exc:
        msg = f"invalid {EXEC_SANITIZE_CHUNK_SIZE_ENV}: {raw!r}"
        raise ConfigurationError(msg) from exc
    return value


def _parse_log_level(raw: str) -> int:
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        msg = f"invalid {EXEC_SANITIZE_LOG_LEVEL_ENV}: {raw!r}"
        raise ConfigurationError(msg)
    return level


@dc.dataclass(frozen=True, slots=True)
class Settings:
    """Runtime settings that do not come from the rule grammar.

    Attributes
    ----------
    log_dir : Path | None
        Default correlation log directory used when ``-log`` is absent.
    chunk_size : int
        Maximum number of bytes read from a child pipe per write.
    strict_log : bool
        Abort on correlation log persistence failures.
    log_level : int
        Level for the package's own diagnostics.
    """

    log_dir: Path | None = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    strict_log: bool = False
    log_level: int = logging.WARNING

    def __post_init__(self) -> None:
        """Validate setting values."""
        validate_positive_int(self.chunk_size, name="chunk_size")

    @classmethod
    def from_env(cls, environ: cabc.Mapping[str, str] | None = None) -> Settings:
        """Read settings from *environ* (defaults to :data:`os.environ`).

        Raises
        ------
        ConfigurationError
            If any variable holds an unusable value.
        """
        env = os.environ if environ is None else environ
        log_dir_raw = env.get(EXEC_SANITIZE_LOG_DIR_ENV, "")
        return cls(
            log_dir=Path(log_dir_raw) if log_dir_raw else None,
            chunk_size=_parse_chunk_size(
                env.get(EXEC_SANITIZE_CHUNK_SIZE_ENV, str(DEFAULT_CHUNK_SIZE))
            ),
            strict_log=_parse_bool(
                EXEC_SANITIZE_STRICT_LOG_ENV, env.get(EXEC_SANITIZE_STRICT_LOG_ENV, "")
            ),
            log_level=_parse_log_level(
                env.get(EXEC_SANITIZE_LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)
            ),
        )


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "EXEC_SANITIZE_CHUNK_SIZE_ENV",
    "EXEC_SANITIZE_LOG_DIR_ENV",
    "EXEC_SANITIZE_LOG_LEVEL_ENV",
    "EXEC_SANITIZE_STRICT_LOG_ENV",
    "Settings",
]
