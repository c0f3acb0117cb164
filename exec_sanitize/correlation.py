"""Correlation logging: record original matched text under sequential keys.

When a log destination is configured, every replacement is wrapped so that
each match consumes the next index from a counter shared by all rules. The
original text is persisted under the decimal form of that index and the
index is spliced into the first placeholder of the replacement, letting a
reader of the sanitized output look up what was removed.
"""

from __future__ import annotations

import logging
import threading
import typing as t
from pathlib import Path

from .errors import LogPersistenceError
from .rules import PLACEHOLDER, Logged

if t.TYPE_CHECKING:
    from .rules import Replacement

logger = logging.getLogger(__name__)

_ENCODING: t.Final[str] = "utf-8"
_ERRORS: t.Final[str] = "surrogateescape"


@t.runtime_checkable
class LogSink(t.Protocol):
    """Key-value store receiving original matched text."""

    def put(self, key: str, value: bytes) -> None:
        """Persist *value* under *key*."""
        ...


class DirectoryLogSink:
    """Store each entry as a file named after its key inside ``directory``.

    The directory is created on the first write, so constructing a sink has
    no filesystem side effects.
    """

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)
        self._created = False

    @property
    def directory(self) -> Path:
        """Return the directory holding the log entries."""
        return self._directory

    def put(self, key: str, value: bytes) -> None:
        """Write *value* to ``directory / key``."""
        if not self._created:
            self._directory.mkdir(parents=True, exist_ok=True)
            self._created = True
        (self._directory / key).write_bytes(value)


class MemoryLogSink:
    """Thread-safe in-memory sink, mostly useful for embedding and tests."""

    def __init__(self) -> None:
        self._entries: dict[str, bytes] = {}
        self._lock = threading.Lock()

    @property
    def entries(self) -> dict[str, bytes]:
        """Return a snapshot of the stored entries."""
        with self._lock:
            return dict(self._entries)

    def put(self, key: str, value: bytes) -> None:
        """Store *value* under *key*."""
        with self._lock:
            self._entries[key] = value


ErrorHook: t.TypeAlias = t.Callable[[str, Exception], None]


class CorrelationLogger:
    """Assign sequential indices to matches and persist the original text.

    Parameters
    ----------
    sink : LogSink
        Destination for the original matched text.
    placeholder : str
        Character replaced by the index in rendered replacements. Only the
        first occurrence is substituted.
    strict : bool
        Raise :class:`~exec_sanitize.errors.LogPersistenceError` when the
        sink fails instead of logging a warning and carrying on.
    on_error : Callable[[str, Exception], None] | None
        Called with the key and exception whenever the sink fails, before
        the strictness policy is applied.
    """

    def __init__(
        self,
        sink: LogSink,
        *,
        placeholder: str = PLACEHOLDER,
        strict: bool = False,
        on_error: ErrorHook | None = None,
    ) -> None:
        if not placeholder:
            msg = "placeholder must be a non-empty string"
            raise ValueError(msg)
        self._sink = sink
        self._placeholder = placeholder
        self._strict = strict
        self._on_error = on_error
        self._next_index = 0
        # Index assignment and persistence form a single critical section so
        # that writers on different relay threads never share an index.
        self._lock = threading.Lock()

    @property
    def sink(self) -> LogSink:
        """Return the configured sink."""
        return self._sink

    @property
    def next_index(self) -> int:
        """Return the index the next recorded match will receive."""
        with self._lock:
            return self._next_index

    def wrap(self, replacement: Replacement) -> Logged:
        """Return *replacement* wrapped so each match is recorded."""
        return Logged(replacement, self)

    def record(self, matched: str, rendered: str) -> str:
        """Persist *matched* under a fresh index and splice it into *rendered*.

        Returns
        -------
        str
            *rendered* with its first placeholder replaced by the index, or
            *rendered* unchanged when it has no placeholder.

        Raises
        ------
        LogPersistenceError
            If the sink fails and the logger is strict.
        """
        with self._lock:
            index = self._next_index
            self._next_index += 1
            key = str(index)
            try:
                self._sink.put(key, matched.encode(_ENCODING, _ERRORS))
            except Exception as exc:  # noqa: BLE001 - sinks are pluggable
                self._handle_failure(key, exc)

        return rendered.replace(self._placeholder, key, 1)

    def _handle_failure(self, key: str, exc: Exception) -> None:
        if self._on_error is not None:
            self._on_error(key, exc)
        if self._strict:
            raise LogPersistenceError(key, exc) from exc
        logger.warning("Could not persist correlation log entry %s: %s", key, exc)


__all__ = [
    "CorrelationLogger",
    "DirectoryLogSink",
    "ErrorHook",
    "LogSink",
    "MemoryLogSink",
]
