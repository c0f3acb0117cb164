"""Ordered rule engine and the streaming writer built on top of it."""

from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:
    import collections.abc as cabc
    import re

    from .rules import Rule

_ENCODING: t.Final[str] = "utf-8"
_ERRORS: t.Final[str] = "surrogateescape"


class BinarySink(t.Protocol):
    """Anything accepting raw bytes, such as ``sys.stdout.buffer``.

    ``write`` returns the number of bytes taken, or ``None`` when it took
    them all. Raw streams may take fewer than offered.
    """

    def write(self, data: bytes, /) -> int | None:
        """Write *data* to the underlying stream."""
        ...


class Sanitizer:
    """Apply an ordered sequence of rules to chunks of output.

    Rules run left to right and each rule sees the fully substituted output
    of the rule before it, so an earlier replacement may be matched again by
    a later rule. A rule whose replacement discards turns the entire chunk
    into an empty string and stops the remaining rules from running.

    Parameters
    ----------
    rules : Iterable[Rule]
        Rules in application order.
    """

    def __init__(self, rules: cabc.Iterable[Rule] = ()) -> None:
        self._rules: tuple[Rule, ...] = tuple(rules)

    @property
    def rules(self) -> tuple[Rule, ...]:
        """Return the rules in application order."""
        return self._rules

    def sanitize(self, chunk: str) -> str:
        """Return *chunk* with every rule applied in order."""
        for rule in self._rules:
            replacement = rule.replacement
            if replacement.discards:
                match = rule.pattern.search(chunk)
                if match is None:
                    continue
                replacement.render(match.group(0))
                return ""

            chunk = _substitute(rule.pattern, replacement.render, chunk)
        return chunk

    def sanitize_bytes(self, chunk: bytes) -> bytes:
        """Sanitize raw bytes, passing undecodable bytes through untouched."""
        text = chunk.decode(_ENCODING, _ERRORS)
        return self.sanitize(text).encode(_ENCODING, _ERRORS)

    def writer(self, sink: BinarySink) -> SanitizingWriter:
        """Return a :class:`SanitizingWriter` forwarding to *sink*."""
        return SanitizingWriter(self, sink)


def _substitute(
    pattern: re.Pattern[str],
    render: t.Callable[[str], str],
    chunk: str,
) -> str:
    """Replace every match of *pattern* in *chunk* with ``render(match)``.

    Unlike :func:`re.sub`, an empty match directly after the previous match
    is skipped, so ``x*`` turns ``"abxd"`` into ``"-a-b-d-"`` rather than
    ``"-a-b--d-"``. Rendered text is inserted verbatim.
    """
    pieces: list[str] = []
    last = 0
    previous_end: int | None = None
    for match in pattern.finditer(chunk):
        start, end = match.span()
        if start == end == previous_end:
            continue
        pieces.append(chunk[last:start])
        pieces.append(render(match.group(0)))
        last = previous_end = end
    pieces.append(chunk[last:])
    return "".join(pieces)


class SanitizingWriter:
    """File-like adapter sanitizing every chunk before it reaches ``sink``.

    Each call to :meth:`write` is sanitized on its own; nothing is buffered
    between calls, so a match split across two writes is not detected.
    """

    def __init__(self, sanitizer: Sanitizer, sink: BinarySink) -> None:
        self._sanitizer = sanitizer
        self._sink = sink

    @property
    def sink(self) -> BinarySink:
        """Return the wrapped sink."""
        return self._sink

    def write(self, chunk: bytes) -> int:
        """Sanitize and forward *chunk*, reporting it as fully consumed.

        Partial writes are retried until the sink has taken every sanitized
        byte. Errors raised by the wrapped sink propagate unchanged.
        """
        remaining = self._sanitizer.sanitize_bytes(bytes(chunk))
        while remaining:
            written = self._sink.write(remaining)
            # Buffered and in-memory sinks may return None for a full write.
            if written is None or written >= len(remaining):
                break
            if written <= 0:
                msg = f"sink accepted no bytes of {len(remaining)} pending"
                raise OSError(msg)
            remaining = remaining[written:]
        return len(chunk)

    def flush(self) -> None:
        """Flush the wrapped sink when it supports flushing."""
        flush = getattr(self._sink, "flush", None)
        if flush is not None:
            flush()


__all__ = ["BinarySink", "Sanitizer", "SanitizingWriter"]
