"""Rule and replacement types applied by the sanitizer.

A :class:`Rule` pairs a compiled pattern with a :class:`Replacement`. The
replacement is a small tagged variant so the engine never has to compare
rendered text against magic strings to decide whether a chunk is discarded:

* :class:`Literal` substitutes fixed text.
* :class:`Computed` substitutes the result of a callable.
* :class:`Discard` deletes the whole chunk on the first match.
* :class:`Logged` wraps any of the above and records each match through a
  :class:`~exec_sanitize.correlation.CorrelationLogger`.
"""

from __future__ import annotations

import abc
import dataclasses as dc
import re
import typing as t

if t.TYPE_CHECKING:
    from .correlation import CorrelationLogger

DISCARD_TOKEN: t.Final[str] = "@discard"
DISCARD_TOKEN_ESCAPED: t.Final[str] = "@@discard"
PLACEHOLDER: t.Final[str] = "*"


class Replacement(abc.ABC):
    """Policy describing what a matched substring turns into."""

    @property
    def discards(self) -> bool:
        """Return ``True`` when a match deletes the entire chunk."""
        return False

    @abc.abstractmethod
    def render(self, matched: str) -> str:
        """Return the text substituted for *matched*."""


@dc.dataclass(frozen=True, slots=True)
class Literal(Replacement):
    """Substitute every match with ``text`` verbatim."""

    text: str = ""

    def render(self, matched: str) -> str:
        """Return the fixed replacement text."""
        return self.text


@dc.dataclass(frozen=True, slots=True)
class Computed(Replacement):
    """Substitute every match with ``func(matched)``."""

    func: t.Callable[[str], str]

    def render(self, matched: str) -> str:
        """Return the computed replacement for *matched*."""
        return self.func(matched)


@dc.dataclass(frozen=True, slots=True)
class Discard(Replacement):
    """Delete the whole chunk as soon as the pattern matches."""

    @property
    def discards(self) -> bool:
        """Discard rules always discard."""
        return True

    def render(self, matched: str) -> str:
        """Return an empty string; the engine drops the chunk anyway."""
        return ""


@dc.dataclass(frozen=True, slots=True)
class Logged(Replacement):
    """Record each match through ``logger`` after rendering ``inner``."""

    inner: Replacement
    logger: CorrelationLogger

    @property
    def discards(self) -> bool:
        """Mirror the wrapped replacement's discard policy."""
        return self.inner.discards

    def render(self, matched: str) -> str:
        """Render ``inner`` and splice in the correlation index."""
        return self.logger.record(matched, self.inner.render(matched))


@dc.dataclass(frozen=True, slots=True)
class Rule:
    """An immutable pattern and replacement pair."""

    pattern: re.Pattern[str]
    replacement: Replacement

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        """Return a debug representation."""
        return f"Rule({self.pattern.pattern!r}, {self.replacement!r})"


__all__ = [
    "DISCARD_TOKEN",
    "DISCARD_TOKEN_ESCAPED",
    "PLACEHOLDER",
    "Computed",
    "Discard",
    "Literal",
    "Logged",
    "Replacement",
    "Rule",
]
