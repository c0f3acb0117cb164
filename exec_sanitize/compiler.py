"""Translate pattern and replacement specifications into compiled rules."""

from __future__ import annotations

import dataclasses as dc
import enum
import logging
import re
import typing as t

from .correlation import CorrelationLogger, DirectoryLogSink
from .errors import ConfigurationError, PatternCompileError
from .rules import DISCARD_TOKEN, DISCARD_TOKEN_ESCAPED, Discard, Literal, Rule
from .sanitizer import Sanitizer

if t.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .rules import Replacement

logger = logging.getLogger(__name__)


class PatternKind(enum.Enum):
    """How the text of a :class:`PatternSpec` is interpreted."""

    REGEX = "regex"
    LITERAL = "plain"


@dc.dataclass(frozen=True, slots=True)
class PatternSpec:
    """A pattern as supplied on the command line."""

    kind: PatternKind
    text: str

    @classmethod
    def regex(cls, text: str) -> PatternSpec:
        """Return a spec interpreting *text* as a regular expression."""
        return cls(PatternKind.REGEX, text)

    @classmethod
    def literal(cls, text: str) -> PatternSpec:
        """Return a spec matching *text* exactly."""
        return cls(PatternKind.LITERAL, text)

    @property
    def source(self) -> str:
        """Return the regular expression source for this spec."""
        if self.kind is PatternKind.LITERAL:
            return re.escape(self.text)
        return self.text


def compile_pattern(spec: PatternSpec) -> re.Pattern[str]:
    """Compile *spec*, raising :class:`PatternCompileError` on bad syntax."""
    source = spec.source
    try:
        return re.compile(source)
    except re.error as exc:
        raise PatternCompileError(source, str(exc)) from exc


def parse_replacement(text: str) -> Replacement:
    """Map replacement text to its :class:`Replacement` variant.

    ``@discard`` becomes :class:`Discard`; the escaped ``@@discard`` becomes
    the literal text ``@discard``. Anything else is substituted verbatim.
    """
    if text == DISCARD_TOKEN:
        return Discard()
    if text == DISCARD_TOKEN_ESCAPED:
        return Literal(DISCARD_TOKEN)
    return Literal(text)


def _pair_replacements(
    pattern_count: int, replacements: cabc.Sequence[str]
) -> list[str]:
    """Return one replacement text per pattern following the count policy."""
    if not replacements:
        return [""] * pattern_count
    if len(replacements) == 1:
        return [replacements[0]] * pattern_count
    if len(replacements) != pattern_count:
        msg = (
            "mismatched number of replacements: "
            f"got {len(replacements)} for {pattern_count} patterns"
        )
        raise ConfigurationError(msg)
    return list(replacements)


def compile_rules(
    patterns: cabc.Sequence[PatternSpec],
    replacements: cabc.Sequence[str] = (),
    *,
    correlation_logger: CorrelationLogger | None = None,
) -> tuple[Rule, ...]:
    """Build rules pairing each pattern with its replacement.

    Parameters
    ----------
    patterns : Sequence[PatternSpec]
        Patterns in application order.
    replacements : Sequence[str]
        Zero replacements delete every match, a single replacement is shared
        by all patterns, otherwise there must be exactly one per pattern.
    correlation_logger : CorrelationLogger | None
        When given, every replacement records its matches through it.

    Raises
    ------
    ConfigurationError
        If more than one replacement is given and the counts differ.
    PatternCompileError
        If any pattern is not a valid regular expression.
    """
    texts = _pair_replacements(len(patterns), replacements)

    rules: list[Rule] = []
    for spec, text in zip(patterns, texts, strict=True):
        replacement = parse_replacement(text)
        if correlation_logger is not None:
            replacement = correlation_logger.wrap(replacement)
        rules.append(Rule(compile_pattern(spec), replacement))

    logger.debug("Compiled %d sanitizing rules", len(rules))
    return tuple(rules)


def build_sanitizer(
    patterns: cabc.Sequence[PatternSpec],
    replacements: cabc.Sequence[str] = (),
    *,
    log_dir: Path | str | None = None,
    strict_log: bool = False,
) -> Sanitizer:
    """Return a :class:`Sanitizer`, logging matches under *log_dir* if set."""
    correlation_logger = None
    if log_dir is not None:
        correlation_logger = CorrelationLogger(
            DirectoryLogSink(log_dir), strict=strict_log
        )
    rules = compile_rules(
        patterns, replacements, correlation_logger=correlation_logger
    )
    return Sanitizer(rules)


__all__ = [
    "PatternKind",
    "PatternSpec",
    "build_sanitizer",
    "compile_pattern",
    "compile_rules",
    "parse_replacement",
]
