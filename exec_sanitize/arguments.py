"""Order-preserving command-line grammar for ``exec-sanitize``.

The grammar is parsed by hand rather than with :mod:`argparse` because the
relative order of pattern flags defines rule order, and pattern or
replacement values routinely begin with a dash (``-r -``), which
:mod:`argparse` would mistake for options.
"""

from __future__ import annotations

import dataclasses as dc
import typing as t

from .compiler import PatternKind, PatternSpec
from .errors import ArgumentError

if t.TYPE_CHECKING:
    import collections.abc as cabc

USAGE = """\
usage: exec-sanitize [-log DIR] [--strict-log]
                     [(-p:regex PATTERN | -p:plain TEXT) [-r REPLACEMENT]]...
                     -- COMMAND [ARGS...]

Run COMMAND and rewrite its stdout and stderr. Rules apply in the order the
pattern flags are given; each rule sees the output of the previous one.

  -p:regex, --pattern PATTERN      regular expression to sanitize
  -p:plain, --plain-pattern TEXT   literal text to sanitize
  -r, --replacement REPLACEMENT    replacement for the pattern given directly
                                   before it; any other position is an error.
                                   A pattern may omit -r. Without any -r,
                                   matches are deleted; a single -r applies
                                   to every pattern; otherwise every pattern
                                   needs its own -r.
                                   "@discard" drops the whole chunk,
                                   "@@discard" emits the literal "@discard".
  -log, --log DIR                  record each original match in DIR/N and
                                   replace the first "*" of the replacement
                                   with N
  --strict-log                     fail instead of warning when DIR/N
                                   cannot be written
  -h, --help                       show this message
"""

_HELP_FLAGS = frozenset({"-h", "-help", "--help"})
_STRICT_LOG_FLAGS = frozenset({"-strict-log", "--strict-log"})
_LOG_FLAGS = frozenset({"-log", "--log"})
_REPLACEMENT_FLAGS = frozenset({"-r", "--replacement"})
_PATTERN_FLAGS: t.Final[dict[str, PatternKind]] = {
    "-p:regex": PatternKind.REGEX,
    "--pattern": PatternKind.REGEX,
    "-p:plain": PatternKind.LITERAL,
    "--plain-pattern": PatternKind.LITERAL,
}
_COMMAND_SEPARATOR = "--"


@dc.dataclass(slots=True)
class ParsedArgs:
    """Result of parsing the ``exec-sanitize`` command line."""

    patterns: list[PatternSpec] = dc.field(default_factory=list)
    replacements: list[str] = dc.field(default_factory=list)
    command: str | None = None
    command_args: list[str] = dc.field(default_factory=list)
    log_dir: str | None = None
    strict_log: bool = False
    show_help: bool = False


def _is_flag(token: str) -> bool:
    return token.startswith("-") and token != "-"


def parse_args(argv: cabc.Sequence[str]) -> ParsedArgs:
    """Parse *argv* (without the program name) into :class:`ParsedArgs`.

    Parsing stops at ``--`` or at the first token that is not a flag; the
    remaining tokens form the command to run.

    Raises
    ------
    ArgumentError
        If a flag is unknown, lacks its value, or a replacement does not
        directly follow a pattern.
    """
    parsed = ParsedArgs()
    tokens = list(argv)
    # Index of the token after the most recent pattern value, used to
    # check that replacements sit directly behind their pattern.
    after_pattern = -1
    pos = 0

    while pos < len(tokens):
        token = tokens[pos]
        if token == _COMMAND_SEPARATOR:
            pos += 1
            break
        if not _is_flag(token):
            break
        if token in _HELP_FLAGS:
            parsed.show_help = True
            pos += 1
            continue
        if token in _STRICT_LOG_FLAGS:
            parsed.strict_log = True
            pos += 1
            continue

        if pos + 1 >= len(tokens):
            msg = "unbalanced number of args"
            raise ArgumentError(msg)
        value = tokens[pos + 1]

        if token in _PATTERN_FLAGS:
            parsed.patterns.append(PatternSpec(_PATTERN_FLAGS[token], value))
            after_pattern = pos + 2
        elif token in _REPLACEMENT_FLAGS:
            if pos != after_pattern:
                msg = "replacement must be directly preceded by a pattern"
                raise ArgumentError(msg)
            parsed.replacements.append(value)
        elif token in _LOG_FLAGS:
            parsed.log_dir = value
        else:
            msg = f"unrecognized flag {token}"
            raise ArgumentError(msg)
        pos += 2

    rest = tokens[pos:]
    if rest:
        parsed.command = rest[0]
        parsed.command_args = rest[1:]
    return parsed


__all__ = ["USAGE", "ParsedArgs", "parse_args"]
