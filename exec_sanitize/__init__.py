"""Run a command and rewrite its output streams with ordered rules.

Rules pair a regular-expression or literal pattern with a replacement and
are applied in order to every chunk the child writes. A replacement may
discard the chunk entirely, and an optional correlation log records the
original text of each match under a sequential index.
"""

from __future__ import annotations

from .compiler import (
    PatternKind,
    PatternSpec,
    build_sanitizer,
    compile_pattern,
    compile_rules,
    parse_replacement,
)
from .correlation import (
    CorrelationLogger,
    DirectoryLogSink,
    LogSink,
    MemoryLogSink,
)
from .environment import Settings
from .errors import (
    ArgumentError,
    CommandNotFoundError,
    CommandStartError,
    ConfigurationError,
    ExecSanitizeError,
    LogPersistenceError,
    PatternCompileError,
)
from .rules import (
    DISCARD_TOKEN,
    DISCARD_TOKEN_ESCAPED,
    PLACEHOLDER,
    Computed,
    Discard,
    Literal,
    Logged,
    Replacement,
    Rule,
)
from .runner import run_command
from .sanitizer import Sanitizer, SanitizingWriter

__all__ = [
    "DISCARD_TOKEN",
    "DISCARD_TOKEN_ESCAPED",
    "PLACEHOLDER",
    "ArgumentError",
    "CommandNotFoundError",
    "CommandStartError",
    "Computed",
    "ConfigurationError",
    "CorrelationLogger",
    "DirectoryLogSink",
    "Discard",
    "ExecSanitizeError",
    "Literal",
    "LogPersistenceError",
    "LogSink",
    "Logged",
    "MemoryLogSink",
    "PatternCompileError",
    "PatternKind",
    "PatternSpec",
    "Replacement",
    "Rule",
    "Sanitizer",
    "SanitizingWriter",
    "Settings",
    "build_sanitizer",
    "compile_pattern",
    "compile_rules",
    "parse_replacement",
    "run_command",
]
