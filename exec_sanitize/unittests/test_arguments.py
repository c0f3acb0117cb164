"""Unit tests for the ``exec-sanitize`` argument grammar."""

from __future__ import annotations

import pytest

from exec_sanitize.arguments import USAGE, ParsedArgs, parse_args
from exec_sanitize.compiler import PatternSpec
from exec_sanitize.errors import ArgumentError, ConfigurationError


@pytest.mark.parametrize(
    ("argv", "expected"),
    [
        pytest.param(["--"], ParsedArgs(), id="separator-only"),
        pytest.param(["--", "true"], ParsedArgs(command="true"), id="bare-command"),
        pytest.param(
            ["--", "echo", "Hi, welcome to Chili's.", "Bye."],
            ParsedArgs(
                command="echo", command_args=["Hi, welcome to Chili's.", "Bye."]
            ),
            id="command-with-args",
        ),
        pytest.param(
            ["echo", "-p:plain", "x"],
            ParsedArgs(command="echo", command_args=["-p:plain", "x"]),
            id="flags-after-command-belong-to-command",
        ),
        pytest.param(
            ["-p:regex", "a", "--", "--", "-x"],
            ParsedArgs(
                patterns=[PatternSpec.regex("a")],
                command="--",
                command_args=["-x"],
            ),
            id="second-separator-is-command",
        ),
    ],
)
def test_parse_args_commands(argv: list[str], expected: ParsedArgs) -> None:
    """Everything after the flags is the command and its arguments."""
    assert parse_args(argv) == expected


def test_parse_args_preserves_rule_order() -> None:
    """Patterns keep their command-line order and kind."""
    parsed = parse_args(
        [
            "-log", "/tmp",
            "-p:plain", "Hi", "-r", "Hello",
            "-p:plain", "^escape$", "-r", "1234",
            "-p:regex", "some pattern", "-r", "another",
            "--", "echo", "Hi, welcome to Chili's.", "Bye.",
        ]
    )  # fmt: skip

    assert parsed == ParsedArgs(
        patterns=[
            PatternSpec.literal("Hi"),
            PatternSpec.literal("^escape$"),
            PatternSpec.regex("some pattern"),
        ],
        replacements=["Hello", "1234", "another"],
        command="echo",
        command_args=["Hi, welcome to Chili's.", "Bye."],
        log_dir="/tmp",
    )
    assert [spec.source for spec in parsed.patterns] == [
        "Hi",
        r"\^escape\$",
        "some pattern",
    ]


def test_parse_args_long_aliases() -> None:
    """Long flag spellings behave like the short ones."""
    parsed = parse_args(
        [
            "--log", "logs",
            "--strict-log",
            "--plain-pattern", "a.b",
            "--pattern", "c+",
            "--replacement", "x",
            "--", "true",
        ]
    )  # fmt: skip

    assert parsed.patterns == [PatternSpec.literal("a.b"), PatternSpec.regex("c+")]
    assert parsed.replacements == ["x"]
    assert parsed.log_dir == "logs"
    assert parsed.strict_log


def test_parse_args_values_may_start_with_dash() -> None:
    """Pattern and replacement values are taken verbatim."""
    parsed = parse_args(["-p:regex", "-+", "-r", "-", "--", "true"])

    assert parsed.patterns == [PatternSpec.regex("-+")]
    assert parsed.replacements == ["-"]


def test_parse_args_patterns_without_replacements() -> None:
    """Patterns may omit replacements; the compiler then deletes matches."""
    parsed = parse_args(["-p:plain", "a", "-p:plain", "b", "--", "true"])

    assert parsed.patterns == [PatternSpec.literal("a"), PatternSpec.literal("b")]
    assert parsed.replacements == []


@pytest.mark.parametrize("flag", ["-h", "-help", "--help"])
def test_parse_args_help(flag: str) -> None:
    """Help flags are recognised anywhere before the command."""
    assert parse_args([flag]).show_help


@pytest.mark.parametrize(
    ("argv", "message"),
    [
        pytest.param(["-flag"], "unbalanced number of args", id="dangling-flag"),
        pytest.param(["-p:regex"], "unbalanced number of args", id="missing-value"),
        pytest.param(["-ye", "val"], "unrecognized flag -ye", id="unknown-flag"),
        pytest.param(
            ["-r", "rep", "--", "true"],
            "replacement must be directly preceded by a pattern",
            id="replacement-first",
        ),
        pytest.param(
            ["-p:regex", "val", "-r", "rep", "-r", "1asd"],
            "replacement must be directly preceded by a pattern",
            id="double-replacement",
        ),
        pytest.param(
            ["-p:regex", "val", "-log", "/tmp", "-r", "rep"],
            "replacement must be directly preceded by a pattern",
            id="replacement-after-log",
        ),
    ],
)
def test_parse_args_errors(argv: list[str], message: str) -> None:
    """Grammar violations raise ArgumentError with a precise message."""
    with pytest.raises(ArgumentError) as exc_info:
        parse_args(argv)

    assert str(exc_info.value) == message
    assert isinstance(exc_info.value, ConfigurationError)


@pytest.mark.parametrize(
    "rule",
    [
        pytest.param("replacement for the pattern given directly", id="placement"),
        pytest.param("A pattern may omit -r.", id="optional-replacement"),
        pytest.param("needs its own -r", id="count"),
    ],
)
def test_usage_documents_replacement_rules(rule: str) -> None:
    """The help text states where -r may appear and when it may be omitted."""
    assert rule in USAGE
