"""Step definitions for the ordered sanitizing rule scenarios."""

from __future__ import annotations

import dataclasses as dc
import io

import pytest
from pytest_bdd import given, parsers, then, when

from exec_sanitize.compiler import PatternSpec, compile_rules
from exec_sanitize.correlation import CorrelationLogger, MemoryLogSink
from exec_sanitize.sanitizer import Sanitizer


@dc.dataclass(slots=True)
class RuleContext:
    """Rules declared by a scenario and the results they produce."""

    patterns: list[PatternSpec] = dc.field(default_factory=list)
    replacements: list[str] = dc.field(default_factory=list)
    log_sink: MemoryLogSink | None = None
    correlation_logger: CorrelationLogger | None = None
    result: str | None = None
    consumed: int | None = None
    sink: io.BytesIO = dc.field(default_factory=io.BytesIO)

    def build(self) -> Sanitizer:
        """Compile the declared rules into a sanitizer."""
        rules = compile_rules(
            self.patterns,
            self.replacements,
            correlation_logger=self.correlation_logger,
        )
        return Sanitizer(rules)


@pytest.fixture
def rule_context() -> RuleContext:
    """Return an empty rule context for a scenario."""
    return RuleContext()


@given("correlation logging to memory")
def enable_memory_logging(rule_context: RuleContext) -> None:
    """Wrap every rule with a logger writing to memory."""
    rule_context.log_sink = MemoryLogSink()
    rule_context.correlation_logger = CorrelationLogger(rule_context.log_sink)


@given(parsers.parse('a regex rule "{pattern}" replaced with "{replacement}"'))
def add_regex_rule(rule_context: RuleContext, pattern: str, replacement: str) -> None:
    """Declare a regular-expression rule."""
    rule_context.patterns.append(PatternSpec.regex(pattern))
    rule_context.replacements.append(replacement)


@given(parsers.parse('a literal rule "{text}" replaced with "{replacement}"'))
def add_literal_rule(rule_context: RuleContext, text: str, replacement: str) -> None:
    """Declare a literal rule."""
    rule_context.patterns.append(PatternSpec.literal(text))
    rule_context.replacements.append(replacement)


@when(parsers.parse('the chunk "{chunk}" is sanitized'))
def sanitize_chunk(rule_context: RuleContext, chunk: str) -> None:
    """Run the declared rules over *chunk*."""
    rule_context.result = rule_context.build().sanitize(chunk)


@when(parsers.parse('the chunk "{chunk}" is written through a sanitizing writer'))
def write_chunk(rule_context: RuleContext, chunk: str) -> None:
    """Push *chunk* through a writer wrapping an in-memory sink."""
    writer = rule_context.build().writer(rule_context.sink)
    rule_context.consumed = writer.write(chunk.encode())


@then(parsers.parse('the sanitized chunk is "{expected}"'))
def sanitized_chunk_is(rule_context: RuleContext, expected: str) -> None:
    """Assert the sanitized text."""
    assert rule_context.result == expected


@then("the sanitized chunk is empty")
def sanitized_chunk_is_empty(rule_context: RuleContext) -> None:
    """Assert the chunk was discarded."""
    assert rule_context.result == ""


@then(parsers.parse('the correlation log holds "{value}" under "{key}"'))
def correlation_log_holds(rule_context: RuleContext, value: str, key: str) -> None:
    """Assert the in-memory correlation log entry for *key*."""
    assert rule_context.log_sink is not None
    assert rule_context.log_sink.entries[key] == value.encode()


@then(parsers.parse("the writer reports {count:d} bytes consumed"))
def writer_reports_consumed(rule_context: RuleContext, count: int) -> None:
    """Assert the byte count returned by the writer."""
    assert rule_context.consumed == count


@then("nothing reaches the sink")
def nothing_reaches_sink(rule_context: RuleContext) -> None:
    """Assert the wrapped sink received no bytes."""
    assert rule_context.sink.getvalue() == b""
