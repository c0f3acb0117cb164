"""Command-line entry point for ``exec-sanitize``."""

from __future__ import annotations

import contextlib
import logging
import os
import sys
import typing as t

from .arguments import USAGE, parse_args
from .compiler import build_sanitizer
from .environment import Settings
from .errors import ExecSanitizeError
from .runner import run_command

if t.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)


def _report(stream: t.BinaryIO, message: str) -> None:
    stream.write(message.encode("utf-8", "replace"))
    stream.flush()


def _silence_stdout() -> None:
    """Point stdout at the null device so the exit-time flush cannot fail."""
    devnull = os.open(os.devnull, os.O_WRONLY)
    try:
        os.dup2(devnull, sys.stdout.fileno())
    finally:
        os.close(devnull)


def run(
    argv: cabc.Sequence[str],
    *,
    stdin: t.BinaryIO | None = None,
    stdout: t.BinaryIO | None = None,
    stderr: t.BinaryIO | None = None,
    settings: Settings | None = None,
) -> int:
    """Parse *argv*, run the command and return the exit status.

    Rule and setting errors are reported before the child is spawned and
    yield status ``1``, as do write errors on the output streams. A non-zero
    child status is reported on *stderr* and returned unchanged.
    """
    out = stdout if stdout is not None else sys.stdout.buffer
    err = stderr if stderr is not None else sys.stderr.buffer

    try:
        parsed = parse_args(argv)
        if parsed.show_help:
            _report(out, USAGE)
            return 0
        if parsed.command is None:
            _report(err, USAGE)
            return 1

        resolved = settings if settings is not None else Settings.from_env()
        log_dir = parsed.log_dir if parsed.log_dir is not None else resolved.log_dir
        sanitizer = build_sanitizer(
            parsed.patterns,
            parsed.replacements,
            log_dir=log_dir,
            strict_log=parsed.strict_log or resolved.strict_log,
        )
        exit_code = run_command(
            parsed.command,
            parsed.command_args,
            sanitizer,
            stdout=out,
            stderr=err,
            stdin=stdin,
            chunk_size=resolved.chunk_size,
        )
    except ExecSanitizeError as exc:
        logger.debug("exec-sanitize failed: %r", exc)
        _report(err, f"{exc}\n")
        return 1
    except OSError as exc:
        logger.debug("Relaying output failed: %r", exc)
        if isinstance(exc, BrokenPipeError) and stdout is None:
            _silence_stdout()
        # stderr may be the broken stream.
        with contextlib.suppress(OSError):
            _report(err, f"{exc}\n")
        return 1

    if exit_code != 0:
        _report(err, f"\ncommand exited with code {exit_code}\n")
    return exit_code


def _configure_logging() -> None:
    try:
        level = Settings.from_env().log_level
    except ExecSanitizeError:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="exec-sanitize: %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    """Run ``exec-sanitize`` with :data:`sys.argv` and exit with its status."""
    _configure_logging()
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":  # pragma: no cover - manual entry
    main()
