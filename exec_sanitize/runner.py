"""Spawn the child command and relay its output through sanitizing writers."""

from __future__ import annotations

import contextlib
import io
import logging
import os
import signal
import subprocess
import threading
import typing as t

from ._validators import validate_positive_int
from .environment import DEFAULT_CHUNK_SIZE
from .errors import CommandNotFoundError, CommandStartError

if t.TYPE_CHECKING:
    import collections.abc as cabc

    from .sanitizer import BinarySink, Sanitizer, SanitizingWriter

logger = logging.getLogger(__name__)

FORWARDED_SIGNALS: t.Final[tuple[signal.Signals, ...]] = (
    signal.SIGINT,
    signal.SIGTERM,
)


class _StreamRelay:
    """Copy one child pipe into a :class:`SanitizingWriter` on a thread.

    Chunks are forwarded in the order they are read. If the writer raises,
    the pipe is closed so the child sees a broken pipe, and the error is kept
    for the caller to re-raise once the child has exited.
    """

    def __init__(
        self,
        name: str,
        source: t.BinaryIO,
        writer: SanitizingWriter,
        chunk_size: int,
    ) -> None:
        self.name = name
        self.error: BaseException | None = None
        self._source = source
        self._writer = writer
        self._chunk_size = chunk_size
        self._thread = threading.Thread(
            target=self._run, name=f"exec-sanitize-{name}", daemon=True
        )

    def start(self) -> None:
        """Begin relaying on a daemon thread."""
        self._thread.start()

    def join(self) -> None:
        """Wait until the pipe reaches end of file or the relay fails."""
        self._thread.join()

    def _read(self) -> bytes:
        read1 = getattr(self._source, "read1", None)
        if read1 is not None:
            return read1(self._chunk_size)
        return self._source.read(self._chunk_size)

    def _run(self) -> None:
        try:
            while chunk := self._read():
                self._writer.write(chunk)
                self._writer.flush()
        except Exception as exc:  # noqa: BLE001 - re-raised by run_command
            logger.debug("Relay for %s stopped: %s", self.name, exc)
            self.error = exc
        finally:
            self._source.close()


def _feed_stdin(source: t.BinaryIO, target: t.BinaryIO, chunk_size: int) -> None:
    """Copy *source* into the child's stdin pipe and close it."""
    try:
        while chunk := source.read(chunk_size):
            target.write(chunk)
            target.flush()
    except BrokenPipeError:
        logger.debug("Child closed stdin before all input was written")
    finally:
        with contextlib.suppress(BrokenPipeError):
            target.close()


def _stdin_target(stdin: t.BinaryIO | None) -> tuple[int | None, t.BinaryIO | None]:
    """Return the ``Popen`` stdin argument and a stream to feed, if any."""
    if stdin is None:
        return None, None
    try:
        return stdin.fileno(), None
    except (AttributeError, OSError, io.UnsupportedOperation):
        return subprocess.PIPE, stdin


@contextlib.contextmanager
def forward_signals(
    process: subprocess.Popen[bytes],
    signals: cabc.Iterable[signal.Signals] = FORWARDED_SIGNALS,
) -> cabc.Iterator[None]:
    """Relay *signals* received by this process to *process*.

    Handlers can only be installed from the main thread; elsewhere this is a
    no-op. Previous handlers are restored on exit.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def relay(signum: int, _frame: object) -> None:
        logger.debug("Forwarding signal %d to pid %d", signum, process.pid)
        with contextlib.suppress(ProcessLookupError):
            process.send_signal(signum)

    previous = {sig: signal.signal(sig, relay) for sig in signals}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            # ``None`` means the handler was installed outside Python.
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)


def exit_code_from_returncode(returncode: int) -> int:
    """Map a ``Popen.returncode`` to a shell-style exit status."""
    if returncode < 0:
        return 128 - returncode
    return returncode


def _spawn(
    command: str,
    args: cabc.Sequence[str],
    stdin: int | None,
) -> subprocess.Popen[bytes]:
    try:
        return subprocess.Popen(  # noqa: S603 - shell=False prevents injection
            [command, *args],
            stdin=stdin,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=dict(os.environ),
            shell=False,
        )
    except FileNotFoundError as exc:
        msg = f"{command}: not found"
        raise CommandNotFoundError(msg) from exc
    except OSError as exc:
        msg = f"{command}: execution failed: {exc}"
        raise CommandStartError(msg) from exc


def run_command(
    command: str,
    args: cabc.Sequence[str],
    sanitizer: Sanitizer,
    *,
    stdout: BinarySink,
    stderr: BinarySink,
    stdin: t.BinaryIO | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """Run *command* with its output sanitized into *stdout* and *stderr*.

    Parameters
    ----------
    command : str
        Executable name or path, looked up on ``PATH``.
    args : Sequence[str]
        Arguments passed to the command.
    sanitizer : Sanitizer
        Rules shared by the stdout and stderr writers.
    stdout, stderr : BinarySink
        Destinations for the sanitized streams.
    stdin : BinaryIO | None
        Input for the child. ``None`` inherits this process's stdin; streams
        without a file descriptor are copied through a pipe.
    chunk_size : int
        Maximum bytes read from a child pipe per write.

    Returns
    -------
    int
        The child's exit status, ``128 + N`` if it was killed by signal N.

    Raises
    ------
    CommandNotFoundError
        If *command* cannot be found.
    CommandStartError
        If *command* cannot be executed.
    Exception
        Whatever a sink raised while writing sanitized output.
    """
    validate_positive_int(chunk_size, name="chunk_size")
    stdin_arg, stdin_source = _stdin_target(stdin)
    process = _spawn(command, args, stdin_arg)
    logger.debug("Started %s (pid %d)", command, process.pid)

    if process.stdout is None or process.stderr is None:  # pragma: no cover
        msg = "child pipes were not created"
        raise CommandStartError(msg)

    relays = [
        _StreamRelay("stdout", process.stdout, sanitizer.writer(stdout), chunk_size),
        _StreamRelay("stderr", process.stderr, sanitizer.writer(stderr), chunk_size),
    ]
    feeder: threading.Thread | None = None
    if stdin_source is not None and process.stdin is not None:
        feeder = threading.Thread(
            target=_feed_stdin,
            args=(stdin_source, process.stdin, chunk_size),
            name="exec-sanitize-stdin",
            daemon=True,
        )

    with forward_signals(process):
        for relay in relays:
            relay.start()
        if feeder is not None:
            feeder.start()
        returncode = process.wait()
        for relay in relays:
            relay.join()

    logger.debug("%s exited with return code %d", command, returncode)
    for relay in relays:
        if relay.error is not None:
            raise relay.error
    return exit_code_from_returncode(returncode)


__all__ = [
    "FORWARDED_SIGNALS",
    "exit_code_from_returncode",
    "forward_signals",
    "run_command",
]
