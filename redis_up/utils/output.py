"""Output utilities for writing to stdout with proper flushing."""

import sys


def write_stdout(message: str, flush: bool = True) -> None:
    """Write message to stdout with optional flushing.

    Args:
        message: Message to write
        flush: Whether to flush after writing (default: True)
    """
    sys.stdout.write(message)
    if flush:
        sys.stdout.flush()


def write_stdout_bytes(chunk: bytes, flush: bool = True) -> None:
    """Write raw bytes (e.g. container log output) to stdout.

    Falls back to a lossy decode when stdout has no binary buffer, which is
    the case under test runners that capture output.
    """
    buffer = getattr(sys.stdout, "buffer", None)
    if buffer is not None:
        buffer.write(chunk)
        if flush:
            buffer.flush()
    else:
        write_stdout(chunk.decode("utf-8", errors="replace"), flush=flush)
