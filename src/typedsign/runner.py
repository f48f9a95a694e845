"""Input sources for the text containing the digest.

Either all of stdin, or the stdout of a command run to completion. Command
output is echoed live while it is captured, so the operator sees the
command's own output before the signing report.
"""

import logging
import subprocess
import sys
from typing import BinaryIO, Optional, Sequence

from typedsign.errors import InputError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 4096


def read_stdin(stream: Optional[BinaryIO] = None) -> bytes:
    """Read standard input to completion.

    Raises:
        InputError: If reading fails
    """
    if stream is None:
        stream = sys.stdin.buffer
    try:
        return stream.read()
    except OSError as e:
        raise InputError(f"Error reading from stdin: {e}") from e


def run_command(
    command: Sequence[str],
    workdir: str = ".",
    echo: Optional[BinaryIO] = None,
) -> bytes:
    """Run `command` in `workdir` and return its captured stdout.

    stdout is copied to `echo` (process stdout by default) as it arrives;
    stderr is passed through untouched. The process is always waited on.

    Raises:
        InputError: If the command cannot be started or exits non-zero
    """
    if not command:
        raise InputError("No command given")
    if echo is None:
        echo = sys.stdout.buffer

    logger.info(f"Running {' '.join(command)} in {workdir}")
    captured = bytearray()
    try:
        with subprocess.Popen(list(command), cwd=workdir, stdout=subprocess.PIPE) as proc:
            for chunk in iter(lambda: proc.stdout.read1(CHUNK_SIZE), b""):
                captured.extend(chunk)
                echo.write(chunk)
                echo.flush()
            returncode = proc.wait()
    except OSError as e:
        raise InputError(f"Error running process: {e}") from e

    if returncode != 0:
        raise InputError(
            f"Error running process: {command[0]} exited with code {returncode}",
            returncode=returncode,
        )

    echo.write(f"\n{command[0]} exited with code 0\n".encode())
    echo.flush()
    return bytes(captured)
