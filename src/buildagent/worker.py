"""
Worker side of the sentinel file protocol.

Runs a build command and settles the build message file when the command
ends: cleared on a zero exit code, replaced with a short error message
otherwise. If this process is killed before it gets there, the file keeps
the crash notice the agent pre-wrote.

Usage:
    python -m buildagent.worker --msg-file PATH -- COMMAND [ARGS...]
"""

import argparse
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from .job.sentinel import BUILD_MSG_FILE_ENV
from .validation import ErrorSeverity, handle_file_error

logger = logging.getLogger(__name__)


def settle_message_file(msg_file: Path, exit_code: int) -> None:
    """Clear the message file on success, or record the failing exit code."""
    message = "" if exit_code == 0 else f"build command exited with code {exit_code}"
    try:
        msg_file.write_text(message, encoding="utf-8")
    except OSError as e:
        handle_file_error(e, f"writing build message file {msg_file}",
                          severity=ErrorSeverity.ERROR, reraise=False, logger=logger)


def run_worker(command: List[str], msg_file: Path) -> int:
    """
    Run ``command`` to completion and settle ``msg_file``.

    Returns:
        The command's exit code (127 if it could not be started)
    """
    try:
        exit_code = subprocess.run(command, check=False).returncode
    except OSError as e:
        logger.error(f"Failed to start build command {command}: {e}")
        try:
            msg_file.write_text(f"failed to start build command: {e}", encoding="utf-8")
        except OSError as write_error:
            handle_file_error(write_error, f"writing build message file {msg_file}",
                              severity=ErrorSeverity.ERROR, reraise=False, logger=logger)
        return 127

    settle_message_file(msg_file, exit_code)
    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run a build command as a tracked worker.")
    parser.add_argument(
        "--msg-file",
        type=Path,
        default=os.environ.get(BUILD_MSG_FILE_ENV),
        help=f"Build message file to settle. Defaults to ${BUILD_MSG_FILE_ENV}.",
    )
    parser.add_argument("command", nargs=argparse.REMAINDER, help="Command to run, after '--'.")
    args = parser.parse_args(argv)

    command = args.command[1:] if args.command[:1] == ["--"] else args.command
    if not command:
        parser.error("no command given")
    if args.msg_file is None:
        parser.error(f"--msg-file or ${BUILD_MSG_FILE_ENV} is required")

    return run_worker(command, Path(args.msg_file))


if __name__ == "__main__":
    sys.exit(main())
