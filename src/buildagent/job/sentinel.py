"""
Sentinel file protocol.

Before a worker runs, the tracker pre-writes a crash notice into a per-build
message file. A worker that shuts down gracefully clears the file, or
replaces its content with its own error message. Whatever the file holds
when the process exits tells the watcher how the build ended:

- empty or missing: clean exit
- worker-written text: the worker reported a failure
- the untouched crash notice: the worker died before it could clean up,
  typically because the OS or another program killed it
"""

import logging
import os
from pathlib import Path

from ..models.config import TrackerConfig
from ..validation import ErrorSeverity, handle_file_error

logger = logging.getLogger(__name__)

DEFAULT_CRASH_MESSAGE = (
    "业务构建进程异常退出，可能被操作系统或其他程序杀掉，需自查并降低负载后重试，"
    "或解压 agent.zip 还原安装后重启agent再重试。(Builder process was killed.)"
)

# Exported to the worker so it can locate its own message file.
BUILD_MSG_FILE_ENV = "BUILDAGENT_BUILD_MSG_FILE"


class SentinelFile:
    """
    Reads and writes the per-build message files under one directory.

    Args:
        directory: Directory holding the message files
        file_mode: Permission bits applied after writing, so the worker
            (possibly a different OS user) can overwrite the file
        crash_message: Text pre-written before the worker starts
    """

    def __init__(self, directory: Path, file_mode: int = 0o777,
                 crash_message: str = DEFAULT_CRASH_MESSAGE):
        self.directory = Path(directory)
        self.file_mode = file_mode
        self.crash_message = crash_message

    @classmethod
    def from_config(cls, config: TrackerConfig) -> "SentinelFile":
        return cls(config.sentinel_dir, file_mode=config.sentinel_file_mode)

    def path_for(self, build_id: str, vm_seq_id: int) -> Path:
        """Deterministic message file path for one (build, slot) pair."""
        return self.directory / f"{build_id}_{vm_seq_id}_build_msg.log"

    def prepare(self, build_id: str, vm_seq_id: int) -> Path:
        """
        Pre-write the crash notice for a build that is about to be watched.

        Write and chmod failures are logged and swallowed: a missing
        sentinel only means an abnormal exit may be reported as a success,
        which must not stop the build from being tracked.

        Returns:
            Path of the message file
        """
        path = self.path_for(build_id, vm_seq_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.crash_message, encoding="utf-8")
        except OSError as e:
            handle_file_error(e, f"writing build message file {path}",
                              severity=ErrorSeverity.WARNING, reraise=False, logger=logger)
            return path

        try:
            os.chmod(path, self.file_mode)
        except OSError as e:
            handle_file_error(e, f"chmod build message file {path}",
                              severity=ErrorSeverity.WARNING, reraise=False, logger=logger)
        return path

    def read(self, build_id: str, vm_seq_id: int) -> str:
        """
        Read the message file once.

        Returns:
            The file content without surrounding whitespace; "" when the
            file is missing or unreadable
        """
        path = self.path_for(build_id, vm_seq_id)
        try:
            return path.read_text(encoding="utf-8", errors="replace").strip()
        except FileNotFoundError:
            return ""
        except OSError as e:
            handle_file_error(e, f"reading build message file {path}",
                              severity=ErrorSeverity.WARNING, reraise=False, logger=logger)
            return ""

    def write_message(self, build_id: str, vm_seq_id: int, message: str) -> None:
        """Replace the file content. This is the worker side of the protocol."""
        self.path_for(build_id, vm_seq_id).write_text(message, encoding="utf-8")

    def clear(self, build_id: str, vm_seq_id: int) -> None:
        """Empty the file, signalling a clean worker shutdown."""
        self.write_message(build_id, vm_seq_id, "")
