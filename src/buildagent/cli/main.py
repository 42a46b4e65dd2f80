"""
Command-line interface for tracking a single build worker.

`buildagent-run` claims a build, spawns the given command as its worker
process, hands the pid to a BuildManager and waits for the completion
report. The command runs under the `buildagent.worker` shim so that it
settles its build message file on exit.
"""

import argparse
import dataclasses
import logging
import os
import signal
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from ..config import get_config, set_config_path
from ..job import (
    BUILD_MSG_FILE_ENV,
    BuildManager,
    CollectingCompletionSink,
    LoggingCompletionSink,
)
from ..models import BuildInfo
from ..validation import (
    handle_cli_error,
    ValidationError,
    validate_build_id,
    validate_positive_integer,
)

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run a build command and track it to completion."
    )
    parser.add_argument("--config", type=Path, help="Path to config.toml.")
    parser.add_argument("--work-dir", type=Path, help="Override [agent] work_dir.")
    parser.add_argument("--build-id", required=True, help="Identifier of this build attempt.")
    parser.add_argument("--vm-seq-id", default="1", help="Executor slot id (default: 1).")
    parser.add_argument("--project-id", default="", help="Project the build belongs to.")
    parser.add_argument("--pipeline-id", default="", help="Pipeline the build belongs to.")
    parser.add_argument("command", nargs=argparse.REMAINDER, help="Build command, after '--'.")
    return parser


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for `buildagent-run`.

    Exits 0 when the build is reported successful, 1 when it fails and 2
    when the configured wait bound expires first.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    command = args.command[1:] if args.command[:1] == ["--"] else args.command
    if not command:
        parser.error("no build command given")

    try:
        build_id = validate_build_id(args.build_id, field_name="--build-id")
        vm_seq_id = validate_positive_integer(args.vm_seq_id, min_value=0, field_name="--vm-seq-id")
    except ValidationError as e:
        handle_cli_error(error=e, context="argument validation", exit_code=1, logger=logger)

    if args.config:
        set_config_path(args.config)
    try:
        app_config = get_config()
    except (FileNotFoundError, ValidationError) as e:
        handle_cli_error(error=e, context="configuration loading", exit_code=1, logger=logger)

    logging.getLogger().setLevel(app_config.log_level)
    tracker_config = app_config.tracker
    if args.work_dir:
        tracker_config = dataclasses.replace(tracker_config, work_dir=args.work_dir)

    sink = CollectingCompletionSink()
    manager = BuildManager.from_config(tracker_config, sink=sink)
    build_info = BuildInfo(
        build_id=build_id,
        vm_seq_id=vm_seq_id,
        project_id=args.project_id,
        pipeline_id=args.pipeline_id,
        workspace=str(Path.cwd()),
    )

    manager.add_pre_instance(build_id)
    # Crash notice goes in before the worker exists, so a fast worker's
    # settled message file is never overwritten.
    msg_file = manager.sentinel.prepare(build_id, vm_seq_id)
    env = dict(os.environ, **{BUILD_MSG_FILE_ENV: str(msg_file)})
    worker_command = [sys.executable, "-m", "buildagent.worker", "--msg-file", str(msg_file), "--", *command]

    try:
        # Own session, so a forwarded signal reaches the whole build tree.
        process = subprocess.Popen(worker_command, env=env, start_new_session=True)
    except OSError as e:
        handle_cli_error(error=e, context="starting build worker", exit_code=1, logger=logger)

    def forward_signal(signum, frame):
        logger.warning(f"Signal {signal.strsignal(signum)} received, killing build worker {process.pid}")
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass

    signal.signal(signal.SIGINT, forward_signal)
    signal.signal(signal.SIGTERM, forward_signal)

    manager.add_build(process.pid, build_info, sentinel_prepared=True)

    timeout = tracker_config.idle_wait_timeout or None
    if not manager.wait_idle(timeout):
        logger.error(f"Build {build_id} not reported within {timeout}s")
        sys.exit(2)

    completion = sink.completions[0]
    LoggingCompletionSink(logger).report(completion)
    sys.exit(0 if completion.success else 1)


if __name__ == "__main__":
    main_cli()
