"""
Integration tests for the buildagent-run command.
"""

import signal
import sys
from pathlib import Path

import pytest

from buildagent.cli import main_cli

SRC_DIR = Path(__file__).resolve().parents[2] / "src"


@pytest.fixture
def cli_env(temp_dir, monkeypatch):
    """Config pointing at a temp work dir, and a worker that can import buildagent."""
    monkeypatch.setenv("PYTHONPATH", str(SRC_DIR))
    config_path = temp_dir / "config.toml"
    config_path.write_text(
        '[agent]\nwork_dir = "work"\n\n[agent.tracker]\nidle_wait_timeout = 30\n',
        encoding="utf-8",
    )
    saved = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)}
    yield config_path
    for sig, handler in saved.items():
        signal.signal(sig, handler)


@pytest.mark.integration
class TestCli:
    """Test cases for main_cli."""

    def test_successful_build_exits_zero(self, cli_env, temp_dir, caplog):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--config", str(cli_env), "--build-id", "b1", "--",
                      sys.executable, "-c", "import time; time.sleep(0.3)"])

        assert exc_info.value.code == 0
        assert (temp_dir / "work" / "build_tmp" / "b1_1_build_msg.log").read_text(encoding="utf-8") == ""
        assert "build finished" in caplog.text

    def test_instant_worker_exits_zero(self, cli_env):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--config", str(cli_env), "--build-id", "b6", "--",
                      sys.executable, "-c", "pass"])

        assert exc_info.value.code == 0

    def test_failing_build_exits_one(self, cli_env, caplog):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--config", str(cli_env), "--build-id", "b2", "--vm-seq-id", "3", "--",
                      sys.executable, "-c", "import sys, time; time.sleep(0.3); sys.exit(4)"])

        assert exc_info.value.code == 1
        assert "build command exited with code 4" in caplog.text

    def test_work_dir_override(self, cli_env, temp_dir):
        override = temp_dir / "other"

        with pytest.raises(SystemExit):
            main_cli(["--config", str(cli_env), "--work-dir", str(override), "--build-id", "b3", "--",
                      sys.executable, "-c", "import time; time.sleep(0.3)"])

        assert (override / "build_tmp" / "b3_1_build_msg.log").exists()

    def test_invalid_build_id(self, cli_env):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--config", str(cli_env), "--build-id", "a/b", "--", "true"])

        assert exc_info.value.code == 1

    def test_missing_command(self, cli_env):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--config", str(cli_env), "--build-id", "b4"])

        assert exc_info.value.code == 2

    def test_missing_config_file(self, temp_dir):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--config", str(temp_dir / "nope.toml"), "--build-id", "b5", "--", "true"])

        assert exc_info.value.code == 1
