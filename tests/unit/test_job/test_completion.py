"""
Unit tests for the completion sinks.
"""

import logging
import threading
from unittest.mock import Mock

import pytest

from buildagent.job import CallbackCompletionSink, CollectingCompletionSink, LoggingCompletionSink
from buildagent.models import BuildCompletion, BuildInfo, ExitDisposition


def _completion(success=True, message="worker pid[1] exit"):
    disposition = ExitDisposition.NORMAL_EXIT if success else ExitDisposition.WORKER_REPORTED_FAILURE
    return BuildCompletion(
        build_info=BuildInfo(build_id="b1", vm_seq_id=1, project_id="proj"),
        success=success,
        message=message,
        disposition=disposition,
        process_id=1,
    )


@pytest.mark.unit
class TestCompletionSinks:
    """Test cases for the provided CompletionSink implementations."""

    def test_callback_sink_passes_triple(self):
        callback = Mock()
        completion = _completion()

        CallbackCompletionSink(callback).report(completion)

        callback.assert_called_once_with(completion.build_info, True, "worker pid[1] exit")

    def test_logging_sink_success(self, caplog):
        with caplog.at_level(logging.INFO):
            LoggingCompletionSink().report(_completion())

        assert "build finished" in caplog.text
        assert '"build_id": "b1"' in caplog.text

    def test_logging_sink_failure_is_warning(self, caplog):
        LoggingCompletionSink().report(_completion(success=False, message="killed"))

        records = [r for r in caplog.records if "build failed" in r.getMessage()]
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert "killed" in records[0].getMessage()

    def test_collecting_sink_wait_for(self):
        sink = CollectingCompletionSink()
        timer = threading.Timer(0.05, sink.report, args=(_completion(),))
        timer.start()

        assert sink.wait_for(1, timeout=5.0)
        assert sink.completions[0].build_id == "b1"
        timer.join()

    def test_collecting_sink_wait_for_times_out(self):
        sink = CollectingCompletionSink()

        assert sink.wait_for(1, timeout=0.01) is False
