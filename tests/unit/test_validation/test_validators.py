"""
Unit tests for validation helpers and error handling.
"""

import logging

import pytest

from buildagent.validation import (
    ErrorSeverity,
    ValidationError,
    handle_error,
    validate_build_id,
    validate_enum_choice,
    validate_file_mode,
    validate_positive_float,
    validate_positive_integer,
)


@pytest.mark.unit
class TestValidators:
    """Test cases for the validator functions."""

    def test_positive_integer(self):
        assert validate_positive_integer("5") == 5
        assert validate_positive_integer(0, min_value=0) == 0
        with pytest.raises(ValidationError):
            validate_positive_integer(0)
        with pytest.raises(ValidationError):
            validate_positive_integer("x")
        with pytest.raises(ValidationError):
            validate_positive_integer(True)
        with pytest.raises(ValidationError):
            validate_positive_integer(11, max_value=10)

    def test_positive_float(self):
        assert validate_positive_float("0.5") == 0.5
        with pytest.raises(ValidationError):
            validate_positive_float(-0.1)

    @pytest.mark.parametrize("build_id", ["b1", "b-20240101.3", "BUILD_x"])
    def test_valid_build_ids(self, build_id):
        assert validate_build_id(build_id) == build_id

    @pytest.mark.parametrize("build_id", ["", "  ", "a/b", "..", "a b", None, 12])
    def test_invalid_build_ids(self, build_id):
        with pytest.raises(ValidationError) as exc_info:
            validate_build_id(build_id)
        assert exc_info.value.field_name == "build_id"

    @pytest.mark.parametrize(
        "value,expected",
        [("0o777", 0o777), ("755", 0o755), (0o600, 0o600), ("0O644", 0o644)],
    )
    def test_file_mode(self, value, expected):
        assert validate_file_mode(value) == expected

    @pytest.mark.parametrize("value", ["999", "0o1000", -1, 1.5, False])
    def test_invalid_file_mode(self, value):
        with pytest.raises(ValidationError):
            validate_file_mode(value)

    def test_enum_choice_case_insensitive(self):
        assert validate_enum_choice("info", ["DEBUG", "INFO"], case_sensitive=False) == "INFO"
        with pytest.raises(ValidationError):
            validate_enum_choice("info", ["DEBUG", "INFO"])


@pytest.mark.unit
class TestHandleError:
    """Test cases for handle_error."""

    def test_reraise(self):
        with pytest.raises(ValueError):
            handle_error(ValueError("bad"), "testing")

    def test_log_without_reraise(self, caplog):
        handle_error(ValueError("bad"), "testing", severity=ErrorSeverity.WARNING, reraise=False)

        assert "Error in testing: bad" in caplog.text
        assert caplog.records[-1].levelno == logging.WARNING

    def test_string_severity(self, caplog):
        handle_error(ValueError("bad"), "testing", severity="ERROR", reraise=False)

        assert caplog.records[-1].levelno == logging.ERROR
