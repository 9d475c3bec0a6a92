"""Tests for the Result type and error codes."""

import inspect

import pytest

from services import error_codes
from services.result import Result


class TestResultCreation:
    """Tests for Result.ok and Result.fail."""

    def test_ok_with_value(self):
        """Result.ok(value) creates success with value."""
        result = Result.ok([1, 2])
        assert result.success is True
        assert result.value == [1, 2]
        assert result.error is None
        assert result.error_code is None

    def test_ok_without_value(self):
        result = Result.ok()
        assert result.success is True
        assert result.value is None

    def test_fail_with_code(self):
        """Result.fail(msg, code) creates failure with code."""
        result = Result.fail("Need at least 1 team", code=error_codes.INVALID_TEAM_COUNT)
        assert result.success is False
        assert result.value is None
        assert result.error == "Need at least 1 team"
        assert result.error_code == error_codes.INVALID_TEAM_COUNT

    def test_result_is_frozen(self):
        result = Result.ok(42)
        with pytest.raises(Exception):  # FrozenInstanceError
            result.value = 100


class TestResultAccess:
    """Tests for truthiness, unwrap and map."""

    def test_truthiness(self):
        assert bool(Result.ok(0)) is True
        assert bool(Result.fail("error")) is False

    def test_unwrap_failure_raises(self):
        """unwrap() raises ValueError on failure."""
        with pytest.raises(ValueError, match="Cannot unwrap failed result"):
            Result.fail("bad roster").unwrap()

    def test_unwrap_or(self):
        assert Result.ok(3).unwrap_or(0) == 3
        assert Result.fail("error").unwrap_or(0) == 0

    def test_map_chain(self):
        """map() can be chained on success."""
        result = Result.ok(5).map(lambda x: Result.ok(x * 2)).map(lambda x: Result.ok(x + 1))
        assert result.value == 11

    def test_map_passes_failure_through(self):
        result = Result.fail("error", code=error_codes.INVALID_QUOTA).map(lambda x: Result.ok(x))
        assert result.success is False
        assert result.error_code == error_codes.INVALID_QUOTA


class TestErrorCodes:
    """Tests for error code constants."""

    def test_error_codes_are_unique_strings(self):
        codes = [
            value
            for name, value in inspect.getmembers(error_codes)
            if not name.startswith("_") and isinstance(value, str)
        ]
        assert codes
        assert len(codes) == len(set(codes)), "Duplicate error codes found"

    def test_request_error_codes_exist(self):
        for name in (
            "INVALID_TEAM_COUNT",
            "INVALID_ROSTER",
            "INVALID_PLAYER",
            "DUPLICATE_PLAYER",
            "INVALID_CONSTRAINT",
            "INVALID_QUOTA",
        ):
            assert hasattr(error_codes, name)
