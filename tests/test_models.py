"""Tests for the execution result model."""

import dataclasses
import json

import pytest

from testdispatch.core.errors import MalformedResultError, MissingResultFieldError
from testdispatch.core.models import ExecutionResult, TestConfiguration, TestType

VM_TEST = TestConfiguration("foo_test.dart", TestType.VM)


class TestTestType:
    """Tests for TestType enum."""

    def test_type_values(self):
        """Test that both environments exist."""
        assert TestType.VM.value == "vm"
        assert TestType.BROWSER.value == "browser"
        assert TestType("browser") is TestType.BROWSER


class TestExecutionResult:
    """Tests for ExecutionResult model."""

    def test_default_values(self):
        """Test default values."""
        result = ExecutionResult(VM_TEST)
        assert result.test is VM_TEST
        assert result.success is True
        assert result.output == ""
        assert result.error_output == ""
        assert result.timed_out is False

    def test_is_immutable(self):
        """Test that results cannot be changed after construction."""
        result = ExecutionResult(VM_TEST, success=False)
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.success = True

    def test_to_dict(self):
        """Test converting to the serialized format."""
        result = ExecutionResult(VM_TEST, success=False, output="out", error_output="err")

        d = result.to_dict()
        assert d == {
            "success": False,
            "testOutput": "out",
            "errorOutput": "err",
            "timedOut": False,
        }

    def test_round_trip(self):
        """Test that a serialized result reads back as an equal result."""
        result = ExecutionResult(VM_TEST, success=False, output="line 1\nline 2", error_output="boom")

        assert ExecutionResult.from_dict(result.to_dict(), VM_TEST) == result
        assert ExecutionResult.from_json(result.to_json(), VM_TEST) == result

    def test_from_dict_without_timed_out(self):
        """Test that timedOut is optional."""
        result = ExecutionResult.from_dict(
            {"success": True, "testOutput": "OK", "errorOutput": ""}, VM_TEST
        )
        assert result.success is True
        assert result.output == "OK"
        assert result.timed_out is False

    def test_from_dict_null_timed_out(self):
        """Test that a null timedOut reads as not timed out."""
        result = ExecutionResult.from_dict(
            {"success": True, "testOutput": "", "errorOutput": "", "timedOut": None}, VM_TEST
        )
        assert result.timed_out is False

    @pytest.mark.parametrize("field", ["success", "testOutput", "errorOutput"])
    def test_from_dict_missing_field(self, field):
        """Test that each required field must be present."""
        data = {"success": True, "testOutput": "", "errorOutput": ""}
        del data[field]

        with pytest.raises(MissingResultFieldError) as exc_info:
            ExecutionResult.from_dict(data, VM_TEST)

        assert exc_info.value.missing == [field]
        assert field in str(exc_info.value)

    def test_from_dict_null_field(self):
        """Test that a null required field counts as missing."""
        with pytest.raises(MissingResultFieldError):
            ExecutionResult.from_dict(
                {"success": None, "testOutput": "", "errorOutput": ""}, VM_TEST
            )

    def test_from_dict_wrong_types(self):
        """Test that field types are checked."""
        with pytest.raises(MalformedResultError):
            ExecutionResult.from_dict(
                {"success": "yes", "testOutput": "", "errorOutput": ""}, VM_TEST
            )
        with pytest.raises(MalformedResultError):
            ExecutionResult.from_dict(
                {"success": True, "testOutput": 3, "errorOutput": ""}, VM_TEST
            )

    def test_missing_field_error_is_value_error(self):
        """Test that malformed payloads surface as ValueError too."""
        with pytest.raises(ValueError):
            ExecutionResult.from_dict({}, VM_TEST)

    def test_from_json_invalid(self):
        """Test that invalid JSON is reported as a malformed result."""
        with pytest.raises(MalformedResultError):
            ExecutionResult.from_json("{not json", VM_TEST)
        with pytest.raises(MalformedResultError):
            ExecutionResult.from_json(json.dumps(["success"]), VM_TEST)

    def test_for_timeout(self):
        """Test the result substituted for a timed out test."""
        result = ExecutionResult.for_timeout(VM_TEST, 240)

        assert result.success is False
        assert result.timed_out is True
        assert "240 seconds" in result.output
        assert result.error_output == ""

    def test_for_timeout_fractional_seconds(self):
        """Test that fractional timeouts are printed without noise."""
        result = ExecutionResult.for_timeout(VM_TEST, 0.5)
        assert "0.5 seconds" in result.output


class TestTestConfiguration:
    """Tests for TestConfiguration model."""

    def test_to_dict(self):
        """Test converting to dictionary."""
        test = TestConfiguration("ui/widget_test.dart", TestType.BROWSER)
        assert test.to_dict() == {"testFileName": "ui/widget_test.dart", "testType": "browser"}

    def test_hashable(self):
        """Test that configurations can be used as keys."""
        assert len({VM_TEST, TestConfiguration("foo_test.dart", TestType.VM)}) == 1
