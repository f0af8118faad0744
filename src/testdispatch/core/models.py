"""Data models for test configurations and execution results."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from testdispatch.core.errors import MalformedResultError, MissingResultFieldError


class TestType(str, Enum):
    """Environment a test has to run in."""

    __test__ = False

    VM = "vm"
    BROWSER = "browser"


@dataclass(frozen=True)
class TestConfiguration:
    """A test file and the environment it runs in."""

    __test__ = False

    test_file_name: str
    test_type: TestType = TestType.VM

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "testFileName": self.test_file_name,
            "testType": self.test_type.value,
        }


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of running a single test file."""

    REQUIRED_FIELDS = ("success", "testOutput", "errorOutput")

    test: TestConfiguration
    success: bool = True
    output: str = ""
    error_output: str = ""
    timed_out: bool = False

    @classmethod
    def for_timeout(cls, test: TestConfiguration, timeout_seconds: float) -> "ExecutionResult":
        """Build the failed result reported when a test exceeds its timeout."""
        return cls(
            test=test,
            success=False,
            output=(
                f"The test did not complete in less than {timeout_seconds:g} seconds. "
                "It was aborted."
            ),
            timed_out=True,
        )

    def to_dict(self) -> dict:
        """Convert to the serialized result format."""
        return {
            "success": self.success,
            "testOutput": self.output,
            "errorOutput": self.error_output,
            "timedOut": self.timed_out,
        }

    def to_json(self) -> str:
        """Serialize to a JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict[str, Any], test: TestConfiguration) -> "ExecutionResult":
        """Create from the serialized result format.

        Args:
            data: Mapping holding ``success``, ``testOutput`` and ``errorOutput``
            test: The test the result belongs to

        Raises:
            MissingResultFieldError: If a required field is absent or null
            MalformedResultError: If a field has the wrong type
        """
        if not isinstance(data, dict):
            raise MalformedResultError(f"Execution result must be an object, got {type(data).__name__}")

        missing = [name for name in cls.REQUIRED_FIELDS if data.get(name) is None]
        if missing:
            raise MissingResultFieldError(missing)

        success = data["success"]
        output = data["testOutput"]
        error_output = data["errorOutput"]
        timed_out = data.get("timedOut")
        if timed_out is None:
            timed_out = False

        if not isinstance(success, bool) or not isinstance(timed_out, bool):
            raise MalformedResultError("'success' and 'timedOut' must be booleans")
        if not isinstance(output, str) or not isinstance(error_output, str):
            raise MalformedResultError("'testOutput' and 'errorOutput' must be strings")

        return cls(
            test=test,
            success=success,
            output=output,
            error_output=error_output,
            timed_out=timed_out,
        )

    @classmethod
    def from_json(cls, text: str, test: TestConfiguration) -> "ExecutionResult":
        """Create from a JSON string produced by ``to_json``."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedResultError(f"Execution result is not valid JSON: {e}") from e
        return cls.from_dict(data, test)
