"""Exceptions raised by the dispatch pipeline.

Test failures and timeouts are never raised; they are reported through
``ExecutionResult``. Everything here means the harness itself cannot work.
"""


class TestDispatchError(Exception):
    """Base class for testdispatch errors."""

    __test__ = False


class ConfigurationError(TestDispatchError):
    """Raised when the harness is misconfigured."""


class UnsupportedTestTypeError(ConfigurationError):
    """Raised when no runner is registered for a test's type."""


class ToolchainNotFoundError(ConfigurationError):
    """Raised when a toolchain binary cannot be started."""


class ArtifactDirectoryCollisionError(ConfigurationError):
    """Raised when the generated files directory name is taken by a non-directory."""


class MalformedResultError(TestDispatchError, ValueError):
    """Raised when a serialized execution result cannot be read."""


class MissingResultFieldError(MalformedResultError):
    """Raised when a serialized execution result lacks a required field."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Execution result is missing required fields: {', '.join(missing)}")
