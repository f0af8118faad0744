"""Core test dispatch functionality."""

from testdispatch.core.dispatcher import TestDispatcher
from testdispatch.core.discovery import TestDiscovery
from testdispatch.core.models import ExecutionResult, TestConfiguration, TestType
from testdispatch.core.project import Project, Toolchain
from testdispatch.core.runners import BrowserTestRunner, TestRunner, VmTestRunner

__all__ = [
    "BrowserTestRunner",
    "ExecutionResult",
    "Project",
    "TestConfiguration",
    "TestDiscovery",
    "TestDispatcher",
    "TestRunner",
    "TestType",
    "Toolchain",
    "VmTestRunner",
]
