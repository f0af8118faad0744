"""
testdispatch - concurrent runner for VM and browser hosted Dart test suites.

This package provides tools to:
- Discover test files and tag them with the environment they need
- Generate the wrapper files each environment runs
- Run every test concurrently with a per-test timeout
- Stream structured, serializable results as tests complete
"""

__version__ = "0.1.0"
__author__ = "testdispatch Team"
