"""Test discovery functionality."""

import re
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from testdispatch.core.artifacts import GENERATED_DIR_NAME
from testdispatch.core.errors import ConfigurationError
from testdispatch.core.models import TestConfiguration, TestType
from testdispatch.core.project import Project

TEST_FILE_PATTERN = "*_test.dart"

# Directories that never hold the project's own tests.
IGNORED_DIRECTORIES = {GENERATED_DIR_NAME, "packages"}

BROWSER_IMPORT = re.compile(r"""^\s*import\s+['"]dart:html['"]""", re.MULTILINE)


class TestDiscovery:
    """Discovers tests in a project."""

    __test__ = False

    def __init__(self, project: Project):
        """Initialize test discovery."""
        self.project = project
        self.test_dir = project.test_directory

    def discover(self, names: Optional[Iterable[str]] = None) -> list[TestConfiguration]:
        """Discover the tests in the project's test directory.

        Args:
            names: Only return these tests, given relative to the test directory

        Raises:
            ConfigurationError: If the test directory or a requested test is missing
        """
        if not self.test_dir.is_dir():
            raise ConfigurationError(f"Test directory not found: {self.test_dir}")

        tests = {}
        for test_file in sorted(self.test_dir.rglob(TEST_FILE_PATTERN)):
            relative_path = test_file.relative_to(self.test_dir)
            if IGNORED_DIRECTORIES.intersection(relative_path.parts[:-1]):
                continue
            name = relative_path.as_posix()
            tests[name] = TestConfiguration(test_file_name=name, test_type=self.detect_type(test_file))

        if names is None:
            return list(tests.values())

        selected = []
        for name in names:
            name = Path(name).as_posix()
            if name not in tests:
                raise ConfigurationError(f"Test not found in {self.test_dir}: {name}")
            selected.append(tests[name])
        return selected

    @staticmethod
    def detect_type(test_file: Path) -> TestType:
        """Tests importing dart:html need a browser; everything else runs on the VM."""
        source = test_file.read_text(encoding="utf-8", errors="replace")
        if BROWSER_IMPORT.search(source):
            return TestType.BROWSER
        return TestType.VM
