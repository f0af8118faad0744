"""Tests for test discovery."""

from pathlib import Path

import pytest

from testdispatch.core.artifacts import ensure_generated_directory
from testdispatch.core.discovery import TestDiscovery
from testdispatch.core.errors import ConfigurationError
from testdispatch.core.models import TestType
from testdispatch.core.project import Project


class TestTestDiscovery:
    """Tests for TestDiscovery."""

    def test_discovers_all_tests(self, project: Project):
        """Test that every *_test.dart file is found, sorted by path."""
        tests = TestDiscovery(project).discover()

        assert [t.test_file_name for t in tests] == [
            "cwd_test.dart",
            "fail_test.dart",
            "hang_test.dart",
            "pass_test.dart",
            "ui/widget_test.dart",
        ]

    def test_detects_browser_tests(self, project: Project):
        """Test that tests importing dart:html run in the browser."""
        tests = {t.test_file_name: t.test_type for t in TestDiscovery(project).discover()}

        assert tests["ui/widget_test.dart"] is TestType.BROWSER
        assert tests["pass_test.dart"] is TestType.VM

    def test_ignores_generated_and_packages_directories(self, project: Project):
        """Test that generated wrappers and package links are skipped."""
        generated = ensure_generated_directory(project.test_directory)
        (generated / "pass_test.dart").write_text("main() {}")
        packages = project.test_directory / "packages" / "unittest"
        packages.mkdir(parents=True)
        (packages / "lib_test.dart").write_text("main() {}")

        names = [t.test_file_name for t in TestDiscovery(project).discover()]

        assert len(names) == 5
        assert not any("__test_runner" in n or "packages" in n for n in names)

    def test_ignores_non_test_files(self, project: Project):
        """Test that helpers without the _test suffix are skipped."""
        (project.test_directory / "helpers.dart").write_text("library helpers;")

        names = [t.test_file_name for t in TestDiscovery(project).discover()]

        assert "helpers.dart" not in names

    def test_select_by_name(self, project: Project):
        """Test selecting tests by relative path, keeping the given order."""
        tests = TestDiscovery(project).discover(["ui/widget_test.dart", "pass_test.dart"])

        assert [t.test_file_name for t in tests] == ["ui/widget_test.dart", "pass_test.dart"]

    def test_select_unknown_name(self, project: Project):
        """Test that asking for a missing test is an error."""
        with pytest.raises(ConfigurationError):
            TestDiscovery(project).discover(["missing_test.dart"])

    def test_missing_test_directory(self, tmp_path: Path):
        """Test that a project without a test directory is an error."""
        with pytest.raises(ConfigurationError):
            TestDiscovery(Project.at(tmp_path)).discover()

    def test_detect_type_ignores_commented_import(self, tmp_path: Path):
        """Test that only real dart:html imports count."""
        test_file = tmp_path / "a_test.dart"
        test_file.write_text("// import 'dart:html';\nmain() {}\n")

        assert TestDiscovery.detect_type(test_file) is TestType.VM
