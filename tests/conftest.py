"""Shared fixtures: a small Dart project and fake toolchain binaries."""

import stat
from pathlib import Path

import pytest

from testdispatch.core.project import Project, Toolchain

# Stands in for `pub run <file>`; behaviour is picked from the generated file name.
FAKE_PUB = """#!/bin/sh
case "$2" in
  *pass_test.dart)
    printf 'unittest-suite-wait-for-done'
    echo 'OK'
    echo 'unittest-suite-wait-for-done'
    exit 0 ;;
  *fail_test.dart)
    echo 'FAIL: assertion' >&2
    exit 1 ;;
  *hang_test.dart)
    echo $$ > "$(dirname "$0")/hang.pid"
    exec sleep 30 ;;
  *cwd_test.dart)
    pwd
    echo "$2"
    exit 0 ;;
  *nested_marker_test.dart)
    echo "unittest-suite-wait-for-unittest-suite-wait-for-donedone"
    echo "OK"
    exit 0 ;;
  *)
    echo "unknown test $2" >&2
    exit 3 ;;
esac
"""

# Stands in for `content_shell --dump-render-tree <page>`.
FAKE_CONTENT_SHELL = """#!/bin/sh
case "$2" in
  *fail_test.html)
    echo 'Content-Type: text/plain'
    echo 'FAIL: element missing'
    echo '#EOF'
    echo '#EOF' >&2
    exit 1 ;;
  *)
    echo 'Content-Type: text/plain'
    echo 'PASS'
    echo "$2"
    echo '#EOF'
    echo '#EOF' >&2
    exit 0 ;;
esac
"""

TEST_SOURCES = {
    "pass_test.dart": "import 'package:unittest/unittest.dart';\nmain() {}\n",
    "fail_test.dart": "import 'package:unittest/unittest.dart';\nmain() {}\n",
    "hang_test.dart": "import 'package:unittest/unittest.dart';\nmain() {}\n",
    "cwd_test.dart": "import 'package:unittest/unittest.dart';\nmain() {}\n",
    "ui/widget_test.dart": "import 'dart:html';\nimport 'package:unittest/unittest.dart';\nmain() {}\n",
}


def _write_script(path: Path, content: str) -> Path:
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project root with a test directory holding a few test files."""
    root = tmp_path / "project"
    for name, source in TEST_SOURCES.items():
        path = root / "test" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source)
    return root


@pytest.fixture
def project(project_dir: Path) -> Project:
    return Project.at(project_dir)


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    path = tmp_path / "bin"
    path.mkdir()
    _write_script(path / "pub", FAKE_PUB)
    _write_script(path / "content_shell", FAKE_CONTENT_SHELL)
    return path


@pytest.fixture
def toolchain(bin_dir: Path) -> Toolchain:
    """Toolchain pointing at the fake binaries."""
    return Toolchain(
        package_runner=str(bin_dir / "pub"),
        browser_driver=str(bin_dir / "content_shell"),
    )
