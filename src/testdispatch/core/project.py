"""Handles on the project under test and the toolchain that runs it."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from testdispatch.config import TestDispatchConfig


@dataclass(frozen=True)
class Project:
    """Project containing the tests."""

    root: Path
    test_directory: Path

    @classmethod
    def at(cls, root: Path | str, test_directory: Optional[Path | str] = None) -> "Project":
        """Create a project handle, defaulting the test root to ``<root>/test``."""
        root = Path(root).resolve()
        if test_directory is None:
            test_directory = root / "test"
        return cls(root=root, test_directory=(root / test_directory).resolve())

    @classmethod
    def from_config(cls, config: TestDispatchConfig, base_dir: Path | str | None = None) -> "Project":
        """Create a project handle from configuration."""
        paths = config.get_absolute_paths(base_dir)
        return cls(root=paths["project_root"], test_directory=paths["test_directory"])


@dataclass(frozen=True)
class Toolchain:
    """Commands used to run VM and browser tests."""

    package_runner: str = "pub"
    browser_driver: str = "content_shell"
    browser_args: tuple[str, ...] = field(default=("--dump-render-tree",))

    @classmethod
    def from_config(cls, config: TestDispatchConfig) -> "Toolchain":
        """Create a toolchain from configuration."""
        toolchain = config.toolchain
        package_runner = toolchain.package_runner
        browser_driver = toolchain.browser_driver

        if toolchain.sdk_path:
            bin_dir = Path(toolchain.sdk_path).expanduser() / "bin"
            package_runner = str(bin_dir / package_runner)

        return cls(
            package_runner=package_runner,
            browser_driver=browser_driver,
            browser_args=tuple(toolchain.browser_args),
        )

    def package_run_command(self, artifact: Path | str) -> list[str]:
        """Command executing a generated file through the package runner."""
        return [self.package_runner, "run", str(artifact)]

    def browser_command(self, page: Path | str) -> list[str]:
        """Command loading a generated page in the browser driver."""
        return [self.browser_driver, *self.browser_args, str(page)]
