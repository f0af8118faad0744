"""Configuration management for testdispatch."""

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ProjectConfig(BaseModel):
    """Project identification and layout."""

    name: str = Field(default="my-project", description="Project name for identification")
    root: str = Field(default=".", description="Project root, relative to the config file")
    test_directory: str = Field(default="test", description="Test root, relative to the project root")


class ToolchainConfig(BaseModel):
    """Binaries used to execute tests."""

    sdk_path: Optional[str] = Field(
        default=None, description="SDK directory; binaries are looked up in its bin/ when set"
    )
    package_runner: str = Field(default="pub", description="Package runner used for VM tests")
    browser_driver: str = Field(default="content_shell", description="Headless browser used for browser tests")
    browser_args: list[str] = Field(
        default_factory=lambda: ["--dump-render-tree"], description="Arguments passed to the browser driver"
    )

    @field_validator("package_runner", "browser_driver")
    @classmethod
    def validate_binary(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Binary name cannot be empty")
        return v


class DispatchConfig(BaseModel):
    """Test dispatch configuration."""

    timeout_seconds: int = Field(default=240, description="Per-test execution timeout")
    max_concurrency: Optional[int] = Field(
        default=5, description="Tests running at the same time (null for no limit)"
    )
    kill_on_timeout: bool = Field(default=True, description="Kill the test process when it times out")

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Timeout must be at least 1 second")
        return v

    @field_validator("max_concurrency")
    @classmethod
    def validate_max_concurrency(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("max_concurrency must be at least 1 (or null for no limit)")
        return v


class TestDispatchConfig(BaseModel):
    """Main configuration for testdispatch."""

    __test__ = False

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "TestDispatchConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        return cls.model_validate(data)

    @classmethod
    def find_config_file(cls, start_dir: Path | str | None = None) -> Optional[Path]:
        """Search up the directory tree for a configuration file."""
        if start_dir is None:
            start_dir = Path.cwd()
        else:
            start_dir = Path(start_dir)

        config_names = ["testdispatch.json", ".testdispatch.json"]

        current = start_dir.resolve()
        while True:
            for name in config_names:
                config_path = current / name
                if config_path.exists():
                    return config_path
            if current == current.parent:
                return None
            current = current.parent

    @classmethod
    def find_and_load(cls, start_dir: Path | str | None = None) -> "TestDispatchConfig":
        """Find and load configuration file, searching up the directory tree."""
        config_path = cls.find_config_file(start_dir)
        if config_path is None:
            raise FileNotFoundError(
                "No configuration file found. Create testdispatch.json or run 'testdispatch init'"
            )
        return cls.from_file(config_path)

    def to_file(self, path: Path | str) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)

    def get_absolute_paths(self, base_dir: Path | str | None = None) -> dict[str, Path]:
        """Get absolute paths for the project layout."""
        if base_dir is None:
            base_dir = Path.cwd()
        else:
            base_dir = Path(base_dir)

        project_root = (base_dir / self.project.root).resolve()
        return {
            "project_root": project_root,
            "test_directory": (project_root / self.project.test_directory).resolve(),
        }


def get_default_config() -> TestDispatchConfig:
    """Return a default configuration."""
    return TestDispatchConfig(
        project=ProjectConfig(name="my-project"),
        toolchain=ToolchainConfig(package_runner="pub", browser_driver="content_shell"),
        dispatch=DispatchConfig(timeout_seconds=240, max_concurrency=5),
    )


def create_example_config(output_path: Path | str) -> Path:
    """Create an example configuration file."""
    output_path = Path(output_path)
    config = get_default_config()
    config.to_file(output_path)
    return output_path
