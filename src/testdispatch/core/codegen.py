"""Generation of the wrapper files each test environment runs."""

import logging
from pathlib import Path, PurePosixPath

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from testdispatch.core.artifacts import ensure_generated_directory

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class ArtifactGenerator:
    """Base class for generators writing into the generated files directory."""

    def __init__(self, test_root: Path | str):
        """Initialize the generator.

        The generated files directory is created on construction if it does
        not exist yet.

        Args:
            test_root: The project's test directory
        """
        self.test_root = Path(test_root)
        self.generated_directory = ensure_generated_directory(self.test_root)

        self.env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            autoescape=select_autoescape(["html.j2"]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    def artifact_path(self, test_file_name: str) -> Path:
        """Path of the generated file for ``test_file_name``."""
        return self.generated_directory / test_file_name

    def _template_context(self, test_file_name: str) -> dict[str, str]:
        # Generated files sit one directory deeper than the test they wrap.
        name = PurePosixPath(test_file_name)
        up = "../" * len(name.parents)
        return {
            "test_file_name": name.as_posix(),
            "import_path": up + name.as_posix(),
            "packages_path": up + "packages/",
        }

    def _write(self, template_name: str, destination: Path, **context: str) -> Path:
        destination.parent.mkdir(parents=True, exist_ok=True)
        content = self.env.get_template(template_name).render(**context)
        destination.write_text(content, encoding="utf-8")
        logger.debug("Generated %s from %s", destination, template_name)
        return destination


class VmArtifactGenerator(ArtifactGenerator):
    """Generates the file forcing the VM configuration for a test."""

    def create_test_file(self, test_file_name: str) -> Path:
        """Write the VM wrapper for ``test_file_name`` and return its path."""
        return self._write(
            "vm_test.dart.j2",
            self.artifact_path(test_file_name),
            **self._template_context(test_file_name),
        )


class BrowserArtifactGenerator(ArtifactGenerator):
    """Generates the Dart wrapper and HTML page loading a test in a browser."""

    def create_test_files(self, test_file_name: str) -> tuple[Path, Path]:
        """Write the browser wrapper and page for ``test_file_name``.

        Returns:
            Tuple of (dart_path, html_path)
        """
        context = self._template_context(test_file_name)
        dart_path = self._write("browser_test.dart.j2", self.artifact_path(test_file_name), **context)

        html_path = dart_path.with_suffix(".html")
        self._write("browser_test.html.j2", html_path, script_name=dart_path.name, **context)
        return dart_path, html_path
