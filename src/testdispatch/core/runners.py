"""Runners executing a single test in a given environment."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from testdispatch.core.codegen import BrowserArtifactGenerator, VmArtifactGenerator
from testdispatch.core.errors import ToolchainNotFoundError
from testdispatch.core.models import ExecutionResult, TestConfiguration
from testdispatch.core.project import Project, Toolchain

logger = logging.getLogger(__name__)

# Printed by the unittest VM configuration to keep the isolate alive.
WAIT_FOR_DONE_MARKER = "unittest-suite-wait-for-done"

# Framing lines added by the browser driver's text dump.
DUMP_RENDER_TREE_FRAMING = ("#EOF", "#READY")


@dataclass
class ProcessOutput:
    """Raw output of a finished toolchain process."""

    exit_code: int
    stdout: str
    stderr: str


class TestRunner(ABC):
    """Runs tests in a particular environment."""

    __test__ = False

    def __init__(self, toolchain: Toolchain, project: Project, kill_on_timeout: bool = True):
        """Initialize the runner.

        Args:
            toolchain: Binaries used to run the test
            project: Project containing the tests
            kill_on_timeout: Kill the test process if the run is cancelled
        """
        self.toolchain = toolchain
        self.project = project
        self.kill_on_timeout = kill_on_timeout
        self._generator = None

    @abstractmethod
    async def run_test(self, test: TestConfiguration) -> ExecutionResult:
        """Run ``test`` and return its result.

        Raises:
            ConfigurationError: If the test cannot be run at all
        """

    async def _run_process(self, command: list[str]) -> ProcessOutput:
        """Run ``command`` in the project root and capture its output.

        Raises:
            ToolchainNotFoundError: If the binary cannot be started
        """
        logger.debug("Executing %s in %s", " ".join(command), self.project.root)
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self.project.root,
            )
        except OSError as e:
            raise ToolchainNotFoundError(
                f"Could not start '{command[0]}': {e}. Is it installed and in the system's PATH?"
            ) from e

        try:
            stdout_bytes, stderr_bytes = await process.communicate()
        except asyncio.CancelledError:
            if self.kill_on_timeout and process.returncode is None:
                logger.debug("Killing process %s", process.pid)
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await process.wait()
            raise

        return ProcessOutput(
            exit_code=process.returncode if process.returncode is not None else -1,
            stdout=stdout_bytes.decode("utf-8", errors="replace"),
            stderr=stderr_bytes.decode("utf-8", errors="replace"),
        )


def _strip_marker(text: str) -> str:
    # Removing one marker can join its neighbours into a new one.
    while WAIT_FOR_DONE_MARKER in text:
        text = text.replace(WAIT_FOR_DONE_MARKER, "")
    return text


class VmTestRunner(TestRunner):
    """Runs tests that can be run on the command line VM."""

    def _create_test_file(self, test_file_name: str) -> Path:
        # Runs in a worker thread; the generator creates the directory on construction.
        if self._generator is None:
            self._generator = VmArtifactGenerator(self.project.test_directory)
        return self._generator.create_test_file(test_file_name)

    async def run_test(self, test: TestConfiguration) -> ExecutionResult:
        artifact = await asyncio.to_thread(self._create_test_file, test.test_file_name)

        # pub resolves package imports from the project root
        try:
            artifact = artifact.relative_to(self.project.root)
        except ValueError:
            pass

        output = await self._run_process(self.toolchain.package_run_command(artifact))
        logger.info("%s finished with exit code %d", test.test_file_name, output.exit_code)

        return ExecutionResult(
            test=test,
            success=output.exit_code == 0,
            output=_strip_marker(output.stdout),
            error_output=output.stderr,
        )


def _strip_dump_framing(text: str) -> str:
    lines = [
        line
        for line in text.splitlines(keepends=True)
        if line.rstrip("\r\n") not in DUMP_RENDER_TREE_FRAMING
        and not line.startswith("Content-Type:")
    ]
    return "".join(lines)


class BrowserTestRunner(TestRunner):
    """Runs tests that need a browser, through a headless browser driver."""

    def _create_test_files(self, test_file_name: str) -> tuple[Path, Path]:
        if self._generator is None:
            self._generator = BrowserArtifactGenerator(self.project.test_directory)
        return self._generator.create_test_files(test_file_name)

    async def run_test(self, test: TestConfiguration) -> ExecutionResult:
        _, page = await asyncio.to_thread(self._create_test_files, test.test_file_name)

        output = await self._run_process(self.toolchain.browser_command(page))
        logger.info("%s finished with exit code %d", test.test_file_name, output.exit_code)

        return ExecutionResult(
            test=test,
            success=output.exit_code == 0,
            output=_strip_dump_framing(output.stdout),
            error_output=_strip_dump_framing(output.stderr),
        )
