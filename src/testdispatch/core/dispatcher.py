"""Dispatch of tests to the runner matching their environment."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Iterable, Mapping
from typing import Optional

from testdispatch.core.errors import UnsupportedTestTypeError
from testdispatch.core.models import ExecutionResult, TestConfiguration, TestType
from testdispatch.core.project import Project, Toolchain
from testdispatch.core.runners import BrowserTestRunner, TestRunner, VmTestRunner

logger = logging.getLogger(__name__)

RunnerFactory = Callable[[Toolchain, Project, bool], TestRunner]

RUNNER_MAP: dict[TestType, RunnerFactory] = {
    TestType.VM: VmTestRunner,
    TestType.BROWSER: BrowserTestRunner,
}

# Number of seconds to wait until a test times out.
DEFAULT_TIMEOUT_SECONDS = 240

DEFAULT_MAX_CONCURRENCY = 5


class TestDispatcher:
    """Runs tests concurrently on the runner matching each test's type."""

    __test__ = False

    def __init__(
        self,
        toolchain: Toolchain,
        project: Project,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_concurrency: Optional[int] = DEFAULT_MAX_CONCURRENCY,
        kill_on_timeout: bool = True,
        runner_map: Optional[Mapping[TestType, RunnerFactory]] = None,
    ):
        """Initialize the dispatcher.

        Args:
            toolchain: Binaries used by the runners
            project: Project containing the tests
            timeout_seconds: Time a single test may run before it is aborted
            max_concurrency: Tests running at the same time, None for no limit
            kill_on_timeout: Kill a test's process when it times out
            runner_map: Runner factory per test type, defaults to RUNNER_MAP
        """
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self.toolchain = toolchain
        self.project = project
        self.timeout_seconds = timeout_seconds
        self.max_concurrency = max_concurrency
        self.kill_on_timeout = kill_on_timeout
        self.runner_map = dict(RUNNER_MAP if runner_map is None else runner_map)
        self._runners: dict[TestType, TestRunner] = {}

    def get_runner(self, test: TestConfiguration) -> TestRunner:
        """Return the runner for ``test``'s type.

        Raises:
            UnsupportedTestTypeError: If no runner handles the type
        """
        runner = self._runners.get(test.test_type)
        if runner is not None:
            return runner

        factory = self.runner_map.get(test.test_type)
        if factory is None:
            raise UnsupportedTestTypeError(
                f"No runner for test type '{test.test_type}' of {test.test_file_name}. "
                f"Available types: {[t.value for t in self.runner_map]}"
            )

        runner = factory(self.toolchain, self.project, self.kill_on_timeout)
        self._runners[test.test_type] = runner
        return runner

    async def run_tests(self, tests: Iterable[TestConfiguration]) -> AsyncIterator[ExecutionResult]:
        """Run all ``tests`` and yield their results as they complete.

        Exactly one result is yielded per test, in completion order. A test
        exceeding the timeout yields a failed result instead of raising.

        Raises:
            ConfigurationError: If a test cannot be run; pending tests are cancelled
        """
        # Resolve every runner up front so a bad type fails before anything starts.
        scheduled = [(test, self.get_runner(test)) for test in tests]
        if not scheduled:
            return

        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None
        tasks = [
            asyncio.ensure_future(self._run_one(runner, test, semaphore))
            for test, runner in scheduled
        ]
        logger.debug("Dispatched %d tests", len(tasks))

        try:
            for next_result in asyncio.as_completed(tasks):
                yield await next_result
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _run_one(
        self,
        runner: TestRunner,
        test: TestConfiguration,
        semaphore: Optional[asyncio.Semaphore],
    ) -> ExecutionResult:
        if semaphore is None:
            return await self._run_with_timeout(runner, test)
        async with semaphore:
            return await self._run_with_timeout(runner, test)

    async def _run_with_timeout(self, runner: TestRunner, test: TestConfiguration) -> ExecutionResult:
        try:
            return await asyncio.wait_for(runner.run_test(test), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                "%s did not complete in %s seconds, aborting", test.test_file_name, self.timeout_seconds
            )
            return ExecutionResult.for_timeout(test, self.timeout_seconds)

    def run_all(
        self,
        tests: Iterable[TestConfiguration],
        on_result: Optional[Callable[[ExecutionResult], None]] = None,
    ) -> list[ExecutionResult]:
        """Run ``tests`` to completion from synchronous code.

        Args:
            tests: Tests to run
            on_result: Called with each result as soon as it is available

        Returns:
            Results in completion order
        """

        async def collect() -> list[ExecutionResult]:
            results = []
            async for result in self.run_tests(tests):
                if on_result is not None:
                    on_result(result)
                results.append(result)
            return results

        return asyncio.run(collect())
