"""Command-line interface for testdispatch."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from testdispatch import __version__
from testdispatch.config import TestDispatchConfig, create_example_config
from testdispatch.core.errors import TestDispatchError
from testdispatch.core.models import ExecutionResult

console = Console()
err_console = Console(stderr=True)

# Exit status when the harness itself fails, as opposed to a failing test.
HARNESS_ERROR_EXIT_CODE = 2


def setup_logging(verbose: bool) -> None:
    """Send library logs to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def print_banner() -> None:
    """Print the testdispatch banner."""
    console.print(
        Panel.fit(
            "[bold blue]testdispatch[/bold blue] - concurrent VM and browser test runner",
            subtitle=f"v{__version__}",
        )
    )


def fail(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {message}")
    sys.exit(HARNESS_ERROR_EXIT_CODE)


def load_config(ctx: click.Context) -> tuple[TestDispatchConfig, Path]:
    """Load the configuration and return it with the directory it is relative to."""
    config_path = ctx.obj.get("config_path")
    try:
        if config_path:
            return TestDispatchConfig.from_file(config_path), Path(config_path).resolve().parent
        found = TestDispatchConfig.find_config_file()
        if found is None:
            raise FileNotFoundError(
                "No configuration file found. Create testdispatch.json or run 'testdispatch init'"
            )
        return TestDispatchConfig.from_file(found), found.parent
    except FileNotFoundError as e:
        fail(str(e))
    except ValidationError as e:
        fail(f"Invalid configuration:\n{e}")


@click.group()
@click.version_option(version=__version__, prog_name="testdispatch")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False),
    help="Path to configuration file (default: testdispatch.json)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, config: Optional[str], verbose: bool) -> None:
    """testdispatch - run VM and browser tests concurrently.

    Each test runs in the environment it needs; results are shown as soon
    as each test finishes.
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="testdispatch.json",
    help="Output path for configuration file",
)
@click.option("--force", "-f", is_flag=True, help="Overwrite existing configuration")
def init(output: str, force: bool) -> None:
    """Initialize a new testdispatch configuration file."""
    print_banner()

    output_path = Path(output)
    if output_path.exists() and not force:
        console.print(f"[yellow]Configuration file already exists:[/yellow] {output_path}")
        console.print("Use --force to overwrite")
        sys.exit(1)

    create_example_config(output_path)
    console.print(f"[green]Created configuration file:[/green] {output_path}")
    console.print("\nNext steps:")
    console.print("  1. Point project.root and project.test_directory at your project")
    console.print("  2. Set toolchain.sdk_path if the SDK is not on your PATH")
    console.print("  3. Run [bold]testdispatch run[/bold] to execute tests")


@main.command(name="list")
@click.pass_context
def list_tests(ctx: click.Context) -> None:
    """List the tests found in the project."""
    from testdispatch.core.discovery import TestDiscovery
    from testdispatch.core.project import Project

    config, base_dir = load_config(ctx)
    project = Project.from_config(config, base_dir)

    try:
        tests = TestDiscovery(project).discover()
    except TestDispatchError as e:
        fail(str(e))

    if not tests:
        console.print(f"[yellow]No tests found in[/yellow] {project.test_directory}")
        return

    table = Table(title=f"Tests in {project.test_directory}")
    table.add_column("Test", style="cyan")
    table.add_column("Environment")
    for test in tests:
        table.add_row(test.test_file_name, test.test_type.value)
    console.print(table)


@main.command()
@click.argument("test_files", nargs=-1)
@click.option("--timeout", type=click.IntRange(min=1), help="Per-test timeout in seconds")
@click.option(
    "--max-concurrency",
    type=click.IntRange(min=0),
    help="Tests running at the same time (0 for no limit)",
)
@click.option("--json", "json_output", is_flag=True, help="Print one JSON result per line")
@click.pass_context
def run(
    ctx: click.Context,
    test_files: tuple[str, ...],
    timeout: Optional[int],
    max_concurrency: Optional[int],
    json_output: bool,
) -> None:
    """Run the project's tests, or only TEST_FILES."""
    from testdispatch.core.discovery import TestDiscovery
    from testdispatch.core.dispatcher import TestDispatcher
    from testdispatch.core.project import Project, Toolchain

    config, base_dir = load_config(ctx)
    if not json_output:
        print_banner()
        console.print(f"[dim]Loaded config for project:[/dim] {config.project.name}")

    project = Project.from_config(config, base_dir)
    dispatch = config.dispatch
    if max_concurrency is None:
        max_concurrency = dispatch.max_concurrency

    dispatcher = TestDispatcher(
        Toolchain.from_config(config),
        project,
        timeout_seconds=timeout or dispatch.timeout_seconds,
        max_concurrency=max_concurrency or None,
        kill_on_timeout=dispatch.kill_on_timeout,
    )

    def show(result: ExecutionResult) -> None:
        if json_output:
            click.echo(_result_line(result))
        else:
            _display_result(result, ctx.obj.get("verbose", False))

    try:
        tests = TestDiscovery(project).discover(test_files or None)
        results = dispatcher.run_all(tests, on_result=show)
    except TestDispatchError as e:
        fail(str(e))

    failed = [r for r in results if not r.success]
    if not json_output:
        _display_results_summary(results)

    if failed:
        sys.exit(1)


@main.command()
@click.pass_context
def clean(ctx: click.Context) -> None:
    """Delete the directory of generated test files."""
    from testdispatch.core.artifacts import delete_generated_directory, generated_directory_path
    from testdispatch.core.project import Project

    config, base_dir = load_config(ctx)
    project = Project.from_config(config, base_dir)

    path = generated_directory_path(project.test_directory)
    if delete_generated_directory(project.test_directory):
        console.print(f"[green]Deleted[/green] {path}")
    else:
        console.print(f"[dim]Nothing to delete at[/dim] {path}")


def _result_line(result: ExecutionResult) -> str:
    return json.dumps({**result.test.to_dict(), **result.to_dict()})


def _display_result(result: ExecutionResult, verbose: bool) -> None:
    """Display a single test result as it arrives."""
    name = result.test.test_file_name
    if result.success:
        console.print(f"  [green]✓[/green] {name}")
        if verbose and result.output.strip():
            console.print(result.output.rstrip(), markup=False, highlight=False)
        return

    label = "timed out" if result.timed_out else "failed"
    console.print(f"  [red]✗[/red] {name} [red]{label}[/red]")
    if result.output.strip():
        console.print(result.output.rstrip(), markup=False, highlight=False)
    if result.error_output.strip():
        err_console.print(result.error_output.rstrip(), markup=False, highlight=False)


def _display_results_summary(results: list[ExecutionResult]) -> None:
    """Display a summary of test results."""
    total = len(results)
    passed = sum(1 for r in results if r.success)
    timed_out = sum(1 for r in results if r.timed_out)
    failed = total - passed

    console.print("\n" + "=" * 50)
    console.print("[bold]Test Results Summary[/bold]")
    console.print("=" * 50)

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Total Tests", str(total))
    table.add_row("Passed", f"[green]{passed}[/green]")
    table.add_row("Failed", f"[red]{failed}[/red]")
    if timed_out:
        table.add_row("Timed Out", f"[yellow]{timed_out}[/yellow]")

    console.print(table)

    if failed > 0:
        console.print("\n[red]Some tests failed![/red]")
    elif total:
        console.print("\n[green]All tests passed![/green]")
    else:
        console.print("\n[yellow]No tests found[/yellow]")


if __name__ == "__main__":
    main()
