"""cypress-parallel CLI: find Cypress specs and publish them as step outputs."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler

from cypress_parallel import __version__
from cypress_parallel.adapters.registry import parse
from cypress_parallel.config import RunConfig, build_run_config
from cypress_parallel.reporters.terminal import CLIReporter
from cypress_parallel.sharding.splitter import group_test_files
from cypress_parallel.utils.ci_context import CIContext, detect_ci_context
from cypress_parallel.utils.github_actions import (
    NOTICE,
    GitHubActionsHandler,
    StepOutputs,
    set_failed,
)

if TYPE_CHECKING:
    from cypress_parallel.adapters.base import TestFiles

logger = logging.getLogger(__name__)

NO_CONFIG_MESSAGE = "No supported Cypress config file found."
NO_TESTS_MESSAGE = "No tests found"

INTEGRATION_OUTPUT = "integration-tests"
COMPONENT_OUTPUT = "component-tests"

_package_logger = logging.getLogger("cypress_parallel")
_installed_handlers: list[logging.Handler] = []


def _configure_logging(ci_context: CIContext, *, verbose: bool) -> None:
    """Route package log records to workflow commands or a rich console."""
    while _installed_handlers:
        _package_logger.removeHandler(_installed_handlers.pop())

    handler: logging.Handler
    if ci_context.is_github_actions:
        handler = GitHubActionsHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        level = logging.DEBUG
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False, markup=False)
        level = logging.DEBUG if verbose else logging.INFO

    _package_logger.addHandler(handler)
    _package_logger.setLevel(level)
    _installed_handlers.append(handler)


def _announce(label: str, tests: list[str]) -> None:
    logger.log(NOTICE, "%s tests found: %s", label, json.dumps(tests, indent=2))


def publish(test_files: TestFiles, outputs: StepOutputs) -> None:
    """Write the step outputs for every category present in *test_files*."""
    outputs.set_output(INTEGRATION_OUTPUT, test_files.integration_tests)
    _announce("Integration", test_files.integration_tests)

    if test_files.component_tests is not None:
        outputs.set_output(COMPONENT_OUTPUT, test_files.component_tests)
        _announce("Component", test_files.component_tests)


def run(run_config: RunConfig, outputs: StepOutputs, reporter: CLIReporter | None = None) -> int:
    """Discover, group and publish the specs for *run_config*.

    Returns:
        Process exit status; on failure no output is written.
    """
    logger.info("Working directory: %s", run_config.working_directory)

    test_files = parse(run_config)
    if test_files is None:
        set_failed(NO_CONFIG_MESSAGE)
        return 1
    if test_files.is_empty:
        set_failed(NO_TESTS_MESSAGE)
        return 1

    group_test_files(run_config.count_runners, test_files)
    publish(test_files, outputs)

    if reporter is not None:
        reporter.print_test_files(test_files)
    return 0


@click.command()
@click.option(
    "--working-directory",
    envvar="INPUT_WORKING-DIRECTORY",
    default="",
    help="Directory containing the Cypress config (defaults to the current directory).",
)
@click.option(
    "--count-runners",
    envvar="INPUT_COUNT-RUNNERS",
    default="",
    help="Number of parallel runners to group the specs for.",
)
@click.option(
    "--follow-symbolic-links/--no-follow-symbolic-links",
    envvar="INPUT_FOLLOW-SYMBOLIC-LINKS",
    default=True,
    help="Follow symbolic links while searching for spec files.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name="cypress-parallel")
def main(
    *,
    working_directory: str,
    count_runners: str,
    follow_symbolic_links: bool,
    verbose: bool,
) -> None:
    """Find Cypress spec files and split them into groups for parallel runners."""
    ci_context = detect_ci_context()
    _configure_logging(ci_context, verbose=verbose)

    try:
        run_config = build_run_config(
            working_directory,
            count_runners,
            follow_symbolic_links=follow_symbolic_links,
        )
        logger.info(
            "Configuration: %s",
            json.dumps(
                {
                    "workingDirectory": str(run_config.working_directory),
                    "countRunners": run_config.count_runners,
                    "followSymbolicLinks": run_config.follow_symbolic_links,
                },
                indent=2,
            ),
        )
        reporter = None if ci_context.is_github_actions else CLIReporter()
        exit_code = run(run_config, StepOutputs(ci_context.output_file), reporter)
    except Exception as exc:
        logger.debug("Unexpected failure", exc_info=True)
        set_failed(f"Action failed with error: {exc}")
        exit_code = 1

    if exit_code:
        raise SystemExit(exit_code)
