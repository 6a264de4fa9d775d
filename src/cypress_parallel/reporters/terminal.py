"""Terminal reporter for local runs, rendered with rich."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from cypress_parallel.adapters.base import TestFiles

_MAX_PATHS_PER_CELL = 10


class CLIReporter:
    """Summarises the discovered groups on stderr.

    Step outputs own stdout, so everything here goes to stderr.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def print_header(self, title: str) -> None:
        """Print a bold header."""
        self.console.print(f"\n[bold cyan]{escape(title)}[/bold cyan]\n")

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{message}[/dim]")

    def print_groups(self, title: str, groups: list[str]) -> None:
        """Render one table row per group with the spec files it holds."""
        if not groups:
            self.print_info(f"{escape(title)}: none")
            return

        table = Table(title=escape(title), show_header=True, header_style="bold")
        table.add_column("Group", justify="right", style="cyan")
        table.add_column("Specs", justify="right")
        table.add_column("Files")

        for index, group in enumerate(groups, start=1):
            paths = group.split(",")
            # paths such as pages/[slug]/view.cy.ts must not be read as markup
            shown = "\n".join(escape(path) for path in paths[:_MAX_PATHS_PER_CELL])
            if len(paths) > _MAX_PATHS_PER_CELL:
                shown += f"\n[dim]... and {len(paths) - _MAX_PATHS_PER_CELL} more[/dim]"
            table.add_row(str(index), str(len(paths)), shown)

        self.console.print(table)

    def print_test_files(self, test_files: TestFiles) -> None:
        """Print tables for every category present in *test_files*."""
        self.print_header("Cypress spec groups")
        self.print_groups("Integration tests", test_files.integration_tests)
        if test_files.component_tests is not None:
            self.print_groups("Component tests", test_files.component_tests)

        total = len(test_files.integration_tests) + len(test_files.component_tests or [])
        self.print_success(f"{total} group(s) written to the step outputs")
