"""Tests for the rich terminal reporter."""

from __future__ import annotations

import io

from rich.console import Console

from cypress_parallel.adapters.base import TestFiles
from cypress_parallel.reporters.terminal import CLIReporter


def _reporter() -> tuple[CLIReporter, io.StringIO]:
    buffer = io.StringIO()
    console = Console(file=buffer, width=200, color_system=None, force_terminal=False)
    return CLIReporter(console), buffer


def test_groups_rendered_per_category() -> None:
    reporter, buffer = _reporter()

    reporter.print_test_files(TestFiles(["a.cy.js,b.cy.js", "c.cy.js"], []))

    output = buffer.getvalue()
    assert "Integration tests" in output
    assert "c.cy.js" in output
    assert "Component tests: none" in output
    assert "2 group(s) written to the step outputs" in output


def test_bracketed_paths_are_not_markup() -> None:
    reporter, buffer = _reporter()

    reporter.print_groups("Tests [e2e]", ["cypress/e2e/pages/[slug]/view.cy.ts,cypress/e2e/[bold]x.cy.ts"])

    output = buffer.getvalue()
    assert "cypress/e2e/pages/[slug]/view.cy.ts" in output
    assert "cypress/e2e/[bold]x.cy.ts" in output
    assert "Tests [e2e]" in output


def test_empty_bracketed_title_is_not_markup() -> None:
    reporter, buffer = _reporter()

    reporter.print_groups("[slug] tests", [])

    assert "[slug] tests: none" in buffer.getvalue()
