"""CI context detection utilities."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class CIContext:
    """Detected execution context: a GitHub Actions step or a local run."""

    is_github_actions: bool
    """Running as a GitHub Actions step (``GITHUB_ACTIONS=true``)."""

    output_file: Path | None = None
    """File that step outputs are appended to (``GITHUB_OUTPUT``)."""

    debug: bool = False
    """Runner debug logging requested (``RUNNER_DEBUG=1``)."""


def detect_ci_context() -> CIContext:
    """Detect the CI context from environment variables.

    Any environment other than GitHub Actions counts as a local run.

    Returns:
        CIContext with detected values.
    """
    if os.getenv("GITHUB_ACTIONS") != "true":
        return CIContext(is_github_actions=False)

    output_file = os.getenv("GITHUB_OUTPUT")
    return CIContext(
        is_github_actions=True,
        output_file=Path(output_file) if output_file else None,
        debug=os.getenv("RUNNER_DEBUG") == "1",
    )
