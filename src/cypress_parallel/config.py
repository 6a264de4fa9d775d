"""Run configuration built from the action inputs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class RunConfig:
    """Settings for a single invocation."""

    working_directory: Path
    """Absolute directory that holds the Cypress config."""

    follow_symbolic_links: bool = True
    """Whether the spec search follows symbolic links."""

    count_runners: int | None = None
    """Number of groups to build; ``None`` disables grouping."""


def parse_count_runners(raw: str | None) -> int | None:
    """Parse the ``count-runners`` input.

    Empty and non-positive values disable grouping.  A value that is not an
    integer also disables grouping, with a warning.
    """
    if raw is None or not raw.strip():
        return None
    try:
        count = int(raw.strip())
    except ValueError:
        logger.warning("Ignoring count-runners %r: not an integer", raw)
        return None
    return count if count > 0 else None


def build_run_config(
    working_directory: str | None,
    count_runners: str | None = None,
    *,
    follow_symbolic_links: bool = True,
    cwd: Path | None = None,
) -> RunConfig:
    """Build a :class:`RunConfig` from raw input strings.

    A relative *working_directory* is resolved against *cwd* (the process
    working directory by default); an empty one means *cwd* itself.
    """
    base = cwd if cwd is not None else Path.cwd()
    directory = Path(working_directory) if working_directory else base
    if not directory.is_absolute():
        directory = base / directory

    return RunConfig(
        working_directory=directory,
        follow_symbolic_links=follow_symbolic_links,
        count_runners=parse_count_runners(count_runners),
    )
