"""Shared data model and base class for Cypress config adapters.

An adapter reads one generation of the Cypress configuration format and
turns it into a :class:`ResolvedConfig`: one :class:`DiscoveryRule` per
test category.  The base class then runs the glob engine for each rule.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any, ClassVar

from cypress_parallel.utils.globber import glob_files

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

logger = logging.getLogger(__name__)


# ── Errors ───────────────────────────────────────────────────────


class CypressConfigError(Exception):
    """Base class for errors raised while reading a Cypress config."""


class ConfigNotFoundError(CypressConfigError):
    """The adapter's config file is missing or ambiguous."""


class ConfigLoadError(CypressConfigError):
    """The config file exists but cannot be read or interpreted."""


class TranspileError(CypressConfigError):
    """A TypeScript config could not be transpiled."""


# ── Data model ───────────────────────────────────────────────────


@dataclass
class DiscoveryRule:
    """Where and how to look for the spec files of one test category."""

    root_folder: str
    """Folder relative to the working directory; empty for the directory itself."""

    include_patterns: list[str]
    """Globs a spec file must match (at least one)."""

    exclude_patterns: list[str] = field(default_factory=list)
    """Globs that remove a file from the result."""


@dataclass
class ResolvedConfig:
    """Schema-independent view of a Cypress config."""

    integration: DiscoveryRule
    component: DiscoveryRule | None = None


@dataclass
class TestFiles:
    """Spec files found per category.

    ``component_tests`` is ``None`` when the config declares no component
    category, which is different from declaring one that matched nothing.
    """

    __test__ = False

    integration_tests: list[str]
    component_tests: list[str] | None = None

    @property
    def is_empty(self) -> bool:
        """True when neither category holds any entry."""
        return not self.integration_tests and not self.component_tests


class LocateStatus(Enum):
    """Outcome of looking for a config file."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"


@dataclass
class ConfigLocation:
    """Result of :func:`locate_config_file`."""

    status: LocateStatus
    path: Path | None = None
    candidates: list[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.status is LocateStatus.FOUND


# ── Config locator ───────────────────────────────────────────────


def locate_config_file(working_directory: Path, candidate_names: Sequence[str]) -> ConfigLocation:
    """Find the single config file named in *candidate_names*.

    Only direct children of *working_directory* are considered.  Finding
    none, or more than one, is reported through the returned status rather
    than raised.
    """
    if not working_directory.is_dir():
        logger.debug("Working directory %s does not exist", working_directory)
        return ConfigLocation(LocateStatus.NOT_FOUND)

    names = set(candidate_names)
    results = sorted(
        entry.name
        for entry in working_directory.iterdir()
        if entry.name in names and entry.is_file()
    )
    logger.debug("Cypress config files found: %s", json.dumps(results, indent=2))

    if not results:
        logger.debug(
            "No config file of type %s found at %s.",
            json.dumps(list(candidate_names)),
            working_directory,
        )
        return ConfigLocation(LocateStatus.NOT_FOUND)
    if len(results) > 1:
        logger.error("Multiple Cypress config files found.")
        return ConfigLocation(LocateStatus.AMBIGUOUS, candidates=results)

    return ConfigLocation(LocateStatus.FOUND, working_directory / results[0], results)


# ── Field helpers ────────────────────────────────────────────────


def normalize_patterns(value: Any, field_name: str) -> list[str] | None:
    """Turn a pattern field into a list of globs.

    ``None`` means the field is not set.  A single string becomes a
    one-element list.

    Raises:
        ConfigLoadError: If the value is neither a string nor a list of strings.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    raise ConfigLoadError(
        f"Invalid value for {field_name}: expected a string or a list of strings, got {value!r}"
    )


def dump_config(config: Any) -> str:
    """Pretty-print a loaded config for the log."""
    return json.dumps(config, indent=2, default=repr)


# ── Adapter base ─────────────────────────────────────────────────


class CypressConfigAdapter(ABC):
    """Base class for adapters reading one Cypress config format.

    Args:
        working_directory: Absolute directory holding the config file.
        follow_symbolic_links: Whether the spec search follows links.
    """

    CONFIG_FILE_NAMES: ClassVar[tuple[str, ...]] = ()

    def __init__(self, working_directory: Path, *, follow_symbolic_links: bool = True) -> None:
        self.working_directory = working_directory
        self.follow_symbolic_links = follow_symbolic_links

    @property
    @abstractmethod
    def name(self) -> str:
        """Adapter identifier used in log messages."""

    @classmethod
    def locate(cls, working_directory: Path) -> ConfigLocation:
        return locate_config_file(working_directory, cls.CONFIG_FILE_NAMES)

    @classmethod
    def has_config_file(cls, working_directory: Path) -> bool:
        """Return ``True`` if exactly one of this adapter's config files exists."""
        return cls.locate(working_directory).found

    def config_file(self) -> Path:
        """Return the path of the config file.

        Raises:
            ConfigNotFoundError: If the file is missing or ambiguous.
        """
        location = self.locate(self.working_directory)
        if location.path is None:
            raise ConfigNotFoundError("no supported config file found.")
        return location.path

    @abstractmethod
    def load_config(self) -> ResolvedConfig:
        """Read the config file and resolve it into discovery rules."""

    def parse_tests(self) -> TestFiles:
        """Find the spec files of every category the config declares.

        The integration category is always searched before the component one.
        """
        config = self.load_config()
        integration_tests = self._parse_test_of_type(config.integration)
        component_tests = None
        if config.component is not None:
            component_tests = self._parse_test_of_type(config.component)
        return TestFiles(integration_tests, component_tests)

    def _parse_test_of_type(self, rule: DiscoveryRule) -> list[str]:
        root = self.working_directory / rule.root_folder if rule.root_folder else self.working_directory
        files = glob_files(
            root,
            rule.include_patterns,
            rule.exclude_patterns,
            follow_symbolic_links=self.follow_symbolic_links,
        )
        if not rule.root_folder:
            return files
        folder = PurePosixPath(rule.root_folder.replace("\\", "/"))
        return [(folder / rel).as_posix() for rel in files]
