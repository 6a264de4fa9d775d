"""Adapter for the legacy ``cypress.json`` config (Cypress 9 and older).

Relevant fields, see https://docs.cypress.io/guides/references/legacy-configuration:
``integrationFolder``, ``componentFolder``, ``testFiles`` and
``ignoreTestFiles``.  Both categories share the same file patterns.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from cypress_parallel.adapters.base import (
    ConfigLoadError,
    CypressConfigAdapter,
    DiscoveryRule,
    ResolvedConfig,
    dump_config,
    normalize_patterns,
)

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

CONFIG_FILE_NAME = "cypress.json"

DEFAULT_INTEGRATION_FOLDER = "cypress/integration"
DEFAULT_TEST_FILES = "**/*.*"


def read_json_config(path: Path) -> dict[str, Any]:
    """Parse *path* as a JSON object.

    Raises:
        ConfigLoadError: If the file is unreadable, not JSON, or not an object.
    """
    try:
        config = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ConfigLoadError(f'Failed to read Cypress config at "{path}": {exc}') from exc

    if not isinstance(config, dict):
        raise ConfigLoadError(f'Cypress config at "{path}" is not a JSON object')
    return config


def _folder(config: dict[str, Any], key: str) -> str | None:
    value = config.get(key)
    if value is None or isinstance(value, str):
        return value
    if value is False:
        return None
    raise ConfigLoadError(f"Invalid value for {key}: expected a string, got {value!r}")


def resolve_legacy_config(config: dict[str, Any]) -> ResolvedConfig:
    """Merge a ``cypress.json`` object onto the Cypress 9 defaults."""
    integration_folder = _folder(config, "integrationFolder")
    if integration_folder is None:
        integration_folder = DEFAULT_INTEGRATION_FOLDER

    test_files = normalize_patterns(config.get("testFiles"), "testFiles") or [DEFAULT_TEST_FILES]

    ignore_value = config.get("ignoreTestFiles")
    ignore_test_files: list[str] = []
    if ignore_value:
        ignore_test_files = normalize_patterns(ignore_value, "ignoreTestFiles") or []

    integration = DiscoveryRule(integration_folder, test_files, ignore_test_files)

    component = None
    component_folder = _folder(config, "componentFolder")
    if component_folder:
        component = DiscoveryRule(component_folder, list(test_files), list(ignore_test_files))

    return ResolvedConfig(integration=integration, component=component)


class Cypress9ConfigAdapter(CypressConfigAdapter):
    """Reads ``cypress.json``."""

    CONFIG_FILE_NAMES = (CONFIG_FILE_NAME,)

    @property
    def name(self) -> str:
        return "cypress9"

    def load_config(self) -> ResolvedConfig:
        config = read_json_config(self.config_file())
        logger.info("JSON Cypress config found: %s", dump_config(config))
        return resolve_legacy_config(config)
