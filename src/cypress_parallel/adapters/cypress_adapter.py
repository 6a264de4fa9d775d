"""Adapters for ``cypress.config.{js,mjs,cjs,ts}`` (Cypress 10 and newer).

The config script exports an object with independent ``e2e`` and
``component`` sections, each with optional ``specPattern`` and
``excludeSpecPattern``.  Defaults follow
https://docs.cypress.io/guides/references/configuration#Testing-Type-Specific-Options
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import TYPE_CHECKING, Any

from cypress_parallel.adapters.base import (
    ConfigLoadError,
    CypressConfigAdapter,
    DiscoveryRule,
    ResolvedConfig,
    TranspileError,
    dump_config,
    normalize_patterns,
)
from cypress_parallel.parsing.module_loader import (
    ModuleEvaluationError,
    Unresolved,
    load_module_exports,
)
from cypress_parallel.parsing.transpile import transpile_module

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

# ── Defaults ─────────────────────────────────────────────────────

# Cypress always excludes dependencies from the spec search
DEFAULT_EXCLUDE_SPEC_PATTERNS = ("**/node_modules/**",)

E2E_SPEC_PATTERN = ("cypress/e2e/**/*.cy.{js,jsx,ts,tsx}",)
E2E_EXCLUDE_SPEC_PATTERN = ("*.hot-update.js",)

COMPONENT_SPEC_PATTERN = ("**/*.cy.{js,jsx,ts,tsx}",)
COMPONENT_EXCLUDE_SPEC_PATTERN = ("/snapshots/*", "/image_snapshots/*")

JS_CONFIG_FILE_NAMES = ("cypress.config.js", "cypress.config.mjs", "cypress.config.cjs")
TS_CONFIG_FILE_NAMES = ("cypress.config.ts",)


# ── Default resolution ───────────────────────────────────────────


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    value = config.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigLoadError(f"Invalid value for {name}: expected an object, got {value!r}")
    return value


def _patterns(section: dict[str, Any], category: str, key: str) -> list[str] | None:
    value = section.get(key)
    if isinstance(value, Unresolved):
        raise ConfigLoadError(
            f"Cannot resolve {category}.{key} statically: {value!r} is computed at runtime"
        )
    return normalize_patterns(value, f"{category}.{key}")


def resolve_modern_config(exports: Any) -> ResolvedConfig:
    """Resolve the exported config object into discovery rules.

    A ``default`` export wraps the config and is unwrapped first.  Missing
    fields take their category default; an explicit exclude list replaces
    the category's own defaults but always keeps ``node_modules`` excluded.
    The component category also excludes every resolved e2e spec pattern.
    """
    config = exports.get("default", exports) if isinstance(exports, dict) else exports
    if not isinstance(config, dict):
        raise ConfigLoadError(f"Cypress config must export an object, got {config!r}")

    e2e = _section(config, "e2e")
    e2e_include = _patterns(e2e, "e2e", "specPattern") or list(E2E_SPEC_PATTERN)
    e2e_exclude_given = _patterns(e2e, "e2e", "excludeSpecPattern")
    if e2e_exclude_given is None:
        e2e_exclude_given = list(E2E_EXCLUDE_SPEC_PATTERN)

    component = _section(config, "component")
    component_include = _patterns(component, "component", "specPattern") or list(COMPONENT_SPEC_PATTERN)
    component_exclude_given = _patterns(component, "component", "excludeSpecPattern")
    if component_exclude_given is None:
        component_exclude_given = list(COMPONENT_EXCLUDE_SPEC_PATTERN)

    return ResolvedConfig(
        integration=DiscoveryRule(
            root_folder="",
            include_patterns=e2e_include,
            exclude_patterns=[*DEFAULT_EXCLUDE_SPEC_PATTERNS, *e2e_exclude_given],
        ),
        component=DiscoveryRule(
            root_folder="",
            include_patterns=component_include,
            exclude_patterns=[*DEFAULT_EXCLUDE_SPEC_PATTERNS, *e2e_include, *component_exclude_given],
        ),
    )


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f'Failed to read Cypress config at "{path}": {exc}') from exc


def _evaluate(source: str, path: Path) -> Any:
    try:
        return load_module_exports(source, origin=str(path))
    except ModuleEvaluationError as exc:
        raise ConfigLoadError(str(exc)) from exc


# ── Adapters ─────────────────────────────────────────────────────


class _CypressScriptConfigAdapter(CypressConfigAdapter):
    """Shared loading for the script based config files."""

    def load_config(self) -> ResolvedConfig:
        path = self.config_file()
        exports = self.load_exports(path)
        logger.info('Cypress config found at "%s": %s', path, dump_config(exports))
        return resolve_modern_config(exports)

    @abstractmethod
    def load_exports(self, path: Path) -> Any:
        """Return the exported value of the config script at *path*."""


class CypressJSConfigAdapter(_CypressScriptConfigAdapter):
    """Reads ``cypress.config.js``, ``.mjs`` or ``.cjs``."""

    CONFIG_FILE_NAMES = JS_CONFIG_FILE_NAMES

    @property
    def name(self) -> str:
        return "cypress-js"

    def load_exports(self, path: Path) -> Any:
        return _evaluate(_read_source(path), path)


class CypressTSConfigAdapter(_CypressScriptConfigAdapter):
    """Reads ``cypress.config.ts`` after transpiling it to JavaScript."""

    CONFIG_FILE_NAMES = TS_CONFIG_FILE_NAMES

    @property
    def name(self) -> str:
        return "cypress-ts"

    def load_exports(self, path: Path) -> Any:
        result = transpile_module(_read_source(path), file_name=str(path))
        if result.diagnostics:
            for diagnostic in result.diagnostics:
                logger.error(diagnostic.format())
            raise TranspileError(f'Failed to transpile Cypress typescript config at "{path}"')
        return _evaluate(result.output_text, path)
