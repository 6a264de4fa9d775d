"""Tests for the cypress-parallel command line entry point."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner, Result

from cypress_parallel.cli import main

# ── Helpers ──────────────────────────────────────────────────────


def _write_file(root: Path, rel: str, content: str = "") -> None:
    f = root / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")


def _actions_env(output_file: Path, **inputs: str) -> dict[str, str | None]:
    env: dict[str, str | None] = {
        "GITHUB_ACTIONS": "true",
        "GITHUB_OUTPUT": str(output_file),
        "RUNNER_DEBUG": None,
        "INPUT_WORKING-DIRECTORY": None,
        "INPUT_COUNT-RUNNERS": None,
        "INPUT_FOLLOW-SYMBOLIC-LINKS": None,
    }
    for name, value in inputs.items():
        env[f"INPUT_{name.upper().replace('_', '-')}"] = value
    return env


def _local_env() -> dict[str, str | None]:
    return {
        "GITHUB_ACTIONS": None,
        "GITHUB_OUTPUT": None,
        "INPUT_WORKING-DIRECTORY": None,
        "INPUT_COUNT-RUNNERS": None,
        "INPUT_FOLLOW-SYMBOLIC-LINKS": None,
    }


def _read_outputs(output_file: Path) -> dict[str, object]:
    """Parse the heredoc entries of a ``GITHUB_OUTPUT`` file."""
    if not output_file.exists():
        return {}
    outputs: dict[str, object] = {}
    lines = output_file.read_text(encoding="utf-8").splitlines()
    index = 0
    while index < len(lines):
        name, delimiter = lines[index].split("<<", 1)
        end = lines.index(delimiter, index + 1)
        outputs[name] = json.loads("\n".join(lines[index + 1 : end]))
        index = end + 1
    return outputs


def _invoke(env: dict[str, str | None], args: list[str] | None = None) -> Result:
    return CliRunner().invoke(main, args or [], env=env)


@pytest.fixture
def output_file(tmp_path: Path) -> Path:
    return tmp_path / "github_output"


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


# ── Success paths ────────────────────────────────────────────────


class TestOutputs:
    def test_modern_config_with_grouping(self, project: Path, output_file: Path) -> None:
        _write_file(project, "cypress.config.js", "module.exports = {};\n")
        for i in range(1, 6):
            _write_file(project, f"cypress/e2e/p{i}.cy.js")
        _write_file(project, "src/Button.cy.tsx")

        result = _invoke(_actions_env(output_file, working_directory=str(project), count_runners="2"))

        assert result.exit_code == 0, result.output
        assert _read_outputs(output_file) == {
            "integration-tests": [
                "cypress/e2e/p1.cy.js,cypress/e2e/p2.cy.js,cypress/e2e/p3.cy.js",
                "cypress/e2e/p4.cy.js,cypress/e2e/p5.cy.js",
            ],
            "component-tests": ["src/Button.cy.tsx"],
        }
        assert "::notice::Integration tests found: [%0A" in result.output
        assert "::notice::Component tests found: [%0A" in result.output

    def test_values_are_compact_json(self, project: Path, output_file: Path) -> None:
        _write_file(project, "cypress.config.js", "module.exports = {};\n")
        _write_file(project, "cypress/e2e/a.cy.js")
        _write_file(project, "cypress/e2e/b.cy.js")

        result = _invoke(_actions_env(output_file, working_directory=str(project)))

        assert result.exit_code == 0, result.output
        assert '\n["cypress/e2e/a.cy.js","cypress/e2e/b.cy.js"]\n' in output_file.read_text(encoding="utf-8")

    def test_legacy_without_component_folder(self, project: Path, output_file: Path) -> None:
        _write_file(project, "cypress.json", "{}")
        _write_file(project, "cypress/integration/a.spec.js")

        result = _invoke(_actions_env(output_file, working_directory=str(project)))

        assert result.exit_code == 0, result.output
        assert _read_outputs(output_file) == {"integration-tests": ["cypress/integration/a.spec.js"]}
        assert "Component tests found" not in result.output

    def test_empty_component_category_still_published(self, project: Path, output_file: Path) -> None:
        _write_file(project, "cypress.config.mjs", "export default { component: {} };\n")
        _write_file(project, "cypress/e2e/a.cy.ts")

        result = _invoke(_actions_env(output_file, working_directory=str(project)))

        assert result.exit_code == 0, result.output
        assert _read_outputs(output_file) == {
            "integration-tests": ["cypress/e2e/a.cy.ts"],
            "component-tests": [],
        }

    def test_only_component_tests(self, project: Path, output_file: Path) -> None:
        _write_file(project, "cypress.json", '{"componentFolder": "src"}')
        _write_file(project, "src/a.spec.js")

        result = _invoke(_actions_env(output_file, working_directory=str(project)))

        assert result.exit_code == 0, result.output
        assert _read_outputs(output_file) == {
            "integration-tests": [],
            "component-tests": ["src/a.spec.js"],
        }

    def test_relative_working_directory(
        self, project: Path, output_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_file(project, "app/cypress.json", "{}")
        _write_file(project, "app/cypress/integration/a.js")
        monkeypatch.chdir(project)

        result = _invoke(_actions_env(output_file), ["--working-directory", "app"])

        assert result.exit_code == 0, result.output
        assert _read_outputs(output_file) == {"integration-tests": ["cypress/integration/a.js"]}

    def test_invalid_count_runners_disables_grouping(self, project: Path, output_file: Path) -> None:
        _write_file(project, "cypress.json", "{}")
        _write_file(project, "cypress/integration/a.js")
        _write_file(project, "cypress/integration/b.js")

        result = _invoke(_actions_env(output_file, working_directory=str(project), count_runners="many"))

        assert result.exit_code == 0, result.output
        assert _read_outputs(output_file) == {
            "integration-tests": ["cypress/integration/a.js", "cypress/integration/b.js"]
        }
        assert "::warning::Ignoring count-runners" in result.output

    def test_follow_symbolic_links_input(self, project: Path, output_file: Path) -> None:
        _write_file(project, "cypress.json", "{}")
        _write_file(project, "cypress/integration/own.js")
        _write_file(project, "shared/linked.js")
        (project / "cypress" / "integration" / "shared").symlink_to(
            project / "shared", target_is_directory=True
        )

        result = _invoke(
            _actions_env(output_file, working_directory=str(project), follow_symbolic_links="false")
        )

        assert result.exit_code == 0, result.output
        assert _read_outputs(output_file) == {"integration-tests": ["cypress/integration/own.js"]}

    def test_local_run_prints_outputs(self, project: Path) -> None:
        _write_file(project, "cypress.json", "{}")
        _write_file(project, "cypress/integration/a.js")

        result = _invoke(_local_env(), ["--working-directory", str(project), "--count-runners", "1"])

        assert result.exit_code == 0, result.output
        assert 'integration-tests=["cypress/integration/a.js"]' in result.output


# ── Failure paths ────────────────────────────────────────────────


class TestFailures:
    def test_no_config(self, project: Path, output_file: Path) -> None:
        result = _invoke(_actions_env(output_file, working_directory=str(project)))

        assert result.exit_code == 1
        assert "::error::No supported Cypress config file found." in result.output
        assert _read_outputs(output_file) == {}

    def test_no_tests(self, project: Path, output_file: Path) -> None:
        _write_file(project, "cypress.config.js", "module.exports = {};\n")

        result = _invoke(_actions_env(output_file, working_directory=str(project)))

        assert result.exit_code == 1
        assert "::error::No tests found" in result.output
        assert _read_outputs(output_file) == {}

    def test_legacy_without_component_and_no_tests(self, project: Path, output_file: Path) -> None:
        _write_file(project, "cypress.json", "{}")

        result = _invoke(_actions_env(output_file, working_directory=str(project)))

        assert result.exit_code == 1
        assert "::error::No tests found" in result.output

    def test_typescript_syntax_error(self, project: Path, output_file: Path) -> None:
        _write_file(project, "cypress.config.ts", "export default {\n  e2e: {\n")
        _write_file(project, "cypress/e2e/a.cy.ts")

        result = _invoke(_actions_env(output_file, working_directory=str(project)))

        assert result.exit_code == 1
        assert "::error::Failed to parse cypress tests: Failed to transpile Cypress typescript config" in (
            result.output
        )
        assert "::error::No tests found" in result.output
        assert _read_outputs(output_file) == {}

    def test_unexpected_error(self, project: Path, output_file: Path) -> None:
        with patch("cypress_parallel.cli.parse", side_effect=PermissionError("permission denied")):
            result = _invoke(_actions_env(output_file, working_directory=str(project)))

        assert result.exit_code == 1
        assert "::error::Action failed with error: permission denied" in result.output
        assert _read_outputs(output_file) == {}


def test_version() -> None:
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "cypress-parallel" in result.output
