"""Tests for CI context detection."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from cypress_parallel.utils.ci_context import CIContext, detect_ci_context


def test_detect_github_actions_context() -> None:
    """GitHub Actions exposes the output file and debug flag."""
    env = {
        "GITHUB_ACTIONS": "true",
        "GITHUB_OUTPUT": "/tmp/github_output",
        "RUNNER_DEBUG": "1",
    }

    with patch.dict(os.environ, env, clear=True):
        context = detect_ci_context()

        assert context.is_github_actions
        assert context.output_file == Path("/tmp/github_output")
        assert context.debug


def test_detect_github_actions_without_output_file() -> None:
    with patch.dict(os.environ, {"GITHUB_ACTIONS": "true"}, clear=True):
        context = detect_ci_context()

        assert context.is_github_actions
        assert context.output_file is None
        assert not context.debug


@pytest.mark.parametrize("env", [{"CI": "true"}, {"GITLAB_CI": "true"}, {"GITHUB_OUTPUT": "/tmp/out"}])
def test_other_environments_run_locally(env: dict[str, str]) -> None:
    with patch.dict(os.environ, env, clear=True):
        assert detect_ci_context() == CIContext(is_github_actions=False)


def test_detect_no_ci_context() -> None:
    with patch.dict(os.environ, {}, clear=True):
        context = detect_ci_context()

        assert context == CIContext(is_github_actions=False, output_file=None, debug=False)
