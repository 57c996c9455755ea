from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from wpship.cli import cli, parse_options


CONFIG = """
from wpship.config import Commands, DeployConfig, DeployTarget, PluginInfo, RepoRef

CONFIG = DeployConfig(
    plugin=PluginInfo(name="Example", slug="example", main_file="example.php"),
    deploy=DeployTarget(type="wp", dev=RepoRef("acme", "example")),
    commands=Commands(lint_scripts="exit 3"),
)
"""


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    (tmp_path / "wpship_config.py").write_text(CONFIG, encoding="utf-8")
    (tmp_path / "example.php").write_text("<?php\n/**\n * Version: 1.0.0\n */\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_tasks_lists_registered_tasks(project: Path) -> None:
    result = CliRunner().invoke(cli, ["tasks"])

    assert result.exit_code == 0
    assert "deploy_to_wp_repo" in result.output
    assert "Zip the build directory" in result.output


def test_run_task_succeeds(project: Path) -> None:
    result = CliRunner().invoke(cli, ["run", "clean:build"])

    assert result.exit_code == 0, result.output
    assert (project / "build" / "example").is_dir()


def test_missing_config_exits_with_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(cli, ["run", "build"])

    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_precondition_failure_exits_1(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GITHUB_API_KEY", raising=False)
    monkeypatch.delenv("GITHUB_USERNAME", raising=False)

    result = CliRunner().invoke(cli, ["run", "validate:env"])

    assert result.exit_code == 1
    assert "Precondition failed" in result.output
    assert "GITHUB_API_KEY" in result.output


def test_failing_command_names_the_task(project: Path) -> None:
    result = CliRunner().invoke(cli, ["run", "lint:scripts"])

    assert result.exit_code == 1
    assert "Task 'lint:scripts' failed" in result.output
    assert "exit code 3" in result.output


def test_unknown_task_exits_1(project: Path) -> None:
    result = CliRunner().invoke(cli, ["run", "nope"])

    assert result.exit_code == 1
    assert "nope" in result.output


def test_malformed_option_is_a_usage_error(project: Path) -> None:
    result = CliRunner().invoke(cli, ["run", "clean:build", "-o", "version"])

    assert result.exit_code == 2
    assert "expected key=value" in result.output


def test_parse_options() -> None:
    options = parse_options(("version=1.2.3", "deploy_tag=false", "note=a=b"))

    assert options.version == "1.2.3"
    assert options.deploy_tag is False
    assert options.extra == {"note": "a=b"}


def test_uncoercible_option_value_is_a_usage_error(project: Path) -> None:
    result = CliRunner().invoke(cli, ["run", "clean:build", "-o", "release_issue_to_close=abc"])

    assert result.exit_code == 2
    assert "invalid value for 'release_issue_to_close'" in result.output
