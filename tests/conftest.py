from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

import wpship.shell as shell_mod
from wpship.config import DeployConfig, DeployTarget, Paths, PluginInfo, RepoRef
from wpship.model import Options
from wpship.tasks import build_runner
from wpship.ui.console import Console


MAIN_FILE = """<?php
/**
 * Plugin Name: Example Gateway
 * Version: 1.2.0-dev.1
 * Requires at least: 5.6
 * Tested up to: 6.1
 * WC requires at least: 6.0
 * WC tested up to: 7.0
 */

woothemes_queue_update( plugin_basename( __FILE__ ), 'abc123def456', '123456' );

class Example_Gateway {
\tconst VERSION = '1.2.0-dev.1';
}
"""

README = """=== Example Gateway ===
Requires at least: 5.6
Tested up to: 6.1
Stable tag: 1.2.0-dev.1

== Description ==

Takes payments.
"""

CHANGELOG = """*** Example Gateway Changelog ***

2024.nn.nn - version 1.2.0
 * Feature - Accept refunds

2024.01.15 - version 1.1.0
 * Fix - Rounding on totals
"""


@pytest.fixture
def plugin_dir(tmp_path: Path) -> Path:
    root = tmp_path / "example-gateway"
    (root / "assets" / "js").mkdir(parents=True)
    (root / "example-gateway.php").write_text(MAIN_FILE, encoding="utf-8")
    (root / "readme.txt").write_text(README, encoding="utf-8")
    (root / "changelog.txt").write_text(CHANGELOG, encoding="utf-8")
    (root / "assets" / "js" / "app.js").write_text("/* 1.2.0-dev.1 */\nconsole.log('hi');\n", encoding="utf-8")
    (root / "assets" / "js" / "app.min.js").write_text("/* 1.2.0-dev.1 */", encoding="utf-8")
    (root / "README.md").write_text("# dev notes\n", encoding="utf-8")
    return root


@pytest.fixture
def make_config(plugin_dir: Path):
    def _make(**overrides) -> DeployConfig:
        kwargs = dict(
            plugin=PluginInfo(name="Example Gateway", slug="example-gateway", main_file="example-gateway.php"),
            paths=Paths(),
            deploy=DeployTarget(type="wp", dev=RepoRef("acme", "example-gateway")),
            root=plugin_dir,
        )
        kwargs.update(overrides)
        return DeployConfig(**kwargs)
    return _make


@pytest.fixture
def make_runner(make_config):
    def _make(options: Options | None = None, **config_overrides):
        return build_runner(make_config(**config_overrides), options, console=Console(), max_workers=4)
    return _make


@pytest.fixture
def shell_calls(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Record shell commands instead of running them; every command succeeds."""
    calls: list[str] = []

    def fake_run(command, **kwargs):
        calls.append(command)
        return SimpleNamespace(returncode=0, stdout="", stderr="")

    monkeypatch.setattr(shell_mod.subprocess, "run", fake_run)
    return calls


@pytest.fixture
def deploy_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("GITHUB_API_KEY", "GITHUB_USERNAME", "TRELLO_API_KEY", "TRELLO_API_TOKEN"):
        monkeypatch.setenv(name, "x")
