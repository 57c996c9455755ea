# config.py
from __future__ import annotations

import os
import runpy
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional

from .errors import PreconditionError


DEFAULT_CONFIG_FILE = "wpship_config.py"

DEPLOY_TYPES = ("wc", "wp")

# always required when deploying
GITHUB_ENV = ["GITHUB_API_KEY", "GITHUB_USERNAME"]
# additionally required for WooCommerce deploys
TRELLO_ENV = ["TRELLO_API_KEY", "TRELLO_API_TOKEN"]

DEFAULT_EXCLUDES = [
    ".git/**",
    ".github/**",
    "node_modules/**",
    "tests/**",
    "build/**",
    ".wordpress-org/**",
    "*.md",
    "*.json",
    "*.xml",
    "*.yml",
    "*.lock",
    "wpship_config.py",
]


@dataclass(frozen=True)
class RepoRef:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class PluginInfo:
    name: str
    slug: str
    main_file: str
    framework_version: Optional[str] = None


@dataclass(frozen=True)
class Paths:
    """All paths are relative to the directory the config file lives in."""
    src: str = "."
    build: str = "build"
    js: str = "assets/js"
    css: str = "assets/css"
    framework_base: str = "lib/skyverge"
    wc_repo: Optional[str] = None      # local clone of the WooCommerce repo
    wp_repo: Optional[str] = None      # local SVN checkout for WordPress.org
    wp_assets: str = ".wordpress-org"  # banners / screenshots for the SVN assets dir
    prerelease: str = "prerelease"
    exclude: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDES))


@dataclass(frozen=True)
class DeployTarget:
    type: Optional[str] = None           # "wc" | "wp" | None
    dev: Optional[RepoRef] = None
    production: Optional[RepoRef] = None
    docs: Optional[RepoRef] = None


@dataclass(frozen=True)
class Commands:
    """Shell commands for script/style tasks; None means "nothing to do"."""
    lint_scripts: Optional[str] = None
    compile_scripts: Optional[str] = None
    lint_styles: Optional[str] = None
    compile_styles: Optional[str] = None


@dataclass(frozen=True)
class DeployConfig:
    plugin: PluginInfo
    paths: Paths = field(default_factory=Paths)
    deploy: DeployTarget = field(default_factory=DeployTarget)
    platform: str = "wp"                 # "wc" plugins also track WooCommerce versions
    trello_board: Optional[str] = None
    svn_url: Optional[str] = None
    commands: Commands = field(default_factory=Commands)
    root: Path = field(default_factory=Path.cwd)

    def __post_init__(self) -> None:
        if self.deploy.type is not None and self.deploy.type not in DEPLOY_TYPES:
            raise ValueError(f"Unknown deploy type {self.deploy.type!r}, expected one of {DEPLOY_TYPES}")
        if self.platform not in DEPLOY_TYPES:
            raise ValueError(f"Unknown platform {self.platform!r}, expected one of {DEPLOY_TYPES}")

    # ---- resolved paths ----

    def path(self, relative: str) -> Path:
        return (self.root / relative).resolve()

    @property
    def src_path(self) -> Path:
        return self.path(self.paths.src)

    @property
    def build_path(self) -> Path:
        """Build output: <build>/<slug>, so the zip has the slug as its top-level dir."""
        return self.path(self.paths.build) / self.plugin.slug

    def main_file_path(self) -> Path:
        return self.src_path / self.plugin.main_file

    def wc_repo_path(self) -> Path:
        if not self.paths.wc_repo:
            raise PreconditionError("paths.wc_repo is not configured")
        return self.path(self.paths.wc_repo)

    def wp_repo_path(self) -> Path:
        if self.paths.wp_repo:
            return self.path(self.paths.wp_repo)
        return self.path(self.paths.build) / "wp_svn"

    @property
    def plugin_svn_url(self) -> str:
        return self.svn_url or f"https://plugins.svn.wordpress.org/{self.plugin.slug}"

    def required_env(self) -> List[str]:
        names = list(GITHUB_ENV)
        if self.deploy.type == "wc":
            names.extend(TRELLO_ENV)
        return names


def validate_environment(names: List[str]) -> None:
    """Raise PreconditionError naming every variable that is unset or empty."""
    missing = [n for n in names if not os.environ.get(n)]
    if missing:
        raise PreconditionError(
            "Missing required environment variables: " + ", ".join(missing)
        )


def load_config(path: str | Path) -> DeployConfig:
    """
    Load a config from a python file path.

    The file must define either:
      - config() -> DeployConfig
      - CONFIG = DeployConfig(...)

    Relative paths in the config are resolved against the file's directory.
    """
    cfg_path = Path(path).expanduser().resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    if cfg_path.suffix != ".py":
        raise ValueError(f"Config must be a .py file, got: {cfg_path.name}")

    globals_dict = runpy.run_path(str(cfg_path), run_name=f"wpship_config_{cfg_path.stem}")

    cfg = None
    if "config" in globals_dict and callable(globals_dict["config"]):
        cfg = globals_dict["config"]()
    elif "CONFIG" in globals_dict:
        cfg = globals_dict["CONFIG"]

    if not isinstance(cfg, DeployConfig):
        raise TypeError(
            "Config file must return/define a DeployConfig. "
            "Define config() -> DeployConfig or CONFIG = DeployConfig(...)."
        )

    # anchor relative paths at the config file, not wherever we were invoked from
    return replace(cfg, root=cfg_path.parent)
