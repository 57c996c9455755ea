# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple, Union

if TYPE_CHECKING:
    from .config import DeployConfig
    from .runner import TaskRunner
    from .ui.console import Console


class _Skip:
    """Sentinel a step returns to end the whole pipeline successfully."""

    _instance: Optional["_Skip"] = None

    def __new__(cls) -> "_Skip":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SKIP"

    def __bool__(self) -> bool:
        return False


SKIP = _Skip()


class Outcome(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"


# A step reference: a registered task name, an inline operation, or a
# nested composition.
StepRef = Union[str, Callable[["RunContext"], Any], "Series", "Parallel"]


@dataclass(frozen=True)
class Series:
    """Steps run one after another; the first failure stops the rest."""
    steps: Tuple[StepRef, ...]

    def __init__(self, *steps: StepRef):
        object.__setattr__(self, "steps", tuple(steps))


@dataclass(frozen=True)
class Parallel:
    """Steps start together; the group completes once all of them have."""
    steps: Tuple[StepRef, ...]

    def __init__(self, *steps: StepRef):
        object.__setattr__(self, "steps", tuple(steps))


@dataclass(frozen=True)
class Task:
    """A named unit of work registered on a runner."""
    name: str
    body: Union[Callable[["RunContext"], Any], Series, Parallel]
    description: str = ""


@dataclass
class Options:
    """
    Per-invocation option bag, shared by reference with every step.

    Written by:
      - deploy:                 deploy, minify
      - bump / prompt:deploy:   version
      - fetch_latest_*:         tested_up_to_wp_version, tested_up_to_wc_version
      - deploy_create_releases: owner, repo
      - github:get_rissue:      release_issue_to_close
      - compress:               zip_path
      - github:create_release:  release_ids
    Everything else comes from the command line (-o key=value).
    """
    deploy: bool = False
    minify: bool = False
    is_watching: bool = False

    owner: Optional[str] = None
    repo: Optional[str] = None
    version: Optional[str] = None
    branch: Optional[str] = None

    deploy_tag: Optional[bool] = None
    deploy_assets: Optional[bool] = None

    tested_up_to_wp_version: Optional[str] = None
    tested_up_to_wc_version: Optional[str] = None
    minimum_wp_version: Optional[str] = None
    minimum_wc_version: Optional[str] = None
    framework_version: Optional[str] = None
    backwards_compatible: Optional[str] = None

    release_issue_to_close: Optional[int] = None
    zip_path: Optional[str] = None
    release_ids: List[int] = field(default_factory=list)

    extra: Dict[str, str] = field(default_factory=dict)

    def set(self, key: str, value: str) -> None:
        """Set an option from its string form (as given on the command line)."""
        key = key.replace("-", "_")
        if key in ("extra", "release_ids") or not hasattr(self, key):
            self.extra[key] = value
            return

        current = getattr(self, key)
        if isinstance(current, bool) or key in ("deploy_tag", "deploy_assets"):
            setattr(self, key, value.strip().lower() in ("1", "true", "yes", "on"))
        elif key == "release_issue_to_close":
            setattr(self, key, int(value))
        else:
            setattr(self, key, value)


@dataclass
class RunContext:
    """What every step receives: config (read-only), options (read/write), runner."""
    config: "DeployConfig"
    options: Options
    runner: "TaskRunner"
    console: "Console"
    session: Dict[str, Any] = field(default_factory=dict)
