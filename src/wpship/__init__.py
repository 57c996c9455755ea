from .dsl import series, parallel, sh, set_options
from .runner import TaskRunner
from .model import SKIP, Options, Outcome, Parallel, RunContext, Series, Task
from .config import Commands, DeployConfig, DeployTarget, Paths, PluginInfo, RepoRef
from .errors import (
    DuplicateTaskError,
    PreconditionError,
    StepExecutionError,
    UnknownTaskError,
    WpshipError,
)

__all__ = [
    "series", "parallel", "sh", "set_options", "TaskRunner",
    "SKIP", "Options", "Outcome", "Parallel", "RunContext", "Series", "Task",
    "Commands", "DeployConfig", "DeployTarget", "Paths", "PluginInfo", "RepoRef",
    "DuplicateTaskError", "PreconditionError", "StepExecutionError", "UnknownTaskError", "WpshipError",
]
