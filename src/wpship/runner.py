# runner.py
from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .errors import DuplicateTaskError, StepExecutionError, UnknownTaskError, WpshipError
from .model import SKIP, Options, Outcome, Parallel, RunContext, Series, StepRef, Task
from .ui.console import Console, get_console


# ----------------------------------------------------------------------
# Runner
# ----------------------------------------------------------------------

class TaskRunner:
    """
    Registry of named tasks plus the series/parallel executor.

    A task body is one of:
      - an operation: fn(ctx) -> None | SKIP
      - a pipeline builder: fn(ctx) -> Series | Parallel, which is then run
      - a prebuilt Series / Parallel of step references

    Failure semantics:
      - series: the first failing step aborts the rest, its error propagates
      - parallel: every member runs to completion, then the first error
        (in completion order) propagates
      - SKIP: ends the enclosing pipelines successfully, nothing after it runs
    """

    def __init__(
        self,
        config=None,
        options: Optional[Options] = None,
        *,
        console: Optional[Console] = None,
        max_workers: int | None = None,
    ):
        self._tasks: Dict[str, Task] = {}
        self._last_run: Dict[str, float] = {}
        self._lock = threading.Lock()
        self.max_workers = max_workers
        self.context = RunContext(
            config=config,
            options=options if options is not None else Options(),
            runner=self,
            console=console or get_console(),
        )

    # ---- registry ----

    def register(
        self,
        name: str,
        body: Union[Callable[[RunContext], Any], Series, Parallel],
        description: str = "",
    ) -> Task:
        if name in self._tasks:
            raise DuplicateTaskError(f"Task '{name}' is already registered")
        if not (callable(body) or isinstance(body, (Series, Parallel))):
            raise TypeError(f"Task '{name}' body must be callable, Series or Parallel, got {type(body).__name__}")

        task = Task(name=name, body=body, description=description)
        self._tasks[name] = task
        return task

    def task(self, name: str, description: str = ""):
        """Decorator form of register()."""
        def decorator(fn: Callable[[RunContext], Any]):
            self.register(name, fn, description)
            return fn
        return decorator

    def get(self, name: str) -> Task:
        try:
            return self._tasks[name]
        except KeyError:
            raise UnknownTaskError(
                f"Unknown task '{name}'. Known tasks: {sorted(self._tasks)}"
            ) from None

    def names(self) -> List[str]:
        return sorted(self._tasks)

    def last_run(self, name: str) -> Optional[float]:
        """Monotonic time of the last successful run of `name` in this session."""
        with self._lock:
            return self._last_run.get(name)

    # ---- execution ----

    def run(self, target: Union[StepRef, Iterable[StepRef]]) -> Outcome:
        """Run a task name, a composition, or a list of steps (in series)."""
        if isinstance(target, (list, tuple)):
            target = Series(*target)
        result = self._run_ref(target)
        return Outcome.SKIPPED if result is SKIP else Outcome.COMPLETED

    def run_parallel(self, steps: Iterable[StepRef]) -> Outcome:
        return self.run(Parallel(*steps))

    def _run_ref(self, ref: StepRef):
        if isinstance(ref, str):
            return self._run_task(self.get(ref))
        if isinstance(ref, Series):
            return self._run_series(ref.steps)
        if isinstance(ref, Parallel):
            return self._run_parallel(ref.steps)
        if callable(ref):
            return self._call(getattr(ref, "__name__", "<anonymous>"), ref)
        raise TypeError(f"Not a step reference: {ref!r}")

    def _run_task(self, task: Task):
        console = self.context.console
        console.print_task_start(task.name)
        started = time.monotonic()

        try:
            if isinstance(task.body, (Series, Parallel)):
                result = self._run_ref(task.body)
            else:
                result = self._call(task.name, task.body)
        except WpshipError as e:
            # only the innermost task reports the failure
            if e.task == task.name:
                console.print_task_failed(task.name, e)
            raise

        with self._lock:
            self._last_run[task.name] = time.monotonic()

        if result is SKIP:
            console.print_task_skipped(task.name)
        else:
            console.print_task_done(task.name, time.monotonic() - started)
        return result

    def _call(self, name: str, fn: Callable[[RunContext], Any]):
        try:
            result = fn(self.context)
        except WpshipError as e:
            if e.task is None:
                e.task = name
            raise
        except Exception as e:
            raise StepExecutionError(f"{type(e).__name__}: {e}", task=name) from e

        # pipeline builder: the composition is fixed before any of it runs
        if isinstance(result, (Series, Parallel)):
            return self._run_ref(result)
        return SKIP if result is SKIP else None

    def _run_series(self, steps):
        for ref in steps:
            if self._run_ref(ref) is SKIP:
                return SKIP
        return None

    def _run_parallel(self, steps):
        if not steps:
            return None

        first_error: Optional[BaseException] = None
        skipped = False

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {pool.submit(self._run_ref, ref): ref for ref in steps}

            for future in as_completed(futures):
                try:
                    result = future.result()
                except Exception as e:
                    if first_error is None:
                        first_error = e
                    continue
                if result is SKIP:
                    skipped = True

        if first_error is not None:
            raise first_error
        return SKIP if skipped else None
