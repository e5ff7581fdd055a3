"""
Cooperative step scheduler.

Tasks are generators driven from the fixed-timestep update loop. A task
suspends by yielding one of:

    float       wait that many seconds of game time
    None        resume on the next update
    WaitUntil   resume once the predicate returns True (polled each update)

Usage:
    def blink():
        while True:
            toggle_cursor()
            yield 0.5

    task = scheduler.start(blink(), name="cursor")
    scheduler.update(dt)   # once per fixed update
    task.stop()
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Generator, Optional

logger = logging.getLogger(__name__)

TaskGenerator = Generator[Any, None, None]


@dataclass(frozen=True)
class WaitUntil:
    """Suspend a task until ``predicate()`` is truthy."""
    predicate: Callable[[], bool]


class TaskState(Enum):
    RUNNING = auto()
    FINISHED = auto()
    STOPPED = auto()
    FAILED = auto()


class Task:
    """Handle for a scheduled generator."""

    def __init__(self, generator: TaskGenerator, name: str = ""):
        self.name = name or getattr(generator, "__name__", "task")
        self.state = TaskState.RUNNING
        self._generator = generator
        self._delay = 0.0
        self._wait: Optional[WaitUntil] = None
        self._next_tick = False
        self._fresh = True
        self._executing = False
        self._on_done: list[Callable[[Task], None]] = []

    @property
    def is_running(self) -> bool:
        return self.state == TaskState.RUNNING

    def add_done_callback(self, callback: Callable[[Task], None]) -> None:
        if self.is_running:
            self._on_done.append(callback)
        else:
            callback(self)

    def stop(self) -> None:
        """Cancel the task. Safe to call more than once."""
        if not self.is_running:
            return
        if not self._executing:
            self._generator.close()
        self._finish(TaskState.STOPPED)

    def _finish(self, state: TaskState) -> None:
        self.state = state
        callbacks, self._on_done = self._on_done, []
        for callback in callbacks:
            callback(self)

    def _ready(self) -> bool:
        if self._next_tick:
            return False
        if self._wait is not None:
            return bool(self._wait.predicate())
        return self._delay <= 0.0

    def _advance(self, dt: float) -> None:
        """Run the task as far as the elapsed time allows."""
        if self._fresh:
            self._fresh = False
        elif self._next_tick or self._wait is not None:
            self._next_tick = False
        else:
            self._delay -= dt

        while self.is_running and self._ready():
            self._wait = None
            self._executing = True
            try:
                yielded = next(self._generator)
            except StopIteration:
                if self.is_running:
                    self._finish(TaskState.FINISHED)
                return
            except Exception:
                logger.exception(f"Task '{self.name}' failed")
                if self.is_running:
                    self._finish(TaskState.FAILED)
                return
            finally:
                self._executing = False

            if not self.is_running:
                # Stopped from inside its own step
                self._generator.close()
                return

            if yielded is None:
                self._next_tick = True
                self._delay = 0.0
            elif isinstance(yielded, WaitUntil):
                self._wait = yielded
                self._delay = 0.0
            else:
                # Leftover time carries into the next delay so pacing
                # does not drift with the tick rate
                self._delay += max(0.0, float(yielded))


class Scheduler:
    """
    Runs tasks one step at a time on the caller's thread.

    Tasks started during an update first run on the next update.
    """

    def __init__(self):
        self._tasks: list[Task] = []
        self.time = 0.0

    def start(self, generator: TaskGenerator, name: str = "") -> Task:
        if not inspect.isgenerator(generator):
            raise TypeError(f"Scheduler tasks must be generators, got {type(generator).__name__}")
        task = Task(generator, name)
        self._tasks.append(task)
        logger.debug(f"Started task '{task.name}'")
        return task

    @property
    def task_count(self) -> int:
        return sum(1 for t in self._tasks if t.is_running)

    def update(self, dt: float) -> None:
        """Advance every running task by ``dt`` seconds."""
        self.time += dt
        for task in list(self._tasks):
            if task.is_running:
                task._advance(dt)
        self._tasks = [t for t in self._tasks if t.is_running]

    def stop_all(self) -> None:
        for task in list(self._tasks):
            task.stop()
        self._tasks.clear()
