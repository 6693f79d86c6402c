"""Base executor class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock

from termtask.tasks.base import SpawnInTerminal, TaskId


class TaskAlreadyRunningError(RuntimeError):
    """Raised when a task that disallows concurrent runs is already running."""

    def __init__(self, task_id: TaskId) -> None:
        super().__init__(f"Task {task_id} is already running")
        self.task_id = task_id


class Executor(ABC):
    """Base class for layers that turn a SpawnInTerminal into a process.

    Tracks which task ids are running so that tasks with
    ``allow_concurrent_runs=False`` are not started twice.
    """

    name: str

    def __init__(self) -> None:
        self._running: dict[TaskId, int] = {}
        self._lock = Lock()

    def is_running(self, task_id: TaskId) -> bool:
        with self._lock:
            return self._running.get(task_id, 0) > 0

    @contextmanager
    def _track(self, spawn: SpawnInTerminal) -> Iterator[None]:
        """Mark the task as running for the duration of the block."""
        with self._lock:
            if not spawn.allow_concurrent_runs and self._running.get(spawn.id, 0):
                raise TaskAlreadyRunningError(spawn.id)
            self._running[spawn.id] = self._running.get(spawn.id, 0) + 1
        try:
            yield
        finally:
            with self._lock:
                remaining = self._running[spawn.id] - 1
                if remaining:
                    self._running[spawn.id] = remaining
                else:
                    del self._running[spawn.id]

    @abstractmethod
    def spawn(self, spawn: SpawnInTerminal) -> int:
        """Run the task to completion and return its exit code."""
        ...
