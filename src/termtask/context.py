"""Resolution context: editor state captured right before a task is resolved."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from termtask.variables import TaskVariables


@dataclass(frozen=True)
class TaskContext:
    """Working directory plus variable values for one resolution pass."""

    cwd: Path | None = None
    task_variables: TaskVariables = field(default_factory=TaskVariables)

    def sort_key(self) -> list[tuple[str, str]]:
        """Variables as sorted ``(token, value)`` pairs, stable across runs."""
        return sorted(self.task_variables.to_env().items())
