"""Base task source definition."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

from termtask.tasks.base import TaskTemplates

SourceT = TypeVar("SourceT", bound="TaskSource")


@dataclass
class SourceContext:
    """Session state handed to task sources when they are asked for tasks.

    Sources resolve their relative paths against ``worktree_root`` and call
    ``notify()`` when their task list changed. The inventory drains the
    recorded changes with ``take_changes()`` after each listing.
    """

    worktree_root: Path | None = None
    generation: int = 0
    changed_sources: list[str] = field(default_factory=list)

    def resolve_path(self, path: Path) -> Path:
        """Anchor a relative path at the worktree root, if there is one."""
        if path.is_absolute() or self.worktree_root is None:
            return path
        return self.worktree_root / path

    def notify(self, source_name: str) -> None:
        """Record that a source's tasks changed since the last listing."""
        self.generation += 1
        self.changed_sources.append(source_name)

    def take_changes(self) -> list[str]:
        """Return and clear the names of sources that changed."""
        changed, self.changed_sources = self.changed_sources, []
        return changed


class TaskSource(ABC):
    """Produces task templates that can be scheduled.

    A static file of task definitions is one implementation; a language
    tool listing test targets could be another.
    """

    name: str

    @abstractmethod
    def tasks_to_schedule(self, cx: SourceContext) -> TaskTemplates:
        """Collect all tasks currently available for scheduling."""
        ...

    def as_type(self, cls: type[SourceT]) -> SourceT | None:
        """Return this source as ``cls`` if it is one, else None."""
        if isinstance(self, cls):
            return self
        return None
