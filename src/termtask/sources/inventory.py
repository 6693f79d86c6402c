"""Aggregation of tasks across several task sources."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from termtask.context import TaskContext
from termtask.sources.base import SourceContext, SourceT, TaskSource
from termtask.sources.static import StaticSource
from termtask.sources.vscode import VSCODE_TASKS_PATH, VsCodeSource
from termtask.tasks.base import ResolvedTask, TaskTemplate
from termtask.tasks.resolver import MAX_DISPLAY_VARIABLE_LENGTH, resolve_task

if TYPE_CHECKING:
    from termtask.config.schema import TermtaskConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourcedTask:
    """A template together with the source that produced it."""

    source: TaskSource
    template: TaskTemplate


class TaskInventory:
    """Ordered collection of task sources.

    A source that fails to list its tasks is logged and skipped, so it
    never hides tasks from the other sources.
    """

    def __init__(self, sources: list[TaskSource] | None = None) -> None:
        self._sources: list[TaskSource] = list(sources or [])

    def add_source(self, source: TaskSource) -> None:
        self._sources.append(source)

    def remove_source(self, name: str) -> bool:
        """Remove the source with the given name. Returns True if removed."""
        for i, source in enumerate(self._sources):
            if source.name == name:
                del self._sources[i]
                return True
        return False

    @property
    def sources(self) -> list[TaskSource]:
        return list(self._sources)

    def source(self, cls: type[SourceT]) -> SourceT | None:
        """Return the first source of a specific type, if any."""
        for source in self._sources:
            typed = source.as_type(cls)
            if typed is not None:
                return typed
        return None

    def list_tasks(self, cx: SourceContext) -> list[SourcedTask]:
        """Collect tasks from every source, in source order."""
        tasks: list[SourcedTask] = []
        for source in self._sources:
            try:
                templates = source.tasks_to_schedule(cx)
            except Exception:
                logger.warning(
                    "Task source '%s' failed to list tasks", source.name, exc_info=True
                )
                continue
            tasks.extend(SourcedTask(source=source, template=t) for t in templates)

        changed = cx.take_changes()
        if changed:
            logger.debug("Task sources reloaded: %s", ", ".join(changed))
        return tasks

    def find(self, label: str, cx: SourceContext) -> SourcedTask | None:
        """Find the first task whose label matches exactly."""
        for task in self.list_tasks(cx):
            if task.template.label == label:
                return task
        return None

    def resolve(
        self,
        label: str,
        context: TaskContext,
        cx: SourceContext,
        label_length: int = MAX_DISPLAY_VARIABLE_LENGTH,
    ) -> ResolvedTask | None:
        """Find a task by label and resolve it. Returns None if not found."""
        task = self.find(label, cx)
        if task is None:
            return None
        return resolve_task(
            task.template,
            context,
            id_base=task.source.name,
            label_length=label_length,
        )


def build_inventory(config: TermtaskConfig) -> TaskInventory:
    """Create the default inventory.

    Order: global task file, project task file, then VS Code tasks. Project
    and VS Code paths are relative and resolved against the worktree root of
    the ``SourceContext`` they are listed with.
    """
    inventory = TaskInventory()
    if config.global_tasks_file:
        inventory.add_source(
            StaticSource(Path(config.global_tasks_file).expanduser(), name="global")
        )
    if config.tasks_file:
        inventory.add_source(StaticSource(Path(config.tasks_file), name="project"))
    if config.vscode_tasks:
        inventory.add_source(VsCodeSource(VSCODE_TASKS_PATH, name="vscode"))
    return inventory
