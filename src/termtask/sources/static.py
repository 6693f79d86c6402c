"""Task source backed by a static YAML/JSON task file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from termtask.sources.base import SourceContext, TaskSource
from termtask.tasks.base import TaskTemplate, TaskTemplates

logger = logging.getLogger(__name__)


class TaskFileError(ValueError):
    """Raised when a task file exists but cannot be parsed."""


def parse_task_templates(data: Any, source: Path | None = None) -> TaskTemplates:
    """Build templates from parsed file contents.

    Accepts either a list of task mappings or a mapping with a ``tasks`` list.
    Entries that are not mappings are skipped.
    """
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("tasks", [])
    if not isinstance(data, list):
        raise TaskFileError(f"Expected a list of tasks in {source or 'task file'}")

    templates: TaskTemplates = []
    for entry in data:
        if not isinstance(entry, dict):
            logger.debug("Skipping non-mapping task entry in %s: %r", source, entry)
            continue
        templates.append(TaskTemplate.from_dict(entry))
    return templates


def load_task_file(path: Path) -> TaskTemplates:
    """Load task templates from a YAML (or JSON) file.

    Returns an empty list if the file is missing.
    """
    if not path.exists():
        return []
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise TaskFileError(f"Invalid task file {path}: {e}") from e
    return parse_task_templates(data, source=path)


class StaticSource(TaskSource):
    """Tasks defined in a file on disk, re-read whenever the file changes."""

    def __init__(self, path: Path, name: str | None = None) -> None:
        self.path = path
        self.name = name or f"static:{path}"
        self._loaded: tuple[Path, float | None] | None = None
        self._templates: TaskTemplates = []

    def tasks_to_schedule(self, cx: SourceContext) -> TaskTemplates:
        """Return the file's tasks, reloading them if the file changed."""
        path = cx.resolve_path(self.path)
        mtime = path.stat().st_mtime if path.exists() else None
        previous = self._loaded
        if previous != (path, mtime):
            self._templates = load_task_file(path)
            self._loaded = (path, mtime)
            if previous is not None or mtime is not None:
                cx.notify(self.name)
        return list(self._templates)
