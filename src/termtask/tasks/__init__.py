"""Task templates, resolved tasks and the resolver."""

from termtask.tasks.base import (
    ResolvedTask,
    RevealStrategy,
    SpawnInTerminal,
    TaskId,
    TaskTemplate,
    TaskTemplates,
)
from termtask.tasks.resolver import (
    MAX_DISPLAY_VARIABLE_LENGTH,
    derive_task_id,
    resolve_task,
    resolve_templates,
    substitute,
)

__all__ = [
    "MAX_DISPLAY_VARIABLE_LENGTH",
    "ResolvedTask",
    "RevealStrategy",
    "SpawnInTerminal",
    "TaskId",
    "TaskTemplate",
    "TaskTemplates",
    "derive_task_id",
    "resolve_task",
    "resolve_templates",
    "substitute",
]
