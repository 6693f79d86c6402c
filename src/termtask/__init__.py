"""termtask - resolve templated shell tasks against editor state."""

from termtask.context import TaskContext
from termtask.tasks import (
    ResolvedTask,
    RevealStrategy,
    SpawnInTerminal,
    TaskId,
    TaskTemplate,
    TaskTemplates,
    resolve_task,
)
from termtask.variables import (
    ZED_VARIABLE_NAME_PREFIX,
    CustomVariable,
    TaskVariableName,
    TaskVariables,
    VariableName,
    parse_variable_name,
)

__version__ = "0.1.0"

__all__ = [
    "ZED_VARIABLE_NAME_PREFIX",
    "CustomVariable",
    "ResolvedTask",
    "RevealStrategy",
    "SpawnInTerminal",
    "TaskContext",
    "TaskId",
    "TaskTemplate",
    "TaskTemplates",
    "TaskVariableName",
    "TaskVariables",
    "VariableName",
    "__version__",
    "parse_variable_name",
    "resolve_task",
]
