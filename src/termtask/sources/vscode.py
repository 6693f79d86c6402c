"""Task source translating VS Code's ``.vscode/tasks.json``."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import json5

from termtask.sources.base import SourceContext, TaskSource
from termtask.sources.static import TaskFileError
from termtask.tasks.base import RevealStrategy, TaskTemplate, TaskTemplates
from termtask.variables import VariableName

logger = logging.getLogger(__name__)

VSCODE_TASKS_PATH = Path(".vscode") / "tasks.json"

# VS Code predefined variables with a direct counterpart
VSCODE_VARIABLES: dict[str, VariableName] = {
    "workspaceFolder": VariableName.WORKTREE_ROOT,
    "workspaceRoot": VariableName.WORKTREE_ROOT,
    "file": VariableName.FILE,
    "lineNumber": VariableName.ROW,
    "selectedText": VariableName.SELECTED_TEXT,
}

_VSCODE_VARIABLE = re.compile(r"\$\{(?P<name>[^}:]+)(?::(?P<arg>[^}]*))?\}")

_REVEAL_MAP: dict[str, RevealStrategy] = {
    "always": RevealStrategy.ALWAYS,
    "silent": RevealStrategy.ON_FAILURE,
    "never": RevealStrategy.NEVER,
}


def translate_variables(text: str) -> str:
    """Rewrite VS Code ``${...}`` variables into ``${ZED_...}`` tokens.

    ``${env:NAME}`` becomes ``${NAME}`` for the shell to expand.
    Anything else is left untouched.
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group("name")
        arg = match.group("arg")
        if name == "env" and arg:
            return f"${{{arg}}}"
        if arg is None and name in VSCODE_VARIABLES:
            return f"${{{VSCODE_VARIABLES[name].token}}}"
        return match.group(0)

    return _VSCODE_VARIABLE.sub(_replace, text)


@dataclass(frozen=True)
class VsCodeTask:
    """A single entry of a tasks.json file."""

    label: str
    task_type: str
    command: str | None = None
    args: tuple[str, ...] = ()
    script: str | None = None
    cwd: str | None = None
    env: dict[str, str] = field(default_factory=dict)
    reveal: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VsCodeTask:
        options = data.get("options") or {}
        if not isinstance(options, dict):
            options = {}
        env_raw = options.get("env") or {}
        presentation = data.get("presentation") or {}
        reveal = presentation.get("reveal") if isinstance(presentation, dict) else None

        args_raw = data.get("args", [])
        args = (
            tuple(str(a) for a in args_raw) if isinstance(args_raw, list) else ()
        )

        command = data.get("command")
        script = data.get("script")
        cwd = options.get("cwd")
        return cls(
            label=str(data.get("label", "")),
            task_type=str(data.get("type", "shell")),
            command=str(command) if command is not None else None,
            args=args,
            script=str(script) if script is not None else None,
            cwd=str(cwd) if cwd is not None else None,
            env=(
                {str(k): str(v) for k, v in env_raw.items()}
                if isinstance(env_raw, dict)
                else {}
            ),
            reveal=str(reveal) if reveal is not None else None,
        )

    def to_template(self) -> TaskTemplate | None:
        """Convert to a TaskTemplate, or None for unsupported task types."""
        if self.task_type in ("shell", "process"):
            if not self.command:
                return None
            command, args = self.command, self.args
        elif self.task_type == "npm":
            if not self.script:
                return None
            command, args = "npm", ("run", self.script)
        else:
            logger.debug(
                "Skipping VS Code task '%s' of unsupported type '%s'",
                self.label,
                self.task_type,
            )
            return None

        label = self.label or (self.script if self.task_type == "npm" else command)
        return TaskTemplate(
            label=translate_variables(label or ""),
            command=translate_variables(command),
            args=tuple(translate_variables(a) for a in args),
            env={k: translate_variables(v) for k, v in self.env.items()},
            cwd=translate_variables(self.cwd) if self.cwd is not None else None,
            reveal=_REVEAL_MAP.get(self.reveal or "always", RevealStrategy.ALWAYS),
        )


@dataclass(frozen=True)
class VsCodeTaskFile:
    """Parsed contents of a tasks.json file."""

    version: str
    tasks: tuple[VsCodeTask, ...]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VsCodeTaskFile:
        tasks_raw = data.get("tasks", [])
        if not isinstance(tasks_raw, list):
            raise TaskFileError("VS Code task file 'tasks' must be a list")
        return cls(
            version=str(data.get("version", "2.0.0")),
            tasks=tuple(VsCodeTask.from_dict(t) for t in tasks_raw if isinstance(t, dict)),
        )

    @classmethod
    def load(cls, path: Path) -> VsCodeTaskFile:
        """Load a tasks.json file, allowing comments and trailing commas."""
        try:
            data = json5.loads(path.read_text(encoding="utf-8"))
        except ValueError as e:
            raise TaskFileError(f"Invalid VS Code task file {path}: {e}") from e
        if not isinstance(data, dict):
            raise TaskFileError(f"Expected a JSON object in {path}")
        return cls.from_dict(data)

    def to_templates(self) -> TaskTemplates:
        templates: TaskTemplates = []
        for task in self.tasks:
            template = task.to_template()
            if template is not None:
                templates.append(template)
        return templates


class VsCodeSource(TaskSource):
    """Tasks read from a VS Code tasks.json file."""

    def __init__(self, path: Path, name: str | None = None) -> None:
        self.path = path
        self.name = name or f"vscode:{path}"

    def tasks_to_schedule(self, cx: SourceContext) -> TaskTemplates:
        path = cx.resolve_path(self.path)
        if not path.exists():
            return []
        return VsCodeTaskFile.load(path).to_templates()
