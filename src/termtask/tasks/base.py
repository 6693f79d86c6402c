"""Task templates and their resolved forms."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class RevealStrategy(Enum):
    """What the terminal pane does once the task's process has started."""

    ALWAYS = "always"  # show the pane and focus the task tab
    NO_FOCUS = "no_focus"  # show the pane, keep focus where it was
    NEVER = "never"  # keep the pane in the background
    ON_FAILURE = "on_failure"  # show only if the process exits non-zero

    @classmethod
    def from_value(cls, value: Any) -> RevealStrategy:
        """Parse a strategy name, falling back to ALWAYS for unknown values."""
        if isinstance(value, RevealStrategy):
            return value
        try:
            return cls(str(value).lower().replace("-", "_"))
        except ValueError:
            return cls.ALWAYS


@dataclass(frozen=True)
class TaskId:
    """Application-unique task identity.

    Reruns and terminal tab affinity are keyed on it.
    """

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TaskTemplate:
    """Unresolved task definition, as authored by a task source.

    Any string field may contain variable tokens like ``$ZED_FILE``.
    """

    label: str
    command: str
    args: tuple[str, ...] = ()
    env: dict[str, str] = field(default_factory=dict)
    cwd: str | None = None
    id: str | None = None  # explicit id base, overrides the source's one
    use_new_terminal: bool = False
    allow_concurrent_runs: bool = False
    reveal: RevealStrategy = RevealStrategy.ALWAYS

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization, omitting defaults."""
        result: dict[str, Any] = {"label": self.label, "command": self.command}
        if self.args:
            result["args"] = list(self.args)
        if self.env:
            result["env"] = dict(self.env)
        if self.cwd is not None:
            result["cwd"] = self.cwd
        if self.id is not None:
            result["id"] = self.id
        if self.use_new_terminal:
            result["use_new_terminal"] = True
        if self.allow_concurrent_runs:
            result["allow_concurrent_runs"] = True
        if self.reveal is not RevealStrategy.ALWAYS:
            result["reveal"] = self.reveal.value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskTemplate:
        """Create a template from a parsed task file entry.

        Unknown keys are ignored.
        """
        args_raw = data.get("args", [])
        if isinstance(args_raw, (list, tuple)):
            args = tuple(str(a) for a in args_raw)
        else:
            args = ()

        env_raw = data.get("env") or {}
        env = (
            {str(k): str(v) for k, v in env_raw.items()}
            if isinstance(env_raw, dict)
            else {}
        )

        cwd = data.get("cwd")
        task_id = data.get("id")

        return cls(
            label=str(data.get("label", "")),
            command=str(data.get("command", "")),
            args=args,
            env=env,
            cwd=str(cwd) if cwd is not None else None,
            id=str(task_id) if task_id is not None else None,
            use_new_terminal=bool(data.get("use_new_terminal", False)),
            allow_concurrent_runs=bool(data.get("allow_concurrent_runs", False)),
            reveal=RevealStrategy.from_value(data.get("reveal", "always")),
        )


# Provider output; order is the display/priority order
TaskTemplates = list[TaskTemplate]


@dataclass(frozen=True)
class SpawnInTerminal:
    """Everything needed to spawn the task in a terminal tab.

    Never contains variable tokens known to the resolution context.
    """

    id: TaskId
    full_label: str  # label with untruncated variable values
    label: str  # tab title
    command: str
    args: tuple[str, ...] = ()
    cwd: Path | None = None
    env: dict[str, str] = field(default_factory=dict)  # laid over the ambient env
    use_new_terminal: bool = False
    allow_concurrent_runs: bool = False
    reveal: RevealStrategy = RevealStrategy.ALWAYS

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "id": self.id.value,
            "full_label": self.full_label,
            "label": self.label,
            "command": self.command,
            "args": list(self.args),
            "cwd": str(self.cwd) if self.cwd is not None else None,
            "env": dict(sorted(self.env.items())),
            "use_new_terminal": self.use_new_terminal,
            "allow_concurrent_runs": self.allow_concurrent_runs,
            "reveal": self.reveal.value,
        }


@dataclass(frozen=True)
class ResolvedTask:
    """A template resolved against a particular context.

    Tasks with identical labels and commands may still get different ids
    when they were resolved in different contexts.
    """

    id: TaskId
    original_task: TaskTemplate
    resolved_label: str
    resolved: SpawnInTerminal | None = None  # None if the template is unusable
