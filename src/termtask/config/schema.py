"""Configuration schema for termtask."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class TermtaskConfig:
    """Termtask configuration schema.

    None values indicate "not set" and will use defaults or be inherited.
    """

    # Task sources
    tasks_file: str | None = None  # relative to the worktree root
    global_tasks_file: str | None = None
    vscode_tasks: bool | None = None

    # Display
    label_length: int | None = None

    # Logging
    log_level: str | None = None

    def merge(self, other: TermtaskConfig) -> TermtaskConfig:
        """Merge another config into this one.

        Values from `other` take precedence when they are not None.
        Returns a new TermtaskConfig instance.
        """
        return TermtaskConfig(
            **{
                f.name: (
                    getattr(other, f.name)
                    if getattr(other, f.name) is not None
                    else getattr(self, f.name)
                )
                for f in fields(self)
            }
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary, excluding None values."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                result[f.name] = value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TermtaskConfig:
        """Create a TermtaskConfig from a dictionary.

        Unknown keys are ignored. Type validation is performed.
        """
        tasks_file = data.get("tasks_file")
        global_tasks_file = data.get("global_tasks_file")
        vscode_raw = data.get("vscode_tasks")
        vscode_tasks = bool(vscode_raw) if vscode_raw is not None else None

        label_length: int | None = None
        label_raw = data.get("label_length")
        if label_raw is not None:
            try:
                label_length = int(label_raw)
            except (TypeError, ValueError):
                label_length = None

        log_level: str | None = None
        level_raw = data.get("log_level")
        if isinstance(level_raw, str) and level_raw.upper() in LOG_LEVELS:
            log_level = level_raw.upper()

        return cls(
            tasks_file=str(tasks_file) if tasks_file is not None else None,
            global_tasks_file=(
                str(global_tasks_file) if global_tasks_file is not None else None
            ),
            vscode_tasks=vscode_tasks,
            label_length=label_length,
            log_level=log_level,
        )


# Default configuration values (used when not specified anywhere)
DEFAULT_CONFIG = TermtaskConfig(
    tasks_file=".termtask/tasks.yaml",
    global_tasks_file="~/.termtask/tasks.yaml",
    vscode_tasks=True,
    label_length=15,
    log_level="WARNING",
)
