"""Executor registry and utilities."""

from termtask.executors.base import Executor, TaskAlreadyRunningError
from termtask.executors.shell import ShellExecutor, build_environment

EXECUTORS: dict[str, type[Executor]] = {
    "shell": ShellExecutor,
}

DEFAULT_EXECUTOR = "shell"


def get_executor(name: str | None = None) -> Executor:
    """Get an executor instance by name. Defaults to shell."""
    executor_name = name or DEFAULT_EXECUTOR
    if executor_name not in EXECUTORS:
        raise ValueError(f"Unknown executor: {executor_name}")
    return EXECUTORS[executor_name]()


__all__ = [
    "DEFAULT_EXECUTOR",
    "EXECUTORS",
    "Executor",
    "ShellExecutor",
    "TaskAlreadyRunningError",
    "build_environment",
    "get_executor",
]
