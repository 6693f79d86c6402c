"""Shell executor implementation."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping

from termtask.executors.base import Executor
from termtask.tasks.base import SpawnInTerminal

logger = logging.getLogger(__name__)


def build_environment(
    spawn: SpawnInTerminal, ambient: Mapping[str, str] | None = None
) -> dict[str, str]:
    """Lay the task's env over the ambient environment; the task wins."""
    env = dict(os.environ if ambient is None else ambient)
    env.update(spawn.env)
    return env


class ShellExecutor(Executor):
    """Executor that runs tasks directly in the current shell.

    A task without args is handed to the shell as a single command line,
    so leftover ``$NAME`` tokens get expanded by the shell itself.
    """

    name = "shell"

    def __init__(self, ambient_env: Mapping[str, str] | None = None) -> None:
        super().__init__()
        self._ambient_env = ambient_env

    def spawn(self, spawn: SpawnInTerminal) -> int:
        """Run the task and return its exit code."""
        with self._track(spawn):
            env = build_environment(spawn, self._ambient_env)
            cwd = str(spawn.cwd) if spawn.cwd is not None else None
            logger.info("Spawning task %s: %s", spawn.id, spawn.full_label)
            if spawn.args:
                result = subprocess.run(
                    [spawn.command, *spawn.args], cwd=cwd, env=env, check=False
                )
            else:
                result = subprocess.run(
                    spawn.command, shell=True, cwd=cwd, env=env, check=False
                )
            return result.returncode
