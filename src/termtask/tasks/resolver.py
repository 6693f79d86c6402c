"""Resolve task templates into spawn-ready tasks."""

from __future__ import annotations

import hashlib
import json
import logging
import re
from collections.abc import Iterable
from pathlib import Path

from termtask.context import TaskContext
from termtask.tasks.base import ResolvedTask, SpawnInTerminal, TaskId, TaskTemplate
from termtask.variables import TaskVariables

logger = logging.getLogger(__name__)

# Longest variable value shown in the shortened label
MAX_DISPLAY_VARIABLE_LENGTH = 15
DEFAULT_ID_BASE = "task"

# ${ANYTHING_BUT_BRACE} or $IDENTIFIER
_TOKEN_PATTERN = re.compile(r"\$\{(?P<braced>[^}]+)\}|\$(?P<bare>[A-Za-z0-9_]+)")


def substitute(text: str, tokens: dict[str, str]) -> str:
    """Replace known ``$TOKEN`` and ``${TOKEN}`` forms in text.

    Unknown tokens are left as written so a shell can still expand them.
    Substituted values are not scanned again.
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group("braced") or match.group("bare")
        value = tokens.get(name)
        if value is None:
            return match.group(0)
        return value

    return _TOKEN_PATTERN.sub(_replace, text)


def _hash_content(payload: object) -> str:
    """Generate SHA256[:16] hash of a JSON-serializable payload."""
    encoded = json.dumps(payload, sort_keys=True, ensure_ascii=False).encode()
    return hashlib.sha256(encoded).hexdigest()[:16]


def derive_task_id(
    template: TaskTemplate, context: TaskContext, id_base: str | None = None
) -> TaskId:
    """Derive a stable id from the template and the context it is resolved in.

    Combines the template's serialized fields, the context cwd and every
    context variable. Equal inputs always give equal ids.
    """
    base = template.id or id_base or DEFAULT_ID_BASE
    digest = _hash_content(
        {
            "template": template.to_dict(),
            "cwd": str(context.cwd) if context.cwd is not None else None,
            "variables": context.sort_key(),
        }
    )
    return TaskId(f"{base}_{digest}")


def resolve_task(
    template: TaskTemplate,
    context: TaskContext,
    id_base: str | None = None,
    label_length: int = MAX_DISPLAY_VARIABLE_LENGTH,
) -> ResolvedTask:
    """Resolve a template against a context.

    Never raises for substitution reasons. A template whose command is empty
    after substitution yields a ResolvedTask without a spawn payload.
    """
    variables: TaskVariables = context.task_variables
    tokens = variables.to_env()
    short_tokens = variables.with_truncated_values(label_length).to_env()

    task_id = derive_task_id(template, context, id_base)
    full_label = substitute(template.label, tokens)

    command = substitute(template.command, tokens)
    if not command.strip():
        logger.debug("Task '%s' has an empty command, not spawnable", full_label)
        return ResolvedTask(
            id=task_id,
            original_task=template,
            resolved_label=full_label,
            resolved=None,
        )

    if template.cwd is not None:
        cwd: Path | None = Path(substitute(template.cwd, tokens))
    else:
        cwd = context.cwd

    env = dict(tokens)
    env.update({key: substitute(value, tokens) for key, value in template.env.items()})

    spawn = SpawnInTerminal(
        id=task_id,
        full_label=full_label,
        label=substitute(template.label, short_tokens),
        command=command,
        args=tuple(substitute(arg, tokens) for arg in template.args),
        cwd=cwd,
        env=env,
        use_new_terminal=template.use_new_terminal,
        allow_concurrent_runs=template.allow_concurrent_runs,
        reveal=template.reveal,
    )
    return ResolvedTask(
        id=task_id,
        original_task=template,
        resolved_label=full_label,
        resolved=spawn,
    )


def resolve_templates(
    templates: Iterable[TaskTemplate],
    context: TaskContext,
    id_base: str | None = None,
) -> list[ResolvedTask]:
    """Resolve several templates against one context, preserving order."""
    return [resolve_task(t, context, id_base=id_base) for t in templates]
