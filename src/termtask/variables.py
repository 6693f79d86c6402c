"""Task variables: names, template tokens and the value container."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum

# Prefix for every variable exposed to templates and spawned processes
ZED_VARIABLE_NAME_PREFIX = "ZED_"
CUSTOM_VARIABLE_PREFIX = "CUSTOM_"

# Closing brace would terminate the braced ${ZED_CUSTOM_...} form early
_INVALID_CUSTOM_CHARS = re.compile(r"[}]")


class VariableName(Enum):
    """Built-in variables describing editor state at resolution time."""

    FILE = "FILE"  # absolute path of the current file
    WORKTREE_ROOT = "WORKTREE_ROOT"  # worktree containing the file
    SYMBOL = "SYMBOL"  # symbol around the cursor/selection
    ROW = "ROW"  # 1-based row of the cursor
    COLUMN = "COLUMN"  # 1-based column of the cursor
    SELECTED_TEXT = "SELECTED_TEXT"

    @property
    def token(self) -> str:
        """Environment variable style name, e.g. ``ZED_FILE``."""
        return f"{ZED_VARIABLE_NAME_PREFIX}{self.value}"

    def template_value(self) -> str:
        """Form used inside templates: ``$ZED_FILE``."""
        return f"${self.token}"

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class CustomVariable:
    """Variable supplied by a task source or plugin.

    Rendered under ``ZED_CUSTOM_`` so it never collides with a built-in.
    """

    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Custom variable name must not be empty")
        if _INVALID_CUSTOM_CHARS.search(self.name):
            raise ValueError(f"Invalid custom variable name: {self.name!r}")

    @property
    def token(self) -> str:
        return f"{ZED_VARIABLE_NAME_PREFIX}{CUSTOM_VARIABLE_PREFIX}{self.name}"

    def template_value(self) -> str:
        """Braced form, ``${ZED_CUSTOM_NAME}``.

        Custom names are not guaranteed to end on a word boundary, so the
        braces delimit the token from surrounding template text.
        """
        return f"${{{self.token}}}"

    def __str__(self) -> str:
        return self.token


TaskVariableName = VariableName | CustomVariable

_BUILTIN_BY_TOKEN: dict[str, VariableName] = {v.token: v for v in VariableName}


def parse_variable_name(text: str) -> TaskVariableName | None:
    """Parse a token back into a variable.

    Accepts ``ZED_FILE``, ``$ZED_FILE`` or ``${ZED_FILE}``.
    Returns None when the text does not name a variable.
    """
    token = text
    if token.startswith("${") and token.endswith("}"):
        token = token[2:-1]
    elif token.startswith("$"):
        token = token[1:]

    builtin = _BUILTIN_BY_TOKEN.get(token)
    if builtin is not None:
        return builtin

    custom_prefix = ZED_VARIABLE_NAME_PREFIX + CUSTOM_VARIABLE_PREFIX
    if token.startswith(custom_prefix):
        try:
            return CustomVariable(token[len(custom_prefix) :])
        except ValueError:
            return None
    return None


def truncate_value(value: str, limit: int) -> str:
    """Shorten a value for display, keeping its leading part."""
    if limit <= 0 or len(value) <= limit:
        return value
    return value[: max(limit - 1, 0)] + "…"


class TaskVariables:
    """Values of task variables, keyed by variable name.

    Keys are unique; inserting an existing key overwrites it.
    """

    def __init__(
        self,
        values: Mapping[TaskVariableName, str]
        | Iterable[tuple[TaskVariableName, str]]
        | None = None,
    ) -> None:
        self._values: dict[TaskVariableName, str] = dict(values or {})

    def insert(self, variable: TaskVariableName, value: str) -> str | None:
        """Set a variable, returning the value it replaced (if any)."""
        previous = self._values.get(variable)
        self._values[variable] = value
        return previous

    def extend(self, other: TaskVariables) -> None:
        """Merge another container into this one; incoming values win."""
        self._values.update(other._values)

    def get(self, variable: TaskVariableName) -> str | None:
        return self._values.get(variable)

    def items(self) -> list[tuple[TaskVariableName, str]]:
        return list(self._values.items())

    def to_env(self) -> dict[str, str]:
        """Convert into environment variables, e.g. ``{"ZED_FILE": ...}``."""
        return {name.token: value for name, value in self._values.items()}

    def with_truncated_values(self, limit: int) -> TaskVariables:
        """Return a copy with every value shortened to ``limit`` characters."""
        return TaskVariables(
            (name, truncate_value(value, limit)) for name, value in self._values.items()
        )

    def __contains__(self, variable: object) -> bool:
        return variable in self._values

    def __iter__(self) -> Iterator[TaskVariableName]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaskVariables):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"TaskVariables({self.to_env()!r})"
