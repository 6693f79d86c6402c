"""Command-line interface for termtask."""

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from rich.table import Table

from termtask import __version__
from termtask.config import TermtaskConfig, load_config
from termtask.console import console
from termtask.context import TaskContext
from termtask.executors import TaskAlreadyRunningError, get_executor
from termtask.sources import SourceContext, TaskInventory, build_inventory
from termtask.tasks import MAX_DISPLAY_VARIABLE_LENGTH, SpawnInTerminal
from termtask.variables import CustomVariable, TaskVariables, VariableName

logger = logging.getLogger(__name__)


def version_callback(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console.print(f"termtask [bold cyan]{__version__}[/bold cyan]")
    ctx.exit()


def _parse_custom_vars(values: tuple[str, ...]) -> list[tuple[CustomVariable, str]]:
    """Parse repeated NAME=VALUE options into custom variables."""
    parsed: list[tuple[CustomVariable, str]] = []
    for item in values:
        name, sep, value = item.partition("=")
        if not sep:
            raise click.BadParameter(f"Expected NAME=VALUE, got '{item}'")
        try:
            parsed.append((CustomVariable(name), value))
        except ValueError as e:
            raise click.BadParameter(str(e)) from e
    return parsed


def build_task_context(
    cwd: Path | None,
    worktree_root: Path | None,
    file: str | None,
    row: int | None,
    column: int | None,
    symbol: str | None,
    selected_text: str | None,
    custom_vars: tuple[str, ...] = (),
) -> TaskContext:
    """Assemble a TaskContext from command-line editor state."""
    variables = TaskVariables()
    builtins: list[tuple[VariableName, Any]] = [
        (VariableName.FILE, file),
        (VariableName.WORKTREE_ROOT, worktree_root),
        (VariableName.ROW, row),
        (VariableName.COLUMN, column),
        (VariableName.SYMBOL, symbol),
        (VariableName.SELECTED_TEXT, selected_text),
    ]
    for name, value in builtins:
        if value is not None:
            variables.insert(name, str(value))

    # Custom variables are applied last and win on collision
    variables.extend(TaskVariables(_parse_custom_vars(custom_vars)))
    return TaskContext(cwd=cwd, task_variables=variables)


def context_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the editor-state options shared by `resolve` and `run`."""
    options = [
        click.option(
            "--cwd",
            type=click.Path(file_okay=False, path_type=Path),
            help="Working directory to resolve the task in.",
        ),
        click.option(
            "--worktree-root",
            "-w",
            type=click.Path(file_okay=False, path_type=Path),
            help="Worktree root (defaults to the current directory).",
        ),
        click.option("--file", "-f", help="Current file ($ZED_FILE)."),
        click.option("--row", type=int, help="Cursor row ($ZED_ROW)."),
        click.option("--column", type=int, help="Cursor column ($ZED_COLUMN)."),
        click.option("--symbol", help="Symbol at the cursor ($ZED_SYMBOL)."),
        click.option("--selected-text", help="Selected text ($ZED_SELECTED_TEXT)."),
        click.option(
            "--var",
            "custom_vars",
            multiple=True,
            help="Custom variable NAME=VALUE, exposed as ${ZED_CUSTOM_NAME}.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _setup_logging(config: TermtaskConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.log_level or "WARNING")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _load_inventory(
    config: TermtaskConfig, root: Path
) -> tuple[TaskInventory, SourceContext]:
    inventory = build_inventory(config)
    logger.debug("Using %d task sources for %s", len(inventory.sources), root)
    return inventory, SourceContext(worktree_root=root)


def _resolve_or_exit(
    label: str,
    context: TaskContext,
    config: TermtaskConfig,
    root: Path,
) -> SpawnInTerminal:
    inventory, cx = _load_inventory(config, root)
    # 0 disables truncation, so only an unset value falls back to the default
    label_length = (
        config.label_length
        if config.label_length is not None
        else MAX_DISPLAY_VARIABLE_LENGTH
    )
    resolved = inventory.resolve(label, context, cx, label_length=label_length)
    if resolved is None:
        console.print(f"[red]Task not found:[/red] {label}")
        raise SystemExit(1)
    if resolved.resolved is None:
        console.print(
            f"[yellow]Task '{resolved.resolved_label}' cannot be spawned "
            "(empty command).[/yellow]"
        )
        raise SystemExit(1)
    return resolved.resolved


def _print_spawn(spawn: SpawnInTerminal) -> None:
    table = Table(show_header=False, box=None)
    table.add_column(style="cyan")
    table.add_column()
    table.add_row("id", spawn.id.value)
    table.add_row("label", spawn.label)
    table.add_row("full label", spawn.full_label)
    table.add_row("command", spawn.command)
    table.add_row("args", " ".join(spawn.args))
    table.add_row("cwd", str(spawn.cwd) if spawn.cwd is not None else "(inherited)")
    for key, value in sorted(spawn.env.items()):
        table.add_row("env", f"{key}={value}")
    table.add_row("reveal", spawn.reveal.value)
    table.add_row("new terminal", str(spawn.use_new_terminal).lower())
    table.add_row("concurrent runs", str(spawn.allow_concurrent_runs).lower())
    console.print(table)


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """termtask - resolve and run templated terminal tasks."""
    config = load_config()
    ctx.obj = config
    _setup_logging(config, verbose)
    logger.debug("Effective config: %s", config.to_dict())

    if ctx.invoked_subcommand is None:
        console.print("[bold]termtask[/bold] - templated terminal tasks")
        console.print("\nRun [cyan]termtask --help[/cyan] for available commands.")


@main.command("list")
@click.option("--verbose", "-v", is_flag=True, help="Show task details.")
@click.option(
    "--worktree-root",
    "-w",
    type=click.Path(file_okay=False, path_type=Path),
    help="Worktree root (defaults to the current directory).",
)
@click.pass_obj
def list_tasks(config: TermtaskConfig, verbose: bool, worktree_root: Path | None) -> None:
    """List available tasks."""
    inventory, cx = _load_inventory(config, worktree_root or Path.cwd())
    tasks = inventory.list_tasks(cx)

    if not tasks:
        console.print("[yellow]No tasks found.[/yellow]")
        console.print("[dim]Define tasks in .termtask/tasks.yaml[/dim]")
        return

    console.print("[bold]Available Tasks:[/bold]\n")
    for task in tasks:
        console.print(f"  [cyan]{task.template.label}[/cyan] [dim]({task.source.name})[/dim]")
        if verbose:
            command = " ".join([task.template.command, *task.template.args])
            console.print(f"    {command}")
            if task.template.cwd:
                console.print(f"    [dim]cwd: {task.template.cwd}[/dim]")
            console.print()


@main.command()
@click.argument("label")
@context_options
@click.option("--json", "as_json", is_flag=True, help="Print the spawn spec as JSON.")
@click.pass_obj
def resolve(
    config: TermtaskConfig,
    label: str,
    cwd: Path | None,
    worktree_root: Path | None,
    file: str | None,
    row: int | None,
    column: int | None,
    symbol: str | None,
    selected_text: str | None,
    custom_vars: tuple[str, ...],
    as_json: bool,
) -> None:
    """Resolve a task and print what would be spawned."""
    root = worktree_root or Path.cwd()
    context = build_task_context(
        cwd, root, file, row, column, symbol, selected_text, custom_vars
    )
    spawn = _resolve_or_exit(label, context, config, root)

    if as_json:
        click.echo(json.dumps(spawn.to_dict(), indent=2))
    else:
        _print_spawn(spawn)


@main.command()
@click.argument("label")
@context_options
@click.pass_obj
def run(
    config: TermtaskConfig,
    label: str,
    cwd: Path | None,
    worktree_root: Path | None,
    file: str | None,
    row: int | None,
    column: int | None,
    symbol: str | None,
    selected_text: str | None,
    custom_vars: tuple[str, ...],
) -> None:
    """Resolve a task and run it in the current shell."""
    root = worktree_root or Path.cwd()
    context = build_task_context(
        cwd, root, file, row, column, symbol, selected_text, custom_vars
    )
    spawn = _resolve_or_exit(label, context, config, root)

    executor = get_executor()
    try:
        exit_code = executor.spawn(spawn)
    except TaskAlreadyRunningError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from None
    except OSError as e:
        console.print(f"[red]Failed to spawn task:[/red] {e}")
        raise SystemExit(1) from None

    if exit_code != 0:
        console.print(f"[red]Task exited with code {exit_code}[/red]")
    raise SystemExit(exit_code)


@main.command()
def variables() -> None:
    """List the built-in task variables."""
    console.print("[bold]Built-in variables:[/bold]\n")
    for name in VariableName:
        console.print(f"  [cyan]{name.template_value()}[/cyan]")
    example = CustomVariable("NAME").template_value()
    console.print(f"\n[dim]Custom variables: {example}[/dim]")
