"""Task sources and their aggregation."""

from termtask.sources.base import SourceContext, TaskSource
from termtask.sources.inventory import SourcedTask, TaskInventory, build_inventory
from termtask.sources.static import StaticSource, TaskFileError, load_task_file
from termtask.sources.vscode import VsCodeSource, VsCodeTaskFile

__all__ = [
    "SourceContext",
    "SourcedTask",
    "StaticSource",
    "TaskFileError",
    "TaskInventory",
    "TaskSource",
    "VsCodeSource",
    "VsCodeTaskFile",
    "build_inventory",
    "load_task_file",
]
