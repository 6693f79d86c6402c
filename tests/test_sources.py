"""Tests for task sources and the task inventory."""

import logging
from pathlib import Path

import pytest

from termtask.config.schema import DEFAULT_CONFIG, TermtaskConfig
from termtask.context import TaskContext
from termtask.sources import (
    SourceContext,
    StaticSource,
    TaskFileError,
    TaskInventory,
    TaskSource,
    VsCodeSource,
    build_inventory,
    load_task_file,
)
from termtask.tasks import RevealStrategy, TaskTemplate, TaskTemplates
from termtask.variables import TaskVariables, VariableName


class FixedSource(TaskSource):
    """Source returning a fixed list of templates."""

    def __init__(self, name: str, templates: TaskTemplates) -> None:
        self.name = name
        self.templates = templates
        self.calls = 0

    def tasks_to_schedule(self, cx: SourceContext) -> TaskTemplates:
        self.calls += 1
        return list(self.templates)


class BrokenSource(TaskSource):
    """Source that always fails."""

    name = "broken"

    def tasks_to_schedule(self, cx: SourceContext) -> TaskTemplates:
        raise RuntimeError("tool crashed")


class TestTaskTemplateSerialization:
    """Tests for TaskTemplate.from_dict / to_dict."""

    def test_from_dict_full(self) -> None:
        """Test that every supported key is read."""
        template = TaskTemplate.from_dict(
            {
                "label": "test",
                "command": "pytest",
                "args": ["-x", 1],
                "env": {"A": 1},
                "cwd": "$ZED_WORKTREE_ROOT",
                "id": "tests",
                "use_new_terminal": True,
                "allow_concurrent_runs": True,
                "reveal": "no-focus",
                "unknown": "ignored",
            }
        )

        assert template.args == ("-x", "1")
        assert template.env == {"A": "1"}
        assert template.cwd == "$ZED_WORKTREE_ROOT"
        assert template.id == "tests"
        assert template.use_new_terminal is True
        assert template.allow_concurrent_runs is True
        assert template.reveal is RevealStrategy.NO_FOCUS

    def test_from_dict_defaults(self) -> None:
        """Test defaults for missing keys."""
        template = TaskTemplate.from_dict({"label": "x", "command": "y"})

        assert template.args == ()
        assert template.env == {}
        assert template.cwd is None
        assert template.use_new_terminal is False
        assert template.allow_concurrent_runs is False
        assert template.reveal is RevealStrategy.ALWAYS

    def test_unknown_reveal_falls_back_to_always(self) -> None:
        """Test that an unknown reveal value is treated as always."""
        template = TaskTemplate.from_dict({"label": "x", "command": "y", "reveal": "?"})
        assert template.reveal is RevealStrategy.ALWAYS

    def test_to_dict_excludes_defaults(self) -> None:
        """Test that to_dict omits default values."""
        data = TaskTemplate(label="x", command="y").to_dict()
        assert data == {"label": "x", "command": "y"}


class TestLoadTaskFile:
    """Tests for reading static task files."""

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        """Test that a missing file yields no tasks."""
        assert load_task_file(tmp_path / "nope.yaml") == []

    def test_yaml_list(self, tmp_path: Path) -> None:
        """Test a YAML list of tasks, keeping file order."""
        path = tmp_path / "tasks.yaml"
        path.write_text(
            "- label: build\n  command: make\n- label: test\n  command: make test\n"
        )
        templates = load_task_file(path)
        assert [t.label for t in templates] == ["build", "test"]

    def test_tasks_key_and_json(self, tmp_path: Path) -> None:
        """Test a JSON file with a top-level tasks key."""
        path = tmp_path / "tasks.json"
        path.write_text('{"tasks": [{"label": "a", "command": "echo a"}, "junk"]}')
        templates = load_task_file(path)
        assert [t.label for t in templates] == ["a"]

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        """Test that malformed YAML raises TaskFileError."""
        path = tmp_path / "tasks.yaml"
        path.write_text("- label: [unclosed\n")
        with pytest.raises(TaskFileError):
            load_task_file(path)

    def test_non_list_raises(self, tmp_path: Path) -> None:
        """Test that a scalar document raises TaskFileError."""
        path = tmp_path / "tasks.yaml"
        path.write_text("just a string\n")
        with pytest.raises(TaskFileError):
            load_task_file(path)


class TestStaticSource:
    """Tests for the file-backed source."""

    def test_reads_tasks_and_notifies(self, tmp_path: Path) -> None:
        """Test first load reports a change to the session."""
        path = tmp_path / "tasks.yaml"
        path.write_text("- label: a\n  command: echo a\n")
        source = StaticSource(path, name="project")
        cx = SourceContext()

        templates = source.tasks_to_schedule(cx)

        assert [t.label for t in templates] == ["a"]
        assert cx.changed_sources == ["project"]

    def test_cached_until_file_changes(self, tmp_path: Path) -> None:
        """Test that an unchanged file is not reported again."""
        path = tmp_path / "tasks.yaml"
        path.write_text("- label: a\n  command: echo a\n")
        source = StaticSource(path)
        cx = SourceContext()

        source.tasks_to_schedule(cx)
        source.tasks_to_schedule(cx)

        assert cx.generation == 1

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing file gives no tasks and no notification."""
        cx = SourceContext()
        assert StaticSource(tmp_path / "none.yaml").tasks_to_schedule(cx) == []
        assert cx.generation == 0

    def test_relative_path_resolved_against_worktree_root(self, tmp_path: Path) -> None:
        """Test that a relative task file is looked up under the session's root."""
        (tmp_path / "tasks.yaml").write_text("- label: a\n  command: echo a\n")
        source = StaticSource(Path("tasks.yaml"))

        templates = source.tasks_to_schedule(SourceContext(worktree_root=tmp_path))

        assert [t.label for t in templates] == ["a"]

    def test_reloads_when_worktree_root_changes(self, tmp_path: Path) -> None:
        """Test that switching worktrees reloads the relative task file."""
        first = tmp_path / "one"
        second = tmp_path / "two"
        for root, label in [(first, "a"), (second, "b")]:
            root.mkdir()
            (root / "tasks.yaml").write_text(f"- label: {label}\n  command: {label}\n")
        source = StaticSource(Path("tasks.yaml"), name="project")
        cx = SourceContext(worktree_root=first)

        assert [t.label for t in source.tasks_to_schedule(cx)] == ["a"]
        cx.worktree_root = second
        assert [t.label for t in source.tasks_to_schedule(cx)] == ["b"]
        assert cx.changed_sources == ["project", "project"]

    def test_as_type(self, tmp_path: Path) -> None:
        """Test the type-recovery hook."""
        source: TaskSource = StaticSource(tmp_path / "x.yaml")
        assert source.as_type(StaticSource) is source
        assert source.as_type(VsCodeSource) is None


class TestTaskInventory:
    """Tests for aggregating several sources."""

    def test_lists_in_source_order(self) -> None:
        """Test that tasks keep source and template order."""
        inventory = TaskInventory(
            [
                FixedSource("one", [TaskTemplate(label="b", command="b")]),
                FixedSource("two", [TaskTemplate(label="a", command="a")]),
            ]
        )
        tasks = inventory.list_tasks(SourceContext())
        assert [(t.source.name, t.template.label) for t in tasks] == [
            ("one", "b"),
            ("two", "a"),
        ]

    def test_failing_source_is_isolated(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that a failing source does not hide other sources' tasks."""
        inventory = TaskInventory(
            [
                BrokenSource(),
                FixedSource("ok", [TaskTemplate(label="a", command="a")]),
            ]
        )
        with caplog.at_level(logging.WARNING):
            tasks = inventory.list_tasks(SourceContext())

        assert [t.template.label for t in tasks] == ["a"]
        assert "broken" in caplog.text

    def test_malformed_static_file_is_isolated(self, tmp_path: Path) -> None:
        """Test that a broken task file only affects its own source."""
        path = tmp_path / "tasks.yaml"
        path.write_text("- label: [unclosed\n")
        inventory = TaskInventory(
            [
                StaticSource(path),
                FixedSource("ok", [TaskTemplate(label="a", command="a")]),
            ]
        )
        assert len(inventory.list_tasks(SourceContext())) == 1

    def test_listing_drains_source_changes(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that the inventory consumes and logs reload notifications."""
        path = tmp_path / "tasks.yaml"
        path.write_text("- label: a\n  command: echo a\n")
        inventory = TaskInventory([StaticSource(path, name="project")])
        cx = SourceContext()

        with caplog.at_level(logging.DEBUG, logger="termtask.sources.inventory"):
            inventory.list_tasks(cx)
            inventory.list_tasks(cx)

        assert cx.generation == 1
        assert cx.changed_sources == []
        assert caplog.text.count("Task sources reloaded: project") == 1

    def test_source_lookup_by_type(self, tmp_path: Path) -> None:
        """Test finding a source by its concrete type."""
        static = StaticSource(tmp_path / "x.yaml")
        inventory = TaskInventory([FixedSource("f", []), static])

        assert inventory.source(StaticSource) is static
        assert inventory.source(VsCodeSource) is None

    def test_add_and_remove_source(self) -> None:
        """Test adding and removing sources by name."""
        inventory = TaskInventory()
        inventory.add_source(FixedSource("f", []))

        assert [s.name for s in inventory.sources] == ["f"]
        assert inventory.remove_source("f") is True
        assert inventory.remove_source("f") is False
        assert inventory.sources == []

    def test_resolve_by_label(self) -> None:
        """Test resolving a task found by label, with the source name as id base."""
        inventory = TaskInventory(
            [FixedSource("project", [TaskTemplate(label="run", command="python $ZED_FILE")])]
        )
        context = TaskContext(
            task_variables=TaskVariables({VariableName.FILE: "/a.py"})
        )
        resolved = inventory.resolve("run", context, SourceContext())

        assert resolved is not None
        assert resolved.resolved is not None
        assert resolved.resolved.command == "python /a.py"
        assert resolved.id.value.startswith("project_")

    def test_resolve_unknown_label(self) -> None:
        """Test that an unknown label resolves to None."""
        inventory = TaskInventory([FixedSource("f", [])])
        assert inventory.resolve("nope", TaskContext(), SourceContext()) is None


class TestBuildInventory:
    """Tests for the config-driven default inventory."""

    def test_default_sources(self) -> None:
        """Test that defaults create global, project and vscode sources."""
        inventory = build_inventory(DEFAULT_CONFIG)
        assert [s.name for s in inventory.sources] == ["global", "project", "vscode"]

    def test_project_file_relative_to_root(self, tmp_path: Path) -> None:
        """Test that the project task file is looked up under the root."""
        config = TermtaskConfig(tasks_file="tasks.yaml")
        (tmp_path / "tasks.yaml").write_text("- label: a\n  command: a\n")

        inventory = build_inventory(config)
        tasks = inventory.list_tasks(SourceContext(worktree_root=tmp_path))

        assert [t.template.label for t in tasks] == ["a"]

    def test_vscode_disabled(self) -> None:
        """Test that the VS Code source can be switched off."""
        config = DEFAULT_CONFIG.merge(TermtaskConfig(vscode_tasks=False))
        inventory = build_inventory(config)
        assert inventory.source(VsCodeSource) is None
