"""Comprehensive tests for CLI module."""

import json
import logging
import tempfile
from datetime import date
from pathlib import Path

import pytest

from tasklists.cli import create_parser, main
from tasklists.persistence import PersistenceBridge
from tasklists.session import TaskManager
from tasklists.storage import JsonStorage
from tasklists.store import IdClock, TaskStore


class TestCLI:
    """Test suite for CLI functionality."""

    @pytest.fixture
    def temp_storage(self):
        """Create a temporary storage file for testing."""
        with tempfile.NamedTemporaryFile(mode="w", delete=False, suffix=".json") as f:
            temp_path = f.name
        # Delete the file immediately - we just need the path
        Path(temp_path).unlink()
        yield temp_path
        # Cleanup
        path = Path(temp_path)
        if path.exists():
            path.unlink()

    @pytest.fixture
    def manager(self, temp_storage):
        """Create a TaskManager over temporary storage; ids start at 1000."""
        bridge = PersistenceBridge(JsonStorage(temp_storage))
        return TaskManager.open(bridge, TaskStore(IdClock(source=lambda: 1.0)))

    @pytest.fixture
    def groceries(self, manager):
        """Populate list #1000 'Groceries' with #1001 Milk (dated) and #1002 Eggs."""
        assert main(["add-list", "Groceries"], manager) == 0
        assert main(["add", "1000", "Milk", "--due", "2024-01-05"], manager) == 0
        assert main(["add", "1000", "Eggs"], manager) == 0
        return manager

    def test_create_parser(self):
        """Test that parser is created with correct subcommands."""
        parser = create_parser()
        assert parser.prog == "tasklists"

        with pytest.raises(SystemExit):
            parser.parse_args(["--help"])

    def test_parser_add_command(self):
        """Test parsing 'add' command with a due date."""
        args = create_parser().parse_args(["add", "7", "Milk", "--due", "2024-01-05"])
        assert args.command == "add"
        assert args.list_id == 7
        assert args.text == "Milk"
        assert args.due == date(2024, 1, 5)

    def test_parser_rejects_bad_date(self):
        """Test that an invalid due date is a usage error."""
        with pytest.raises(SystemExit):
            create_parser().parse_args(["add", "7", "Milk", "--due", "tomorrow"])

    def test_parser_show_default_filter(self):
        """Test that show defaults to all tasks."""
        args = create_parser().parse_args(["show", "7"])
        assert args.filter == "all"

    def test_parser_edit_due_options_exclusive(self):
        """Test that --due and --clear-due cannot be combined."""
        with pytest.raises(SystemExit):
            create_parser().parse_args(["edit", "1", "2", "--due", "2024-01-01", "--clear-due"])

    def test_no_command(self, manager, capsys):
        """Test that running without a command prints help."""
        assert main([], manager) == 1
        assert "usage" in capsys.readouterr().out

    def test_lists_empty(self, manager, capsys):
        """Test listing when there are no lists."""
        assert main(["lists"], manager) == 0
        assert "No task lists found." in capsys.readouterr().out

    def test_add_list(self, manager, capsys):
        """Test creating a list."""
        assert main(["add-list", "  Groceries "], manager) == 0
        assert "List added: #1000 Groceries" in capsys.readouterr().out

    def test_add_list_blank(self, manager, capsys):
        """Test that a blank list name is an error."""
        assert main(["add-list", "   "], manager) == 1
        assert "cannot be empty" in capsys.readouterr().err

    def test_lists(self, groceries, capsys):
        """Test listing lists with their task counts."""
        capsys.readouterr()
        assert main(["lists"], groceries) == 0
        assert "#1000 Groceries (2 tasks)" in capsys.readouterr().out

    def test_add_to_unknown_list(self, manager, capsys):
        """Test adding a task to a list that does not exist."""
        assert main(["add", "5", "Milk"], manager) == 1
        assert "List #5 not found." in capsys.readouterr().err

    def test_add_blank_task(self, groceries, capsys):
        """Test that blank task text is an error."""
        assert main(["add", "1000", "  "], groceries) == 1
        assert "cannot be empty" in capsys.readouterr().err

    def test_show_orders_dated_first(self, groceries, capsys):
        """Test that show lists dated tasks before dateless ones."""
        capsys.readouterr()
        assert main(["show", "1000"], groceries) == 0
        lines = capsys.readouterr().out.splitlines()

        assert lines == [
            "Groceries",
            "[ ] #1001 Milk (due 2024-01-05)",
            "[ ] #1002 Eggs (no due date)",
        ]

    def test_toggle_and_filter(self, groceries, capsys):
        """Test toggling a task and filtering by status."""
        assert main(["toggle", "1000", "1001"], groceries) == 0
        assert "marked as completed: Milk" in capsys.readouterr().out

        assert main(["show", "1000", "--filter", "pending"], groceries) == 0
        out = capsys.readouterr().out
        assert "Eggs" in out
        assert "Milk" not in out

        assert main(["show", "1000", "--filter", "completed"], groceries) == 0
        assert "[x] #1001 Milk" in capsys.readouterr().out

    def test_show_unknown_list(self, manager, capsys):
        assert main(["show", "9"], manager) == 1
        assert "List #9 not found." in capsys.readouterr().err

    def test_show_empty_filter(self, groceries, capsys):
        """Test showing a filter with no matches."""
        capsys.readouterr()
        assert main(["show", "1000", "--filter", "completed"], groceries) == 0
        assert "No tasks found." in capsys.readouterr().out

    def test_toggle_unknown_task(self, groceries, capsys):
        assert main(["toggle", "1000", "5"], groceries) == 1
        assert "Task #5 not found in list #1000." in capsys.readouterr().err

    def test_edit_text_and_due(self, groceries, temp_storage, capsys):
        """Test editing text and due date, and that it is stored."""
        assert main(["edit", "1000", "1002", "--text", "Brown eggs", "--due", "2024-02-01"], groceries) == 0
        assert "Task #1002 updated: Brown eggs" in capsys.readouterr().out

        stored = json.loads(JsonStorage(temp_storage).get("taskLists"))
        eggs = stored[0]["tasks"][1]
        assert eggs["text"] == "Brown eggs"
        assert eggs["dueDate"] == "2024-02-01"

    def test_edit_clear_due(self, groceries):
        """Test removing a due date."""
        assert main(["edit", "1000", "1001", "--clear-due"], groceries) == 0
        task = groceries.state.find_list(1000).find_task(1001)
        assert task.due_date is None
        assert task.text == "Milk"

    def test_edit_blank_text(self, groceries, capsys):
        """Test that a blank edit is rejected and the task is unchanged."""
        assert main(["edit", "1000", "1001", "--text", "  "], groceries) == 1
        assert "cannot be empty" in capsys.readouterr().err

        task = groceries.state.find_list(1000).find_task(1001)
        assert task.text == "Milk"
        assert not task.is_editing

    def test_edit_unknown_task(self, groceries, capsys):
        assert main(["edit", "1000", "5", "--text", "x"], groceries) == 1
        assert "not found" in capsys.readouterr().err

    def test_delete_task(self, groceries, capsys):
        """Test deleting a task."""
        assert main(["delete", "1000", "1001"], groceries) == 0
        assert "Task #1001 deleted." in capsys.readouterr().out
        assert [t.id for t in groceries.state.task_lists[0].tasks] == [1002]

    def test_delete_unknown_task(self, groceries, capsys):
        assert main(["delete", "1000", "1001"], groceries) == 0
        assert main(["delete", "1000", "1001"], groceries) == 1
        assert "not found" in capsys.readouterr().err

    def test_delete_list(self, groceries, capsys):
        """Test deleting a list."""
        assert main(["delete-list", "1000"], groceries) == 0
        assert "List #1000 deleted." in capsys.readouterr().out
        assert groceries.state.task_lists == ()

    def test_delete_unknown_list(self, manager, capsys):
        assert main(["delete-list", "1000"], manager) == 1
        assert "List #1000 not found." in capsys.readouterr().err

    def test_main_uses_settings(self, temp_storage, monkeypatch, capsys):
        """Test that main opens the storage file named by the environment."""
        monkeypatch.setenv("TASKLISTS_DB_PATH", temp_storage)
        monkeypatch.delenv("TASKLISTS_STORAGE_KEY", raising=False)

        try:
            assert main(["add-list", "Work"]) == 0
            capsys.readouterr()
            assert main(["lists"]) == 0
            assert "Work (0 tasks)" in capsys.readouterr().out
        finally:
            logger = logging.getLogger("tasklists")
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)
        assert json.loads(JsonStorage(temp_storage).get("taskLists"))[0]["name"] == "Work"
