"""Command-line interface for tasklists.

This module provides the CLI interface for managing task lists using
argparse. It supports the following commands:
- lists: Show all task lists
- add-list / delete-list: Create or remove a task list
- add: Add a task to a list
- show: Show the tasks of a list, optionally filtered
- toggle: Flip a task between pending and completed
- edit: Change a task's text or due date
- delete: Delete a task
"""

import argparse
import sys
from datetime import date
from typing import List, Optional

from tasklists.config import get_settings
from tasklists.logging_setup import setup_logging
from tasklists.models import TaskFilter
from tasklists.persistence import PersistenceBridge
from tasklists.session import TaskManager
from tasklists.storage import JsonStorage
from tasklists.store import UNSET


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD")


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="tasklists",
        description="Manage named task lists"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("lists", help="Show all task lists")

    add_list_parser = subparsers.add_parser("add-list", help="Create a task list")
    add_list_parser.add_argument("name", help="List name")

    delete_list_parser = subparsers.add_parser("delete-list", help="Delete a task list")
    delete_list_parser.add_argument("list_id", type=int, help="List ID")

    add_parser = subparsers.add_parser("add", help="Add a task to a list")
    add_parser.add_argument("list_id", type=int, help="List ID")
    add_parser.add_argument("text", help="Task text")
    add_parser.add_argument("--due", type=_parse_date, help="Due date (YYYY-MM-DD)")

    show_parser = subparsers.add_parser("show", help="Show the tasks of a list")
    show_parser.add_argument("list_id", type=int, help="List ID")
    show_parser.add_argument(
        "--filter",
        choices=[f.value for f in TaskFilter],
        default=TaskFilter.ALL.value,
        help="Filter tasks by completion (default: all)"
    )

    toggle_parser = subparsers.add_parser("toggle", help="Toggle task completion")
    toggle_parser.add_argument("list_id", type=int, help="List ID")
    toggle_parser.add_argument("task_id", type=int, help="Task ID")

    edit_parser = subparsers.add_parser("edit", help="Edit a task")
    edit_parser.add_argument("list_id", type=int, help="List ID")
    edit_parser.add_argument("task_id", type=int, help="Task ID")
    edit_parser.add_argument("--text", help="New task text")
    due_group = edit_parser.add_mutually_exclusive_group()
    due_group.add_argument("--due", type=_parse_date, help="New due date (YYYY-MM-DD)")
    due_group.add_argument("--clear-due", action="store_true", help="Remove the due date")

    delete_parser = subparsers.add_parser("delete", help="Delete a task")
    delete_parser.add_argument("list_id", type=int, help="List ID")
    delete_parser.add_argument("task_id", type=int, help="Task ID")

    return parser


def _error(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def cmd_lists(args: argparse.Namespace, manager: TaskManager) -> int:
    """Handle the 'lists' command."""
    if not manager.state.task_lists:
        print("No task lists found.")
        return 0

    for task_list in manager.state.task_lists:
        print(f"#{task_list.id} {task_list.name} ({len(task_list.tasks)} tasks)")
    return 0


def cmd_add_list(args: argparse.Namespace, manager: TaskManager) -> int:
    """Handle the 'add-list' command.

    Args:
        args: Parsed command-line arguments
        manager: TaskManager instance

    Returns:
        Exit code (0 for success, 1 for a blank name)
    """
    previous = manager.state
    state = manager.add_task_list(args.name)
    if state is previous:
        return _error("List name cannot be empty.")

    task_list = state.task_lists[-1]
    print(f"List added: #{task_list.id} {task_list.name}")
    return 0


def cmd_delete_list(args: argparse.Namespace, manager: TaskManager) -> int:
    """Handle the 'delete-list' command."""
    previous = manager.state
    if manager.delete_task_list(args.list_id) is previous:
        return _error(f"List #{args.list_id} not found.")

    print(f"List #{args.list_id} deleted.")
    return 0


def cmd_add(args: argparse.Namespace, manager: TaskManager) -> int:
    """Handle the 'add' command.

    Args:
        args: Parsed command-line arguments
        manager: TaskManager instance

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if manager.state.find_list(args.list_id) is None:
        return _error(f"List #{args.list_id} not found.")

    previous = manager.state
    state = manager.add_task(args.list_id, args.text, args.due)
    if state is previous:
        return _error("Task text cannot be empty.")

    task = state.find_list(args.list_id).tasks[-1]
    print(f"Task added: #{task.id} {task.text}")
    return 0


def cmd_show(args: argparse.Namespace, manager: TaskManager) -> int:
    """Handle the 'show' command.

    Args:
        args: Parsed command-line arguments
        manager: TaskManager instance

    Returns:
        Exit code (0 for success, 1 for an unknown list)
    """
    task_list = manager.state.find_list(args.list_id)
    if task_list is None:
        return _error(f"List #{args.list_id} not found.")

    tasks = manager.filtered_tasks(args.list_id, TaskFilter(args.filter))
    print(task_list.name)
    if not tasks:
        print("No tasks found.")
        return 0

    for task in tasks:
        mark = "x" if task.completed else " "
        due = f"due {task.due_date.isoformat()}" if task.due_date else "no due date"
        print(f"[{mark}] #{task.id} {task.text} ({due})")
    return 0


def cmd_toggle(args: argparse.Namespace, manager: TaskManager) -> int:
    """Handle the 'toggle' command."""
    previous = manager.state
    state = manager.toggle_completion(args.list_id, args.task_id)
    if state is previous:
        return _error(f"Task #{args.task_id} not found in list #{args.list_id}.")

    task = state.find_list(args.list_id).find_task(args.task_id)
    print(f"Task #{task.id} marked as {'completed' if task.completed else 'pending'}: {task.text}")
    return 0


def cmd_edit(args: argparse.Namespace, manager: TaskManager) -> int:
    """Handle the 'edit' command.

    Runs a full edit session: begin, update the draft, commit.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    task_list = manager.state.find_list(args.list_id)
    if task_list is None or task_list.find_task(args.task_id) is None:
        return _error(f"Task #{args.task_id} not found in list #{args.list_id}.")

    due_date = UNSET
    if args.clear_due:
        due_date = None
    elif args.due is not None:
        due_date = args.due
    text = UNSET if args.text is None else args.text

    manager.begin_edit(args.list_id, args.task_id)
    manager.update_draft(args.list_id, args.task_id, text=text, due_date=due_date)
    state = manager.commit_edit(args.list_id, args.task_id)

    task = state.find_list(args.list_id).find_task(args.task_id)
    if task.is_editing:
        manager.cancel_edit(args.list_id, args.task_id)
        return _error("Task text cannot be empty.")

    print(f"Task #{task.id} updated: {task.text}")
    return 0


def cmd_delete(args: argparse.Namespace, manager: TaskManager) -> int:
    """Handle the 'delete' command.

    Args:
        args: Parsed command-line arguments
        manager: TaskManager instance

    Returns:
        Exit code (0 for success, 1 for error)
    """
    previous = manager.state
    if manager.delete_task(args.list_id, args.task_id) is previous:
        return _error(f"Task #{args.task_id} not found in list #{args.list_id}.")

    print(f"Task #{args.task_id} deleted.")
    return 0


def main(argv: Optional[List[str]] = None, manager: Optional[TaskManager] = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:]
        manager: TaskManager to operate on. If None, one is opened from
                 the storage file named by the settings.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if manager is None:
        settings = get_settings()
        setup_logging(settings.log_level)
        bridge = PersistenceBridge(JsonStorage(settings.db_path), settings.storage_key)
        manager = TaskManager.open(bridge)

    # Dispatch to command handlers
    commands = {
        "lists": cmd_lists,
        "add-list": cmd_add_list,
        "delete-list": cmd_delete_list,
        "add": cmd_add,
        "show": cmd_show,
        "toggle": cmd_toggle,
        "edit": cmd_edit,
        "delete": cmd_delete,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Error: Unknown command '{args.command}'", file=sys.stderr)
        return 1

    return handler(args, manager)


if __name__ == "__main__":
    sys.exit(main())
