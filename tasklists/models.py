"""Core models for tasklists.

This module defines the immutable data structures the store works on:
- Task: A single task item with completion state, due date and edit state
- TaskList: A named, ordered collection of tasks
- Viewing / Editing: Edit sub-state of a task
- TaskFilter: Enum for filtering tasks by completion
- StoreState: A full snapshot of every task list plus the current selection
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Tuple, Union


class TaskFilter(Enum):
    """Task completion filter."""

    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"


@dataclass(frozen=True)
class Viewing:
    """Edit state of a task that is not being edited."""


@dataclass(frozen=True)
class Editing:
    """Edit state of a task carrying an uncommitted draft.

    Attributes:
        pending_text: Draft text, committed on save
        pending_due_date: Draft due date, committed on save
    """

    pending_text: str
    pending_due_date: Optional[date] = None


EditState = Union[Viewing, Editing]

VIEWING = Viewing()


@dataclass(frozen=True)
class Task:
    """Task model representing a single task item.

    Attributes:
        id: Identifier, unique within the owning list
        text: Task description
        completed: Whether the task is done
        due_date: Optional calendar due date
        edit_state: VIEWING, or an Editing draft
    """

    id: int
    text: str
    completed: bool = False
    due_date: Optional[date] = None
    edit_state: EditState = VIEWING

    @property
    def is_editing(self) -> bool:
        """Whether the task currently carries an Editing draft."""
        return isinstance(self.edit_state, Editing)


@dataclass(frozen=True)
class TaskList:
    """A named list of tasks, kept in insertion order."""

    id: int
    name: str
    tasks: Tuple[Task, ...] = ()

    def find_task(self, task_id: int) -> Optional[Task]:
        """Find a task of this list by id.

        Args:
            task_id: ID of the task to find

        Returns:
            The Task if found, None otherwise
        """
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None


@dataclass(frozen=True)
class StoreState:
    """Snapshot of the store.

    Attributes:
        task_lists: Every task list, in creation order
        selected_list_id: Id of the selected list, or None
    """

    task_lists: Tuple[TaskList, ...] = field(default_factory=tuple)
    selected_list_id: Optional[int] = None

    def find_list(self, list_id: Optional[int]) -> Optional[TaskList]:
        """Find a task list by id.

        Args:
            list_id: ID of the list to find; None never matches

        Returns:
            The TaskList if found, None otherwise
        """
        for task_list in self.task_lists:
            if task_list.id == list_id:
                return task_list
        return None

    @property
    def selected_list(self) -> Optional[TaskList]:
        """The selected TaskList, or None when nothing is selected."""
        return self.find_list(self.selected_list_id)
