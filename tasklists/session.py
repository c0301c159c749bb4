"""Task manager session.

TaskManager holds the current StoreState, routes every operation through
TaskStore and runs the persistence hook on the snapshot it gets back.
"""

import logging
from datetime import date
from typing import Optional, Tuple

from tasklists.models import StoreState, Task, TaskFilter
from tasklists.persistence import PersistenceBridge
from tasklists.store import UNSET, DraftDueDate, DraftText, TaskStore

logger = logging.getLogger(__name__)


class TaskManager:
    """Current task list state plus its write-back to storage.

    Attributes:
        bridge: PersistenceBridge used to load and persist task lists
        store: TaskStore applying the state transitions
        state: The most recent snapshot
    """

    def __init__(self, bridge: PersistenceBridge, store: Optional[TaskStore] = None):
        self.bridge = bridge
        self.store = store or TaskStore()
        self.state = StoreState()

    @classmethod
    def open(cls, bridge: PersistenceBridge, store: Optional[TaskStore] = None) -> "TaskManager":
        """Create a manager and load the persisted task lists into it."""
        manager = cls(bridge, store)
        manager.load()
        return manager

    def load(self) -> StoreState:
        """Replace the current task lists with the persisted ones."""
        self.state = StoreState(task_lists=self.bridge.load())
        return self.state

    def apply(self, new_state: StoreState) -> StoreState:
        """Make `new_state` current and persist it if its task lists changed."""
        previous = self.state
        self.state = new_state
        if new_state is not previous and new_state.task_lists != previous.task_lists:
            self.bridge.persist(new_state.task_lists)
        return new_state

    # Task lists

    def add_task_list(self, name: str) -> StoreState:
        return self.apply(self.store.add_task_list(self.state, name))

    def delete_task_list(self, list_id: int) -> StoreState:
        return self.apply(self.store.delete_task_list(self.state, list_id))

    def select_task_list(self, list_id: Optional[int]) -> StoreState:
        return self.apply(self.store.select_task_list(self.state, list_id))

    def next_list(self, step: int = 1) -> StoreState:
        return self.apply(self.store.next_list(self.state, step))

    # Tasks

    def add_task(self, list_id: int, text: str, due_date: Optional[date] = None) -> StoreState:
        return self.apply(self.store.add_task(self.state, list_id, text, due_date))

    def delete_task(self, list_id: int, task_id: int) -> StoreState:
        return self.apply(self.store.delete_task(self.state, list_id, task_id))

    def toggle_completion(self, list_id: int, task_id: int) -> StoreState:
        return self.apply(self.store.toggle_completion(self.state, list_id, task_id))

    def begin_edit(self, list_id: int, task_id: int) -> StoreState:
        return self.apply(self.store.begin_edit(self.state, list_id, task_id))

    def update_draft(
        self,
        list_id: int,
        task_id: int,
        text: DraftText = UNSET,
        due_date: DraftDueDate = UNSET,
    ) -> StoreState:
        return self.apply(
            self.store.update_draft(self.state, list_id, task_id, text=text, due_date=due_date)
        )

    def commit_edit(self, list_id: int, task_id: int) -> StoreState:
        return self.apply(self.store.commit_edit(self.state, list_id, task_id))

    def cancel_edit(self, list_id: int, task_id: int) -> StoreState:
        return self.apply(self.store.cancel_edit(self.state, list_id, task_id))

    # Queries

    def filtered_tasks(
        self, list_id: int, task_filter: TaskFilter = TaskFilter.ALL
    ) -> Tuple[Task, ...]:
        return self.store.filtered_tasks(self.state, list_id, task_filter)
