"""Task list store.

This module provides the TaskStore class, which applies every state
transition of the task manager. Operations never mutate a snapshot: each
one takes a StoreState and returns a new StoreState. When an operation is
skipped (blank input, unknown list or task id) the very same StoreState
object is returned, so callers can detect "nothing changed" by identity.
"""

import time
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional, Sequence, Tuple, Union

from tasklists.models import (
    VIEWING,
    Editing,
    StoreState,
    Task,
    TaskFilter,
    TaskList,
)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()

DraftText = Union[str, _Unset]
DraftDueDate = Union[Optional[date], _Unset]


class IdClock:
    """Mints identifiers from the wall clock, in milliseconds.

    Ids are strictly increasing for the lifetime of the clock, even when
    several are requested within the same millisecond.
    """

    def __init__(self, source: Optional[Callable[[], float]] = None):
        self._source = source or time.time
        self._last = 0

    def next_id(self) -> int:
        candidate = int(self._source() * 1000)
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate


def _as_date(value: Optional[date]) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    return value


def navigate(ids: Sequence[int], current: Optional[int], step: int) -> Optional[int]:
    """Return the id `step` positions away from `current`.

    Movement stops at either end of the sequence. When `current` is not in
    the sequence, a forward step lands on the first id and a backward step
    on the last one.
    """
    if not ids:
        return None
    ids = list(ids)
    if current not in ids:
        return ids[0] if step >= 0 else ids[-1]
    index = ids.index(current) + step
    return ids[min(max(index, 0), len(ids) - 1)]


class TaskStore:
    """State transitions for task lists and their tasks.

    Attributes:
        clock: IdClock used to mint list and task ids
    """

    def __init__(self, clock: Optional[IdClock] = None):
        self.clock = clock or IdClock()

    # Task lists

    def add_task_list(self, state: StoreState, name: str) -> StoreState:
        """Append a new, empty task list named `name` (trimmed)."""
        name = name.strip()
        if not name:
            return state
        task_list = TaskList(id=self.clock.next_id(), name=name)
        return replace(state, task_lists=state.task_lists + (task_list,))

    def delete_task_list(self, state: StoreState, list_id: int) -> StoreState:
        """Remove a task list, clearing the selection if it was selected."""
        if state.find_list(list_id) is None:
            return state
        selected = state.selected_list_id
        return StoreState(
            task_lists=tuple(tl for tl in state.task_lists if tl.id != list_id),
            selected_list_id=None if selected == list_id else selected,
        )

    def select_task_list(self, state: StoreState, list_id: Optional[int]) -> StoreState:
        """Select a task list by id, or clear the selection with None."""
        if list_id is not None and state.find_list(list_id) is None:
            return state
        if state.selected_list_id == list_id:
            return state
        return replace(state, selected_list_id=list_id)

    def next_list(self, state: StoreState, step: int = 1) -> StoreState:
        """Move the selection `step` lists forward (negative for backward)."""
        ids = [tl.id for tl in state.task_lists]
        return self.select_task_list(state, navigate(ids, state.selected_list_id, step))

    # Tasks

    def add_task(
        self,
        state: StoreState,
        list_id: int,
        text: str,
        due_date: Optional[date] = None,
    ) -> StoreState:
        """Append a new pending task to the list `list_id`."""
        text = text.strip()
        task_list = state.find_list(list_id)
        if not text or task_list is None:
            return state
        task = Task(id=self.clock.next_id(), text=text, due_date=_as_date(due_date))
        return self._replace_list(state, replace(task_list, tasks=task_list.tasks + (task,)))

    def delete_task(self, state: StoreState, list_id: int, task_id: int) -> StoreState:
        task_list = state.find_list(list_id)
        if task_list is None or task_list.find_task(task_id) is None:
            return state
        tasks = tuple(t for t in task_list.tasks if t.id != task_id)
        return self._replace_list(state, replace(task_list, tasks=tasks))

    def toggle_completion(self, state: StoreState, list_id: int, task_id: int) -> StoreState:
        return self._update_task(
            state, list_id, task_id, lambda t: replace(t, completed=not t.completed)
        )

    # Editing

    def begin_edit(self, state: StoreState, list_id: int, task_id: int) -> StoreState:
        """Put a task into editing, seeding the draft from its committed values.

        Only one task in the store is edited at a time: any other task that
        is still editing goes back to viewing and loses its draft.
        """
        task_list = state.find_list(list_id)
        target = task_list.find_task(task_id) if task_list is not None else None
        if target is None or target.is_editing:
            return state

        def reset(task: Task) -> Task:
            if task is target:
                return replace(task, edit_state=Editing(task.text, task.due_date))
            if task.is_editing:
                return replace(task, edit_state=VIEWING)
            return task

        task_lists = tuple(
            replace(tl, tasks=tuple(reset(t) for t in tl.tasks)) for tl in state.task_lists
        )
        return replace(state, task_lists=task_lists)

    def update_draft(
        self,
        state: StoreState,
        list_id: int,
        task_id: int,
        text: DraftText = UNSET,
        due_date: DraftDueDate = UNSET,
    ) -> StoreState:
        """Change the draft of a task that is being edited.

        Omitted arguments leave the draft field as is; `due_date=None`
        clears the draft date.
        """

        def update(task: Task) -> Task:
            if not task.is_editing:
                return task
            draft = task.edit_state
            if text is not UNSET:
                draft = replace(draft, pending_text=text)
            if due_date is not UNSET:
                draft = replace(draft, pending_due_date=_as_date(due_date))
            if draft == task.edit_state:
                return task
            return replace(task, edit_state=draft)

        return self._update_task(state, list_id, task_id, update)

    def commit_edit(self, state: StoreState, list_id: int, task_id: int) -> StoreState:
        """Copy the draft into the committed fields and stop editing.

        A draft whose text is blank is not committed; the task stays in
        editing.
        """

        def commit(task: Task) -> Task:
            if not task.is_editing:
                return task
            draft = task.edit_state
            text = draft.pending_text.strip()
            if not text:
                return task
            return Task(
                id=task.id,
                text=text,
                completed=task.completed,
                due_date=draft.pending_due_date,
            )

        return self._update_task(state, list_id, task_id, commit)

    def cancel_edit(self, state: StoreState, list_id: int, task_id: int) -> StoreState:
        """Discard the draft without touching the committed fields."""
        return self._update_task(
            state,
            list_id,
            task_id,
            lambda t: replace(t, edit_state=VIEWING) if t.is_editing else t,
        )

    # Queries

    def filtered_tasks(
        self,
        state: StoreState,
        list_id: int,
        task_filter: TaskFilter = TaskFilter.ALL,
    ) -> Tuple[Task, ...]:
        """Return the tasks of a list matching `task_filter`.

        Tasks with a due date come first, latest date first; tasks without
        one follow. Ties keep insertion order.
        """
        task_list = state.find_list(list_id)
        if task_list is None:
            return ()

        if task_filter == TaskFilter.COMPLETED:
            tasks = [t for t in task_list.tasks if t.completed]
        elif task_filter == TaskFilter.PENDING:
            tasks = [t for t in task_list.tasks if not t.completed]
        else:
            tasks = list(task_list.tasks)

        dated = sorted(
            (t for t in tasks if t.due_date is not None),
            key=lambda t: t.due_date,
            reverse=True,
        )
        undated = [t for t in tasks if t.due_date is None]
        return tuple(dated + undated)

    def next_task(
        self,
        state: StoreState,
        list_id: int,
        current_task_id: Optional[int],
        step: int = 1,
        task_filter: TaskFilter = TaskFilter.ALL,
    ) -> Optional[int]:
        """Return the id of the neighbouring task in filtered order."""
        ids = [t.id for t in self.filtered_tasks(state, list_id, task_filter)]
        return navigate(ids, current_task_id, step)

    # Helpers

    @staticmethod
    def _replace_list(state: StoreState, task_list: TaskList) -> StoreState:
        task_lists = tuple(task_list if tl.id == task_list.id else tl for tl in state.task_lists)
        return replace(state, task_lists=task_lists)

    def _update_task(
        self,
        state: StoreState,
        list_id: int,
        task_id: int,
        update: Callable[[Task], Task],
    ) -> StoreState:
        task_list = state.find_list(list_id)
        task = task_list.find_task(task_id) if task_list is not None else None
        if task is None:
            return state
        updated = update(task)
        if updated is task:
            return state
        tasks = tuple(updated if t is task else t for t in task_list.tasks)
        return self._replace_list(state, replace(task_list, tasks=tasks))
