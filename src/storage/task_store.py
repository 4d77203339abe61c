"""
Task persistence.

Both backends return tasks for an owner ordered by due date ascending with
undated tasks last, ties broken by id. Every write is a single statement;
concurrent updates to one task are last-write-wins.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import asyncpg

from storage import db
from taskmind.errors import StoreError
from taskmind.models import Task, TaskPatch

logger = logging.getLogger(__name__)

TASK_COLUMNS = (
    "id, user_id, title, description, category, priority, "
    "estimated_time_hours, due_date, completed, created_at, updated_at"
)

# Columns a patch may touch; keys come from TaskPatch, never from raw input.
UPDATABLE_COLUMNS = tuple(TaskPatch.model_fields)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken to be UTC, matching how asyncpg stores them."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _sort_key(task: Task):
    return (task.due_date is None, task.due_date or datetime.min.replace(tzinfo=timezone.utc), task.id)


class TaskStore(ABC):
    @abstractmethod
    async def create(
        self,
        owner_id: int,
        title: str,
        description: str,
        category: str,
        priority: str,
        due_date: Optional[datetime],
    ) -> Task:
        raise NotImplementedError

    @abstractmethod
    async def get(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    @abstractmethod
    async def list_for_owner(self, owner_id: int) -> List[Task]:
        raise NotImplementedError

    @abstractmethod
    async def update(self, task_id: int, changes: Dict[str, Any]) -> Optional[Task]:
        """Overwrite the given columns; None if the task vanished meanwhile."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, task_id: int) -> None:
        raise NotImplementedError


class InMemoryTaskStore(TaskStore):
    def __init__(self):
        self._tasks: Dict[int, Task] = {}
        self._ids = itertools.count(1)

    async def create(self, owner_id, title, description, category, priority, due_date) -> Task:
        now = datetime.now(timezone.utc)
        task = Task(
            id=next(self._ids),
            user_id=owner_id,
            title=title,
            description=description,
            category=category,
            priority=priority,
            due_date=as_utc(due_date),
            created_at=now,
            updated_at=now,
        )
        self._tasks[task.id] = task
        return task

    async def get(self, task_id: int) -> Optional[Task]:
        return self._tasks.get(task_id)

    async def list_for_owner(self, owner_id: int) -> List[Task]:
        owned = [t for t in self._tasks.values() if t.user_id == owner_id]
        return sorted(owned, key=_sort_key)

    async def update(self, task_id: int, changes: Dict[str, Any]) -> Optional[Task]:
        task = self._tasks.get(task_id)
        if task is None:
            return None
        changes = {k: v for k, v in changes.items() if k in UPDATABLE_COLUMNS}
        if "due_date" in changes:
            changes["due_date"] = as_utc(changes["due_date"])
        updated = Task.model_validate(
            {**task.model_dump(), **changes, "updated_at": datetime.now(timezone.utc)}
        )
        self._tasks[task_id] = updated
        return updated

    async def delete(self, task_id: int) -> None:
        self._tasks.pop(task_id, None)


class PostgresTaskStore(TaskStore):
    async def create(self, owner_id, title, description, category, priority, due_date) -> Task:
        query = f"""
            INSERT INTO tasks (user_id, title, description, category, priority, due_date)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING {TASK_COLUMNS}
        """
        try:
            row = await db.fetchrow(
                query, owner_id, title, description, category, priority, as_utc(due_date)
            )
        except asyncpg.PostgresError as e:
            logger.error(f"Failed to insert task for account {owner_id}: {e}")
            raise StoreError(str(e)) from e
        return Task(**dict(row))

    async def get(self, task_id: int) -> Optional[Task]:
        try:
            row = await db.fetchrow(f"SELECT {TASK_COLUMNS} FROM tasks WHERE id = $1", task_id)
        except asyncpg.PostgresError as e:
            raise StoreError(str(e)) from e
        return Task(**dict(row)) if row else None

    async def list_for_owner(self, owner_id: int) -> List[Task]:
        query = f"""
            SELECT {TASK_COLUMNS} FROM tasks
            WHERE user_id = $1
            ORDER BY due_date ASC NULLS LAST, id ASC
        """
        try:
            rows = await db.fetch(query, owner_id)
        except asyncpg.PostgresError as e:
            raise StoreError(str(e)) from e
        return [Task(**dict(r)) for r in rows]

    async def update(self, task_id: int, changes: Dict[str, Any]) -> Optional[Task]:
        columns = [k for k in changes if k in UPDATABLE_COLUMNS]
        if not columns:
            return await self.get(task_id)

        values = [as_utc(changes[c]) if c == "due_date" else changes[c] for c in columns]
        assignments = ", ".join(f"{c} = ${i}" for i, c in enumerate(columns, start=2))
        query = f"""
            UPDATE tasks SET {assignments}, updated_at = NOW()
            WHERE id = $1
            RETURNING {TASK_COLUMNS}
        """
        try:
            row = await db.fetchrow(query, task_id, *values)
        except asyncpg.PostgresError as e:
            logger.error(f"Failed to update task {task_id}: {e}")
            raise StoreError(str(e)) from e
        return Task(**dict(row)) if row else None

    async def delete(self, task_id: int) -> None:
        try:
            await db.execute("DELETE FROM tasks WHERE id = $1", task_id)
        except asyncpg.PostgresError as e:
            raise StoreError(str(e)) from e
