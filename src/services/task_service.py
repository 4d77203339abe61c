import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from taskmind.metrics import TASKS_CREATED_TOTAL
from enrichment.task_enricher import TaskEnricher
from storage.task_store import TaskStore
from taskmind.errors import EnrichmentError, NotFoundError
from taskmind.models import DEFAULT_CATEGORY, DEFAULT_PRIORITY, CategoryCount, Task, TaskPatch

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"


class TaskService:
    """Task CRUD for one authenticated account, plus the AI-assisted operations.

    Ownership is checked here: a task that exists but belongs to someone
    else is reported exactly like a missing one.
    """

    def __init__(self, tasks: TaskStore, enricher: TaskEnricher):
        self.tasks = tasks
        self.enricher = enricher

    async def get_owned(self, owner_id: int, task_id: int) -> Task:
        task = await self.tasks.get(task_id)
        if task is None or task.user_id != owner_id:
            raise NotFoundError()
        return task

    async def create(
        self,
        owner_id: int,
        title: str,
        description: str = "",
        due_date: Optional[datetime] = None,
    ) -> Task:
        # Both calls always settle; failures and timeouts come back as None.
        category, priority = await asyncio.gather(
            self.enricher.categorize(title, description),
            self.enricher.suggest_priority(title, description),
        )

        task = await self.tasks.create(
            owner_id,
            title,
            description,
            category or DEFAULT_CATEGORY,
            priority or DEFAULT_PRIORITY,
            due_date,
        )
        logger.info(
            f"Created task {task.id} for account {owner_id} "
            f"(category={task.category}, priority={task.priority})"
        )

        try:
            TASKS_CREATED_TOTAL.inc()
        except Exception:
            pass

        return task

    async def list(self, owner_id: int) -> List[Task]:
        return await self.tasks.list_for_owner(owner_id)

    async def update(self, owner_id: int, task_id: int, patch: Dict[str, Any]) -> Task:
        task = await self.get_owned(owner_id, task_id)
        changes = TaskPatch.model_validate(patch).changes()
        if not changes:
            return task

        updated = await self.tasks.update(task_id, changes)
        if updated is None:
            # deleted between the ownership check and the write
            raise NotFoundError()
        return updated

    async def delete(self, owner_id: int, task_id: int) -> dict:
        await self.get_owned(owner_id, task_id)
        await self.tasks.delete(task_id)
        logger.info(f"Deleted task {task_id} for account {owner_id}")
        return {"success": True}

    async def predict_time(self, owner_id: int, task_id: int) -> Optional[float]:
        task = await self.get_owned(owner_id, task_id)
        estimate = await self.enricher.estimate_hours(task.title, task.description)
        if estimate is not None:
            await self.tasks.update(task_id, {"estimated_time_hours": estimate})
        return estimate

    async def generate_procedure(self, owner_id: int, task_id: int) -> str:
        task = await self.get_owned(owner_id, task_id)
        logger.info(f"Generating procedure for task {task_id}")

        procedure = await self.enricher.generate_procedure(task.title, task.description)
        if procedure is None:
            raise EnrichmentError()
        return procedure

    async def category_counts(self, owner_id: int) -> List[CategoryCount]:
        counts: Dict[str, int] = {}
        for task in await self.list(owner_id):
            category = task.category or UNCATEGORIZED
            counts[category] = counts.get(category, 0) + 1
        return [CategoryCount(category=c, count=n) for c, n in counts.items()]
