import logging
from typing import List

from fastapi import APIRouter, Depends

from api.dependencies import get_current_account, get_task_service
from services.task_service import TaskService
from taskmind.models import (
    Account,
    CategoryCount,
    EstimateOut,
    ProcedureOut,
    Task,
    TaskCreate,
    TaskPatch,
)

router = APIRouter(prefix="/tasks", tags=["tasks"])
logger = logging.getLogger(__name__)


@router.post("", response_model=Task)
async def create_task(
    payload: TaskCreate,
    account: Account = Depends(get_current_account),
    service: TaskService = Depends(get_task_service),
) -> Task:
    """Create a task; category and priority are suggested by the LLM."""
    return await service.create(
        account.id, payload.title, payload.description, payload.due_date
    )


@router.get("", response_model=List[Task])
async def list_tasks(
    account: Account = Depends(get_current_account),
    service: TaskService = Depends(get_task_service),
) -> List[Task]:
    """Caller's tasks by due date, undated last."""
    return await service.list(account.id)


@router.get("/stats/categories", response_model=List[CategoryCount])
async def category_stats(
    account: Account = Depends(get_current_account),
    service: TaskService = Depends(get_task_service),
) -> List[CategoryCount]:
    """Task counts per category, for the dashboard chart."""
    return await service.category_counts(account.id)


@router.put("/{task_id}", response_model=Task)
async def update_task(
    task_id: int,
    payload: TaskPatch,
    account: Account = Depends(get_current_account),
    service: TaskService = Depends(get_task_service),
) -> Task:
    return await service.update(account.id, task_id, payload.changes())


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    account: Account = Depends(get_current_account),
    service: TaskService = Depends(get_task_service),
) -> dict:
    return await service.delete(account.id, task_id)


@router.post("/{task_id}/predict-time", response_model=EstimateOut)
async def predict_time(
    task_id: int,
    account: Account = Depends(get_current_account),
    service: TaskService = Depends(get_task_service),
) -> EstimateOut:
    estimate = await service.predict_time(account.id, task_id)
    return EstimateOut(estimate=estimate)


@router.post("/{task_id}/generate-procedure", response_model=ProcedureOut)
async def generate_procedure(
    task_id: int,
    account: Account = Depends(get_current_account),
    service: TaskService = Depends(get_task_service),
) -> ProcedureOut:
    procedure = await service.generate_procedure(account.id, task_id)
    return ProcedureOut(procedure=procedure)
