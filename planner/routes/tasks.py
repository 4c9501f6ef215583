"""Task API router: CRUD, per-day listing and weekly statistics."""

from datetime import date as date_cls
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from planner.app.schemas import Task, TaskCreate, TaskStats, TaskUpdate, WeekDay, WeekOverview
from planner.app.task_stats import week_bounds, week_days
from planner.deps import get_task_store
from planner.ports.task_store import ITaskStore

router = APIRouter(prefix="/tasks")


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Task not found")


@router.get("", response_model=list[Task])
def list_tasks(
    date: Optional[str] = Query(default=None),
    store: ITaskStore = Depends(get_task_store),
):
    """List all tasks, or only the tasks of one day when ``date`` is given."""

    return store.list_tasks(date)


@router.get("/stats", response_model=TaskStats)
def weekly_stats(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    store: ITaskStore = Depends(get_task_store),
):
    if not start_date or not end_date:
        raise HTTPException(status_code=400, detail="startDate and endDate are required")
    return store.weekly_stats(start_date, end_date)


@router.get("/week", response_model=WeekOverview)
def week_overview(
    date: Optional[str] = Query(default=None),
    store: ITaskStore = Depends(get_task_store),
):
    """
    Sunday-to-Saturday week containing ``date`` (today when omitted):
    tasks grouped per day plus the week's completion counts.
    """

    try:
        day = date_cls.fromisoformat(date) if date else date_cls.today()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="date must be YYYY-MM-DD") from exc

    start_date, end_date = week_bounds(day)
    days = [WeekDay(date=iso_day, tasks=store.list_tasks(iso_day)) for iso_day in week_days(day)]
    return WeekOverview(
        start_date=start_date,
        end_date=end_date,
        days=days,
        stats=store.weekly_stats(start_date, end_date),
    )


@router.get("/{task_id}", response_model=Task)
def get_task(task_id: str, store: ITaskStore = Depends(get_task_store)):
    task = store.get_task(task_id)
    if not task:
        raise _not_found()
    return task


@router.post("", response_model=Task, status_code=201)
def create_task(payload: TaskCreate, store: ITaskStore = Depends(get_task_store)):
    return store.create_task(payload)


@router.patch("/{task_id}", response_model=Task)
def update_task(task_id: str, patch: TaskUpdate, store: ITaskStore = Depends(get_task_store)):
    """Apply a merge patch; omitted fields keep their stored values."""

    task = store.update_task(task_id, patch)
    if not task:
        raise _not_found()
    return task


@router.delete("/{task_id}", status_code=204)
def delete_task(task_id: str, store: ITaskStore = Depends(get_task_store)):
    if not store.delete_task(task_id):
        raise _not_found()
    return Response(status_code=204)


__all__ = ["router"]
