"""Task API routes.

Learn: These routes are the HTTP interface to TaskService. The service
handles validation and the ownership filter; routes just translate HTTP
to service calls. Errors surface as TaskTrackError subclasses and are
turned into responses by the handlers in tasktrack.errors.

Key patterns:
- task ids are taken as plain strings; a malformed id is just a task
  you can't see (404), not a 400
- PUT is a partial update (any subset of title/description/status)
- PATCH /toggle flips status without the client sending the new value
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.auth.dependencies import CurrentIdentity, get_current_user
from tasktrack.db.engine import get_db
from tasktrack.schemas.task import MessageResponse, TaskCreate, TaskRead, TaskUpdate
from tasktrack.services.task_service import TaskService

router = APIRouter(prefix="/tasks")


def _task_svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.get("", response_model=list[TaskRead])
async def list_tasks(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """List the caller's tasks, newest first."""
    return await svc.list_tasks(identity.user_id)


@router.post("", response_model=TaskRead, status_code=201)
async def create_task(
    body: TaskCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Create a new task in 'pending' status."""
    return await svc.create_task(
        identity.user_id,
        title=body.title,
        description=body.description,
    )


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: str,
    body: TaskUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Partially update a task (title, description, status)."""
    return await svc.update_task(
        identity.user_id,
        task_id,
        title=body.title,
        description=body.description,
        status=body.status,
    )


@router.patch("/{task_id}/toggle", response_model=TaskRead)
async def toggle_task(
    task_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Flip a task between 'pending' and 'completed'."""
    return await svc.toggle_status(identity.user_id, task_id)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Delete a task."""
    await svc.delete_task(identity.user_id, task_id)
    return {"message": "Task deleted successfully"}
