"""Task service — owner-scoped CRUD over personal to-do items.

Learn: Every method takes the caller's user id and every statement
filters on Task.owner_id == that id. A task that exists but belongs to
someone else is indistinguishable from one that doesn't exist: both
raise NotFoundOrForbidden.

Writes are single statements (UPDATE ... WHERE id AND owner_id, DELETE
... WHERE id AND owner_id), so each is atomic per row. Toggle flips the
status inside the UPDATE itself with a CASE expression; two concurrent
toggles are applied one after the other, never both from the same read.
Each write returns its own row via RETURNING, so a caller always sees
the state its statement produced.

A miss commits (nothing was written) instead of rolling back, so objects
already loaded in the session stay usable after NotFoundOrForbidden.

Status state machine:
  pending ⇄ completed   (via update or toggle, nothing else)
"""

import uuid
from typing import Optional, Union

import structlog
from sqlalchemy import case, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.db.models import TASK_STATUSES, Task
from tasktrack.errors import NotFoundOrForbidden, ValidationError

logger = structlog.get_logger()

TaskId = Union[uuid.UUID, str]


def _parse_task_id(task_id: TaskId) -> uuid.UUID:
    """Coerce a path id to UUID. Garbage ids simply don't match any task."""
    if isinstance(task_id, uuid.UUID):
        return task_id
    try:
        return uuid.UUID(str(task_id))
    except ValueError:
        raise NotFoundOrForbidden()


def _clean_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    return title


class TaskService:
    """Business logic for task CRUD, always scoped to one owner."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Read ────────────────────────────────────────────

    async def list_tasks(self, owner_id: uuid.UUID) -> list[Task]:
        """All of the owner's tasks, newest first. May be empty."""
        result = await self.db.execute(
            select(Task)
            .where(Task.owner_id == owner_id)
            .order_by(Task.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_task(self, owner_id: uuid.UUID, task_id: TaskId) -> Task:
        result = await self.db.execute(
            select(Task)
            .where(Task.id == _parse_task_id(task_id), Task.owner_id == owner_id)
            .execution_options(populate_existing=True)
        )
        task = result.scalars().first()
        if task is None:
            raise NotFoundOrForbidden()
        return task

    # ─── Create ──────────────────────────────────────────

    async def create_task(
        self,
        owner_id: uuid.UUID,
        title: str,
        description: Optional[str] = None,
    ) -> Task:
        """Create a task in 'pending' status, owned by owner_id."""
        task = Task(
            owner_id=owner_id,
            title=_clean_title(title),
            description=description or "",
            status="pending",
        )
        self.db.add(task)
        await self.db.commit()

        logger.info("task.created", task_id=str(task.id), owner_id=str(owner_id))
        return task

    # ─── Update ──────────────────────────────────────────

    async def update_task(
        self,
        owner_id: uuid.UUID,
        task_id: TaskId,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Task:
        """Partially update a task. Only non-None fields are applied."""
        changes = {}
        if title is not None:
            changes["title"] = _clean_title(title)
        if description is not None:
            changes["description"] = description
        if status is not None:
            if status not in TASK_STATUSES:
                raise ValidationError(
                    f"Status must be one of: {', '.join(TASK_STATUSES)}"
                )
            changes["status"] = status

        tid = _parse_task_id(task_id)
        if not changes:
            return await self.get_task(owner_id, tid)

        task = await self._apply(owner_id, tid, changes)
        logger.info(
            "task.updated", task_id=str(tid), fields=sorted(changes)
        )
        return task

    async def toggle_status(self, owner_id: uuid.UUID, task_id: TaskId) -> Task:
        """Flip pending ⇄ completed in one conditional UPDATE."""
        tid = _parse_task_id(task_id)
        flipped = case(
            (Task.status == "pending", "completed"),
            else_="pending",
        )
        task = await self._apply(owner_id, tid, {"status": flipped})
        logger.info("task.toggled", task_id=str(tid), status=task.status)
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, owner_id: uuid.UUID, task_id: TaskId) -> None:
        tid = _parse_task_id(task_id)
        result = await self.db.execute(
            delete(Task)
            .where(Task.id == tid, Task.owner_id == owner_id)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        if result.rowcount == 0:
            raise NotFoundOrForbidden()

        logger.info("task.deleted", task_id=str(tid))

    # ─── Helpers ─────────────────────────────────────────

    async def _apply(self, owner_id: uuid.UUID, task_id: uuid.UUID, values: dict) -> Task:
        """UPDATE one owned row and return it, or raise NotFoundOrForbidden."""
        result = await self.db.scalars(
            update(Task)
            .where(Task.id == task_id, Task.owner_id == owner_id)
            .values(**values)
            .returning(Task)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        task = result.first()
        await self.db.commit()
        if task is None:
            raise NotFoundOrForbidden()
        return task
