"""
Farm task lists.
"""

from __future__ import annotations

import logging
from typing import Optional

from crowelogic.records import Task, TaskDraft, TaskPatch, new_id, now_ms
from crowelogic.repository import HashRepository

logger = logging.getLogger(__name__)

STATUS_RANK = {"pending": 0, "in-progress": 1, "completed": 2}
PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}


def task_sort_key(task: Task) -> tuple:
    """
    Order by status, then priority, then due date (tasks with a due date
    first, earliest first), then creation time.
    """
    has_due_date = task.due_date is not None
    return (
        STATUS_RANK[task.status],
        PRIORITY_RANK[task.priority],
        not has_due_date,
        task.due_date if has_due_date else 0,
        task.created_at,
    )


class TaskRepository(HashRepository[Task]):
    prefix = "tasks"
    record_type = Task

    async def create_task(self, draft: TaskDraft) -> Task:
        now = now_ms()
        task = Task(
            id=new_id(),
            **draft.model_dump(),
            created_at=now,
            updated_at=now,
        )
        await self._save(task.user_id, task)
        logger.debug("Created task %s for %s", task.id, task.user_id)
        return task

    async def get_task(self, user_id: str, task_id: str) -> Optional[Task]:
        return await self._load(user_id, task_id)

    async def update_task(
        self, user_id: str, task_id: str, patch: TaskPatch
    ) -> Optional[Task]:
        return await self._update(user_id, task_id, patch)

    async def get_user_tasks(self, user_id: str) -> list[Task]:
        tasks = await self._load_all(user_id)
        return sorted(tasks, key=task_sort_key)
