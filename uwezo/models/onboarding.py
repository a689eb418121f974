"""
Onboarding Task Models.

``OnboardingTask`` is a static catalog entry (``tasks`` table),
``UserTaskState`` is the per-user completion record (``user_tasks``), and
``TaskWithProgress`` is the merged view the tracker caches and the UI
renders.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import BaseModel, Field

from uwezo.models.enums import TaskType

__all__ = [
    "DEFAULT_TASKS",
    "OnboardingTask",
    "TaskProgress",
    "TaskWithProgress",
    "UserTaskState",
    "progress_percentage",
]


class OnboardingTask(BaseModel):
    """Catalog entry.  Immutable at runtime."""

    id: str
    title: str
    description: str = ""
    task_type: TaskType
    is_required: bool = True
    order_index: int = 0

    model_config = {"from_attributes": True, "frozen": True}


class UserTaskState(BaseModel):
    """Per-user, per-task completion record.

    ``completed_at`` is ``None`` whenever ``completed`` is ``False``.
    Timestamps are ISO-8601 strings, matching what Supabase returns.
    """

    id: str
    user_id: str
    task_id: str
    completed: bool = False
    completed_at: Optional[str] = None
    metadata: dict[str, object] = Field(default_factory=dict)
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class TaskWithProgress(BaseModel):
    """A catalog entry merged with the current user's completion state."""

    id: str
    title: str
    description: str = ""
    task_type: TaskType
    is_required: bool = True
    order_index: int = 0
    completed: bool = False
    user_task: Optional[UserTaskState] = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_task(
        cls, task: OnboardingTask, state: Optional[UserTaskState] = None,
    ) -> "TaskWithProgress":
        return cls(
            **task.model_dump(),
            completed=state.completed if state is not None else False,
            user_task=state,
        )


class TaskProgress(BaseModel):
    """Aggregate completion figures for the onboarding checklist."""

    completed: int
    total: int
    percentage: int


def progress_percentage(completed: int, total: int) -> int:
    """Return ``round(100 * completed / total)`` with halves rounded up.

    Python's ``round`` uses banker's rounding (``round(12.5) == 12``),
    so the computation goes through ``Decimal`` with ``ROUND_HALF_UP``.
    Returns ``0`` for an empty checklist.
    """
    if total <= 0:
        return 0
    ratio = Decimal(100 * completed) / Decimal(total)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Built-in catalog, used when no remote catalog is available.
# ---------------------------------------------------------------------------

DEFAULT_TASKS: tuple[OnboardingTask, ...] = (
    OnboardingTask(
        id="1",
        title="Review and Sign NDA",
        description="Review and sign the Non-Disclosure Agreement",
        task_type=TaskType.NDA,
        order_index=1,
    ),
    OnboardingTask(
        id="2",
        title="Sign Employment Contract",
        description="Review and sign your employment contract",
        task_type=TaskType.CONTRACT,
        order_index=2,
    ),
    OnboardingTask(
        id="3",
        title="Upload CV for Skill Analysis",
        description="Upload your CV for AI-powered skill analysis",
        task_type=TaskType.CV_ANALYSIS,
        order_index=3,
    ),
    OnboardingTask(
        id="4",
        title="Complete Profile Information",
        description="Fill in your complete profile information",
        task_type=TaskType.FORM,
        order_index=4,
    ),
    OnboardingTask(
        id="5",
        title="Take the Aptitude Quiz",
        description="Complete the aptitude assessment quiz",
        task_type=TaskType.QUIZ,
        order_index=5,
    ),
    OnboardingTask(
        id="6",
        title="Record a Video Introduction",
        description="Record a brief video introduction",
        task_type=TaskType.VIDEO_INTRO,
        order_index=6,
    ),
    OnboardingTask(
        id="7",
        title="Meet your onboarding buddy",
        description="Connect with your assigned onboarding buddy",
        task_type=TaskType.CHAT,
        order_index=7,
    ),
)
