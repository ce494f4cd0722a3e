"""Kernel settings — user-tunable behaviour of the planner."""

from pydantic import BaseModel, Field

QUICK_VENTURE_ID = 395


class KernelSettings(BaseModel):
    """Configuration for the Assignment Planner."""

    filler_venture_id: int = QUICK_VENTURE_ID
    min_task_reserve: int = Field(ge=0, le=65000, default=0)
    show_assignment_messages: bool = True
