"""External facts — what the live telemetry source reports each cycle."""

from typing import List, Set

from pydantic import BaseModel


class WorkerSnapshot(BaseModel):
    """A worker as reported by the external source."""

    worker_id: int
    name: str
    display_order: int = 0
    level: int = 0
    job: int = 0
    has_venture: bool = False
    venture_id: int = 0


class WorkerStats(BaseModel):
    """Supplemental per-worker stats, keyed by (account id, worker name)."""

    item_level: int = 0
    gathering: int = 0
    perception: int = 0


class AccountSnapshot(BaseModel):
    """An account as reported by the external source."""

    account_id: int
    name: str
    world: str = ""
    excluded: bool = False
    unlocked_items: Set[int] = set()
    task_currency: int = 0
    workers: List[WorkerSnapshot] = []
