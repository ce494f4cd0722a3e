"""Demand Model — the persisted configuration graph.

Accounts own their workers. Demand lists and groups live in id-keyed
arenas and are referenced by UUID, never embedded.
"""

from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Set, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from arc_kernel.models.settings import KernelSettings


class ManagementMode(str, Enum):
    UNMANAGED = "unmanaged"
    STANDALONE = "standalone"
    GROUP_MEMBER = "group_member"


class ReplenishmentMode(str, Enum):
    ONE_TIME = "one_time"   # Countdown; an item is done once it hits zero.
    RESTOCK = "restock"     # Keep stock topped up to the target forever.


class PriorityPolicy(str, Enum):
    IN_ORDER = "in_order"   # Top to bottom
    BALANCED = "balanced"   # Lowest current stock first


class LineItem(BaseModel):
    """One queued item on a demand list."""

    item_id: int
    quantity: int                           # Remaining (ONE_TIME) or target stock (RESTOCK)
    internal_id: UUID = Field(default_factory=uuid4)


class DemandList(BaseModel):
    """A user-authored queue of items to collect."""

    list_id: UUID = Field(default_factory=uuid4)
    name: str
    mode: ReplenishmentMode = ReplenishmentMode.ONE_TIME
    priority: PriorityPolicy = PriorityPolicy.IN_ORDER
    count_storage: bool = False             # RESTOCK only: include third-party storage counts
    items: List[LineItem] = []

    def find_item(self, internal_id: UUID) -> Optional[LineItem]:
        return next((i for i in self.items if i.internal_id == internal_id), None)

    def icon(self) -> str:
        return "∞" if self.mode == ReplenishmentMode.RESTOCK else "①"


class Group(BaseModel):
    """Demand lists shared by every account in GROUP_MEMBER mode."""

    group_id: UUID = Field(default_factory=uuid4)
    name: str
    list_ids: List[UUID] = []


class _WorkerStats(BaseModel):
    name: str
    managed: bool = False                   # User opt-in, never touched by sync
    display_order: int = 0
    level: int = 0
    job: int = 0
    item_level: int = 0
    gathering: int = 0
    perception: int = 0
    has_venture: bool = False
    last_venture: int = 0
    quality: int = 0


class TrackedWorker(_WorkerStats):
    """A worker correlated with the external source by a stable id."""

    kind: Literal["tracked"] = "tracked"
    worker_id: int


class LegacyWorker(_WorkerStats):
    """
    A worker persisted before stable ids existed.

    Only correlatable by name; the next sync either upgrades it to a
    TrackedWorker or drops it.
    """

    kind: Literal["legacy"] = "legacy"


WorkerRecord = Annotated[Union[TrackedWorker, LegacyWorker], Field(discriminator="kind")]


class Account(BaseModel):
    """A player character owning workers and demand configuration."""

    account_id: int
    name: str
    world: str = ""
    mode: ManagementMode = ManagementMode.UNMANAGED
    group_id: Optional[UUID] = None         # Active only in GROUP_MEMBER mode
    list_ids: List[UUID] = []               # Active only in STANDALONE mode
    unlocked_items: Set[int] = set()
    task_currency: int = 0
    workers: List[WorkerRecord] = []

    def tracked_workers(self) -> List[TrackedWorker]:
        return [w for w in self.workers if isinstance(w, TrackedWorker)]

    def find_worker(self, worker_id: int) -> Optional[TrackedWorker]:
        return next(
            (w for w in self.tracked_workers() if w.worker_id == worker_id),
            None,
        )

    def __str__(self) -> str:
        return f"{self.name} @ {self.world}"


class KernelConfiguration(BaseModel):
    """The whole persisted model: accounts plus the list and group arenas."""

    version: int = 2
    accounts: Dict[int, Account] = {}
    demand_lists: Dict[UUID, DemandList] = {}
    groups: Dict[UUID, Group] = {}
    settings: KernelSettings = KernelSettings()
