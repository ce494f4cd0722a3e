"""Shared fixtures: a small venture catalog and one account with three workers."""

from dataclasses import dataclass
from typing import List

import pytest

from arc_kernel.catalog.ventures import VentureCatalog
from arc_kernel.config_store.store import ConfigurationStore
from arc_kernel.external.providers import (
    CollectingNotifier,
    InMemorySnapshotProvider,
    StaticExecutionSystem,
    StaticInventory,
)
from arc_kernel.models import (
    AccountSnapshot,
    KernelConfiguration,
    RewardTier,
    VentureCategory,
    VentureDefinition,
    WorkerSnapshot,
    WorkerStats,
)
from arc_kernel.planner.assignment import AssignmentPlanner
from arc_kernel.reconciler.sync import Reconciler

ACCOUNT_ID = 0x1000
MINER_ID = 0xA1
FIGHTER_ID = 0xA2
FISHER_ID = 0xA3

COBALT_ORE = 5111
IRON_ORE = 5112
DARKSTEEL_ORE = 5113
MAPLE_LOG = 5380
SILVER_LOBSTER = 4500
BOMB_ASH = 5525
WIND_SHARD = 5

DARKSTEEL_GATHERED_ID = 7001


def _gatherer_tiers(quantities, thresholds) -> List[RewardTier]:
    return [
        RewardTier(quantity=q, perception_gatherer=t)
        for q, t in zip(quantities, thresholds)
    ]


def make_catalog() -> VentureCatalog:
    ventures = [
        VentureDefinition(
            venture_id=100, item_id=COBALT_ORE, name="Cobalt Ore", level=50,
            category=VentureCategory.MINING, required_gathering=300,
            rewards=_gatherer_tiers([20, 40, 60, 80, 100], [0, 200, 300, 400, 500]),
        ),
        VentureDefinition(
            venture_id=101, item_id=IRON_ORE, name="Iron Ore", level=10,
            category=VentureCategory.MINING,
            rewards=_gatherer_tiers([10, 20, 30, 40, 50], [0, 50, 100, 150, 200]),
        ),
        VentureDefinition(
            venture_id=102, item_id=DARKSTEEL_ORE, name="Darksteel Ore", level=40,
            category=VentureCategory.MINING,
            rewards=_gatherer_tiers([5, 10, 15, 20, 25], [0, 50, 100, 150, 200]),
        ),
        VentureDefinition(
            venture_id=110, item_id=MAPLE_LOG, name="Maple Log", level=1,
            category=VentureCategory.BOTANY,
            rewards=_gatherer_tiers([30, 60, 90, 120, 150], [0, 10, 20, 30, 40]),
        ),
        VentureDefinition(
            venture_id=120, item_id=SILVER_LOBSTER, name="Silver Lobster", level=30,
            category=VentureCategory.FISHING, required_gathering=100,
            rewards=[
                RewardTier(quantity=q, perception_fisher=t)
                for q, t in zip([2, 3, 4, 5, 6], [0, 100, 150, 200, 250])
            ],
        ),
        VentureDefinition(
            venture_id=200, item_id=BOMB_ASH, name="Bomb Ash", level=1,
            category=VentureCategory.COMBAT, item_level_combat=10,
            rewards=[
                RewardTier(quantity=q, item_level_combat=t)
                for q, t in zip([6, 9, 12, 15, 18], [0, 50, 100, 150, 200])
            ],
        ),
        VentureDefinition(
            venture_id=201, item_id=WIND_SHARD, name="Wind Shard", level=1,
            category=VentureCategory.COMBAT,
            rewards=[RewardTier(quantity=120)],
        ),
    ]
    return VentureCatalog(ventures, collectibles={DARKSTEEL_ORE: DARKSTEEL_GATHERED_ID})


def make_account_snapshot(**overrides) -> AccountSnapshot:
    fields = dict(
        account_id=ACCOUNT_ID,
        name="Aria Stone",
        world="Twintania",
        task_currency=100,
        workers=[
            WorkerSnapshot(worker_id=MINER_ID, name="Mina", display_order=0, level=60, job=16),
            WorkerSnapshot(worker_id=FIGHTER_ID, name="Gunnar", display_order=1, level=60, job=1),
            WorkerSnapshot(worker_id=FISHER_ID, name="Fenna", display_order=2, level=60, job=18),
        ],
    )
    fields.update(overrides)
    return AccountSnapshot(**fields)


def make_provider(snapshot: AccountSnapshot = None) -> InMemorySnapshotProvider:
    provider = InMemorySnapshotProvider([snapshot or make_account_snapshot()])
    provider.set_stats(ACCOUNT_ID, "Mina", WorkerStats(gathering=400, perception=350))
    provider.set_stats(ACCOUNT_ID, "Gunnar", WorkerStats(item_level=120))
    provider.set_stats(ACCOUNT_ID, "Fenna", WorkerStats(gathering=150, perception=180))
    return provider


@dataclass
class Kernel:
    """Everything a planner test needs, already synced once."""

    store: ConfigurationStore
    catalog: VentureCatalog
    provider: InMemorySnapshotProvider
    inventory: StaticInventory
    execution: StaticExecutionSystem
    notifier: CollectingNotifier
    planner: AssignmentPlanner
    saves: List[KernelConfiguration]

    @property
    def account(self):
        return self.store.configuration.accounts[ACCOUNT_ID]

    def worker(self, worker_id: int):
        return self.account.find_worker(worker_id)

    def set_worker_snapshot(self, worker_id: int, **changes) -> None:
        """Change what the telemetry source reports for one worker."""
        snapshot = self.provider.snapshots[0]
        snapshot.workers = [
            w.model_copy(update=changes) if w.worker_id == worker_id else w
            for w in snapshot.workers
        ]


@pytest.fixture
def catalog() -> VentureCatalog:
    return make_catalog()


@pytest.fixture
def provider() -> InMemorySnapshotProvider:
    return make_provider()


@pytest.fixture
def kernel(catalog, provider) -> Kernel:
    saves: List[KernelConfiguration] = []
    store = ConfigurationStore(saver=lambda c: saves.append(c.model_copy(deep=True)))
    Reconciler(store.configuration, provider).reconcile(provider.get_snapshots())

    inventory = StaticInventory()
    execution = StaticExecutionSystem()
    notifier = CollectingNotifier()
    planner = AssignmentPlanner(
        store=store,
        catalog=catalog,
        snapshot_provider=provider,
        stats_provider=provider,
        inventory=inventory,
        execution=execution,
        notifier=notifier,
        storage=inventory,
    )
    return Kernel(
        store=store,
        catalog=catalog,
        provider=provider,
        inventory=inventory,
        execution=execution,
        notifier=notifier,
        planner=planner,
        saves=saves,
    )
