"""
Assignment Planner — picks the next venture for a worker.

States:
  GATED -> RECONCILE -> (INSUFFICIENT_CURRENCY | SCAN_LISTS) -> (ASSIGN | FALLBACK)

Scanning is strictly first-fit: lists in declared order, and within a list
the computed candidate order. The first candidate the worker can earn a
reward for wins, even if a later one would yield more.

With dry_run=True the planner works on a deep copy of the configuration,
so neither reconciled facts nor assignment bookkeeping are written.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from arc_kernel.catalog.ventures import VentureCatalog
from arc_kernel.config_store.store import ConfigurationStore, effective_lists
from arc_kernel.external.providers import (
    ExecutionSystem,
    InventoryProvider,
    Notifier,
    SnapshotProvider,
    StorageInventoryProvider,
    WorkerStatsProvider,
)
from arc_kernel.models.catalog import RewardTier, VentureDefinition
from arc_kernel.models.configuration import (
    Account,
    DemandList,
    KernelConfiguration,
    LineItem,
    ManagementMode,
    PriorityPolicy,
    ReplenishmentMode,
    TrackedWorker,
)
from arc_kernel.planner.in_progress import InProgressEstimator
from arc_kernel.reconciler.sync import Reconciler
from arc_kernel.resolver.venture import VentureResolver

logger = logging.getLogger(__name__)

FILLER_VENTURE_NAME = "Quick Venture"


@dataclass
class StockedItem:
    """A candidate line item together with its current stock."""

    item: LineItem
    stock: int

    @property
    def item_id(self) -> int:
        return self.item.item_id


@dataclass
class PlanPreview:
    """What plan_next would do right now, without doing it."""

    venture_id: Optional[int]
    description: str

    def to_dict(self) -> dict:
        return {"venture_id": self.venture_id, "description": self.description}


def format_assignment(
    worker_name: str, venture: VentureDefinition, reward: RewardTier, demand_list: DemandList
) -> str:
    return (
        f"Sending worker {worker_name} to collect {reward.quantity}x {venture.name} "
        f"for {demand_list.name} {demand_list.icon()}."
    )


def format_end_of_list(worker_name: str) -> str:
    return f"No tasks left for worker {worker_name}, sending to {FILLER_VENTURE_NAME}."


class AssignmentPlanner:
    """Chooses ventures from an account's demand lists."""

    def __init__(
        self,
        store: ConfigurationStore,
        catalog: VentureCatalog,
        snapshot_provider: SnapshotProvider,
        stats_provider: WorkerStatsProvider,
        inventory: InventoryProvider,
        execution: ExecutionSystem,
        notifier: Notifier,
        storage: Optional[StorageInventoryProvider] = None,
    ):
        self.store = store
        self.catalog = catalog
        self.snapshot_provider = snapshot_provider
        self.stats_provider = stats_provider
        self.inventory = inventory
        self.execution = execution
        self.notifier = notifier
        self.storage = storage
        self.resolver = VentureResolver(catalog)
        self.estimator = InProgressEstimator(catalog, self.resolver)

    def plan_next(self, account_id: int, worker_id: int, dry_run: bool = False) -> Optional[int]:
        """
        Return the venture id to send the worker on, or None to leave the
        worker's current assignment alone.
        """
        if not self.execution.should_reassign():
            logger.info("Execution system is configured to not reassign ventures, not checking any lists")
            return None

        if dry_run:
            config = self.store.configuration.model_copy(deep=True)
        else:
            config = self.store.configuration

        account = config.accounts.get(account_id)
        if account is None:
            logger.info("No account information found for %X", account_id)
            return None
        if account.mode == ManagementMode.UNMANAGED:
            logger.info("Account %s is not managed", account)
            return None

        worker = account.find_worker(worker_id)
        if worker is None:
            logger.info("No worker information found for %X", worker_id)
            return None
        if not worker.managed:
            logger.info("Worker %s is not managed", worker.name)
            return None

        logger.info("Checking tasks for %s...", worker.name)
        reconciled = Reconciler(config, self.stats_provider).reconcile(
            self.snapshot_provider.get_snapshots()
        )
        if reconciled.changed and not dry_run:
            self.store.save()

        # Reconcile may have replaced or pruned the records we looked up.
        account = config.accounts[account_id]
        worker = account.find_worker(worker_id)
        if worker is None:
            logger.info("Worker %X disappeared during sync", worker_id)
            return None

        settings = config.settings
        if account.task_currency == 0:
            logger.warning(
                "Could not assign a venture from any list, %s has no ventures left", account
            )
        elif account.task_currency <= settings.min_task_reserve:
            logger.warning(
                "Could not assign a venture from any list, %s only has %d left, "
                "configured to only send out above %d",
                account,
                account.task_currency,
                settings.min_task_reserve,
            )
        else:
            lists = effective_lists(config, account)
            if lists is None:
                return None

            venture_id = self._scan_lists(config, account, worker, lists, dry_run)
            if venture_id is not None:
                return venture_id

        return self._fallback(worker, settings.filler_venture_id, dry_run)

    def preview(self, account_id: int, worker_id: int) -> PlanPreview:
        """Dry-run plan_next and describe the outcome."""
        venture_id = self.plan_next(account_id, worker_id, dry_run=True)
        filler_id = self.store.configuration.settings.filler_venture_id
        if venture_id is None:
            description = "(none)"
        elif venture_id == filler_id:
            description = FILLER_VENTURE_NAME
        else:
            venture = self.catalog.get(venture_id)
            description = venture.name if venture else str(venture_id)
        return PlanPreview(venture_id=venture_id, description=description)

    def _scan_lists(
        self,
        config: KernelConfiguration,
        account: Account,
        worker: TrackedWorker,
        lists: List[DemandList],
        dry_run: bool,
    ) -> Optional[int]:
        in_progress = self.estimator.estimate(account)

        for demand_list in lists:
            logger.info("Checking ventures in list '%s'", demand_list.name)
            candidates = self._candidates(account, demand_list, in_progress)
            logger.debug("Found %d to-do items on current list", len(candidates))

            for candidate in candidates:
                logger.debug("Checking venture info for item %d", candidate.item_id)
                resolution = self.resolver.resolve(account, worker, candidate.item_id)
                if resolution.venture is None:
                    logger.debug("Worker doesn't know how to gather item %d", candidate.item_id)
                    continue
                if resolution.reward is None:
                    logger.debug("Worker can't complete venture '%s'", resolution.venture.name)
                    continue

                venture, reward = resolution
                if config.settings.show_assignment_messages or dry_run:
                    self.notifier.notify(format_assignment(worker.name, venture, reward, demand_list))
                logger.info(
                    "Using venture %d, which should retrieve %dx %s",
                    venture.venture_id,
                    reward.quantity,
                    venture.name,
                )

                if not dry_run:
                    worker.has_venture = True
                    worker.last_venture = venture.venture_id
                    if demand_list.mode == ReplenishmentMode.ONE_TIME:
                        candidate.item.quantity = max(0, candidate.item.quantity - reward.quantity)
                    self.store.save()

                return venture.venture_id

        return None

    def _candidates(
        self, account: Account, demand_list: DemandList, in_progress: Dict[int, int]
    ) -> List[StockedItem]:
        if demand_list.mode == ReplenishmentMode.ONE_TIME:
            return [StockedItem(item=i, stock=0) for i in demand_list.items if i.quantity > 0]

        stocked = []
        for item in demand_list.items:
            stock = self.inventory.get_item_count(item.item_id) + in_progress.get(item.item_id, 0)
            if demand_list.count_storage and self.storage is not None:
                stock += sum(
                    self.storage.get_storage_count(w.worker_id, item.item_id)
                    for w in account.tracked_workers()
                )
            if stock < item.quantity:
                stocked.append(StockedItem(item=item, stock=stock))

        # Collect the items with the least current stock first.
        if demand_list.priority == PriorityPolicy.BALANCED:
            stocked.sort(key=lambda s: s.stock)
        return stocked

    def _fallback(self, worker: TrackedWorker, filler_id: int, dry_run: bool) -> Optional[int]:
        if worker.last_venture == filler_id:
            logger.info("Not changing venture, already a %s", FILLER_VENTURE_NAME)
            return None

        self.notifier.notify(format_end_of_list(worker.name))
        logger.info("No tasks left (previous venture = %d), using %s", worker.last_venture, FILLER_VENTURE_NAME)
        if not dry_run:
            worker.has_venture = True
            worker.last_venture = filler_id
            self.store.save()
        return filler_id
