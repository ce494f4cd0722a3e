"""
Kernel Service — the single call site for external triggers.

  zone change / explicit sync  -> sync()
  venture completion callback  -> next_venture()
  debug request                -> preview()

One call runs to completion before the next starts; nothing here locks.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from arc_kernel.catalog.ventures import VentureCatalog
from arc_kernel.config_store.store import ConfigurationStore
from arc_kernel.external.providers import (
    ExecutionSystem,
    InventoryProvider,
    Notifier,
    SnapshotProvider,
    StorageInventoryProvider,
    WorkerStatsProvider,
)
from arc_kernel.planner.assignment import AssignmentPlanner, PlanPreview
from arc_kernel.reconciler.sync import Reconciler, ReconcileResult

logger = logging.getLogger(__name__)


@dataclass
class SyncOutcome:
    synced: bool
    result: Optional[ReconcileResult] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "synced": self.synced,
            "result": self.result.to_dict() if self.result else None,
            "error": self.error,
        }


class KernelService:
    """Wires the reconciler and planner to the external collaborators."""

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
        self.notifier = notifier
        self.planner = AssignmentPlanner(
            store=store,
            catalog=catalog,
            snapshot_provider=snapshot_provider,
            stats_provider=stats_provider,
            inventory=inventory,
            execution=execution,
            notifier=notifier,
            storage=storage,
        )

    def sync(self) -> SyncOutcome:
        """Fetch fresh facts and reconcile them. Persists on change."""
        try:
            snapshots = self.snapshot_provider.get_snapshots()
        except Exception as e:
            logger.exception("Unable to fetch account snapshots")
            self.notifier.notify(
                "Unable to synchronize characters, assignments might not work properly."
            )
            return SyncOutcome(synced=False, error=str(e))

        result = Reconciler(self.store.configuration, self.stats_provider).reconcile(snapshots)
        if result.changed:
            self.store.save()
        return SyncOutcome(synced=True, result=result)

    def next_venture(self, account_id: int, worker_id: int) -> Optional[int]:
        """Venture-completion callback: pick and record the next venture."""
        try:
            return self.planner.plan_next(account_id, worker_id, dry_run=False)
        except Exception:
            logger.exception("Unable to plan next venture for worker %X", worker_id)
            raise

    def preview(self, account_id: int, worker_id: int) -> PlanPreview:
        return self.planner.preview(account_id, worker_id)
