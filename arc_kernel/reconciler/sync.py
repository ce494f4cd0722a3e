"""
Reconciler — merges externally observed account/worker facts into the
persisted configuration.

Behavioral Contract:
- Creates accounts on first sight (UNMANAGED) and never deletes them
- Creates, updates and prunes workers to match the external source
- Never touches user-owned fields (management mode, lists, worker opt-in)
- Re-running with identical facts reports changed=False

Per-field writes are idempotent, so a partially applied cycle converges on
the next one. There is no rollback.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from arc_kernel.catalog.ventures import GATHERING_JOBS
from arc_kernel.external.providers import WorkerStatsProvider
from arc_kernel.models.configuration import (
    Account,
    KernelConfiguration,
    LegacyWorker,
    ManagementMode,
    TrackedWorker,
)
from arc_kernel.models.snapshot import AccountSnapshot, WorkerSnapshot, WorkerStats

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of one reconcile pass."""

    changed: bool = False
    created_accounts: List[int] = field(default_factory=list)
    created_workers: List[int] = field(default_factory=list)
    migrated_workers: List[int] = field(default_factory=list)
    removed_workers: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "changed": self.changed,
            "created_accounts": list(self.created_accounts),
            "created_workers": list(self.created_workers),
            "migrated_workers": list(self.migrated_workers),
            "removed_workers": list(self.removed_workers),
        }


def _worker_quality(job: int, stats: WorkerStats) -> int:
    if job in GATHERING_JOBS:
        return stats.gathering + stats.perception
    return stats.item_level


class Reconciler:
    """Applies AccountSnapshots to a KernelConfiguration."""

    def __init__(
        self,
        configuration: KernelConfiguration,
        stats_provider: WorkerStatsProvider,
    ):
        self.configuration = configuration
        self.stats_provider = stats_provider

    def reconcile(self, snapshots: Iterable[AccountSnapshot]) -> ReconcileResult:
        """Run one pass over every reported account."""
        result = ReconcileResult()
        for snapshot in snapshots:
            logger.debug("Sync for account %X", snapshot.account_id)
            if snapshot.excluded:
                continue
            self._reconcile_account(snapshot, result)
        return result

    def _reconcile_account(self, snapshot: AccountSnapshot, result: ReconcileResult) -> None:
        account = self.configuration.accounts.get(snapshot.account_id)
        if account is None:
            account = Account(
                account_id=snapshot.account_id,
                name=snapshot.name,
                world=snapshot.world,
                mode=ManagementMode.UNMANAGED,
            )
            self.configuration.accounts[account.account_id] = account
            result.created_accounts.append(account.account_id)
            result.changed = True
            logger.info("Discovered account %s", account)

        if account.name != snapshot.name or account.world != snapshot.world:
            account.name = snapshot.name
            account.world = snapshot.world
            result.changed = True

        if account.unlocked_items != snapshot.unlocked_items:
            account.unlocked_items = set(snapshot.unlocked_items)
            result.changed = True

        if account.task_currency != snapshot.task_currency:
            account.task_currency = snapshot.task_currency
            result.changed = True

        self._migrate_legacy_workers(account, snapshot.workers, result)

        seen: Set[int] = set()
        for worker_snapshot in snapshot.workers:
            seen.add(worker_snapshot.worker_id)
            self._reconcile_worker(account, worker_snapshot, result)

        kept = []
        for worker in account.workers:
            if isinstance(worker, TrackedWorker) and worker.worker_id not in seen:
                logger.info("Removing worker %s from %s, no longer reported", worker.name, account)
                result.removed_workers.append(worker.name)
                result.changed = True
                continue
            kept.append(worker)
        account.workers = kept

    def _migrate_legacy_workers(
        self,
        account: Account,
        incoming: List[WorkerSnapshot],
        result: ReconcileResult,
    ) -> None:
        """
        Upgrade name-keyed legacy records to carry the stable id.

        Legacy records that match no incoming worker by name are dropped,
        since nothing can correlate them anymore.
        """
        if not any(isinstance(w, LegacyWorker) for w in account.workers):
            return

        by_name = {w.name: w for w in incoming}
        tracked_ids = {w.worker_id for w in account.tracked_workers()}
        migrated = []
        for worker in account.workers:
            if not isinstance(worker, LegacyWorker):
                migrated.append(worker)
                continue

            match = by_name.get(worker.name)
            if match is None or match.worker_id in tracked_ids:
                logger.warning(
                    "Removing worker %s from %s, it has no stable id and cannot be correlated",
                    worker.name,
                    account,
                )
                result.removed_workers.append(worker.name)
                result.changed = True
                continue

            upgraded = TrackedWorker(
                worker_id=match.worker_id,
                **worker.model_dump(exclude={"kind"}),
            )
            tracked_ids.add(match.worker_id)
            migrated.append(upgraded)
            result.migrated_workers.append(match.worker_id)
            result.changed = True
            logger.info("Migrated worker %s to id %X", worker.name, match.worker_id)

        account.workers = migrated

    def _reconcile_worker(
        self,
        account: Account,
        snapshot: WorkerSnapshot,
        result: ReconcileResult,
    ) -> None:
        worker: Optional[TrackedWorker] = account.find_worker(snapshot.worker_id)
        if worker is None:
            worker = TrackedWorker(
                worker_id=snapshot.worker_id,
                name=snapshot.name,
                managed=False,
            )
            account.workers.append(worker)
            result.created_workers.append(worker.worker_id)
            result.changed = True

        stats = self.stats_provider.get_stats(account.account_id, snapshot.name)
        updates = {
            "name": snapshot.name,
            "display_order": snapshot.display_order,
            "level": snapshot.level,
            "job": snapshot.job,
            "has_venture": snapshot.has_venture,
            "last_venture": snapshot.venture_id,
            "item_level": stats.item_level,
            "gathering": stats.gathering,
            "perception": stats.perception,
            "quality": _worker_quality(snapshot.job, stats),
        }
        for field_name, value in updates.items():
            if getattr(worker, field_name) != value:
                setattr(worker, field_name, value)
                result.changed = True
