"""
External collaborators — the interfaces the kernel consumes.

Each collaborator is a Protocol so callers can plug in the real telemetry
bridge. The in-memory implementations below back tests and the API.
"""

import logging
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from arc_kernel.models.snapshot import AccountSnapshot, WorkerStats

logger = logging.getLogger(__name__)


class SnapshotProvider(Protocol):
    """Live account/worker facts."""

    def get_snapshots(self) -> List[AccountSnapshot]: ...


class WorkerStatsProvider(Protocol):
    """Supplemental per-worker stats."""

    def get_stats(self, account_id: int, worker_name: str) -> WorkerStats: ...


class InventoryProvider(Protocol):
    """Item counts held by the logged-in account itself."""

    def get_item_count(self, item_id: int) -> int: ...


class StorageInventoryProvider(Protocol):
    """Third-party storage item counts, keyed by owner (account or worker id) and item."""

    def get_storage_count(self, owner_id: int, item_id: int) -> int: ...


class ExecutionSystem(Protocol):
    """The system that actually runs ventures on workers."""

    def should_reassign(self) -> bool: ...


class Notifier(Protocol):
    """Surface for human-readable assignment messages."""

    def notify(self, message: str) -> None: ...


# --- In-memory implementations ---

class InMemorySnapshotProvider:
    """Serves whatever snapshots and stats were last pushed into it."""

    def __init__(
        self,
        snapshots: Optional[List[AccountSnapshot]] = None,
        stats: Optional[Dict[Tuple[int, str], WorkerStats]] = None,
    ):
        self.snapshots: List[AccountSnapshot] = list(snapshots or [])
        self.stats: Dict[Tuple[int, str], WorkerStats] = dict(stats or {})

    def get_snapshots(self) -> List[AccountSnapshot]:
        return list(self.snapshots)

    def get_stats(self, account_id: int, worker_name: str) -> WorkerStats:
        return self.stats.get((account_id, worker_name), WorkerStats())

    def set_stats(self, account_id: int, worker_name: str, stats: WorkerStats) -> None:
        self.stats[(account_id, worker_name)] = stats


class StaticInventory:
    """Fixed item counts; doubles as a storage provider."""

    def __init__(
        self,
        counts: Optional[Dict[int, int]] = None,
        storage: Optional[Dict[Tuple[int, int], int]] = None,
    ):
        self.counts: Dict[int, int] = dict(counts or {})
        self.storage: Dict[Tuple[int, int], int] = dict(storage or {})

    def get_item_count(self, item_id: int) -> int:
        return self.counts.get(item_id, 0)

    def get_storage_count(self, owner_id: int, item_id: int) -> int:
        return self.storage.get((owner_id, item_id), 0)


class StaticExecutionSystem:
    """An execution system with a fixed reassign toggle."""

    def __init__(self, reassign: bool = True):
        self.reassign = reassign

    def should_reassign(self) -> bool:
        return self.reassign


class CollectingNotifier:
    """Keeps every message; optionally forwards each one to a callback."""

    def __init__(self, forward: Optional[Callable[[str], None]] = None):
        self.messages: List[str] = []
        self._forward = forward

    def notify(self, message: str) -> None:
        logger.info("%s", message)
        self.messages.append(message)
        if self._forward:
            self._forward(message)
