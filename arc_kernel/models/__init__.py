"""ARC Kernel data models."""

from arc_kernel.models.catalog import RewardTier, VentureCategory, VentureDefinition
from arc_kernel.models.configuration import (
    Account,
    DemandList,
    Group,
    KernelConfiguration,
    LegacyWorker,
    LineItem,
    ManagementMode,
    PriorityPolicy,
    ReplenishmentMode,
    TrackedWorker,
    WorkerRecord,
)
from arc_kernel.models.settings import QUICK_VENTURE_ID, KernelSettings
from arc_kernel.models.snapshot import AccountSnapshot, WorkerSnapshot, WorkerStats

__all__ = [
    "QUICK_VENTURE_ID",
    "Account",
    "AccountSnapshot",
    "DemandList",
    "Group",
    "KernelConfiguration",
    "KernelSettings",
    "LegacyWorker",
    "LineItem",
    "ManagementMode",
    "PriorityPolicy",
    "ReplenishmentMode",
    "RewardTier",
    "TrackedWorker",
    "VentureCategory",
    "VentureDefinition",
    "WorkerRecord",
    "WorkerSnapshot",
    "WorkerStats",
]
