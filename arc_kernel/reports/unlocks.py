"""
Locked-collectible report.

For each managed account: which unlock-gated items on its lists its
workers could gather, and whether the account has unlocked them yet.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel

from arc_kernel.catalog.ventures import VentureCatalog, matches_job
from arc_kernel.config_store.store import ConfigurationStore
from arc_kernel.models.configuration import ManagementMode


class UnlockStatus(str, Enum):
    UNLOCKED = "unlocked"
    LOCKED = "locked"
    NOT_APPLICABLE = "not_applicable"   # Not on any list, or no worker has the job


class ItemUnlockState(BaseModel):
    item_id: int
    name: str
    status: UnlockStatus


class AccountUnlockReport(BaseModel):
    account_id: int
    account_name: str
    items: List[ItemUnlockState]

    @property
    def locked(self) -> List[ItemUnlockState]:
        return [i for i in self.items if i.status == UnlockStatus.LOCKED]


def locked_items_report(
    store: ConfigurationStore,
    catalog: VentureCatalog,
    include_all: bool = False,
) -> List[AccountUnlockReport]:
    reports = []
    for account in store.configuration.accounts.values():
        if account.mode == ManagementMode.UNMANAGED:
            continue

        listed = {
            item.item_id
            for demand_list in store.lists_for_account(account) or []
            for item in demand_list.items
        }
        jobs = {w.job for w in account.tracked_workers()}

        items = []
        for item_id, gathered_id in sorted(catalog.collectibles.items()):
            ventures = [v for v in catalog.for_item(item_id) if v.category.is_gathering]
            if not ventures:
                continue

            gatherable = any(matches_job(v, job) for v in ventures for job in jobs)
            if item_id not in listed or not gatherable:
                status = UnlockStatus.NOT_APPLICABLE
            elif gathered_id in account.unlocked_items:
                status = UnlockStatus.UNLOCKED
            else:
                status = UnlockStatus.LOCKED

            if status == UnlockStatus.NOT_APPLICABLE and not include_all:
                continue
            items.append(ItemUnlockState(item_id=item_id, name=ventures[0].name, status=status))

        reports.append(AccountUnlockReport(
            account_id=account.account_id,
            account_name=str(account),
            items=items,
        ))
    return reports
