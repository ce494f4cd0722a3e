"""
Inventory overview.

For each demand list: how much of every queued item the accounts using
that list hold, read from the storage provider. Lists that count storage
also break each account's count down into its own bags and each managed
worker's storage.
"""

from typing import Dict, List, Optional, Set
from uuid import UUID

from pydantic import BaseModel

from arc_kernel.catalog.ventures import VentureCatalog
from arc_kernel.config_store.store import ConfigurationStore
from arc_kernel.external.providers import StorageInventoryProvider
from arc_kernel.models.configuration import Account, ReplenishmentMode, TrackedWorker

OWN_INVENTORY_LABEL = "In Inventory"


class StockHolding(BaseModel):
    owner_id: int
    label: str
    quantity: int


class AccountStock(BaseModel):
    account_id: int
    account_name: str
    quantity: int
    target: Optional[int] = None            # RESTOCK lists only
    holdings: List[StockHolding] = []       # Only for lists that count storage


class ItemStock(BaseModel):
    internal_id: UUID
    item_id: int
    name: str
    total: int
    accounts: List[AccountStock] = []


class ListInventory(BaseModel):
    list_id: UUID
    name: str
    icon: str
    items: List[ItemStock] = []


def _storage_workers(account: Account) -> List[TrackedWorker]:
    workers = [w for w in account.tracked_workers() if w.managed and w.job > 0]
    return sorted(workers, key=lambda w: (w.display_order, w.worker_id))


class _AccountCounts:
    """Counts per owner for one account, limited to the items on its lists."""

    def __init__(self, account: Account, storage: StorageInventoryProvider, item_ids: Set[int]):
        self.account = account
        self.workers = _storage_workers(account)
        self.own: Dict[int, int] = {
            item_id: storage.get_storage_count(account.account_id, item_id) for item_id in item_ids
        }
        self.by_worker: Dict[int, Dict[int, int]] = {
            w.worker_id: {
                item_id: storage.get_storage_count(w.worker_id, item_id) for item_id in item_ids
            }
            for w in self.workers
        }

    def count(self, item_id: int, include_storage: bool) -> int:
        total = self.own.get(item_id, 0)
        if include_storage:
            total += sum(counts.get(item_id, 0) for counts in self.by_worker.values())
        return total


def inventory_report(
    store: ConfigurationStore,
    catalog: VentureCatalog,
    storage: StorageInventoryProvider,
) -> List[ListInventory]:
    config = store.configuration

    list_ids_by_account: Dict[int, List[UUID]] = {}
    counts: Dict[int, _AccountCounts] = {}
    for account in config.accounts.values():
        lists = store.lists_for_account(account) or []
        list_ids_by_account[account.account_id] = [dl.list_id for dl in lists]
        item_ids = {item.item_id for dl in lists for item in dl.items}
        counts[account.account_id] = _AccountCounts(account, storage, item_ids)

    reports = []
    for demand_list in config.demand_lists.values():
        relevant = [
            counts[account_id]
            for account_id, list_ids in list_ids_by_account.items()
            if demand_list.list_id in list_ids
        ]
        target_of = demand_list.mode == ReplenishmentMode.RESTOCK

        items = []
        for item in demand_list.items:
            venture = catalog.first_for_item(item.item_id)
            accounts = []
            for account_counts in relevant:
                quantity = account_counts.count(item.item_id, demand_list.count_storage)
                if quantity == 0:
                    continue

                holdings = []
                if demand_list.count_storage:
                    holdings.append(StockHolding(
                        owner_id=account_counts.account.account_id,
                        label=OWN_INVENTORY_LABEL,
                        quantity=account_counts.own.get(item.item_id, 0),
                    ))
                    for worker in account_counts.workers:
                        held = account_counts.by_worker[worker.worker_id].get(item.item_id, 0)
                        if held:
                            holdings.append(StockHolding(
                                owner_id=worker.worker_id, label=worker.name, quantity=held
                            ))

                accounts.append(AccountStock(
                    account_id=account_counts.account.account_id,
                    account_name=str(account_counts.account),
                    quantity=quantity,
                    target=item.quantity if target_of else None,
                    holdings=holdings,
                ))

            items.append(ItemStock(
                internal_id=item.internal_id,
                item_id=item.item_id,
                name=venture.name if venture else "",
                total=sum(a.quantity for a in accounts),
                accounts=accounts,
            ))

        reports.append(ListInventory(
            list_id=demand_list.list_id,
            name=demand_list.name,
            icon=demand_list.icon(),
            items=items,
        ))
    return reports
