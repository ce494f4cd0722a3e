"""
Configuration Store — the boundary for user edits to the Demand Model.

Updated by: the editing UI / API
Queried by: Reconciler + Assignment Planner

Lists and groups are referenced by id. Deleting one that is still
referenced is refused after a reverse-reference scan.
"""

import logging
from typing import Callable, List, Optional
from uuid import UUID

from arc_kernel.errors import InvalidNameError, NotFoundError, ReferenceInUseError
from arc_kernel.models.configuration import (
    Account,
    DemandList,
    Group,
    KernelConfiguration,
    LineItem,
    ManagementMode,
    PriorityPolicy,
    ReplenishmentMode,
    TrackedWorker,
)

logger = logging.getLogger(__name__)


def _is_valid_name(name: str, existing_names: List[str]) -> bool:
    return (
        len(name) >= 2
        and "%" not in name
        and name.lower() not in (n.lower() for n in existing_names)
    )


def effective_lists(config: KernelConfiguration, account: Account) -> Optional[List[DemandList]]:
    """Resolve the account's active list references against config."""
    if account.mode == ManagementMode.STANDALONE:
        list_ids = account.list_ids
    elif account.mode == ManagementMode.GROUP_MEMBER:
        group = config.groups.get(account.group_id) if account.group_id else None
        if group is None:
            logger.error("Unable to resolve group %s for %s", account.group_id, account)
            return None
        list_ids = group.list_ids
    else:
        return []

    lists = []
    for list_id in list_ids:
        demand_list = config.demand_lists.get(list_id)
        if demand_list is None:
            logger.error("Unable to resolve demand list %s for %s", list_id, account)
            continue
        lists.append(demand_list)
    return lists


class ConfigurationStore:
    """Owns the KernelConfiguration and the save hook."""

    def __init__(
        self,
        configuration: Optional[KernelConfiguration] = None,
        saver: Optional[Callable[[KernelConfiguration], None]] = None,
    ):
        self._config = configuration or KernelConfiguration()
        self._saver = saver

    @property
    def configuration(self) -> KernelConfiguration:
        return self._config

    def save(self) -> None:
        """Hand the configuration to the persistence hook, if any."""
        if self._saver is not None:
            self._saver(self._config)

    # --- Lookups ---

    def get_account(self, account_id: int) -> Optional[Account]:
        return self._config.accounts.get(account_id)

    def get_list(self, list_id: UUID) -> Optional[DemandList]:
        return self._config.demand_lists.get(list_id)

    def get_group(self, group_id: UUID) -> Optional[Group]:
        return self._config.groups.get(group_id)

    def lists_for_account(self, account: Account) -> Optional[List[DemandList]]:
        """
        The account's effective demand lists, in declared order.

        Dangling list ids are skipped. A group member whose group is gone
        gets None rather than an empty list.
        """
        return effective_lists(self._config, account)

    def _require_account(self, account_id: int) -> Account:
        account = self._config.accounts.get(account_id)
        if account is None:
            raise NotFoundError(f"Account {account_id} not found")
        return account

    def _require_list(self, list_id: UUID) -> DemandList:
        demand_list = self._config.demand_lists.get(list_id)
        if demand_list is None:
            raise NotFoundError(f"Demand list {list_id} not found")
        return demand_list

    def _require_group(self, group_id: UUID) -> Group:
        group = self._config.groups.get(group_id)
        if group is None:
            raise NotFoundError(f"Group {group_id} not found")
        return group

    # --- Demand lists ---

    def create_list(
        self,
        name: str,
        mode: ReplenishmentMode = ReplenishmentMode.ONE_TIME,
        priority: PriorityPolicy = PriorityPolicy.IN_ORDER,
        count_storage: bool = False,
    ) -> DemandList:
        existing = [dl.name for dl in self._config.demand_lists.values()]
        if not _is_valid_name(name, existing):
            raise InvalidNameError(f"Invalid demand list name: {name!r}")

        demand_list = DemandList(
            name=name, mode=mode, priority=priority, count_storage=count_storage
        )
        self._config.demand_lists[demand_list.list_id] = demand_list
        logger.info("Created demand list '%s' (%s)", name, demand_list.list_id)
        return demand_list

    def rename_list(self, list_id: UUID, name: str) -> DemandList:
        demand_list = self._require_list(list_id)
        existing = [
            dl.name for dl in self._config.demand_lists.values() if dl.list_id != list_id
        ]
        if not _is_valid_name(name, existing):
            raise InvalidNameError(f"Invalid demand list name: {name!r}")
        demand_list.name = name
        return demand_list

    def update_list_settings(
        self,
        list_id: UUID,
        mode: Optional[ReplenishmentMode] = None,
        priority: Optional[PriorityPolicy] = None,
        count_storage: Optional[bool] = None,
    ) -> DemandList:
        demand_list = self._require_list(list_id)
        if mode is not None:
            demand_list.mode = mode
        if priority is not None:
            demand_list.priority = priority
        if count_storage is not None:
            demand_list.count_storage = count_storage
        return demand_list

    def list_references(self, list_id: UUID) -> List[str]:
        """Human-readable names of every standalone account and group using the list."""
        refs = [
            f"account:{a}" for a in self._config.accounts.values()
            if a.mode == ManagementMode.STANDALONE and list_id in a.list_ids
        ]
        refs.extend(
            f"group:{g.name}" for g in self._config.groups.values()
            if list_id in g.list_ids
        )
        return refs

    def delete_list(self, list_id: UUID) -> None:
        self._require_list(list_id)
        refs = self.list_references(list_id)
        if refs:
            raise ReferenceInUseError(
                f"Demand list {list_id} is used by {len(refs)} account(s)/group(s)",
                refs,
            )
        del self._config.demand_lists[list_id]
        logger.info("Deleted demand list %s", list_id)

    def add_item(
        self, list_id: UUID, item_id: int, quantity: int, merge: bool = False
    ) -> LineItem:
        """Append an item; with merge=True, add to an existing line instead."""
        demand_list = self._require_list(list_id)
        if merge:
            existing = next((i for i in demand_list.items if i.item_id == item_id), None)
            if existing is not None:
                existing.quantity += quantity
                return existing

        item = LineItem(item_id=item_id, quantity=quantity)
        demand_list.items.append(item)
        return item

    def import_items(self, list_id: UUID, items: List[LineItem]) -> int:
        """Merge parsed items into the list. Returns how many were imported."""
        logger.info("Importing %d items into list %s", len(items), list_id)
        for item in items:
            self.add_item(list_id, item.item_id, item.quantity, merge=True)
        return len(items)

    def remove_item(self, list_id: UUID, internal_id: UUID) -> None:
        demand_list = self._require_list(list_id)
        item = demand_list.find_item(internal_id)
        if item is None:
            raise NotFoundError(f"Item {internal_id} not found on list {list_id}")
        demand_list.items.remove(item)

    def move_item(self, list_id: UUID, internal_id: UUID, new_index: int) -> None:
        """Move a line item to new_index (clamped to the list bounds)."""
        demand_list = self._require_list(list_id)
        item = demand_list.find_item(internal_id)
        if item is None:
            raise NotFoundError(f"Item {internal_id} not found on list {list_id}")

        demand_list.items.remove(item)
        new_index = max(0, min(new_index, len(demand_list.items)))
        demand_list.items.insert(new_index, item)
        logger.debug("Moved item %d on list %s to index %d", item.item_id, list_id, new_index)

    def remove_finished_items(self, list_id: UUID) -> int:
        """Drop ONE_TIME items that reached zero. Returns how many went."""
        demand_list = self._require_list(list_id)
        if demand_list.mode != ReplenishmentMode.ONE_TIME:
            return 0
        before = len(demand_list.items)
        demand_list.items = [i for i in demand_list.items if i.quantity > 0]
        return before - len(demand_list.items)

    # --- Groups ---

    def create_group(self, name: str, list_ids: Optional[List[UUID]] = None) -> Group:
        existing = [g.name for g in self._config.groups.values()]
        if not _is_valid_name(name, existing):
            raise InvalidNameError(f"Invalid group name: {name!r}")

        for list_id in list_ids or []:
            self._require_list(list_id)

        group = Group(name=name, list_ids=list(list_ids or []))
        self._config.groups[group.group_id] = group
        logger.info("Created group '%s' (%s)", name, group.group_id)
        return group

    def rename_group(self, group_id: UUID, name: str) -> Group:
        group = self._require_group(group_id)
        existing = [
            g.name for g in self._config.groups.values() if g.group_id != group_id
        ]
        if not _is_valid_name(name, existing):
            raise InvalidNameError(f"Invalid group name: {name!r}")
        group.name = name
        return group

    def set_group_lists(self, group_id: UUID, list_ids: List[UUID]) -> Group:
        group = self._require_group(group_id)
        for list_id in list_ids:
            self._require_list(list_id)
        group.list_ids = list(list_ids)
        return group

    def group_members(self, group_id: UUID) -> List[Account]:
        return [
            a for a in self._config.accounts.values()
            if a.mode == ManagementMode.GROUP_MEMBER and a.group_id == group_id
        ]

    def delete_group(self, group_id: UUID) -> None:
        self._require_group(group_id)
        refs = [f"account:{a}" for a in self.group_members(group_id)]
        if refs:
            raise ReferenceInUseError(
                f"Group {group_id} is used by {len(refs)} account(s)", refs
            )
        del self._config.groups[group_id]
        logger.info("Deleted group %s", group_id)

    # --- Accounts ---

    def set_account_mode(
        self,
        account_id: int,
        mode: ManagementMode,
        group_id: Optional[UUID] = None,
        list_ids: Optional[List[UUID]] = None,
    ) -> Account:
        """
        Switch how the account's lists are chosen.

        Everything is validated before the account is touched. Leaving
        GROUP_MEMBER mode clears the group reference.
        """
        account = self._require_account(account_id)
        if mode == ManagementMode.GROUP_MEMBER:
            if group_id is None:
                raise NotFoundError("A group is required for group membership")
            self._require_group(group_id)
        for list_id in list_ids or []:
            self._require_list(list_id)

        if list_ids is not None:
            account.list_ids = list(list_ids)
        account.group_id = group_id if mode == ManagementMode.GROUP_MEMBER else None
        account.mode = mode
        return account

    def set_account_lists(self, account_id: int, list_ids: List[UUID]) -> Account:
        account = self._require_account(account_id)
        for list_id in list_ids:
            self._require_list(list_id)
        account.list_ids = list(list_ids)
        return account

    def set_worker_managed(self, account_id: int, worker_id: int, managed: bool) -> TrackedWorker:
        account = self._require_account(account_id)
        worker = account.find_worker(worker_id)
        if worker is None:
            raise NotFoundError(f"Worker {worker_id} not found on account {account_id}")
        worker.managed = managed
        return worker
