"""Tests for the Configuration Store and list import."""

from uuid import uuid4

import pytest

from arc_kernel.config_store.importer import parse_item_lines
from arc_kernel.config_store.store import ConfigurationStore
from arc_kernel.errors import InvalidNameError, NotFoundError, ReferenceInUseError
from arc_kernel.models import (
    Account,
    KernelConfiguration,
    ManagementMode,
    ReplenishmentMode,
    TrackedWorker,
)

COBALT_ORE = 5111
IRON_ORE = 5112
WIND_SHARD = 5


def _store_with_account() -> ConfigurationStore:
    config = KernelConfiguration(accounts={
        1: Account(
            account_id=1,
            name="Aria",
            world="Twintania",
            workers=[TrackedWorker(worker_id=10, name="Mina")],
        )
    })
    return ConfigurationStore(config)


class TestNames:
    def test_list_names(self):
        store = ConfigurationStore()
        store.create_list("Ores")
        for bad in ("", "x", "50%", "ores", "ORES"):
            with pytest.raises(InvalidNameError):
                store.create_list(bad)

    def test_rename_to_own_name_is_allowed(self):
        store = ConfigurationStore()
        ores = store.create_list("Ores")
        store.rename_list(ores.list_id, "ORES")
        assert ores.name == "ORES"

    def test_group_names(self):
        store = ConfigurationStore()
        store.create_group("Main")
        with pytest.raises(InvalidNameError):
            store.create_group("main")
        other = store.create_group("Alts")
        with pytest.raises(InvalidNameError):
            store.rename_group(other.group_id, "MAIN")


class TestReferenceIntegrity:
    def test_list_in_use_by_account_cannot_be_deleted(self):
        store = _store_with_account()
        ores = store.create_list("Ores")
        store.set_account_mode(1, ManagementMode.STANDALONE, list_ids=[ores.list_id])

        with pytest.raises(ReferenceInUseError) as exc:
            store.delete_list(ores.list_id)
        assert exc.value.referenced_by == ["account:Aria @ Twintania"]

        store.set_account_lists(1, [])
        store.delete_list(ores.list_id)
        assert store.get_list(ores.list_id) is None

    def test_inactive_account_lists_do_not_block_deletion(self):
        store = _store_with_account()
        ores = store.create_list("Ores")
        group = store.create_group("Main")
        store.set_account_mode(1, ManagementMode.STANDALONE, list_ids=[ores.list_id])
        store.set_account_mode(1, ManagementMode.GROUP_MEMBER, group.group_id)

        assert store.list_references(ores.list_id) == []
        store.delete_list(ores.list_id)
        assert store.get_list(ores.list_id) is None

    def test_list_in_use_by_group_cannot_be_deleted(self):
        store = ConfigurationStore()
        ores = store.create_list("Ores")
        store.create_group("Main", [ores.list_id])
        with pytest.raises(ReferenceInUseError) as exc:
            store.delete_list(ores.list_id)
        assert exc.value.referenced_by == ["group:Main"]

    def test_group_in_use_cannot_be_deleted(self):
        store = _store_with_account()
        group = store.create_group("Main")
        store.set_account_mode(1, ManagementMode.GROUP_MEMBER, group.group_id)
        assert store.group_members(group.group_id)[0].account_id == 1

        with pytest.raises(ReferenceInUseError) as exc:
            store.delete_group(group.group_id)
        assert exc.value.referenced_by == ["account:Aria @ Twintania"]

    def test_group_can_be_deleted_after_members_leave(self):
        store = _store_with_account()
        group = store.create_group("Main")
        store.set_account_mode(1, ManagementMode.GROUP_MEMBER, group.group_id)
        store.set_account_mode(1, ManagementMode.STANDALONE)
        store.set_account_mode(1, ManagementMode.UNMANAGED)

        assert store.get_account(1).group_id is None
        store.delete_group(group.group_id)
        assert store.get_group(group.group_id) is None

    def test_failed_mode_change_leaves_account_untouched(self):
        store = _store_with_account()
        ores = store.create_list("Ores")

        with pytest.raises(NotFoundError):
            store.set_account_mode(1, ManagementMode.GROUP_MEMBER, list_ids=[ores.list_id])
        with pytest.raises(NotFoundError):
            store.set_account_mode(1, ManagementMode.STANDALONE, list_ids=[ores.list_id, uuid4()])

        account = store.get_account(1)
        assert account.list_ids == []
        assert account.mode == ManagementMode.UNMANAGED

    def test_unknown_ids(self):
        store = _store_with_account()
        with pytest.raises(NotFoundError):
            store.delete_list(uuid4())
        with pytest.raises(NotFoundError):
            store.set_account_lists(1, [uuid4()])
        with pytest.raises(NotFoundError):
            store.set_account_mode(1, ManagementMode.GROUP_MEMBER, uuid4())
        with pytest.raises(NotFoundError):
            store.set_account_mode(1, ManagementMode.GROUP_MEMBER)
        with pytest.raises(NotFoundError):
            store.set_worker_managed(1, 99, True)
        with pytest.raises(NotFoundError):
            store.create_group("Main", [uuid4()])


class TestLineItems:
    def setup_method(self):
        self.store = ConfigurationStore()
        self.ores = self.store.create_list("Ores")

    def test_add_and_merge(self):
        first = self.store.add_item(self.ores.list_id, COBALT_ORE, 100)
        self.store.add_item(self.ores.list_id, COBALT_ORE, 50)
        assert len(self.ores.items) == 2

        merged = self.store.add_item(self.ores.list_id, COBALT_ORE, 25, merge=True)
        assert merged is first
        assert first.quantity == 125

    def test_move_item(self):
        a = self.store.add_item(self.ores.list_id, COBALT_ORE, 1)
        b = self.store.add_item(self.ores.list_id, IRON_ORE, 1)
        c = self.store.add_item(self.ores.list_id, WIND_SHARD, 1)

        self.store.move_item(self.ores.list_id, c.internal_id, 0)
        assert self.ores.items == [c, a, b]

        self.store.move_item(self.ores.list_id, c.internal_id, 99)
        assert self.ores.items == [a, b, c]

    def test_remove_item(self):
        a = self.store.add_item(self.ores.list_id, COBALT_ORE, 1)
        self.store.remove_item(self.ores.list_id, a.internal_id)
        assert self.ores.items == []
        with pytest.raises(NotFoundError):
            self.store.remove_item(self.ores.list_id, a.internal_id)

    def test_remove_finished_items(self):
        self.store.add_item(self.ores.list_id, COBALT_ORE, 0)
        self.store.add_item(self.ores.list_id, IRON_ORE, 10)
        assert self.store.remove_finished_items(self.ores.list_id) == 1
        assert [i.item_id for i in self.ores.items] == [IRON_ORE]

    def test_remove_finished_items_ignores_restock_lists(self):
        stock = self.store.create_list("Stock", mode=ReplenishmentMode.RESTOCK)
        self.store.add_item(stock.list_id, COBALT_ORE, 0)
        assert self.store.remove_finished_items(stock.list_id) == 0
        assert len(stock.items) == 1


class TestImport:
    def test_parse_teamcraft_lines(self, catalog):
        text = "2000x Cobalt Ore\n500 iron ore\nnot a line\n12x Unknown Thing\n"
        items = parse_item_lines(text, catalog)
        assert [(i.item_id, i.quantity) for i in items] == [(COBALT_ORE, 2000), (IRON_ORE, 500)]

    def test_import_merges_into_existing_lines(self, catalog):
        store = ConfigurationStore()
        ores = store.create_list("Ores")
        store.add_item(ores.list_id, COBALT_ORE, 100)

        count = store.import_items(ores.list_id, parse_item_lines("2000x Cobalt Ore\n30x Wind Shard", catalog))

        assert count == 2
        assert [(i.item_id, i.quantity) for i in ores.items] == [(COBALT_ORE, 2100), (WIND_SHARD, 30)]


class TestLookups:
    def test_lists_for_account(self):
        store = _store_with_account()
        a = store.create_list("Alpha")
        b = store.create_list("Beta")
        store.set_account_lists(1, [b.list_id, a.list_id])
        account = store.get_account(1)

        assert store.lists_for_account(account) == []  # still unmanaged

        store.set_account_mode(1, ManagementMode.STANDALONE)
        assert store.lists_for_account(account) == [b, a]

        group = store.create_group("Main", [a.list_id])
        store.set_account_mode(1, ManagementMode.GROUP_MEMBER, group.group_id)
        assert store.lists_for_account(account) == [a]

    def test_set_group_lists(self):
        store = _store_with_account()
        a = store.create_list("Alpha")
        b = store.create_list("Beta")
        group = store.create_group("Main", [a.list_id])
        store.set_account_mode(1, ManagementMode.GROUP_MEMBER, group.group_id)

        store.set_group_lists(group.group_id, [b.list_id, a.list_id])
        assert store.lists_for_account(store.get_account(1)) == [b, a]

        with pytest.raises(NotFoundError):
            store.set_group_lists(group.group_id, [uuid4()])
        assert group.list_ids == [b.list_id, a.list_id]

    def test_missing_group_yields_none(self):
        store = _store_with_account()
        group = store.create_group("Main")
        store.set_account_mode(1, ManagementMode.GROUP_MEMBER, group.group_id)
        del store.configuration.groups[group.group_id]

        assert store.lists_for_account(store.get_account(1)) is None

    def test_save_calls_the_hook(self):
        saved = []
        store = ConfigurationStore(saver=saved.append)
        store.save()
        assert saved == [store.configuration]
        ConfigurationStore().save()  # no hook, no error
