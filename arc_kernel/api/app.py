"""
ARC Kernel API — FastAPI endpoints.

Exposes the kernel's functionality via a REST API for:
- Synchronization with the telemetry source
- Demand list and group editing
- Account and worker management settings
- Venture assignment and dry-run previews
- Reports (locked collectibles, inventory overview)
"""

from typing import List, Optional
from uuid import UUID

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from arc_kernel.catalog.ventures import VentureCatalog
from arc_kernel.config_store.importer import parse_item_lines
from arc_kernel.config_store.store import ConfigurationStore
from arc_kernel.errors import InvalidNameError, NotFoundError, ReferenceInUseError
from arc_kernel.external.providers import (
    CollectingNotifier,
    InMemorySnapshotProvider,
    StaticExecutionSystem,
    StaticInventory,
)
from arc_kernel.models.configuration import (
    ManagementMode,
    PriorityPolicy,
    ReplenishmentMode,
)
from arc_kernel.persistence.store import ConfigurationRepository
from arc_kernel.reports.inventory import inventory_report
from arc_kernel.reports.unlocks import locked_items_report
from arc_kernel.service import KernelService


# --- Request/Response Models ---

class ListCreateRequest(BaseModel):
    name: str
    mode: ReplenishmentMode = ReplenishmentMode.ONE_TIME
    priority: PriorityPolicy = PriorityPolicy.IN_ORDER
    count_storage: bool = False


class ItemAddRequest(BaseModel):
    item_id: int
    quantity: int
    merge: bool = False


class ImportRequest(BaseModel):
    text: str


class GroupCreateRequest(BaseModel):
    name: str
    list_ids: List[UUID] = []


class GroupListsRequest(BaseModel):
    list_ids: List[UUID]


class AccountModeRequest(BaseModel):
    mode: ManagementMode
    group_id: Optional[UUID] = None
    list_ids: Optional[List[UUID]] = None


class WorkerManagedRequest(BaseModel):
    managed: bool


# --- Application Factory ---

def create_app(
    catalog: Optional[VentureCatalog] = None,
    repository: Optional[ConfigurationRepository] = None,
    snapshot_provider: Optional[InMemorySnapshotProvider] = None,
    inventory: Optional[StaticInventory] = None,
    execution: Optional[StaticExecutionSystem] = None,
    notifier: Optional[CollectingNotifier] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="ARC Kernel API",
        description="Worker venture assignment and reconciliation",
        version="0.1.0",
    )

    # Initialize components
    repo = repository or ConfigurationRepository()
    cat = catalog or VentureCatalog([])
    snapshots = snapshot_provider or InMemorySnapshotProvider()
    inv = inventory or StaticInventory()
    notes = notifier or CollectingNotifier()
    store = ConfigurationStore(repo.load(), saver=repo.save)

    service = KernelService(
        store=store,
        catalog=cat,
        snapshot_provider=snapshots,
        stats_provider=snapshots,
        inventory=inv,
        execution=execution or StaticExecutionSystem(),
        notifier=notes,
        storage=inv,
    )

    # Store components on app state for access in endpoints
    app.state.store = store
    app.state.repository = repo
    app.state.catalog = cat
    app.state.service = service
    app.state.notifier = notes

    def _edited() -> None:
        store.save()

    # === SYNC ===

    @app.post("/sync")
    def sync():
        """Reconcile with the telemetry source."""
        return service.sync().to_dict()

    @app.get("/configuration")
    def get_configuration():
        """Current configuration snapshot."""
        return store.configuration.model_dump(mode="json")

    # === DEMAND LISTS ===

    @app.get("/lists")
    def list_lists():
        return [dl.model_dump(mode="json") for dl in store.configuration.demand_lists.values()]

    @app.post("/lists")
    def create_list(req: ListCreateRequest):
        try:
            demand_list = store.create_list(
                req.name, mode=req.mode, priority=req.priority, count_storage=req.count_storage
            )
        except InvalidNameError as e:
            raise HTTPException(422, str(e))
        _edited()
        return demand_list.model_dump(mode="json")

    @app.delete("/lists/{list_id}")
    def delete_list(list_id: UUID):
        try:
            store.delete_list(list_id)
        except NotFoundError:
            raise HTTPException(404, "Demand list not found")
        except ReferenceInUseError as e:
            raise HTTPException(409, {"message": str(e), "referenced_by": e.referenced_by})
        _edited()
        return {"status": "deleted", "list_id": str(list_id)}

    @app.post("/lists/{list_id}/items")
    def add_item(list_id: UUID, req: ItemAddRequest):
        try:
            item = store.add_item(list_id, req.item_id, req.quantity, merge=req.merge)
        except NotFoundError:
            raise HTTPException(404, "Demand list not found")
        _edited()
        return item.model_dump(mode="json")

    @app.post("/lists/{list_id}/import")
    def import_items(list_id: UUID, req: ImportRequest):
        """Import a Teamcraft-style "2000x Cobalt Ore" list."""
        items = parse_item_lines(req.text, cat)
        try:
            imported = store.import_items(list_id, items)
        except NotFoundError:
            raise HTTPException(404, "Demand list not found")
        _edited()
        return {"imported": imported}

    # === GROUPS ===

    @app.get("/groups")
    def list_groups():
        return [g.model_dump(mode="json") for g in store.configuration.groups.values()]

    @app.post("/groups")
    def create_group(req: GroupCreateRequest):
        try:
            group = store.create_group(req.name, req.list_ids)
        except InvalidNameError as e:
            raise HTTPException(422, str(e))
        except NotFoundError as e:
            raise HTTPException(404, str(e))
        _edited()
        return group.model_dump(mode="json")

    @app.put("/groups/{group_id}/lists")
    def set_group_lists(group_id: UUID, req: GroupListsRequest):
        try:
            group = store.set_group_lists(group_id, req.list_ids)
        except NotFoundError as e:
            raise HTTPException(404, str(e))
        _edited()
        return group.model_dump(mode="json")

    @app.delete("/groups/{group_id}")
    def delete_group(group_id: UUID):
        try:
            store.delete_group(group_id)
        except NotFoundError:
            raise HTTPException(404, "Group not found")
        except ReferenceInUseError as e:
            raise HTTPException(409, {"message": str(e), "referenced_by": e.referenced_by})
        _edited()
        return {"status": "deleted", "group_id": str(group_id)}

    # === ACCOUNTS ===

    @app.put("/accounts/{account_id}/mode")
    def set_account_mode(account_id: int, req: AccountModeRequest):
        try:
            account = store.set_account_mode(
                account_id, req.mode, group_id=req.group_id, list_ids=req.list_ids
            )
        except NotFoundError as e:
            raise HTTPException(404, str(e))
        _edited()
        return account.model_dump(mode="json")

    @app.put("/accounts/{account_id}/workers/{worker_id}/managed")
    def set_worker_managed(account_id: int, worker_id: int, req: WorkerManagedRequest):
        try:
            worker = store.set_worker_managed(account_id, worker_id, req.managed)
        except NotFoundError as e:
            raise HTTPException(404, str(e))
        _edited()
        return worker.model_dump(mode="json")

    # === ASSIGNMENT ===

    @app.post("/accounts/{account_id}/workers/{worker_id}/next")
    def next_venture(account_id: int, worker_id: int):
        """Venture-completion callback: assign the next venture."""
        return {"venture_id": service.next_venture(account_id, worker_id)}

    @app.get("/accounts/{account_id}/workers/{worker_id}/preview")
    def preview_venture(account_id: int, worker_id: int):
        """What the next venture would be, without assigning it."""
        return service.preview(account_id, worker_id).to_dict()

    # === REPORTS ===

    @app.get("/reports/locked-items")
    def locked_items(include_all: bool = False):
        return [
            r.model_dump(mode="json")
            for r in locked_items_report(store, cat, include_all=include_all)
        ]

    @app.get("/reports/inventory")
    def inventory():
        """Per-list stock held by the accounts using each list."""
        return [r.model_dump(mode="json") for r in inventory_report(store, cat, inv)]

    @app.get("/notifications")
    def notifications():
        return notes.messages

    return app
