"""In-Progress Estimator — quantities promised by workers mid-venture."""

import logging
from typing import Dict

from arc_kernel.catalog.ventures import VentureCatalog
from arc_kernel.models.configuration import Account
from arc_kernel.resolver.venture import VentureResolver

logger = logging.getLogger(__name__)


class InProgressEstimator:
    """
    Sums the expected reward of every managed worker that is out on a venture.

    A worker whose completion event fired but whose reward hasn't been
    collected still counts as in progress. This overcounts on purpose, so
    the same demand is never assigned twice.
    """

    def __init__(self, catalog: VentureCatalog, resolver: VentureResolver):
        self.catalog = catalog
        self.resolver = resolver

    def estimate(self, account: Account) -> Dict[int, int]:
        in_progress: Dict[int, int] = {}
        for worker in account.tracked_workers():
            if not (worker.managed and worker.has_venture and worker.last_venture != 0):
                continue

            venture = self.catalog.get(worker.last_venture)
            if venture is None:
                continue

            resolution = self.resolver.resolve(account, worker, venture.item_id)
            if not resolution.assignable:
                continue

            in_progress[venture.item_id] = (
                in_progress.get(venture.item_id, 0) + resolution.reward.quantity
            )

        for item_id, quantity in in_progress.items():
            logger.debug("Venture in progress: item %d for a total amount of %d", item_id, quantity)
        return in_progress
