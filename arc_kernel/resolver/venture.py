"""
Venture Resolver — can this worker bring back this item, and how many?

Returns (venture, reward):
  (None, None)       no venture fits the worker's level/job, or the item is
                     an unlock-gated collectible the account hasn't unlocked
  (venture, None)    the venture fits but the worker's stats earn nothing
  (venture, reward)  the best reward tier the worker currently earns
"""

import logging
from typing import Callable, List, NamedTuple, Optional

from arc_kernel.catalog.ventures import VentureCatalog, matches_job
from arc_kernel.models.catalog import RewardTier, VentureCategory, VentureDefinition
from arc_kernel.models.configuration import Account, TrackedWorker

logger = logging.getLogger(__name__)


class Resolution(NamedTuple):
    venture: Optional[VentureDefinition]
    reward: Optional[RewardTier]

    @property
    def assignable(self) -> bool:
        return self.venture is not None and self.reward is not None


NO_VENTURE = Resolution(None, None)


def _last_qualifying(
    rewards: List[RewardTier], qualifies: Callable[[RewardTier], bool]
) -> Optional[RewardTier]:
    # Reward tables are ordered by threshold; the last tier met is the best.
    chosen = None
    for tier in rewards:
        if qualifies(tier):
            chosen = tier
    return chosen


class VentureResolver:
    """Resolves (account, worker, item) to a venture and reward tier."""

    def __init__(self, catalog: VentureCatalog):
        self.catalog = catalog

    def resolve(self, account: Account, worker: TrackedWorker, item_id: int) -> Resolution:
        venture = next(
            (
                v for v in self.catalog.for_item(item_id)
                if v.level <= worker.level and matches_job(v, worker.job)
            ),
            None,
        )
        if venture is None:
            logger.debug("No applicable venture found for item %d", item_id)
            return NO_VENTURE

        gathered_id = self.catalog.collectible_for(item_id)
        if gathered_id is not None and gathered_id not in account.unlocked_items:
            logger.info("Account %s hasn't unlocked %s yet", account, venture.name)
            return NO_VENTURE

        logger.debug(
            "Found venture %s, id = %d, checking if it is suitable",
            venture.name,
            venture.venture_id,
        )
        return Resolution(venture, self._select_reward(venture, worker))

    @staticmethod
    def _select_reward(venture: VentureDefinition, worker: TrackedWorker) -> Optional[RewardTier]:
        if venture.category in (VentureCategory.MINING, VentureCategory.BOTANY):
            if worker.gathering < venture.required_gathering:
                return None
            return _last_qualifying(
                venture.rewards, lambda t: worker.perception >= t.perception_gatherer
            )

        if venture.category == VentureCategory.FISHING:
            if worker.gathering < venture.required_gathering:
                return None
            return _last_qualifying(
                venture.rewards, lambda t: worker.perception >= t.perception_fisher
            )

        if worker.item_level < venture.item_level_combat:
            return None
        return _last_qualifying(
            venture.rewards, lambda t: worker.item_level >= t.item_level_combat
        )
