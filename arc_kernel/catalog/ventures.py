"""
Venture Catalog — read-only lookup over venture definitions.

Definitions are kept in a stable order (level, then name, then venture id)
so that "the first matching venture" is deterministic.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from arc_kernel.errors import CatalogError
from arc_kernel.models.catalog import VentureCategory, VentureDefinition

logger = logging.getLogger(__name__)

# Worker job code -> the only gathering category that job can run.
# Jobs missing from this table are combat jobs.
GATHERING_JOBS: Dict[int, VentureCategory] = {
    16: VentureCategory.MINING,
    17: VentureCategory.BOTANY,
    18: VentureCategory.FISHING,
}


def matches_job(venture: VentureDefinition, job: int) -> bool:
    """Whether a worker with the given job code can take this venture."""
    gathering_category = GATHERING_JOBS.get(job)
    if venture.category.is_gathering:
        return gathering_category == venture.category
    return gathering_category is None


class VentureCatalog:
    """
    Static venture data plus the unlock-gated collectibles.

    collectibles maps a produced item id to the gathered-item id the account
    must have unlocked before any worker can bring it back.
    """

    def __init__(
        self,
        ventures: Iterable[VentureDefinition],
        collectibles: Optional[Dict[int, int]] = None,
    ):
        ordered = sorted(ventures, key=lambda v: (v.level, v.name, v.venture_id))
        self._validate(ordered)

        self._ventures: List[VentureDefinition] = ordered
        self._by_id: Dict[int, VentureDefinition] = {v.venture_id: v for v in ordered}
        self._by_item: Dict[int, List[VentureDefinition]] = defaultdict(list)
        for venture in ordered:
            self._by_item[venture.item_id].append(venture)
        self._collectibles: Dict[int, int] = dict(collectibles or {})

    @classmethod
    def from_document(cls, document: dict) -> "VentureCatalog":
        """Build a catalog from a JSON-style document."""
        try:
            ventures = [VentureDefinition.model_validate(v) for v in document.get("ventures", [])]
            collectibles = {
                int(item_id): int(gathered_id)
                for item_id, gathered_id in document.get("collectibles", {}).items()
            }
        except (ValueError, TypeError) as e:
            logger.error("Unable to load venture catalog: %s", e)
            raise CatalogError(f"Malformed venture catalog: {e}") from e
        return cls(ventures, collectibles)

    @staticmethod
    def _validate(ventures: List[VentureDefinition]) -> None:
        seen = set()
        for venture in ventures:
            if venture.venture_id in seen:
                logger.error("Duplicate venture id %d in catalog", venture.venture_id)
                raise CatalogError(f"Duplicate venture id {venture.venture_id}")
            seen.add(venture.venture_id)

            if not venture.rewards:
                logger.error("Venture %d has no reward tiers", venture.venture_id)
                raise CatalogError(f"Venture {venture.venture_id} has no reward tiers")

    @property
    def ventures(self) -> List[VentureDefinition]:
        """All definitions in stable order."""
        return list(self._ventures)

    @property
    def collectibles(self) -> Dict[int, int]:
        return dict(self._collectibles)

    def get(self, venture_id: int) -> Optional[VentureDefinition]:
        return self._by_id.get(venture_id)

    def for_item(self, item_id: int) -> List[VentureDefinition]:
        """Every definition producing item_id, in stable order."""
        return list(self._by_item.get(item_id, []))

    def first_for_item(self, item_id: int) -> Optional[VentureDefinition]:
        ventures = self._by_item.get(item_id)
        return ventures[0] if ventures else None

    def collectible_for(self, item_id: int) -> Optional[int]:
        """The gathered-item id gating item_id, if it is unlock-gated."""
        return self._collectibles.get(item_id)

    def find_by_name(self, name: str) -> Optional[VentureDefinition]:
        """Case-insensitive exact name lookup."""
        wanted = name.strip().lower()
        return next((v for v in self._ventures if v.name.lower() == wanted), None)

    def search(self, text: str) -> List[List[VentureDefinition]]:
        """
        Case-insensitive substring search, grouped by produced item.

        Each group lists every venture producing the same item, so a caller
        can show e.g. "Cobalt Ore (MIN DoWM)".
        """
        needle = text.lower()
        groups: Dict[int, List[VentureDefinition]] = {}
        for venture in self._ventures:
            if needle in venture.name.lower():
                groups.setdefault(venture.item_id, []).append(venture)
        return list(groups.values())
