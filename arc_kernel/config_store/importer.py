"""Parse Teamcraft-style item lists ("2000x Cobalt Ore") into line items."""

import logging
import re
from typing import List

from arc_kernel.catalog.ventures import VentureCatalog
from arc_kernel.models.configuration import LineItem

logger = logging.getLogger(__name__)

COUNT_AND_NAME = re.compile(r"^(\d{1,5})x?\s+(.*)$")


def parse_item_lines(text: str, catalog: VentureCatalog) -> List[LineItem]:
    """
    Parse one "<count>[x] <venture name>" entry per line.

    Lines that don't match, or that name no known venture, are skipped.
    """
    items: List[LineItem] = []
    for line in text.splitlines():
        match = COUNT_AND_NAME.match(line.strip())
        if not match:
            continue

        venture = catalog.find_by_name(match.group(2))
        if venture is None:
            logger.debug("Skipping unknown item '%s' in import", match.group(2))
            continue

        items.append(LineItem(item_id=venture.item_id, quantity=int(match.group(1))))
    return items
