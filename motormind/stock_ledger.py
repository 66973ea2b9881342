from __future__ import annotations

import logging

from .errors import OutOfStock, UnitNotFound
from .inventory_store import InventoryItem, InventoryStore

logger = logging.getLogger("motormind.ledger")


class StockLedger:
    """Guarded decrement of a unit's stock when it is allocated or bought."""

    def __init__(self, store: InventoryStore) -> None:
        self._store = store

    def decrement(self, unit_id: str) -> InventoryItem:
        """Purpose: Reduce a unit's stock by exactly one after precondition checks.
        Inputs/Outputs: Input is the unit id; output is the updated InventoryItem.
        Side Effects / State: Writes the new stock through InventoryStore.set_stock.
        Dependencies: InventoryStore.get and InventoryStore.set_stock.
        Failure Modes: UnitNotFound if the id is unknown; OutOfStock if stock <= 0.
            The read and the write are separate store calls, so concurrent
            decrements of the last unit can both pass the check.
        If Removed: Allocations never reserve inventory and stock drifts from reality.
        Testing Notes: Stock 1 -> 0 succeeds once; the next call raises OutOfStock.
        """
        # Existence first, availability second, then an unconditional write.
        existing = self._store.get(unit_id)
        if existing is None:
            logger.warning("decrement rejected id=%s reason=not_found", unit_id)
            raise UnitNotFound(unit_id)
        if existing.stock <= 0:
            logger.warning("decrement rejected id=%s reason=out_of_stock", unit_id)
            raise OutOfStock(unit_id)

        updated = self._store.set_stock(unit_id, existing.stock - 1)
        logger.info(
            "stock updated id=%s model=%s stock=%s->%s",
            unit_id,
            updated.model,
            existing.stock,
            updated.stock,
        )
        return updated
