"""JSON-file backed vehicle inventory with the keyed-collection operations the core uses."""

from __future__ import annotations

import json
import logging
import threading
import time
import uuid
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .errors import UnitNotFound

logger = logging.getLogger("motormind.inventory")


@dataclass(frozen=True)
class InventoryItem:
    """Immutable snapshot of one stock record."""
    id: str
    model: str
    location: str
    color: str
    stock: int
    price: float
    type: str
    created_at: float = 0.0
    updated_at: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "model": self.model,
            "location": self.location,
            "color": self.color,
            "stock": self.stock,
            "price": self.price,
            "type": self.type,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InventoryItem":
        return cls(
            id=str(data["id"]),
            model=str(data.get("model", "")),
            location=str(data.get("location", "")),
            color=str(data.get("color", "")),
            stock=int(data.get("stock", 0)),
            price=float(data.get("price", 0)),
            type=str(data.get("type", "")),
            created_at=float(data.get("createdAt", 0.0)),
            updated_at=float(data.get("updatedAt", 0.0)),
        )


class InventoryStore:
    """Keyed vehicle collection persisted to a JSON file (or memory only when path is None)."""

    def __init__(self, path: Optional[Path] = None) -> None:
        """Purpose: Initialize the store and hydrate items from disk if available.
        Inputs/Outputs: Input is an optional JSON file path; no return value.
        Side Effects / State: Loads items into an in-memory dict keyed by id.
        Dependencies: Calls _load; relies on InventoryItem.from_dict.
        Failure Modes: JSON decode errors leave an empty store.
        If Removed: The resolution core has no inventory to search or decrement.
        Testing Notes: Use path=None for in-memory tests; tmp_path for persistence.
        """
        # Keep configuration and preload persisted items if present.
        self._path = path
        self._items: Dict[str, InventoryItem] = {}
        self._lock = threading.Lock()
        self._load()

    def _load(self) -> None:
        if not self._path or not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("inventory file=%s unreadable, starting empty", self._path)
            return
        records = data.get("vehicles", []) if isinstance(data, dict) else []
        for record in records:
            if not isinstance(record, dict) or "id" not in record:
                continue
            item = InventoryItem.from_dict(record)
            self._items[item.id] = item

    def _persist(self) -> None:
        """Purpose: Write the in-memory items to disk.
        Inputs/Outputs: Writes to self._path; no return value.
        Side Effects / State: Overwrites the JSON file; creates parent directories.
        Dependencies: Uses json.dumps and Path.write_text.
        Failure Modes: IO errors raise exceptions (not caught here).
        If Removed: Inventory changes are lost on restart.
        Testing Notes: Reopen a store on the same path and compare items.
        """
        # Serialize the current collection; callers hold the lock.
        if not self._path:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"vehicles": [item.to_dict() for item in self._items.values()]}
        self._path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    def __len__(self) -> int:
        return len(self._items)

    def list_all(self) -> List[InventoryItem]:
        return list(self._items.values())

    def get(self, item_id: str) -> Optional[InventoryItem]:
        return self._items.get(item_id)

    def create(
        self,
        model: str,
        location: str,
        stock: int,
        price: float,
        color: str,
        type: str,
    ) -> InventoryItem:
        now = time.time()
        item = InventoryItem(
            id=str(uuid.uuid4()),
            model=model,
            location=location,
            color=color,
            stock=stock,
            price=price,
            type=type,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._items[item.id] = item
            self._persist()
        logger.info("created vehicle id=%s model=%s location=%s stock=%s", item.id, model, location, stock)
        return item

    def update(
        self,
        item_id: str,
        model: str,
        location: str,
        stock: int,
        price: float,
        color: str,
    ) -> InventoryItem:
        with self._lock:
            existing = self._items.get(item_id)
            if existing is None:
                raise UnitNotFound(item_id)
            item = replace(
                existing,
                model=model,
                location=location,
                stock=stock,
                price=price,
                color=color,
                updated_at=time.time(),
            )
            self._items[item_id] = item
            self._persist()
        return item

    def delete(self, item_id: str) -> InventoryItem:
        with self._lock:
            item = self._items.pop(item_id, None)
            if item is None:
                raise UnitNotFound(item_id)
            self._persist()
        logger.info("deleted vehicle id=%s model=%s", item_id, item.model)
        return item

    def search_in_stock(self, model: str) -> List[InventoryItem]:
        """Purpose: Case-insensitive substring search on model name, stock >= 1 only.
        Inputs/Outputs: Input is a model fragment; output is matching snapshots.
        Side Effects / State: None.
        Dependencies: Used by the orchestrator's exact-match step.
        Failure Modes: A blank fragment returns an empty list.
        If Removed: Exact-match allocation cannot find candidate units.
        Testing Notes: "splendor" should match "Hero Super Splendor" with stock 2.
        """
        needle = (model or "").strip().lower()
        if not needle:
            return []
        return [
            item
            for item in self._items.values()
            if needle in item.model.lower() and item.stock >= 1
        ]

    def set_stock(self, item_id: str, stock: int) -> InventoryItem:
        # Single-field write; no comparison against the previous value.
        with self._lock:
            existing = self._items.get(item_id)
            if existing is None:
                raise UnitNotFound(item_id)
            item = replace(existing, stock=stock, updated_at=time.time())
            self._items[item_id] = item
            self._persist()
        return item

    def seed(self, records: Iterable[Dict[str, Any]]) -> int:
        """Purpose: Populate an empty store from sample records.
        Inputs/Outputs: Input is an iterable of vehicle dicts; output is created count.
        Side Effects / State: Creates items and persists them.
        Dependencies: Uses create(); records come from load_seed_records.
        Failure Modes: Records missing required keys are skipped with a warning.
        If Removed: Fresh deployments start with no inventory.
        Testing Notes: Seeding twice must not duplicate items.
        """
        # Only seed a store that has never held inventory.
        if self._items:
            return 0
        created = 0
        for record in records:
            try:
                self.create(
                    model=str(record["model"]),
                    location=str(record["location"]),
                    stock=int(record["stock"]),
                    price=float(record["price"]),
                    color=str(record["color"]),
                    type=str(record.get("type", "BIKE")),
                )
            except (KeyError, TypeError, ValueError):
                logger.warning("skipping malformed seed record=%s", record)
                continue
            created += 1
        logger.info("seeded inventory count=%s", created)
        return created


def load_seed_records(path: Path) -> List[Dict[str, Any]]:
    # Accept either a bare list or {"vehicles": [...]}.
    data = json.loads(path.read_text(encoding="utf-8-sig"))
    if isinstance(data, dict):
        data = data.get("vehicles", [])
    return [record for record in data if isinstance(record, dict)] if isinstance(data, list) else []
