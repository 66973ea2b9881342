"""Shared fixtures: a scripted oracle and a small in-memory inventory."""

from dataclasses import replace
from typing import List, Optional, Tuple

import pytest

from motormind.config import load_settings
from motormind.inventory_store import InventoryStore


class ScriptedOracle:
    """Returns queued replies in order and records every call."""

    def __init__(self) -> None:
        self.replies: List[Optional[str]] = []
        self.calls: List[Tuple[str, str]] = []

    def queue(self, *replies: Optional[str]) -> "ScriptedOracle":
        self.replies.extend(replies)
        return self

    def complete(self, system_instruction: str, message: str) -> str:
        self.calls.append((system_instruction, message))
        if not self.replies:
            raise AssertionError("oracle called more times than scripted")
        return self.replies.pop(0)


@pytest.fixture
def oracle():
    return ScriptedOracle()


@pytest.fixture
def store():
    inventory = InventoryStore(None)
    inventory.create("Hero Super Splendor", "Jodhpur", 2, 82000, "Blue", "BIKE")
    inventory.create("Hero Super Splendor", "Jaipur", 1, 82000, "Black", "BIKE")
    inventory.create("Hero Splendor Plus", "Udaipur", 4, 76000, "Red", "BIKE")
    inventory.create("Hero Splendor Plus", "Delhi", 0, 76000, "Silver", "BIKE")
    inventory.create("Bajaj Pulsar 150", "Delhi", 3, 115000, "Red", "BIKE")
    inventory.create("Yamaha YZF R15 V4", "Pune", 1, 182000, "Blue", "BIKE")
    inventory.create("Honda Activa 6G", "Kota", 5, 79000, "White", "SCOOTER")
    return inventory


@pytest.fixture
def settings(tmp_path):
    return replace(
        load_settings(),
        inventory_path=tmp_path / "inventory.json",
        seed_on_startup=False,
        log_level="DEBUG",
    )


@pytest.fixture
def find_item(store):
    def _find(model, location):
        for item in store.list_all():
            if item.model == model and item.location == location:
                return item
        raise LookupError(f"{model} @ {location}")

    return _find
