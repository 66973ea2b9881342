"""Tests for the JSON-backed inventory store."""

import json

import pytest

from motormind.errors import UnitNotFound
from motormind.inventory_store import InventoryStore, load_seed_records


class TestSearch:
    def test_case_insensitive_substring_with_stock(self, store):
        models = sorted((item.model, item.location) for item in store.search_in_stock("SPLENDOR"))
        assert models == [
            ("Hero Splendor Plus", "Udaipur"),
            ("Hero Super Splendor", "Jaipur"),
            ("Hero Super Splendor", "Jodhpur"),
        ]

    def test_full_model_name(self, store):
        hits = store.search_in_stock("hero super splendor")
        assert {item.location for item in hits} == {"Jodhpur", "Jaipur"}

    def test_blank_term_matches_nothing(self, store):
        assert store.search_in_stock("  ") == []

    def test_no_match(self, store):
        assert store.search_in_stock("Yamaha R15") == []


class TestMutations:
    def test_create_and_get(self):
        inventory = InventoryStore(None)
        item = inventory.create("Honda Shine", "Bikaner", 6, 84000, "Black", "BIKE")
        assert inventory.get(item.id) == item
        assert item.created_at == item.updated_at > 0

    def test_update_replaces_fields(self, store, find_item):
        item = find_item("Honda Activa 6G", "Kota")
        updated = store.update(item.id, "Honda Activa 125", "Kota", 9, 85000, "Grey")
        assert updated.model == "Honda Activa 125"
        assert updated.stock == 9
        assert updated.type == "SCOOTER"
        assert store.get(item.id) == updated

    def test_update_missing_raises(self, store):
        with pytest.raises(UnitNotFound):
            store.update("nope", "X", "Y", 1, 1, "Z")

    def test_delete(self, store, find_item):
        item = find_item("Bajaj Pulsar 150", "Delhi")
        assert store.delete(item.id) == item
        assert store.get(item.id) is None
        with pytest.raises(UnitNotFound):
            store.delete(item.id)

    def test_set_stock(self, store, find_item):
        item = find_item("Bajaj Pulsar 150", "Delhi")
        assert store.set_stock(item.id, 0).stock == 0
        assert store.search_in_stock("pulsar") == []

    def test_snapshots_are_not_mutated_by_later_writes(self, store, find_item):
        before = find_item("Bajaj Pulsar 150", "Delhi")
        store.set_stock(before.id, 1)
        assert before.stock == 3


class TestPersistence:
    def test_reload_from_disk(self, tmp_path):
        path = tmp_path / "data" / "inventory.json"
        first = InventoryStore(path)
        item = first.create("Yamaha FZ-S", "Pune", 3, 122000, "Blue", "BIKE")
        first.set_stock(item.id, 2)

        second = InventoryStore(path)
        assert second.get(item.id).stock == 2
        assert second.get(item.id).model == "Yamaha FZ-S"

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "inventory.json"
        path.write_text("{not json", encoding="utf-8")
        assert len(InventoryStore(path)) == 0


class TestSeeding:
    def test_seed_only_when_empty(self, tmp_path):
        seed_file = tmp_path / "seed.json"
        seed_file.write_text(
            json.dumps(
                [
                    {"model": "Honda Shine", "location": "Bikaner", "stock": 6, "price": 84000, "color": "Black"},
                    {"model": "Broken"},
                ]
            ),
            encoding="utf-8",
        )
        inventory = InventoryStore(None)
        assert inventory.seed(load_seed_records(seed_file)) == 1
        assert inventory.list_all()[0].type == "BIKE"
        assert inventory.seed(load_seed_records(seed_file)) == 0
        assert len(inventory) == 1

    def test_seed_file_with_wrapper_object(self, tmp_path):
        seed_file = tmp_path / "seed.json"
        seed_file.write_text(json.dumps({"vehicles": [{"model": "A"}, "junk"]}), encoding="utf-8")
        assert load_seed_records(seed_file) == [{"model": "A"}]
