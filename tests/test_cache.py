"""
Tests for the metadata cache.

Tests the name filter and the cache-aside snapshot store.
"""

import json
from unittest.mock import MagicMock

import pytest

from schema_explorer.cache import MetadataCacheStore, filter_by_names
from schema_explorer.models import ObjectKind, SchemaObjectMetadata


def make_objects(kind, *names):
    return [
        SchemaObjectMetadata(name=name, kind=kind, definition=f"-- {name}")
        for name in names
    ]


@pytest.fixture
def tables():
    return make_objects(ObjectKind.TABLES, "EMPLOYEES", "DEPARTMENTS", "EMP_HISTORY")


@pytest.fixture
def fetcher(tables):
    fetcher = MagicMock()
    fetcher.fetch_all.return_value = tables
    return fetcher


@pytest.fixture
def store(fetcher, tmp_path):
    return MetadataCacheStore(fetcher, tmp_path / "metadata")


class TestFilterByNames:
    """Tests for filter_by_names."""

    def test_empty_request_yields_empty(self, tables):
        assert filter_by_names(tables, []) == []
        assert filter_by_names(tables, None) == []
        assert filter_by_names(tables, ["", "  "]) == []

    def test_unknown_names_yield_empty(self, tables):
        assert filter_by_names(tables, ["ORDERS", "INVOICES"]) == []

    def test_all_names_yield_universe_in_order(self, tables):
        requested = [t.name for t in reversed(tables)]
        assert filter_by_names(tables, requested) == tables
        assert filter_by_names(tables, requested, contains=True) == tables

    def test_exact_match_is_case_insensitive(self, tables):
        result = filter_by_names(tables, ["employees"])
        assert [t.name for t in result] == ["EMPLOYEES"]

    def test_substring_match(self, tables):
        result = filter_by_names(tables, ["emp"], contains=True)
        assert [t.name for t in result] == ["EMPLOYEES", "EMP_HISTORY"]

    def test_exact_match_ignores_substrings(self, tables):
        assert filter_by_names(tables, ["EMP"]) == []

    def test_single_name_string(self, tables):
        assert [t.name for t in filter_by_names(tables, "emp", contains=True)] == ["EMPLOYEES", "EMP_HISTORY"]
        assert [t.name for t in filter_by_names(tables, "departments")] == ["DEPARTMENTS"]


class TestMetadataCacheStore:
    """Tests for MetadataCacheStore."""

    def test_second_read_served_from_snapshot(self, store, fetcher, tables):
        first = store.get_or_fetch(ObjectKind.TABLES)
        second = store.get_or_fetch(ObjectKind.TABLES)

        assert first == tables
        assert second == tables
        assert fetcher.fetch_all.call_count == 1

    def test_snapshot_file_format(self, store):
        store.get_or_fetch("tables")

        path = store.snapshot_path(ObjectKind.TABLES)
        assert path.name == "tables_metadata.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data[0] == {"TableName": "EMPLOYEES", "Definition": "-- EMPLOYEES"}
        assert len(data) == 3

    def test_creates_missing_cache_directory(self, fetcher, tmp_path):
        store = MetadataCacheStore(fetcher, tmp_path / "a" / "b" / "cache")
        store.get_or_fetch(ObjectKind.TABLES)
        assert store.snapshot_path(ObjectKind.TABLES).exists()

    def test_invalidate_forces_refetch(self, store, fetcher):
        store.get_or_fetch(ObjectKind.TABLES)
        assert store.invalidate(ObjectKind.TABLES) is True

        store.get_or_fetch(ObjectKind.TABLES)
        assert fetcher.fetch_all.call_count == 2

    def test_invalidate_missing_snapshot(self, store):
        assert store.invalidate(ObjectKind.VIEWS) is False

    def test_new_store_reads_existing_snapshot(self, store, fetcher, tables, tmp_path):
        store.get_or_fetch(ObjectKind.TABLES)

        other_fetcher = MagicMock()
        other = MetadataCacheStore(other_fetcher, tmp_path / "metadata")
        assert other.get_or_fetch(ObjectKind.TABLES) == tables
        other_fetcher.fetch_all.assert_not_called()

    def test_externally_deleted_snapshot_refetched(self, store, fetcher):
        store.get_or_fetch(ObjectKind.TABLES)
        store.snapshot_path(ObjectKind.TABLES).unlink()

        store.get_or_fetch(ObjectKind.TABLES)
        assert fetcher.fetch_all.call_count == 2

    def test_corrupt_snapshot_self_heals(self, store, fetcher, tables):
        path = store.snapshot_path(ObjectKind.TABLES)
        path.parent.mkdir(parents=True)
        path.write_text("[{not json", encoding="utf-8")

        assert store.get_or_fetch(ObjectKind.TABLES) == tables
        assert fetcher.fetch_all.call_count == 1
        assert len(json.loads(path.read_text(encoding="utf-8"))) == 3

    @pytest.mark.parametrize("content", [
        '{"TableName": "EMPLOYEES"}',
        '[{"ViewName": "EMPLOYEES"}]',
        '["EMPLOYEES"]',
    ])
    def test_wrong_shape_snapshot_refetched(self, store, fetcher, tables, content):
        path = store.snapshot_path(ObjectKind.TABLES)
        path.parent.mkdir(parents=True)
        path.write_text(content, encoding="utf-8")

        assert store.get_or_fetch(ObjectKind.TABLES) == tables
        fetcher.fetch_all.assert_called_once_with(ObjectKind.TABLES)

    def test_write_failure_still_returns_fetched(self, fetcher, tables, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = MetadataCacheStore(fetcher, blocker / "metadata")

        assert store.get_or_fetch(ObjectKind.TABLES) == tables
        assert not store.snapshot_path(ObjectKind.TABLES).exists()

    def test_unserializable_universe_leaves_file_untouched(self, store, fetcher, tables):
        path = store.snapshot_path(ObjectKind.TABLES)
        path.parent.mkdir(parents=True)
        path.write_text("[{not json", encoding="utf-8")

        bad = SchemaObjectMetadata(name="BAD", kind=ObjectKind.TABLES, attributes={"Blob": object()})
        fetcher.fetch_all.return_value = tables + [bad]

        assert store.get_or_fetch(ObjectKind.TABLES) == tables + [bad]
        assert path.read_text(encoding="utf-8") == "[{not json"

    def test_fetch_failure_propagates_without_snapshot(self, store, fetcher):
        error = RuntimeError("ORA-12541: TNS:no listener")
        fetcher.fetch_all.side_effect = error

        with pytest.raises(RuntimeError) as excinfo:
            store.get_or_fetch(ObjectKind.TABLES)

        assert excinfo.value is error
        assert not store.snapshot_path(ObjectKind.TABLES).exists()

    def test_lookup_uses_kind_matching(self, store, fetcher):
        assert [t.name for t in store.lookup(ObjectKind.TABLES, ["emp"])] == ["EMPLOYEES", "EMP_HISTORY"]
        assert [t.name for t in store.lookup(ObjectKind.TABLES, ["emp"], exact=True)] == []

        fetcher.fetch_all.return_value = make_objects(ObjectKind.PROCEDURES, "CALC_BONUS", "CALC_BONUS_V2")
        result = store.lookup(ObjectKind.PROCEDURES, ["calc_bonus"])
        assert [p.name for p in result] == ["CALC_BONUS"]
