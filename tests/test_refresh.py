"""Tests for CacheRefreshTool."""

from unittest.mock import MagicMock

import pytest

from schema_explorer.cache import MetadataCacheStore
from schema_explorer.models import ALL_KINDS, ObjectKind, SchemaObjectMetadata
from schema_explorer.refresh import CacheRefreshTool


def fetch_all(kind):
    return [SchemaObjectMetadata(name=f"{kind.value.upper()}_1", kind=kind, definition="v2")]


@pytest.fixture
def fetcher():
    fetcher = MagicMock()
    fetcher.fetch_all.side_effect = fetch_all
    return fetcher


@pytest.fixture
def store(fetcher, tmp_path):
    return MetadataCacheStore(fetcher, tmp_path)


class TestCacheRefreshTool:
    """Tests for CacheRefreshTool."""

    def test_refresh_kind_replaces_snapshot(self, store, fetcher):
        store.get_or_fetch(ObjectKind.TABLES)

        result = CacheRefreshTool(store).refresh_kind("tables")

        assert [r.name for r in result] == ["TABLES_1"]
        assert fetcher.fetch_all.call_count == 2
        assert store.snapshot_path(ObjectKind.TABLES).exists()

    def test_refresh_all_in_order(self, store, fetcher):
        seen = []
        counts = CacheRefreshTool(store).refresh_all(on_refreshed=lambda kind, n: seen.append(kind))

        assert list(counts) == ALL_KINDS
        assert set(counts.values()) == {1}
        assert seen == ALL_KINDS
        assert [c.args[0] for c in fetcher.fetch_all.call_args_list] == ALL_KINDS

    def test_refresh_all_stops_at_first_failure(self, store, fetcher):
        triggers_snapshot = store.snapshot_path(ObjectKind.TRIGGERS)
        triggers_snapshot.write_text('[{"TriggerName": "OLD", "Definition": "v1"}]', encoding="utf-8")

        error = ConnectionError("ORA-03113: end-of-file on communication channel")

        def failing_fetch(kind):
            if kind == ObjectKind.VIEWS:
                raise error
            return fetch_all(kind)

        fetcher.fetch_all.side_effect = failing_fetch
        tool = CacheRefreshTool(store, kinds=["tables", "views", "triggers"])

        with pytest.raises(ConnectionError) as excinfo:
            tool.refresh_all()

        assert excinfo.value is error
        assert store.snapshot_path(ObjectKind.TABLES).exists()
        assert not store.snapshot_path(ObjectKind.VIEWS).exists()
        assert "OLD" in triggers_snapshot.read_text(encoding="utf-8")
        assert ObjectKind.TRIGGERS not in [c.args[0] for c in fetcher.fetch_all.call_args_list]
