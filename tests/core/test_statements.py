"""Tests for schemadb.core.statements — the per-depth statement cache."""

from __future__ import annotations

import pytest

from schemadb.core.adapters.sqlite import SQLiteAdapter
from schemadb.core.enums import BindKind
from schemadb.core.statements import StatementCache


@pytest.fixture
def adapter():
    adapter = SQLiteAdapter(":memory:")
    adapter.connect()
    yield adapter
    adapter.disconnect()


@pytest.fixture
def cache(adapter):
    cache = StatementCache(adapter)
    yield cache
    cache.close_all()


class TestAcquire:
    def test_same_sql_same_handle(self, cache):
        stmt = cache.acquire("SELECT 1")
        assert cache.acquire("SELECT 1") is stmt
        assert "SELECT 1" in cache
        assert len(cache) == 1

    def test_different_sql(self, cache):
        assert cache.acquire("SELECT 1") is not cache.acquire("SELECT 2")

    def test_reuse_disabled(self, adapter):
        cache = StatementCache(adapter, reuse=False)
        assert cache.acquire("SELECT 1") is not cache.acquire("SELECT 1")
        assert len(cache) == 0


class TestCheckoutRelease:
    def test_checkout_removes_without_closing(self, cache):
        stmt = cache.acquire("SELECT 1")
        assert cache.checkout("SELECT 1") is stmt
        assert "SELECT 1" not in cache
        assert not stmt.closed
        assert cache.acquire("SELECT 1") is not stmt

    def test_checkout_missing(self, cache):
        assert cache.checkout("SELECT 1") is None

    def test_release_reinserts(self, cache):
        stmt = cache.acquire("SELECT 1")
        stmt.execute()
        cache.checkout("SELECT 1")
        cache.release(stmt)
        assert not stmt.is_open
        assert cache.acquire("SELECT 1") is stmt

    def test_double_release_is_noop(self, cache):
        stmt = cache.acquire("SELECT 1")
        cache.checkout("SELECT 1")
        cache.release(stmt)
        cache.release(stmt)
        assert cache.acquire("SELECT 1") is stmt
        assert not stmt.closed

    def test_release_closed_is_noop(self, cache):
        stmt = cache.acquire("SELECT 1")
        cache.checkout("SELECT 1")
        stmt.close()
        cache.release(stmt)
        assert "SELECT 1" not in cache

    def test_release_when_slot_taken_closes(self, cache):
        first = cache.acquire("SELECT 1")
        cache.checkout("SELECT 1")
        second = cache.acquire("SELECT 1")
        cache.release(first)
        assert first.closed
        assert cache.acquire("SELECT 1") is second

    def test_release_with_reuse_disabled_closes(self, adapter):
        cache = StatementCache(adapter, reuse=False)
        stmt = cache.acquire("SELECT 1")
        cache.release(stmt)
        assert stmt.closed


class TestDepthFrames:
    def test_push_starts_empty_frame(self, cache):
        outer = cache.acquire("SELECT 1")
        cache.push()
        assert cache.depth == 1
        assert "SELECT 1" not in cache
        inner = cache.acquire("SELECT 1")
        assert inner is not outer

        cache.pop()
        assert cache.depth == 0
        assert inner.closed
        assert cache.acquire("SELECT 1") is outer

    def test_release_goes_to_current_depth(self, cache):
        stmt = cache.acquire("SELECT 1")
        cache.checkout("SELECT 1")
        cache.push()
        cache.release(stmt)
        assert "SELECT 1" in cache
        cache.pop()
        assert stmt.closed

    def test_close_all(self, cache):
        outer = cache.acquire("SELECT 1")
        cache.push()
        inner = cache.acquire("SELECT 2")
        cache.close_all()
        assert outer.closed and inner.closed
        assert cache.depth == 0
        assert len(cache) == 0

    def test_close_all_closes_checked_out(self, cache):
        stmt = cache.acquire("SELECT 1")
        stmt.execute()
        cache.checkout("SELECT 1")
        cache.close_all()
        assert stmt.closed
        assert not stmt.is_open
        cache.release(stmt)
        assert "SELECT 1" not in cache

    def test_close_all_closes_uncached_checkout(self, adapter):
        cache = StatementCache(adapter, reuse=False)
        stmt = cache.acquire("SELECT 1")
        assert cache.checkout("SELECT 1", stmt) is None
        cache.close_all()
        assert stmt.closed


class TestStatementBinding:
    def test_positional_and_named(self, cache):
        stmt = cache.acquire("SELECT ? AS a, ? AS b")
        stmt.bind(2, "two", BindKind.STR)
        stmt.bind(1, 1, BindKind.INT)
        stmt.execute()
        assert stmt.fetchall() == [{"a": 1, "b": "two"}]

        named = cache.acquire("SELECT :x AS x")
        named.bind(":x", None, BindKind.NULL)
        named.execute()
        assert named.fetchone() == {"x": None}

    def test_closed_statement_cannot_execute(self, cache):
        from schemadb.core.errors import SchemaDBError

        stmt = cache.acquire("SELECT 1")
        stmt.close()
        with pytest.raises(SchemaDBError, match="closed"):
            stmt.execute()
