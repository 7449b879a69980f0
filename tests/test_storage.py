"""Tests for the storage module (database, writer, reader, node store)."""

import sqlite3

import pytest

from usage_tree.exceptions import SnapshotNotFoundError
from usage_tree.models import NodeType, PersistedNode, SnapshotDescriptor
from usage_tree.persistence import SqliteNodeStore, TreeDB


def _node(snapshot_id, signature, parent="", type_=NodeType.CLASS, customer_id=3, **kwargs):
    return PersistedNode(
        snapshot_id=snapshot_id,
        customer_id=customer_id,
        signature=signature,
        parent_signature=parent,
        type=type_,
        **kwargs,
    )


def _snapshot(store, **kwargs):
    defaults = dict(customer_id=3, name="nightly", packages="com.foo.*", filter_invoked_at_millis=1000)
    defaults.update(kwargs)
    return store.create_snapshot(SnapshotDescriptor(**defaults))


class TestTreeDB:
    def test_creates_directory_and_gitignore(self, tmp_path):
        with TreeDB(tmp_path / "db") as db:
            assert (db.db_dir / ".gitignore").exists()
            assert (db.db_dir / ".gitignore").read_text() == "*\n"
            assert db.db_path.exists()

    def test_context_manager(self, tmp_path):
        with TreeDB(tmp_path) as db:
            assert db.connected
        assert not db.connected
        with pytest.raises(RuntimeError):
            db.conn

    def test_migrate_idempotent(self, tmp_path):
        with TreeDB(tmp_path) as db:
            pass
        with TreeDB(tmp_path) as db:
            row = db.conn.execute("SELECT COUNT(*) AS n FROM schema_version").fetchone()
            assert row["n"] == 1

    def test_creates_tables_and_indexes(self, tree_db):
        names = {
            r["name"]
            for r in tree_db.conn.execute("SELECT name FROM sqlite_master WHERE type IN ('table', 'index')")
        }
        assert {"snapshots", "snapshot_nodes", "idx_snapshot_nodes_parent"} <= names


class TestSnapshots:
    def test_create_assigns_id_and_timestamp(self, store):
        snap = _snapshot(store)
        assert snap.id is not None
        assert snap.created_at
        loaded = store.load_snapshot(snap.id)
        assert loaded == snap

    def test_load_missing(self, store):
        with pytest.raises(SnapshotNotFoundError):
            store.load_snapshot(404)

    def test_list_newest_first_with_node_counts(self, store):
        first = _snapshot(store, name="first")
        second = _snapshot(store, name="second", customer_id=4)
        store.save_nodes([_node(first.id, "a.B"), _node(first.id, "a.B.m()", "a.B", NodeType.METHOD)])

        rows = store.list_snapshots()
        assert [r["name"] for r in rows] == ["second", "first"]
        assert rows[1]["node_count"] == 2

        only_4 = store.list_snapshots(customer_id=4)
        assert [r["id"] for r in only_4] == [second.id]

    def test_delete_cascades_to_nodes(self, store):
        snap = _snapshot(store)
        store.save_nodes([_node(snap.id, "a.B")])
        assert store.delete_snapshot(snap.id)
        assert store.find_children(3, snap.id, "") == []
        assert not store.delete_snapshot(snap.id)

    def test_customer_required(self, store):
        with pytest.raises(ValueError):
            store.create_snapshot(SnapshotDescriptor(name="orphan"))


class TestNodeQueries:
    @pytest.fixture
    def snap(self, store):
        snap = _snapshot(store)
        store.save_nodes(
            [
                _node(snap.id, "com.foo", type_=NodeType.PACKAGE, used_count=2, unused_count=1),
                _node(snap.id, "com.foo.Bar", "com.foo", used_count=1, last_invoked_at_millis=5000),
                _node(snap.id, "com.foo.Bar.baz()", "com.foo.Bar", NodeType.METHOD, used_count=1),
                _node(snap.id, "com.foo.Qux", "com.foo", unused_count=1),
                _node(snap.id, "com.foo.Qux", "com.foo", customer_id=99),
            ]
        )
        return snap

    def test_round_trip_fields(self, store, snap):
        (bar,) = [n for n in store.find_children(3, snap.id, "com.foo") if n.signature == "com.foo.Bar"]
        assert bar.id is not None
        assert bar == _node(snap.id, "com.foo.Bar", "com.foo", used_count=1, last_invoked_at_millis=5000)

    def test_children_exact_parent_match(self, store, snap):
        assert [n.signature for n in store.find_children(3, snap.id, "")] == ["com.foo"]
        assert [n.signature for n in store.find_children(3, snap.id, "com.foo")] == [
            "com.foo.Bar",
            "com.foo.Qux",
        ]
        assert store.find_children(3, snap.id, "com") == []

    def test_children_scoped_to_customer(self, store, snap):
        assert len(store.find_children(99, snap.id, "com.foo")) == 1

    def test_substring_search_is_case_sensitive(self, store, snap):
        assert {n.signature for n in store.find_by_signature_substring(3, snap.id, "Bar")} == {
            "com.foo.Bar",
            "com.foo.Bar.baz()",
        }
        assert store.find_by_signature_substring(3, snap.id, "bar") == []

    def test_substring_wildcards_are_literal(self, store, snap):
        assert store.find_by_signature_substring(3, snap.id, "%") == []
        assert store.find_by_signature_substring(3, snap.id, "com_foo") == []

    def test_substring_excludes_node(self, store, snap):
        matches = store.find_by_signature_substring(3, snap.id, "Bar")
        bar_id = next(n.id for n in matches if n.signature == "com.foo.Bar")
        remaining = store.find_by_signature_substring(3, snap.id, "Bar", exclude_id=bar_id)
        assert [n.signature for n in remaining] == ["com.foo.Bar.baz()"]

    def test_delete_by_snapshot_scoped_to_customer(self, store, snap):
        store.delete_by_snapshot(3, snap.id)
        assert store.find_children(3, snap.id, "com.foo") == []
        assert len(store.find_children(99, snap.id, "com.foo")) == 1


class TestTransactions:
    def test_commit(self, tree_db, store):
        snap = _snapshot(store)
        with store.transaction():
            store.save_nodes([_node(snap.id, "a.B")])
        other = sqlite3.connect(str(tree_db.db_path))
        try:
            assert other.execute("SELECT COUNT(*) FROM snapshot_nodes").fetchone()[0] == 1
        finally:
            other.close()

    def test_rollback_on_error(self, store):
        snap = _snapshot(store)
        store.save_nodes([_node(snap.id, "old.Node")])
        with pytest.raises(RuntimeError):
            with store.transaction():
                store.delete_by_snapshot(3, snap.id)
                store.save_nodes([_node(snap.id, "new.Node")])
                raise RuntimeError("storage failed mid-write")
        assert [n.signature for n in store.find_children(3, snap.id, "")] == ["old.Node"]

    def test_nested_transaction_joins_outer(self, store):
        snap = _snapshot(store)
        with pytest.raises(RuntimeError):
            with store.transaction():
                with store.transaction():
                    store.save_nodes([_node(snap.id, "a.B")])
                raise RuntimeError("outer failure")
        assert store.find_children(3, snap.id, "") == []

    def test_write_outside_transaction_commits(self, tree_db, store):
        snap = _snapshot(store)
        store.save_nodes([_node(snap.id, "a.B")])
        assert not tree_db.conn.in_transaction
