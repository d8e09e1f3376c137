#!/usr/bin/env python3
"""
Tests for the snapshot files and the cached conversation store.
"""

import json
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from weneed.memory import ConversationStore
from weneed.models import NeededSnapshot
from weneed.snapshot_store import SnapshotStore


def make_store(data_dir: Path) -> ConversationStore:
    snapshots = SnapshotStore(data_dir)
    snapshots.ensure_root()
    return ConversationStore(snapshots)


def test_path_is_decimal_id(tmp_path):
    snapshots = SnapshotStore(tmp_path)
    assert snapshots.path_for(42) == tmp_path / "42.json"
    assert snapshots.path_for(-100123) == tmp_path / "-100123.json"


def test_read_missing_snapshot_returns_none(tmp_path):
    assert SnapshotStore(tmp_path).read(7) is None


def test_write_then_read(tmp_path):
    snapshots = SnapshotStore(tmp_path)
    assert snapshots.write(42, NeededSnapshot(items=["Bread", "eggs"]))

    on_disk = json.loads((tmp_path / "42.json").read_text(encoding="utf-8"))
    assert on_disk == {"items": ["Bread", "eggs"]}
    assert snapshots.read(42).items == ["Bread", "eggs"]
    # No temporary files are left behind.
    assert sorted(p.name for p in tmp_path.iterdir()) == ["42.json"]


def test_write_replaces_previous_snapshot(tmp_path):
    snapshots = SnapshotStore(tmp_path)
    snapshots.write(1, NeededSnapshot(items=["a", "b", "c"]))
    snapshots.write(1, NeededSnapshot(items=["d"]))
    assert snapshots.read(1).items == ["d"]


def test_legacy_list_key_is_accepted(tmp_path):
    (tmp_path / "5.json").write_text('{"list": ["Tea"]}', encoding="utf-8")
    assert SnapshotStore(tmp_path).read(5).items == ["Tea"]


def test_corrupt_snapshot_reads_as_none(tmp_path, caplog):
    (tmp_path / "9.json").write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        assert SnapshotStore(tmp_path).read(9) is None
    assert "Failed to parse snapshot" in caplog.text


def test_incompatible_snapshot_reads_as_none(tmp_path):
    (tmp_path / "9.json").write_text('{"items": "Milk"}', encoding="utf-8")
    assert SnapshotStore(tmp_path).read(9) is None


def test_write_failure_returns_false(tmp_path, caplog):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        assert SnapshotStore(blocker).write(1, NeededSnapshot(items=["Milk"])) is False
    assert "Failed to write snapshot" in caplog.text


def test_hydration_miss_gives_empty_list(tmp_path):
    store = make_store(tmp_path)
    needed = store.get_or_create(123)
    assert len(needed) == 0
    assert 123 in store
    # Looking up alone does not create a snapshot.
    assert not (tmp_path / "123.json").exists()


def test_get_or_create_returns_cached_entry(tmp_path):
    store = make_store(tmp_path)
    first = store.get_or_create(1)
    first.add_batch("Milk")
    assert store.get_or_create(1) is first
    assert store.conversation_ids() == [1]


def test_persistence_round_trip_across_restart(tmp_path):
    store = make_store(tmp_path)
    store.get_or_create(42).add_batch("Bread, eggs")
    assert store.persist(42)

    restarted = make_store(tmp_path)
    needed = restarted.get_or_create(42)
    assert [i.display for i in needed.items] == ["Bread", "eggs"]
    assert "bread" in needed and "EGGS" in needed


def test_corrupt_snapshot_starts_empty(tmp_path):
    (tmp_path / "3.json").write_text("garbage", encoding="utf-8")
    store = make_store(tmp_path)
    assert len(store.get_or_create(3)) == 0


def test_persist_unknown_conversation_is_noop(tmp_path):
    store = make_store(tmp_path)
    assert store.persist(99) is False
    assert not (tmp_path / "99.json").exists()


def test_cache_stays_authoritative_after_write_failure(tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("", encoding="utf-8")
    store = ConversationStore(SnapshotStore(blocker))

    needed = store.get_or_create(1)
    needed.add_batch("Milk")
    assert store.persist(1) is False
    assert "Milk" in store.get_or_create(1)


def test_conversations_are_independent(tmp_path):
    store = make_store(tmp_path)
    store.get_or_create(1).add_batch("Milk")
    store.get_or_create(2).add_batch("Tea")
    store.persist(1)
    store.persist(2)

    restarted = make_store(tmp_path)
    assert [i.display for i in restarted.get_or_create(1).items] == ["Milk"]
    assert [i.display for i in restarted.get_or_create(2).items] == ["Tea"]
