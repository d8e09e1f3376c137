#!/usr/bin/env python3
"""
Tests for command parsing and the need/got service with write-through.
"""

import logging
import sys
import threading
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from weneed.commands import HELP_TEXT, Action, parse_command
from weneed.memory import ConversationStore
from weneed.needed import EVERYTHING_THERE
from weneed.service import NeedService
from weneed.snapshot_store import SnapshotStore


@pytest.fixture
def snapshots(tmp_path):
    store = SnapshotStore(tmp_path)
    store.ensure_root()
    return store


@pytest.fixture
def service(snapshots):
    return NeedService(ConversationStore(snapshots), bot_username="WeNeedBot")


def test_parse_command_variants():
    cmd = parse_command("/need milk, bread")
    assert cmd.action is Action.need
    assert cmd.args == "milk, bread"

    cmd = parse_command("/weneed@WeNeedBot  Milk ")
    assert cmd.action is Action.need
    assert cmd.bot_username == "WeNeedBot"
    assert cmd.args == "Milk"

    assert parse_command("/got").args == ""
    assert parse_command("/GOT eggs").action is Action.got
    assert parse_command("/list").action is Action.show
    assert parse_command("/start").action is Action.help


def test_parse_command_ignores_plain_text():
    assert parse_command(None) is None
    assert parse_command("") is None
    assert parse_command("we need milk") is None
    assert parse_command("/") is None


def test_unknown_command_has_no_action():
    cmd = parse_command("/dance now")
    assert cmd.keyword == "dance"
    assert cmd.action is None


def test_end_to_end_milk_and_bread(service, snapshots):
    reply = service.handle_text(1, "/need Milk, Bread, milk")
    assert reply == "'milk' already on the list!\nWe need:\n1. Bread\n2. Milk"
    assert snapshots.read(1).items == ["Bread", "Milk"]

    reply = service.handle_text(1, "/got bread")
    assert reply == "We still need:\n1. Milk"
    assert snapshots.read(1).items == ["Milk"]


def test_got_everything(service, snapshots):
    service.need(5, "Beer")
    assert service.got(5, "beer") == EVERYTHING_THERE
    assert snapshots.read(5).items == []


def test_list_and_help(service):
    assert service.handle_text(2, "/list") == EVERYTHING_THERE
    service.need(2, "Tea")
    assert service.handle_text(2, "/list") == "We need:\n1. Tea"
    assert service.handle_text(2, "/help") == HELP_TEXT


def test_unknown_and_plain_messages_get_no_reply(service, caplog):
    with caplog.at_level(logging.WARNING):
        assert service.handle_text(1, "/dance") is None
    assert "Unknown command /dance" in caplog.text
    assert service.handle_text(1, "hello there") is None


def test_commands_for_other_bots_are_ignored(service):
    assert service.handle_text(1, "/need@OtherBot milk") is None
    assert service.handle_text(1, "/need@weneedbot milk") == "We need:\n1. milk"


def test_unchanged_list_is_not_rewritten(service, snapshots, monkeypatch):
    service.need(3, "Milk")
    writes = []
    original_write = snapshots.write

    def counting_write(conversation_id, snapshot):
        writes.append(conversation_id)
        return original_write(conversation_id, snapshot)

    monkeypatch.setattr(snapshots, "write", counting_write)
    service.need(3, "milk")
    service.got(3, "Jam")
    service.show(3)
    assert writes == []

    service.got(3, "MILK")
    assert writes == [3]


def test_write_failure_still_answers(service, snapshots, monkeypatch):
    monkeypatch.setattr(snapshots, "write", lambda conversation_id, snapshot: False)
    assert service.need(4, "Milk") == "We need:\n1. Milk"
    assert service.need(4, "Bread") == "We need:\n1. Bread\n2. Milk"


def test_history_survives_restart(snapshots):
    NeedService(ConversationStore(snapshots)).need(42, "Bread, eggs")

    restarted = NeedService(ConversationStore(snapshots))
    reply = restarted.need(42, "EGGS, Jam")
    assert reply == "'EGGS' already on the list!\nWe need:\n1. Bread\n2. eggs\n3. Jam"


def test_concurrent_adds_on_one_conversation(service, snapshots):
    names = [f"item{i}" for i in range(40)]

    def worker(name):
        service.need(7, name)

    threads = [threading.Thread(target=worker, args=(n,)) for n in names]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    needed = service.store.get_or_create(7)
    assert len(needed) == len(names)
    assert sorted(snapshots.read(7).items) == sorted(names)


def test_next_successful_write_catches_up_after_failure(service, snapshots, monkeypatch):
    monkeypatch.setattr(snapshots, "write", lambda conversation_id, snapshot: False)
    service.need(1, "Milk")
    assert snapshots.read(1) is None

    monkeypatch.undo()
    service.need(1, "Bread")
    assert snapshots.read(1).items == ["Bread", "Milk"]
