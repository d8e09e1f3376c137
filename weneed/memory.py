from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List

from .logging_config import get_logger
from .needed import NeededList
from .snapshot_store import SnapshotStore

logger = get_logger(__name__)


class ConversationStore:
  """
  Needed lists keyed by conversation id, backed by a SnapshotStore.

  A conversation is loaded from its snapshot the first time it is looked up
  and stays cached for the life of the process. Writing back is a separate,
  explicit step (``persist``) so callers see where storage happens.

  Each conversation has its own lock; hold it via ``locked`` around a whole
  lookup-mutate-persist sequence when updates may arrive concurrently.
  """

  def __init__(self, snapshots: SnapshotStore) -> None:
    self.snapshots = snapshots
    self._entries: Dict[int, NeededList] = {}
    self._locks: Dict[int, threading.Lock] = {}
    self._registry_lock = threading.Lock()

  def __contains__(self, conversation_id: object) -> bool:
    with self._registry_lock:
      return conversation_id in self._entries

  def conversation_ids(self) -> List[int]:
    with self._registry_lock:
      return list(self._entries)

  def _lock_for(self, conversation_id: int) -> threading.Lock:
    with self._registry_lock:
      lock = self._locks.get(conversation_id)
      if lock is None:
        lock = self._locks[conversation_id] = threading.Lock()
      return lock

  @contextmanager
  def locked(self, conversation_id: int) -> Iterator[None]:
    with self._lock_for(conversation_id):
      yield

  def get_or_create(self, conversation_id: int) -> NeededList:
    """
    Return the cached list for a conversation, hydrating it on first access.

    Falls back to an empty list when there is no snapshot or it is unusable.
    """
    with self._registry_lock:
      needed = self._entries.get(conversation_id)
    if needed is not None:
      return needed

    snapshot = self.snapshots.read(conversation_id)
    if snapshot is None:
      needed = NeededList()
    else:
      needed = NeededList.from_snapshot(snapshot)
      logger.info(
        f"Restored {len(needed)} item(s) for conversation {conversation_id}",
        extra={"conversation_id": conversation_id},
      )

    with self._registry_lock:
      # Another caller may have hydrated the same id in the meantime.
      return self._entries.setdefault(conversation_id, needed)

  def persist(self, conversation_id: int) -> bool:
    """
    Write the cached list of a conversation to its snapshot.

    Does nothing for conversations that were never looked up. Returns
    whether a snapshot was written.
    """
    with self._registry_lock:
      needed = self._entries.get(conversation_id)
    if needed is None:
      logger.debug(
        f"Nothing to persist for conversation {conversation_id}",
        extra={"conversation_id": conversation_id},
      )
      return False
    return self.snapshots.write(conversation_id, needed.to_snapshot())
