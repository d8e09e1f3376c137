from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from .logging_config import get_logger
from .models import NeededSnapshot, snapshot_from_json, snapshot_to_json

logger = get_logger(__name__)


class SnapshotStore:
  """
  File-backed snapshots of needed lists, one JSON file per conversation.

  Reads and writes never raise: a missing or unreadable snapshot reads as
  None and a failed write is reported through the return value and the log,
  so storage trouble cannot break the chat.
  """

  def __init__(self, data_dir: Union[str, Path]) -> None:
    self.data_dir = Path(data_dir)

  def ensure_root(self) -> None:
    """Create the data directory. Called once at startup."""
    self.data_dir.mkdir(parents=True, exist_ok=True)
    logger.debug(f"Snapshot directory ready at {self.data_dir}")

  def path_for(self, conversation_id: int) -> Path:
    return self.data_dir / f"{int(conversation_id)}.json"

  def read(self, conversation_id: int) -> Optional[NeededSnapshot]:
    """
    Load the snapshot for a conversation.

    Returns None if no snapshot exists or if it cannot be read or parsed.
    """
    path = self.path_for(conversation_id)
    if not path.exists():
      logger.debug(
        f"No snapshot for conversation {conversation_id} at {path}",
        extra={"conversation_id": conversation_id},
      )
      return None

    try:
      raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
      logger.warning(
        f"Failed to read snapshot {path}: {str(e)}",
        extra={"conversation_id": conversation_id},
      )
      return None

    try:
      snapshot = snapshot_from_json(raw)
    except ValidationError as e:
      logger.warning(
        f"Failed to parse snapshot {path}, starting with an empty list: {e.error_count()} error(s)",
        extra={"conversation_id": conversation_id},
      )
      return None

    logger.debug(
      f"Loaded {len(snapshot.items)} item(s) for conversation {conversation_id}",
      extra={"conversation_id": conversation_id},
    )
    return snapshot

  def write(self, conversation_id: int, snapshot: NeededSnapshot) -> bool:
    """
    Replace the snapshot of a conversation.

    The document is written to a temporary file next to the target and then
    moved over it, so readers only ever see a complete snapshot.
    Returns False if the snapshot could not be written.
    """
    path = self.path_for(conversation_id)
    tmp_name = None
    try:
      fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.stem}.", suffix=".tmp", dir=str(self.data_dir)
      )
      with os.fdopen(fd, "w", encoding="utf-8") as fh:
        fh.write(snapshot_to_json(snapshot))
      os.replace(tmp_name, path)
      tmp_name = None
    except OSError as e:
      logger.warning(
        f"Failed to write snapshot {path}: {str(e)}",
        extra={"conversation_id": conversation_id},
      )
      return False
    finally:
      if tmp_name is not None:
        try:
          os.unlink(tmp_name)
        except OSError:
          pass

    logger.debug(
      f"Wrote {len(snapshot.items)} item(s) for conversation {conversation_id}",
      extra={"conversation_id": conversation_id},
    )
    return True
