from __future__ import annotations

from typing import Callable, Optional

from .commands import HELP_TEXT, Action, parse_command
from .logging_config import get_logger
from .memory import ConversationStore
from .needed import NeededList

logger = get_logger(__name__)


class NeedService:
  """
  Command handling on top of the conversation store.

  Each mutation looks the conversation up (hydrating it if needed), applies
  the batch, and writes the snapshot back if the list changed, all while
  holding that conversation's lock.
  """

  def __init__(self, store: ConversationStore, bot_username: Optional[str] = None) -> None:
    self.store = store
    self.bot_username = bot_username

  def _mutate(
    self,
    conversation_id: int,
    apply: Callable[[NeededList], str],
  ) -> str:
    with self.store.locked(conversation_id):
      needed = self.store.get_or_create(conversation_id)
      before = needed.version
      reply = apply(needed)
      if needed.version != before:
        # A failed write is logged by the snapshot store; the reply still goes out.
        self.store.persist(conversation_id)
      return reply

  def need(self, conversation_id: int, raw_args: str) -> str:
    return self._mutate(conversation_id, lambda needed: needed.add_batch(raw_args))

  def got(self, conversation_id: int, raw_args: str) -> str:
    return self._mutate(conversation_id, lambda needed: needed.remove_batch(raw_args))

  def show(self, conversation_id: int) -> str:
    with self.store.locked(conversation_id):
      return self.store.get_or_create(conversation_id).render()

  def handle_text(self, conversation_id: int, text: Optional[str]) -> Optional[str]:
    """
    Route a chat message to the matching command.

    Returns the reply text, or None if the message needs no answer.
    """
    command = parse_command(text)
    if command is None:
      return None
    if not command.addressed_to(self.bot_username):
      logger.debug(
        f"Ignoring /{command.keyword} addressed to @{command.bot_username}",
        extra={"conversation_id": conversation_id},
      )
      return None

    if command.action is Action.need:
      return self.need(conversation_id, command.args)
    if command.action is Action.got:
      return self.got(conversation_id, command.args)
    if command.action is Action.show:
      return self.show(conversation_id)
    if command.action is Action.help:
      return HELP_TEXT

    logger.warning(
      f"Unknown command /{command.keyword}",
      extra={"conversation_id": conversation_id},
    )
    return None
