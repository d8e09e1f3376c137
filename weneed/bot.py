from __future__ import annotations

import time
from typing import Optional

import httpx

from .logging_config import get_logger
from .models import TelegramUpdate, TelegramUser
from .service import NeedService
from .telegram_client import TelegramClient, TelegramError

logger = get_logger(__name__)


class NeedBot:
  """
  Long-polling receive loop.

  Updates are handled strictly one after another: fetch, answer, then
  acknowledge via the next getUpdates offset.
  """

  def __init__(
    self,
    client: TelegramClient,
    service: NeedService,
    poll_timeout: int = 30,
    retry_delay: float = 5.0,
  ) -> None:
    self.client = client
    self.service = service
    self.poll_timeout = poll_timeout
    self.retry_delay = retry_delay
    self.me: Optional[TelegramUser] = None
    self._offset: Optional[int] = None

  def start(self) -> TelegramUser:
    self.me = self.client.get_me()
    self.service.bot_username = self.me.username
    logger.info(f"Started bot: @{self.me.username} (id {self.me.id})")
    return self.me

  def process_update(self, update: TelegramUpdate) -> Optional[str]:
    """Answer a single update. Returns the reply that was sent, if any."""
    message = update.message
    if message is None or message.text is None:
      return None

    chat_id = message.chat.id
    name = message.from_user.full_name if message.from_user else "?"
    logger.info(
      f"<{name}> {message.text}",
      extra={"conversation_id": chat_id, "update_id": update.update_id},
    )

    reply = self.service.handle_text(chat_id, message.text)
    if reply:
      self.client.send_message(chat_id, reply)
    return reply

  def poll_once(self) -> int:
    """Fetch and handle one batch of updates. Returns how many were seen."""
    updates = self.client.get_updates(offset=self._offset, timeout=self.poll_timeout)
    for update in updates:
      self._offset = update.update_id + 1
      try:
        self.process_update(update)
      except (TelegramError, httpx.HTTPError) as exc:
        # The list change is already applied and stored; only the reply is lost.
        logger.error(
          f"Failed to answer update: {str(exc)}",
          extra={"update_id": update.update_id},
        )
    return len(updates)

  def run(self) -> None:
    if self.me is None:
      self.start()
    try:
      while True:
        try:
          self.poll_once()
        except (TelegramError, httpx.HTTPError) as exc:
          logger.error(f"Polling failed, retrying in {self.retry_delay}s: {str(exc)}")
          time.sleep(self.retry_delay)
    except KeyboardInterrupt:
      logger.info("Stopping bot")
