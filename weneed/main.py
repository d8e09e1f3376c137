from __future__ import annotations

import sys

from .bot import NeedBot
from .config import ConfigError, load_settings
from .logging_config import get_logger, setup_logging
from .memory import ConversationStore
from .service import NeedService
from .snapshot_store import SnapshotStore
from .telegram_client import TelegramClient, TelegramError

logger = get_logger(__name__)


def main() -> int:
  settings = load_settings()
  setup_logging(log_level=settings.log_level, log_file=settings.log_file)

  logger.info("=" * 60)
  logger.info("Starting We Need bot (long polling)")
  logger.info("=" * 60)
  logger.info(f"Data directory: {settings.data_dir}")
  logger.info(f"Log Level: {settings.log_level}")
  logger.info(f"Log File: {settings.log_file or '(console only)'}")

  try:
    token = settings.require_token()
  except ConfigError as e:
    logger.error(f"❌ CRITICAL: {e}")
    logger.error("Please set it in a .env file or the environment.")
    return 1

  snapshots = SnapshotStore(settings.data_dir)
  snapshots.ensure_root()
  service = NeedService(ConversationStore(snapshots))

  client = TelegramClient(token)
  bot = NeedBot(client, service, poll_timeout=settings.poll_timeout)
  try:
    bot.start()
  except TelegramError as e:
    logger.error(f"Error starting bot: {e}")
    return 1

  try:
    bot.run()
  finally:
    client.close()
  return 0


if __name__ == "__main__":
  sys.exit(main())
