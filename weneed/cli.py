from __future__ import annotations

import argparse
from pathlib import Path

from .config import load_settings
from .memory import ConversationStore
from .service import NeedService
from .snapshot_store import SnapshotStore


def build_arg_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(
    description="Local chat client for the We Need bot (no Telegram needed)"
  )
  parser.add_argument(
    "--conversation-id",
    type=int,
    default=1,
    help="Conversation ID whose list to work on (default: 1)",
  )
  parser.add_argument(
    "--data-dir",
    help="Directory holding the list snapshots (default: WENEED_DATA_DIR or ./data)",
  )
  return parser


def main(argv: list[str] | None = None) -> int:
  parser = build_arg_parser()
  args = parser.parse_args(argv)

  settings = load_settings()
  data_dir = Path(args.data_dir) if args.data_dir else settings.data_dir

  snapshots = SnapshotStore(data_dir)
  snapshots.ensure_root()
  service = NeedService(ConversationStore(snapshots))

  print(f"Conversation ID: {args.conversation_id}")
  print(f"Data directory: {data_dir}")
  print("Type commands like '/need milk, bread' or '/got milk'. Ctrl+C or EOF to exit.\n")

  try:
    while True:
      try:
        user_input = input("You: ")
      except EOFError:
        print()
        break

      if not user_input.strip():
        continue

      reply = service.handle_text(args.conversation_id, user_input)
      if reply is None:
        print("Bot: (no answer - try /help)")
        continue
      print(f"Bot: {reply}")

  except KeyboardInterrupt:
    print("\nExiting...")

  return 0


if __name__ == "__main__":  # pragma: no cover
  raise SystemExit(main())
