from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Action(str, Enum):
  need = "need"
  got = "got"
  show = "list"
  help = "help"


KEYWORDS = {
  "need": Action.need,
  "weneed": Action.need,
  "got": Action.got,
  "list": Action.show,
  "start": Action.help,
  "help": Action.help,
}

HELP_TEXT = (
  "Write \"/need item\" to put something on the shopping list and "
  "\"/got item\" once you have it. Separate several items with commas. "
  "\"/list\" shows what we still need."
)

# "/need@SomeBot milk, bread" -> keyword "need", bot "SomeBot", args "milk, bread"
_COMMAND_RE = re.compile(r"^/(?P<keyword>[A-Za-z0-9_]+)(?:@(?P<bot>[A-Za-z0-9_]+))?(?:\s+(?P<args>.*))?$", re.DOTALL)


@dataclass
class Command:
  keyword: str
  action: Optional[Action]
  args: str = ""
  bot_username: Optional[str] = None

  def addressed_to(self, username: Optional[str]) -> bool:
    """Commands without "@bot" are for everyone; others only for that bot."""
    if not self.bot_username or not username:
      return True
    return self.bot_username.lower() == username.lower()


def parse_command(text: Optional[str]) -> Optional[Command]:
  """
  Split a chat message into command keyword and argument string.

  Returns None for anything that is not a "/command". Unknown keywords are
  returned with ``action`` set to None.
  """
  if not text:
    return None
  match = _COMMAND_RE.match(text.strip())
  if not match:
    return None
  keyword = match.group("keyword").lower()
  return Command(
    keyword=keyword,
    action=KEYWORDS.get(keyword),
    args=(match.group("args") or "").strip(),
    bot_username=match.group("bot"),
  )
