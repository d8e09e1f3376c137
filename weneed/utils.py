from __future__ import annotations

from typing import Iterable, List


def listify(parts: Iterable[str], sep: str = ", ", last_sep: str = " and ") -> str:
  """
  Join parts the way a sentence lists things: "a, b and c".
  """
  items: List[str] = [str(p) for p in parts]
  if not items:
    return ""
  if len(items) == 1:
    return items[0]
  return sep.join(items[:-1]) + last_sep + items[-1]


def quote_items(parts: Iterable[object]) -> str:
  return listify(f"'{p}'" for p in parts)


def numbered_list(parts: Iterable[object]) -> str:
  """Render one entry per line, numbered from 1."""
  return "\n".join(f"{i}. {p}" for i, p in enumerate(parts, 1))
