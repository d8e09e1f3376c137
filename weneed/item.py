from __future__ import annotations

from functools import total_ordering
from typing import List


@total_ordering
class NeededItem:
  """
  An entry on the needed list as typed by a human.

  Comparison, hashing and ordering only look at the case-folded text, so
  "/need Beer" followed by "/got beer" still finds the item. The spelling
  as typed is kept for display.
  """

  __slots__ = ("display",)

  def __init__(self, display: str) -> None:
    self.display = display

  @classmethod
  def normalize(cls, raw: str) -> "NeededItem":
    display = raw.strip()
    if not display:
      raise ValueError("Item name must not be empty")
    return cls(display)

  @property
  def key(self) -> str:
    return self.display.casefold()

  def __eq__(self, other: object) -> bool:
    if not isinstance(other, NeededItem):
      return NotImplemented
    return self.key == other.key

  def __lt__(self, other: "NeededItem") -> bool:
    if not isinstance(other, NeededItem):
      return NotImplemented
    return self.key < other.key

  def __hash__(self) -> int:
    return hash(self.key)

  def __str__(self) -> str:
    return self.display

  def __repr__(self) -> str:
    return f"NeededItem({self.display!r})"


def split_items(raw_args: str) -> List[NeededItem]:
  """
  Split a command argument string into items.

  Tokens are separated by commas and trimmed; empty tokens (from doubled,
  leading or trailing commas) are dropped. Input order is preserved.
  """
  return [NeededItem.normalize(part) for part in raw_args.split(",") if part.strip()]
