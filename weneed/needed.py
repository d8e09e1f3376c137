"""
The "to-buy" list of one chat. "/need item" puts the item on the list,
"/got item" takes it off again.
"""
from __future__ import annotations

from typing import Dict, Iterable, List

from .item import NeededItem, split_items
from .models import NeededSnapshot
from .utils import numbered_list, quote_items

EVERYTHING_THERE = "We have everything we need :-)"


class NeededList:
  """
  Case-insensitive set of needed items, rendered in sorted order.

  Items are keyed by their case-folded text. The spelling that was added
  first is the one that is kept and shown.
  """

  def __init__(self, items: Iterable[NeededItem] = ()) -> None:
    self._items: Dict[str, NeededItem] = {}
    # Bumped on every insert/remove so callers can tell whether to persist.
    self.version = 0
    for item in items:
      self._items.setdefault(item.key, item)

  def __len__(self) -> int:
    return len(self._items)

  def __contains__(self, item: object) -> bool:
    if isinstance(item, str):
      return item.strip().casefold() in self._items
    if isinstance(item, NeededItem):
      return item.key in self._items
    return False

  @property
  def items(self) -> List[NeededItem]:
    return sorted(self._items.values())

  def _insert(self, item: NeededItem) -> None:
    self._items[item.key] = item
    self.version += 1

  def _remove(self, item: NeededItem) -> None:
    del self._items[item.key]
    self.version += 1

  def add_batch(self, raw_args: str) -> str:
    """
    Handle the arguments of a "/need" command.

    Every comma separated item that is not on the list yet is added. Items
    that are already there (including repeats within this batch) are
    reported at the top of the answer.
    """
    already_there: List[NeededItem] = []
    for item in split_items(raw_args):
      if item in self:
        already_there.append(item)
      else:
        self._insert(item)

    prefix = ""
    if already_there:
      prefix = f"{quote_items(already_there)} already on the list!\n"
    return f"{prefix}We need:\n{self._render_items()}"

  def remove_batch(self, raw_args: str) -> str:
    """Handle the arguments of a "/got" command."""
    not_found: List[NeededItem] = []
    for item in split_items(raw_args):
      if item in self:
        self._remove(item)
      else:
        not_found.append(item)

    prefix = ""
    if not_found:
      prefix = f"{quote_items(not_found)} not on the list!\n"
    if not self._items:
      return prefix + EVERYTHING_THERE
    return f"{prefix}We still need:\n{self._render_items()}"

  def render(self) -> str:
    if not self._items:
      return EVERYTHING_THERE
    return f"We need:\n{self._render_items()}"

  def _render_items(self) -> str:
    return numbered_list(self.items)

  def to_snapshot(self) -> NeededSnapshot:
    return NeededSnapshot(items=[item.display for item in self.items])

  @classmethod
  def from_snapshot(cls, snapshot: NeededSnapshot) -> "NeededList":
    items = [NeededItem(s.strip()) for s in snapshot.items if s and s.strip()]
    return cls(items)
