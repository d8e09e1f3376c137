from __future__ import annotations

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class NeededSnapshot(BaseModel):
  """Durable form of one conversation's needed list."""

  # Older snapshots stored the items under "list".
  items: List[str] = Field(
    default_factory=list,
    validation_alias=AliasChoices("items", "list"),
  )


def snapshot_to_json(snapshot: NeededSnapshot) -> str:
  return snapshot.model_dump_json()


def snapshot_from_json(data: str) -> NeededSnapshot:
  """
  Parse a JSON document into a NeededSnapshot.

  Raises pydantic.ValidationError if the document is malformed.
  """
  return NeededSnapshot.model_validate_json(data)


# ============================================================================
# Telegram Bot API Models
# ============================================================================

class TelegramUser(BaseModel):
  id: int
  is_bot: bool = False
  first_name: str = ""
  last_name: Optional[str] = None
  username: Optional[str] = None

  @property
  def full_name(self) -> str:
    if self.last_name:
      return f"{self.first_name} {self.last_name}"
    return self.first_name


class TelegramChat(BaseModel):
  id: int
  type: str = "private"
  title: Optional[str] = None


class TelegramMessage(BaseModel):
  model_config = ConfigDict(populate_by_name=True)

  message_id: int
  chat: TelegramChat
  from_user: Optional[TelegramUser] = Field(default=None, alias="from")
  date: Optional[int] = None
  text: Optional[str] = None


class TelegramUpdate(BaseModel):
  update_id: int
  message: Optional[TelegramMessage] = None


# ============================================================================
# HTTP API Models
# ============================================================================

class NeededListResponse(BaseModel):
  conversationId: int
  items: List[str]
