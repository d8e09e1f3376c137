from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

import httpx

from .logging_config import get_logger
from .models import TelegramUpdate, TelegramUser

logger = get_logger(__name__)


class TelegramError(RuntimeError):
  """Raised when the Bot API cannot be reached or reports a failure."""


class TelegramClient:
  """
  Minimal HTTP client for the Telegram Bot API: just what a polling chat bot
  needs (getMe, getUpdates, sendMessage).
  """

  def __init__(
    self,
    token: str,
    base_url: str = "https://api.telegram.org",
    http: Optional[httpx.Client] = None,
    timeout: float = 10.0,
  ) -> None:
    self.base_url = f"{base_url.rstrip('/')}/bot{token}"
    self.timeout = timeout
    self._http = http or httpx.Client()

  def close(self) -> None:
    self._http.close()

  def _call(self, method: str, payload: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None) -> Any:
    url = f"{self.base_url}/{method}"
    start_time = time.time()
    try:
      response = self._http.post(url, json=payload or {}, timeout=timeout or self.timeout)
    except httpx.RequestError as exc:
      duration_ms = int((time.time() - start_time) * 1000)
      logger.error(
        f"Telegram {method} request failed after {duration_ms}ms: {str(exc)}",
        extra={"duration_ms": duration_ms},
      )
      raise TelegramError(f"Telegram {method} request failed: {exc}") from exc

    duration_ms = int((time.time() - start_time) * 1000)
    try:
      data = response.json()
    except ValueError as exc:
      raise TelegramError(
        f"Telegram {method} returned non-JSON response ({response.status_code})"
      ) from exc

    if not isinstance(data, dict) or not data.get("ok"):
      description = data.get("description") if isinstance(data, dict) else None
      logger.error(
        f"Telegram {method} error {response.status_code}: {description}",
        extra={"status_code": response.status_code, "duration_ms": duration_ms},
      )
      raise TelegramError(f"Telegram {method} failed: {description or response.status_code}")

    logger.debug(
      f"Telegram {method} ok: {duration_ms}ms",
      extra={"status_code": response.status_code, "duration_ms": duration_ms},
    )
    return data.get("result")

  def get_me(self) -> TelegramUser:
    return TelegramUser.model_validate(self._call("getMe"))

  def get_updates(self, offset: Optional[int] = None, timeout: int = 30) -> List[TelegramUpdate]:
    """Long-poll for new updates. ``offset`` acknowledges earlier ones."""
    payload: Dict[str, Any] = {"timeout": timeout, "allowed_updates": ["message"]}
    if offset is not None:
      payload["offset"] = offset
    # The HTTP timeout has to outlast the server-side long poll.
    result = self._call("getUpdates", payload, timeout=timeout + self.timeout)
    return [TelegramUpdate.model_validate(u) for u in result or []]

  def send_message(self, chat_id: int, text: str) -> None:
    self._call("sendMessage", {"chat_id": chat_id, "text": text})
