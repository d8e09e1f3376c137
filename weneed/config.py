from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

PROJECT_ROOT = Path(__file__).resolve().parents[1]


class ConfigError(RuntimeError):
  """Raised when required configuration is missing or invalid."""


class Settings(BaseModel):
  telegram_bot_token: Optional[str] = None
  data_dir: Path = Path("data")
  log_file: Optional[str] = None
  log_level: str = "INFO"
  poll_timeout: int = 30
  webhook_secret: Optional[str] = None
  port: int = 8000

  def require_token(self) -> str:
    if not self.telegram_bot_token:
      raise ConfigError("Environment variable 'TELEGRAM_BOT_TOKEN' missing!")
    return self.telegram_bot_token


def _load_env_from_local_files() -> None:
  """
  Load environment variables from .env files in the working directory and
  the project root. Values already set in the process environment win.
  """
  for env_path in (Path.cwd() / ".env", PROJECT_ROOT / ".env"):
    if env_path.exists():
      load_dotenv(env_path, override=False)


def _int_env(name: str, default: int) -> int:
  raw = os.getenv(name)
  if raw is None or raw.strip() == "":
    return default
  try:
    return int(raw)
  except ValueError:
    raise ConfigError(f"Environment variable '{name}' must be an integer, got {raw!r}")


def load_settings() -> Settings:
  """Build Settings from the environment (after loading local .env files)."""
  _load_env_from_local_files()
  return Settings(
    telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN") or None,
    data_dir=Path(os.getenv("WENEED_DATA_DIR", "data")),
    log_file=os.getenv("LOG_FILE") or None,
    log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    poll_timeout=_int_env("TELEGRAM_POLL_TIMEOUT", 30),
    webhook_secret=os.getenv("TELEGRAM_WEBHOOK_SECRET") or None,
    port=_int_env("PORT", 8000),
  )
