from __future__ import annotations

import datetime as _dt
import time
import uuid
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request

from .config import Settings, load_settings
from .logging_config import get_logger, setup_logging
from .memory import ConversationStore
from .models import NeededListResponse, TelegramUpdate
from .service import NeedService
from .snapshot_store import SnapshotStore

logger = get_logger(__name__)

# * Lazy initialization - only create when the first request needs it
settings: Optional[Settings] = None
service: Optional[NeedService] = None

app = FastAPI(title="We Need Bot API")


# * ============================================================================
# * Request/Response Logging Middleware
# * ============================================================================

@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    """
    Log every HTTP request and response with a request_id and timing.
    """
    request_id = str(uuid.uuid4())[:8]
    start_time = time.time()
    method = request.method
    path = request.url.path

    logger.info(
        f"→ {method} {path}",
        extra={"request_id": request_id, "method": method, "endpoint": path},
    )

    try:
        response = await call_next(request)
    except Exception:
        duration_ms = int((time.time() - start_time) * 1000)
        logger.error(
            f"✗ {method} {path} - Exception ({duration_ms}ms)",
            exc_info=True,
            extra={
                "request_id": request_id,
                "method": method,
                "endpoint": path,
                "duration_ms": duration_ms,
            }
        )
        # Re-raise to let FastAPI handle it
        raise

    duration_ms = int((time.time() - start_time) * 1000)
    status_code = response.status_code
    log_level = logger.info if status_code < 400 else logger.error
    log_level(
        f"← {method} {path} - {status_code} ({duration_ms}ms)",
        extra={
            "request_id": request_id,
            "method": method,
            "endpoint": path,
            "status_code": status_code,
            "duration_ms": duration_ms,
        }
    )
    return response


# * ============================================================================
# * Initialization Functions
# * ============================================================================

def _init_need_service() -> NeedService:
    """Lazily initialize the need service on first use."""
    global settings, service
    if service is None:
        settings = load_settings()
        # Re-apply logging now that .env values are in the environment.
        setup_logging(log_level=settings.log_level, log_file=settings.log_file)
        snapshots = SnapshotStore(settings.data_dir)
        snapshots.ensure_root()
        service = NeedService(ConversationStore(snapshots))
    return service


def get_service() -> NeedService:
    return _init_need_service()


def get_webhook_secret() -> Optional[str]:
    _init_need_service()
    return settings.webhook_secret if settings else None


def _check_secret_token(secret: Optional[str], token: Optional[str], **extra: Any) -> None:
    """Reject the call with 403 when a secret is configured and does not match."""
    if secret and token != secret:
        logger.warning("Rejected call with wrong secret token", extra=extra)
        raise HTTPException(status_code=403, detail="Invalid secret token")


# * ============================================================================
# * Root & Health Check Endpoints
# * ============================================================================

@app.get("/")
async def root():
    """Root endpoint - returns API info."""
    return {
        "name": "We Need Bot API",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "webhook": "POST /telegram/webhook",
            "needed": "GET /conversations/{conversation_id}/needed",
        }
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": _dt.datetime.now(_dt.timezone.utc).isoformat().replace("+00:00", "Z"),
    }


# * ============================================================================
# * Telegram Webhook
# * ============================================================================

@app.post("/telegram/webhook")
def telegram_webhook(
    update: TelegramUpdate,
    svc: NeedService = Depends(get_service),
    secret: Optional[str] = Depends(get_webhook_secret),
    x_telegram_bot_api_secret_token: Optional[str] = Header(default=None),
) -> Dict[str, Any]:
    """
    Handle one update pushed by Telegram.

    The reply is returned inline as a sendMessage call, which Telegram
    executes on our behalf. An empty object means "nothing to send".
    """
    _check_secret_token(secret, x_telegram_bot_api_secret_token, update_id=update.update_id)

    message = update.message
    if message is None or message.text is None:
        return {}

    chat_id = message.chat.id
    name = message.from_user.full_name if message.from_user else "?"
    logger.info(
        f"<{name}> {message.text}",
        extra={"conversation_id": chat_id, "update_id": update.update_id},
    )

    reply = svc.handle_text(chat_id, message.text)
    if not reply:
        return {}
    return {"method": "sendMessage", "chat_id": chat_id, "text": reply}


@app.get("/conversations/{conversation_id}/needed", response_model=NeededListResponse)
def get_needed(
    conversation_id: int,
    svc: NeedService = Depends(get_service),
    secret: Optional[str] = Depends(get_webhook_secret),
    x_telegram_bot_api_secret_token: Optional[str] = Header(default=None),
) -> NeededListResponse:
    """
    Current needed list of a conversation, in display order.

    Guarded by the same secret token as the webhook.
    """
    _check_secret_token(secret, x_telegram_bot_api_secret_token, conversation_id=conversation_id)
    with svc.store.locked(conversation_id):
        needed = svc.store.get_or_create(conversation_id)
        items = [item.display for item in needed.items]
    return NeededListResponse(conversationId=conversation_id, items=items)
