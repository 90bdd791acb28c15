# plpgen/api/telegram.py
"""
Telegram webhook and configuration probe.

The webhook acknowledges immediately and handles the update in a task,
because a generation run can take far longer than Telegram waits for a
webhook reply.
"""
import asyncio
import json
from typing import Optional, Set

from fastapi import APIRouter, Depends, HTTPException, Request

from plpgen.bot.sessions import SessionStore
from plpgen.bot.wizard import Wizard
from plpgen.core.config import settings
from plpgen.core.logging import log
from plpgen.db import get_store
from plpgen.lib.rate_limit import limiter
from plpgen.lib.telegram import TelegramClient

router = APIRouter(tags=["Telegram"])

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"

_telegram: Optional[TelegramClient] = None
_pending: Set[asyncio.Task] = set()


def get_telegram_client() -> TelegramClient:
    global _telegram
    if _telegram is None:
        _telegram = TelegramClient(settings.telegram)
    return _telegram


async def close_telegram_client() -> None:
    global _telegram
    if _telegram is not None:
        await _telegram.aclose()
        _telegram = None


def get_wizard() -> Wizard:
    sessions = SessionStore(get_store(), settings.store.session_ttl_seconds)
    return Wizard(get_telegram_client(), sessions, settings)


@router.get("/debug")
async def debug():
    """Which settings are present - never their values."""
    token = settings.telegram.bot_token
    store = get_store()
    return {
        "hasToken": bool(token),
        "tokenLen": len(token),
        # True only for a store that survives restarts
        "hasKV": store.name != "memory",
        "kvBackend": store.name,
        "hasAdmin": bool(settings.admin_code),
        "hasTemplate": bool(settings.generator.template_url),
        "hasSecret": bool(settings.telegram.webhook_secret),
    }


@router.post("/telegram/webhook")
@limiter.exempt
async def telegram_webhook(request: Request, wizard: Wizard = Depends(get_wizard)):
    secret = settings.telegram.webhook_secret
    if secret and request.headers.get(SECRET_HEADER) != secret:
        raise HTTPException(status_code=403, detail="forbidden")

    try:
        update = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        update = None
    if not isinstance(update, dict):
        raise HTTPException(status_code=400, detail="bad request")

    update_id = update.get("update_id")

    async def _handle_update_with_logging():
        try:
            await wizard.handle_update(update)
        except Exception as e:
            log("BOT", f"ERROR handling update {update_id}: {type(e).__name__}: {e}")

    task = asyncio.create_task(_handle_update_with_logging())
    _pending.add(task)
    task.add_done_callback(_pending.discard)

    return {"ok": True}


async def drain_pending_updates() -> None:
    """Wait for in-flight updates (shutdown, tests)."""
    if _pending:
        await asyncio.gather(*list(_pending), return_exceptions=True)
