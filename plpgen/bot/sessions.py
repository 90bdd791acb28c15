# plpgen/bot/sessions.py
"""
Per-user bot state kept in the KV store.

    auth:<user_id>  "1" while the user is authorized (no expiry)
    wiz:<user_id>   JSON WizardSession, expires session_ttl_seconds after
                    the last write
"""
import uuid
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError

from plpgen.core.logging import log
from plpgen.generation.options import GenerationOptions
from plpgen.lib.kv_store import KeyValueStore

UserId = Union[int, str]

DEFAULT_SESSION_TTL = 1800


class WizardStep(str, Enum):
    COUNT = "count"
    CUSTOM_COUNT = "custom_count"
    FIRST_MODE = "first_mode"
    FIXED_FIRST_INPUT = "fixed_first_input"
    LAST_MODE = "last_mode"
    FIXED_LAST_INPUT = "fixed_last_input"
    CONFIRM = "confirm"
    GENERATING = "generating"


class WizardSession(BaseModel):
    # Fresh per /gen, so a finished run can leave a newer session alone
    session_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    step: WizardStep = WizardStep.COUNT
    chat_id: int
    user_id: int
    options: GenerationOptions = GenerationOptions()

    def update_options(self, **changes) -> None:
        self.options = self.options.model_copy(update=changes)


def auth_key(user_id: UserId) -> str:
    return f"auth:{user_id}"


def wizard_key(user_id: UserId) -> str:
    return f"wiz:{user_id}"


class SessionStore:

    def __init__(self, store: KeyValueStore, ttl_seconds: int = DEFAULT_SESSION_TTL):
        self.store = store
        self.ttl_seconds = ttl_seconds

    async def is_authorized(self, user_id: UserId) -> bool:
        return await self.store.get(auth_key(user_id)) == "1"

    async def authorize(self, user_id: UserId) -> None:
        await self.store.put(auth_key(user_id), "1")

    async def logout(self, user_id: UserId) -> None:
        await self.store.delete(auth_key(user_id))
        await self.store.delete(wizard_key(user_id))

    async def load(self, user_id: UserId) -> Optional[WizardSession]:
        raw = await self.store.get(wizard_key(user_id))
        if not raw:
            return None
        try:
            return WizardSession.model_validate_json(raw)
        except ValidationError as e:
            log("BOT", f"⚠️ Dropping unreadable session: {e.error_count()} error(s)", session_id=str(user_id))
            await self.store.delete(wizard_key(user_id))
            return None

    async def save(self, session: WizardSession) -> None:
        await self.store.put(wizard_key(session.user_id), session.model_dump_json(), self.ttl_seconds)

    async def discard(self, user_id: UserId) -> None:
        await self.store.delete(wizard_key(user_id))

    async def discard_if_current(self, session: WizardSession) -> bool:
        """Discard the stored session only if it is still this one."""
        current = await self.load(session.user_id)
        if current is not None and current.session_id != session.session_id:
            return False
        await self.discard(session.user_id)
        return True
