# plpgen/bot/wizard.py
"""
Conversation that collects GenerationOptions and runs a batch.

    /gen -> count -> first_mode [-> fixed_first_input]
         -> last_mode [-> fixed_last_input] -> confirm -> generating

Buttons arrive as callback queries, typed answers as plain messages. The
session is stored after every transition so that each Telegram update can
be handled by a fresh request.
"""
from typing import Any, Awaitable, Callable, Dict, Optional, Set

import httpx

from plpgen.bot import menus
from plpgen.bot.sessions import SessionStore, WizardSession, WizardStep
from plpgen.core.config import Settings
from plpgen.core.exceptions import PlpGenError
from plpgen.core.logging import log
from plpgen.generation.batch import generate_batch
from plpgen.generation.options import GenerationOptions
from plpgen.generation.records import title_case
from plpgen.lib.telegram import TelegramClient

GenerateFn = Callable[..., Awaitable[bytes]]

ALREADY_GENERATING = "Already generating…"

# Users with a batch running in this process. Checked and claimed without an
# await in between, so two concurrent Generate presses cannot both start one.
_active_runs: Set[int] = set()


def _chat_id(message: Optional[Dict[str, Any]]) -> Optional[int]:
    return ((message or {}).get("chat") or {}).get("id")


def _user_id(obj: Dict[str, Any]) -> Optional[int]:
    return (obj.get("from") or {}).get("id")


class Wizard:

    def __init__(
        self,
        telegram: TelegramClient,
        sessions: SessionStore,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
        generate: GenerateFn = generate_batch,
    ):
        self.telegram = telegram
        self.sessions = sessions
        self.settings = settings
        self.http_client = http_client
        self.generate = generate

    @property
    def max_count(self) -> int:
        return self.settings.generator.max_count

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def handle_update(self, update: Dict[str, Any]) -> None:
        callback = update.get("callback_query")
        if callback:
            await self.on_callback(callback)
            return
        message = update.get("message") or update.get("edited_message")
        if message:
            await self.on_message(message)

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    async def on_message(self, message: Dict[str, Any]) -> None:
        chat_id = _chat_id(message)
        user_id = _user_id(message)
        if chat_id is None or user_id is None:
            return
        text = message.get("text") or ""

        if text.startswith("/start"):
            await self.telegram.send_message(chat_id, menus.HELP_TEXT)
            return

        if text.startswith("/auth"):
            await self._authorize(chat_id, user_id, text)
            return

        if not await self.sessions.is_authorized(user_id):
            await self.telegram.send_message(chat_id, menus.LOCKED_TEXT)
            return

        if text.startswith("/logout"):
            await self.sessions.logout(user_id)
            await self.telegram.send_message(chat_id, "✅ Logged out.")
            return

        if text.startswith("/gen"):
            if await self._is_generating(user_id):
                await self.telegram.send_message(chat_id, f"⏳ {ALREADY_GENERATING} wait for the current batch.")
                return
            session = WizardSession(
                chat_id=chat_id,
                user_id=user_id,
                options=GenerationOptions(text2=self.settings.generator.default_text2),
            )
            await self.sessions.save(session)
            log("BOT", "New wizard session", session_id=str(user_id))
            await self.telegram.send_message(chat_id, "Choose how many files:", menus.count_menu(self.max_count))
            return

        session = await self.sessions.load(user_id)
        if session is not None and await self._on_text_input(session, text.strip()):
            return

        await self.telegram.send_message(chat_id, menus.COMMANDS_TEXT)

    async def _authorize(self, chat_id: int, user_id: int, text: str) -> None:
        parts = text.split()
        code = parts[1] if len(parts) > 1 else ""
        admin_code = self.settings.admin_code
        if code and admin_code and code == admin_code:
            await self.sessions.authorize(user_id)
            log("BOT", "User authorized", session_id=str(user_id))
            await self.telegram.send_message(chat_id, "✅ Authorized.\nUse /gen to generate.")
        else:
            await self.telegram.send_message(chat_id, "❌ Wrong code.")

    async def _on_text_input(self, session: WizardSession, value: str) -> bool:
        """Handle a typed answer; False when the current step expects none."""
        chat_id = session.chat_id

        if session.step == WizardStep.CUSTOM_COUNT:
            try:
                count = int(value)
            except ValueError:
                count = 0
            if not 1 <= count <= self.max_count:
                await self.telegram.send_message(chat_id, f"Enter a number between 1 and {self.max_count}.")
                return True
            session.update_options(count=count)
            await self._advance(session, WizardStep.FIRST_MODE)
            await self.telegram.send_message(chat_id, "First name mode:", menus.mode_menu("first"))
            return True

        if session.step == WizardStep.FIXED_FIRST_INPUT:
            if not value:
                await self.telegram.send_message(chat_id, "Type a first name (e.g., Ahsan).")
                return True
            session.update_options(fixed_first=title_case(value))
            await self._advance(session, WizardStep.LAST_MODE)
            await self.telegram.send_message(chat_id, "Last name mode (surname):", menus.mode_menu("last"))
            return True

        if session.step == WizardStep.FIXED_LAST_INPUT:
            if not value:
                await self.telegram.send_message(chat_id, "Type a last name (surname) (e.g., Ahmed / Das).")
                return True
            if value.lower() == "random":
                session.update_options(last_mode="random")
            else:
                session.update_options(fixed_last=title_case(value))
            await self._advance(session, WizardStep.CONFIRM)
            await self.telegram.send_message(chat_id, menus.confirm_summary(session.options), menus.confirm_menu())
            return True

        return False

    # ------------------------------------------------------------------
    # Buttons
    # ------------------------------------------------------------------

    async def on_callback(self, callback: Dict[str, Any]) -> None:
        data = callback.get("data") or ""
        callback_id = callback.get("id")
        chat_id = _chat_id(callback.get("message"))
        user_id = _user_id(callback)
        if chat_id is None or user_id is None:
            return

        if not await self.sessions.is_authorized(user_id):
            await self.telegram.answer_callback_query(callback_id, "Locked.")
            await self.telegram.send_message(chat_id, "🔒 Use /auth first.")
            return

        session = await self.sessions.load(user_id)
        if session is None:
            await self.telegram.answer_callback_query(callback_id, "Session expired.")
            await self.telegram.send_message(chat_id, "Session expired. Send /gen again.")
            return

        if session.step == WizardStep.GENERATING or user_id in _active_runs:
            await self.telegram.answer_callback_query(callback_id, ALREADY_GENERATING)
            return

        key, _, value = data.partition(":")

        if key == "count":
            await self._on_count(session, callback_id, value)
        elif key == "first" and value in ("random", "fixed"):
            await self._on_first_mode(session, callback_id, value)
        elif key == "last" and value in ("random", "fixed"):
            await self._on_last_mode(session, callback_id, value)
        elif data == "do_generate":
            await self.run_generation(session, callback_id)
        elif data == "cancel":
            await self.sessions.discard(user_id)
            await self.telegram.answer_callback_query(callback_id, "Cancelled")
            await self.telegram.send_message(chat_id, "Cancelled. Send /gen again anytime.")
        else:
            await self.telegram.answer_callback_query(callback_id, "OK")

    async def _on_count(self, session: WizardSession, callback_id: str, value: str) -> None:
        chat_id = session.chat_id
        if value == "custom":
            await self._advance(session, WizardStep.CUSTOM_COUNT)
            await self.telegram.answer_callback_query(callback_id, "OK")
            await self.telegram.send_message(chat_id, f"Type a number (1-{self.max_count}):")
            return

        try:
            count = int(value)
        except ValueError:
            count = 0
        if not 1 <= count <= self.max_count:
            await self.telegram.answer_callback_query(callback_id, "Invalid count")
            return

        session.update_options(count=count)
        await self._advance(session, WizardStep.FIRST_MODE)
        await self.telegram.answer_callback_query(callback_id, "OK")
        await self.telegram.send_message(chat_id, "First name mode:", menus.mode_menu("first"))

    async def _on_first_mode(self, session: WizardSession, callback_id: str, mode: str) -> None:
        session.update_options(first_mode=mode)
        await self.telegram.answer_callback_query(callback_id, "OK")
        if mode == "fixed":
            await self._advance(session, WizardStep.FIXED_FIRST_INPUT)
            await self.telegram.send_message(session.chat_id, "Type FIXED first name:")
            return
        await self._advance(session, WizardStep.LAST_MODE)
        await self.telegram.send_message(session.chat_id, "Last name mode (surname):", menus.mode_menu("last"))

    async def _on_last_mode(self, session: WizardSession, callback_id: str, mode: str) -> None:
        session.update_options(last_mode=mode)
        await self.telegram.answer_callback_query(callback_id, "OK")
        if mode == "fixed":
            await self._advance(session, WizardStep.FIXED_LAST_INPUT)
            await self.telegram.send_message(
                session.chat_id,
                "Type FIXED last name (surname):\n(or type 'random' to switch)",
            )
            return
        await self._advance(session, WizardStep.CONFIRM)
        await self.telegram.send_message(session.chat_id, menus.confirm_summary(session.options), menus.confirm_menu())

    async def _advance(self, session: WizardSession, step: WizardStep) -> None:
        session.step = step
        await self.sessions.save(session)
        log("BOT", f"step → {step.value}", session_id=str(session.user_id))

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def _edit_status(self, chat_id: int, message_id: Optional[int], text: str) -> None:
        if message_id is None:
            return
        try:
            await self.telegram.edit_message_text(chat_id, message_id, text)
        except PlpGenError as e:
            log("TELEGRAM", f"⚠️ Status update failed: {e.message}")

    async def _is_generating(self, user_id: int) -> bool:
        if user_id in _active_runs:
            return True
        session = await self.sessions.load(user_id)
        return session is not None and session.step == WizardStep.GENERATING

    async def run_generation(self, session: WizardSession, callback_id: str) -> None:
        user_id = session.user_id
        if user_id in _active_runs:
            await self.telegram.answer_callback_query(callback_id, ALREADY_GENERATING)
            return
        _active_runs.add(user_id)
        try:
            # Mark the stored session before any Telegram round trip
            await self._advance(session, WizardStep.GENERATING)
            try:
                await self.telegram.answer_callback_query(callback_id, "Generating…")
            except PlpGenError as e:
                log("TELEGRAM", f"⚠️ Could not answer callback: {e.message}")
            await self._generate_and_deliver(session)
        finally:
            _active_runs.discard(user_id)
            if not await self.sessions.discard_if_current(session):
                log("BOT", "Newer session kept after run", session_id=str(user_id))

    async def _generate_and_deliver(self, session: WizardSession) -> None:
        chat_id = session.chat_id
        user_id = session.user_id
        archive_name = self.settings.generator.archive_name

        status_id: Optional[int] = None
        try:
            status = await self.telegram.send_message(chat_id, "⏳ Fetching template…")
            status_id = (status.get("result") or {}).get("message_id")

            async def progress(text: str) -> None:
                if status_id is not None:
                    await self.telegram.edit_message_text(chat_id, status_id, text)

            data = await self.generate(
                session.options,
                progress,
                settings=self.settings.generator,
                client=self.http_client,
            )

            await self._edit_status(chat_id, status_id, f"📤 Uploading {archive_name} …")
            await self.telegram.send_document(chat_id, data, archive_name)
            await self._edit_status(chat_id, status_id, "✅ Done!")
            log("BOT", f"Delivered {archive_name} ({len(data)} bytes)", session_id=str(user_id))
        except Exception as e:
            message = e.message if isinstance(e, PlpGenError) else str(e)
            log("BOT", f"❌ Generation failed: {type(e).__name__}: {message}", session_id=str(user_id))
            if status_id is not None:
                await self._edit_status(chat_id, status_id, f"❌ Error: {message}")
            else:
                try:
                    await self.telegram.send_message(chat_id, f"❌ Error: {message}")
                except PlpGenError as send_error:
                    log("TELEGRAM", f"⚠️ Could not report error: {send_error.message}")
