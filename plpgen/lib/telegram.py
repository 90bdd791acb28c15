# plpgen/lib/telegram.py
"""
Minimal Telegram Bot API client over httpx.

Only the calls the wizard needs. Every method returns the decoded reply
and raises TelegramError when the API answers ok=false.
"""
from typing import Any, Dict, Optional, Union

import httpx

from plpgen.core.config import TelegramSettings
from plpgen.core.exceptions import TelegramError
from plpgen.core.logging import log

ChatId = Union[int, str]


class TelegramClient:

    def __init__(self, settings: TelegramSettings, client: Optional[httpx.AsyncClient] = None) -> None:
        self.settings = settings
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.timeout)
        return self._client

    def _url(self, method: str) -> str:
        token = self.settings.bot_token
        if not token:
            raise TelegramError(method, "TELEGRAM_BOT_TOKEN is missing")
        return f"{self.settings.api_base.rstrip('/')}/bot{token}/{method}"

    @staticmethod
    def _decode(method: str, response: httpx.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            raise TelegramError(method, f"HTTP {response.status_code}: {response.text[:200]}")
        if not payload.get("ok"):
            raise TelegramError(method, payload.get("description") or str(payload))
        return payload

    async def call(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = self._url(method)
        try:
            response = await self.client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise TelegramError(method, f"{type(e).__name__}: {e}") from e
        return self._decode(method, response)

    async def send_message(self, chat_id: ChatId, text: str, reply_markup: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"chat_id": chat_id, "text": text}
        if reply_markup:
            payload["reply_markup"] = reply_markup
        return await self.call("sendMessage", payload)

    async def edit_message_text(self, chat_id: ChatId, message_id: int, text: str) -> Dict[str, Any]:
        return await self.call("editMessageText", {"chat_id": chat_id, "message_id": message_id, "text": text})

    async def answer_callback_query(self, callback_query_id: str, text: str) -> Dict[str, Any]:
        return await self.call(
            "answerCallbackQuery",
            {"callback_query_id": callback_query_id, "text": text, "show_alert": False},
        )

    async def send_document(self, chat_id: ChatId, data: bytes, filename: str) -> Dict[str, Any]:
        method = "sendDocument"
        url = self._url(method)
        log("TELEGRAM", f"Uploading {filename} ({len(data)} bytes) to chat {chat_id}")
        try:
            response = await self.client.post(
                url,
                data={"chat_id": str(chat_id)},
                files={"document": (filename, data, "application/zip")},
            )
        except httpx.HTTPError as e:
            raise TelegramError(method, f"{type(e).__name__}: {e}") from e
        return self._decode(method, response)

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
