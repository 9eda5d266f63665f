"""Telegram Bot API implementation of BotClient."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from spacybot.config import Settings
from spacybot.errors import TelegramAPIError
from spacybot.models import CardList, ResultCard
from spacybot.telegram.base import ALLOWED_UPDATES, BotClient

_LOGGER = logging.getLogger(__name__)

_MAX_RETRIES = 3
_RETRY_BACKOFF_SECONDS = [1, 3, 9]


class BotApiClient(BotClient):
    """Bot client calling the HTTPS Bot API with httpx."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    async def get_me(self) -> dict[str, Any]:
        return await self._call("getMe")

    async def set_webhook(
        self,
        url: str,
        secret_token: str = "",
        allowed_updates: list[str] | None = None,
    ) -> bool:
        payload: dict[str, Any] = {
            "url": url,
            "allowed_updates": allowed_updates if allowed_updates is not None else ALLOWED_UPDATES,
        }
        if secret_token:
            payload["secret_token"] = secret_token
        return bool(await self._call("setWebhook", payload))

    async def get_updates(self, offset: int | None, timeout: int) -> list[dict[str, Any]]:
        payload: dict[str, Any] = {"timeout": timeout, "allowed_updates": ALLOWED_UPDATES}
        if offset is not None:
            payload["offset"] = offset
        result = await self._call(
            "getUpdates",
            payload,
            timeout=self._settings.request_timeout_seconds + timeout,
        )
        return result if isinstance(result, list) else []

    async def answer_inline_query(self, inline_query_id: str, cards: CardList) -> bool:
        payload = {
            "inline_query_id": inline_query_id,
            "results": [_to_article(card) for card in cards],
            "cache_time": cards.cache_time,
        }
        return bool(await self._call("answerInlineQuery", payload))

    async def _call(
        self,
        method: str,
        payload: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        timeout_config = httpx.Timeout(timeout or self._settings.request_timeout_seconds)
        base_url = f"{self._settings.api_base_url}/bot{self._settings.bot_token}"
        async with httpx.AsyncClient(base_url=base_url, timeout=timeout_config) as client:
            for attempt in range(_MAX_RETRIES + 1):
                response = await client.post(f"/{method}", json=payload or {})
                data = _safe_json(response)
                if response.status_code == 429 and attempt < _MAX_RETRIES:
                    wait = _retry_after(data) or _RETRY_BACKOFF_SECONDS[attempt]
                    _LOGGER.warning(
                        "Bot API rate limited %s (429), retrying in %ds (attempt %d/%d)",
                        method,
                        wait,
                        attempt + 1,
                        _MAX_RETRIES,
                    )
                    await asyncio.sleep(wait)
                    continue
                break

        if not data.get("ok"):
            raise TelegramAPIError(
                method=method,
                error_code=int(data.get("error_code") or response.status_code),
                description=str(data.get("description") or response.reason_phrase),
                retry_after=_retry_after(data),
            )
        _LOGGER.debug("Bot API %s succeeded", method)
        return data.get("result")


def _to_article(card: ResultCard) -> dict[str, Any]:
    return {
        "type": "article",
        "id": card.id,
        "title": card.title,
        "description": card.description,
        "input_message_content": {"message_text": card.message_text},
    }


def _safe_json(response: httpx.Response) -> dict[str, Any]:
    try:
        parsed = response.json()
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _retry_after(data: dict[str, Any]) -> int | None:
    parameters = data.get("parameters")
    if isinstance(parameters, dict) and isinstance(parameters.get("retry_after"), int):
        return parameters["retry_after"]
    return None
