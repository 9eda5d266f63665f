"""Messaging platform client interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from spacybot.models import CardList

ALLOWED_UPDATES = ["inline_query"]


class BotClient(ABC):
    """Abstract Bot API client used by startup and update delivery."""

    @abstractmethod
    async def get_me(self) -> dict[str, Any]:
        """Return the bot's own user record."""

    @abstractmethod
    async def set_webhook(
        self,
        url: str,
        secret_token: str = "",
        allowed_updates: list[str] | None = None,
    ) -> bool:
        """Register the webhook URL; an empty URL switches back to polling."""

    @abstractmethod
    async def get_updates(self, offset: int | None, timeout: int) -> list[dict[str, Any]]:
        """Long-poll for pending updates."""

    @abstractmethod
    async def answer_inline_query(self, inline_query_id: str, cards: CardList) -> bool:
        """Send the card list as the answer to an inline query."""
