"""Adapter between Bot API updates and the card assembler."""

from __future__ import annotations

import logging
from typing import Any

from spacybot.assembler import assemble
from spacybot.models import QueryInput
from spacybot.rng import Rng
from spacybot.telegram.base import BotClient

LOGGER = logging.getLogger(__name__)


class InlineQueryHandler:
    """Answers inline query updates with the assembled card list."""

    def __init__(self, client: BotClient, rng: Rng | None = None) -> None:
        self._client = client
        self._rng = rng

    async def handle_update(self, update: dict[str, Any]) -> None:
        """Answer one update; failures are logged and never raised."""

        query = _to_query(update)
        if query is None:
            LOGGER.debug("Skipping update without inline query: %s", update.get("update_id"))
            return

        LOGGER.debug(
            "Received inline query userID=%s userFirstName=%r username=%r text=%r",
            query.sender_id,
            query.sender_first_name,
            query.sender_username,
            query.query_text,
        )

        cards = assemble(query, self._rng)
        try:
            await self._client.answer_inline_query(query.query_id, cards)
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Failed to handle update %s: %s", update.get("update_id"), exc)


def _to_query(update: dict[str, Any]) -> QueryInput | None:
    inline_query = update.get("inline_query")
    if not isinstance(inline_query, dict):
        return None
    query_id = inline_query.get("id")
    if not isinstance(query_id, str) or not query_id:
        return None

    sender = inline_query.get("from")
    if not isinstance(sender, dict):
        sender = {}
    text = inline_query.get("query")
    sender_id = sender.get("id")

    return QueryInput(
        query_id=query_id,
        sender_first_name=str(sender.get("first_name") or ""),
        query_text=text if isinstance(text, str) else "",
        sender_id=sender_id if isinstance(sender_id, int) else None,
        sender_username=str(sender.get("username") or ""),
    )
