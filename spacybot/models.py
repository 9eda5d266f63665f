"""Core domain models used across layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator


@dataclass(slots=True, frozen=True)
class QueryInput:
    """Inline query normalized by adapters for card assembly."""

    query_id: str
    sender_first_name: str
    query_text: str
    sender_id: int | None = None
    sender_username: str = ""


@dataclass(slots=True, frozen=True)
class ResultCard:
    """One selectable suggestion in an inline query answer."""

    id: str
    title: str
    description: str
    message_text: str


@dataclass(slots=True, frozen=True)
class CardList:
    """Ordered answer to one inline query."""

    cards: tuple[ResultCard, ...]
    cache_time: int = 1

    def __iter__(self) -> Iterator[ResultCard]:
        return iter(self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def ids(self) -> list[str]:
        return [card.id for card in self.cards]
