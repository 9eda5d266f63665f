"""Builds the ordered card list answering one inline query."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from spacybot.models import CardList, QueryInput, ResultCard
from spacybot.rng import Rng, default_rng
from spacybot.transforms import (
    add_spaces,
    create_typos,
    generate_me,
    mirror,
    randomize_case,
    repeat,
    reverse,
    scramble_letters,
)

CACHE_TIME_SECONDS = 1


@dataclass(slots=True, frozen=True)
class CardSpec:
    """Static metadata and renderer for one card position."""

    id: str
    title: str
    description: str
    render: Callable[[QueryInput, Rng], str]


# Positions are part of the public contract: clients may select by index.
# Position 10 (comboMirrorSpaces) is this bot's own addition to the classic ten.
CARD_SPECS: tuple[CardSpec, ...] = (
    CardSpec(
        id="addSpaces",
        title="🌌 I need some space!",
        description="Add extra spaces between each character in the message.",
        render=lambda query, rng: add_spaces(query.query_text),
    ),
    CardSpec(
        id="randomizeCase",
        title="🦘 Jumpy Letters",
        description="Randomly change letter case in the message.",
        render=lambda query, rng: randomize_case(query.query_text, rng),
    ),
    CardSpec(
        id="createTypos",
        title="✏️ feat: add typo",
        description="Randomly change the order of characters in the message.",
        render=lambda query, rng: create_typos(query.query_text, 1, rng),
    ),
    CardSpec(
        id="scrambleLetters",
        title="✍️ Scramble Letters",
        description="Recursively add typos.",
        render=lambda query, rng: scramble_letters(query.query_text, rng),
    ),
    CardSpec(
        id="generateMe",
        title="🤳 What the hell am I doing?",
        description="Tell everyone what you're doing (/me).",
        render=lambda query, rng: generate_me(query.sender_first_name, query.query_text),
    ),
    CardSpec(
        id="repeat",
        title="🔂 Can you repeat what I just said?",
        description="Repeat the message three times.",
        render=lambda query, rng: repeat(query.query_text),
    ),
    CardSpec(
        id="reverse",
        title="🔀 上海自来水",
        description="Reverse the order of characters in the message.",
        render=lambda query, rng: reverse(query.query_text),
    ),
    CardSpec(
        id="mirror",
        title="🪞 上海自来水来自海上",
        description="Mirror the message in reverse order.",
        render=lambda query, rng: mirror(query.query_text),
    ),
    CardSpec(
        id="comboSpacesRepeat",
        title="🛠️ Combo: Spaces + Repeat",
        description="Add extra spaces between each character. Then repeat the message three times.",
        render=lambda query, rng: repeat(add_spaces(query.query_text)),
    ),
    CardSpec(
        id="comboRandomcaseSpaces",
        title="🛠️ Combo: Random Case + Spaces",
        description="Randomly change letter case. Then add extra spaces between each character.",
        render=lambda query, rng: add_spaces(randomize_case(query.query_text, rng)),
    ),
    CardSpec(
        id="comboMirrorSpaces",
        title="🛠️ Combo: Mirror + Spaces",
        description="Mirror the message in reverse order. Then add extra spaces between each character.",
        render=lambda query, rng: add_spaces(mirror(query.query_text)),
    ),
)


def assemble(query: QueryInput, rng: Rng | None = None) -> CardList:
    """Render every card for the query in their fixed order."""

    rng = rng or default_rng()
    cards = tuple(
        ResultCard(
            id=spec.id,
            title=spec.title,
            description=spec.description,
            message_text=spec.render(query, rng),
        )
        for spec in CARD_SPECS
    )
    return CardList(cards=cards, cache_time=CACHE_TIME_SECONDS)
