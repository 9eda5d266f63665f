"""Text transforms applied to inline query fragments.

Every transform walks the text as a sequence of code points and substitutes
its own default literal when handed an empty string.
"""

from __future__ import annotations

from spacybot.rng import Rng, default_rng

DEFAULT_SPACES_TEXT = "🌌 I need some space!"
DEFAULT_CASE_TEXT = "The quick brown fox jumps over the lazy dog."
DEFAULT_TYPOS_TEXT = "✏️ feat: add typo"
DEFAULT_ME_TEXT = "doesn't know what to say. 🤐"
DEFAULT_REPEAT_TEXT = "I repeat!"
DEFAULT_REVERSE_TEXT = "上海自来水"
DEFAULT_MIRROR_TEXT = "上海自来水"

_MAX_ASCII = 0x7F
_CASE_BIT = 0x20
_SCRAMBLE_MIN_ROUNDS = 10
_SCRAMBLE_ROUND_SPAN = 10


def add_spaces(s: str) -> str:
    """Add one space after ASCII characters and pad others on both sides.

    Wide glyphs look cramped with a single space, hence the double padding.
    """

    if not s:
        s = DEFAULT_SPACES_TEXT

    parts: list[str] = []
    for char in s:
        if ord(char) > _MAX_ASCII:
            parts.append(f" {char} ")
        else:
            parts.append(f"{char} ")
    return "".join(parts).strip()


def _is_basic_latin_letter(char: str) -> bool:
    return "a" <= char <= "z" or "A" <= char <= "Z"


def randomize_case(s: str, rng: Rng | None = None) -> str:
    """Flip the case of each basic Latin letter with probability 1/2.

    One 64-bit draw covers up to 64 letters.
    """

    if not s:
        s = DEFAULT_CASE_TEXT
    rng = rng or default_rng()

    chars = list(s)
    bits = 0
    remaining = 0
    for index, char in enumerate(chars):
        if not _is_basic_latin_letter(char):
            continue
        if remaining == 0:
            bits, remaining = rng.uint64(), 64
        if bits & 1:
            chars[index] = chr(ord(char) ^ _CASE_BIT)
        bits >>= 1
        remaining -= 1
    return "".join(chars)


def create_typos(s: str, rounds: int, rng: Rng | None = None) -> str:
    """Swap random adjacent characters (1 + n // 20) * rounds times."""

    if not s:
        s = DEFAULT_TYPOS_TEXT

    chars = list(s)
    if len(chars) < 2:
        return s
    rng = rng or default_rng()

    times = (1 + len(chars) // 20) * rounds
    for _ in range(times):
        pos = rng.randbelow(len(chars) - 1)
        chars[pos], chars[pos + 1] = chars[pos + 1], chars[pos]
    return "".join(chars)


def scramble_letters(s: str, rng: Rng | None = None) -> str:
    """Run create_typos with a round count drawn from [10, 20)."""

    rng = rng or default_rng()
    rounds = _SCRAMBLE_MIN_ROUNDS + rng.randbelow(_SCRAMBLE_ROUND_SPAN)
    return create_typos(s, rounds, rng)


def generate_me(first_name: str, s: str) -> str:
    """Format a chat '/me' action line."""

    if not s:
        s = DEFAULT_ME_TEXT
    return f"* {first_name} {s}"


def repeat(s: str) -> str:
    if not s:
        s = DEFAULT_REPEAT_TEXT
    return "\n".join((s, s, s))


def reverse(s: str) -> str:
    if not s:
        s = DEFAULT_REVERSE_TEXT
    return s[::-1]


def mirror(s: str) -> str:
    """Append the text reversed, pivoting on its last character."""

    if not s:
        s = DEFAULT_MIRROR_TEXT
    return s + s[-2::-1]
