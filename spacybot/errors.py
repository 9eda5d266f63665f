"""Exceptions raised outside the text kernel."""

from __future__ import annotations


class TelegramAPIError(RuntimeError):
    """Raised when the Bot API answers with ok=false."""

    def __init__(
        self,
        method: str,
        error_code: int,
        description: str,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(f"{method} failed ({error_code}): {description}")
        self.method = method
        self.error_code = error_code
        self.description = description
        self.retry_after = retry_after

    @property
    def is_unauthorized(self) -> bool:
        # The Bot API answers 404 for a token it does not recognise at all.
        return self.error_code in (401, 404)


class StartupError(RuntimeError):
    """Raised when the bot cannot start and the process should exit nonzero."""
