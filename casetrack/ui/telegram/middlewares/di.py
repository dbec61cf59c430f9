from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject

from casetrack.domain.deadlines.engine import DeadlineEngine


class DIMiddleware(BaseMiddleware):
    """
    Inject dependencies to handlers via `data` dict.

    Handlers can request args by name, e.g.
      async def handler(message: Message, engine: DeadlineEngine, timezone: str): ...
    """

    def __init__(self, engine: DeadlineEngine, timezone: str) -> None:
        self._engine = engine
        self._tz = timezone

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        data["engine"] = self._engine
        data["timezone"] = self._tz
        return await handler(event, data)
