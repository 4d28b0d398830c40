import asyncio
import inspect
import time
from dataclasses import dataclass
from typing import Awaitable, TypeVar

from app.core.exceptions import PersistenceTimeoutError

T = TypeVar("T")


@dataclass(frozen=True)
class Deadline:
    """Absolute monotonic instant after which persistence calls give up."""
    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(time.monotonic() + seconds)

    def remaining(self) -> float:
        return self.expires_at - time.monotonic()

    async def run(self, awaitable: Awaitable[T]) -> T:
        remaining = self.remaining()
        if remaining <= 0:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise PersistenceTimeoutError()
        try:
            return await asyncio.wait_for(awaitable, timeout=remaining)
        except asyncio.TimeoutError as exc:
            raise PersistenceTimeoutError() from exc
