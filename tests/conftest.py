import asyncio
from typing import Any, List, Optional

import pytest


class ScriptedFetcher:
    """Status fetcher test double returning scripted payloads in order.

    Each item is either a payload (returned) or an exception (raised). The
    last item repeats once the script is exhausted. When `gate` is set the
    fetch blocks until the event is set, simulating a slow response.
    """

    def __init__(self, *script: Any):
        self.script: List[Any] = list(script)
        self.calls: List[str] = []
        self.gate: Optional[asyncio.Event] = None

    async def fetch(self, handle: str) -> Any:
        self.calls.append(handle)
        if self.gate is not None:
            await self.gate.wait()
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def scripted_fetcher():
    """Factory for ScriptedFetcher instances."""
    return ScriptedFetcher
