"""Fan-out event source that merges results from several sources."""

import asyncio
import itertools
import logging
from collections.abc import Awaitable, Callable, Sequence

from eventmonkey.models import Event
from eventmonkey.services.base import EventSource, truncate

logger = logging.getLogger(__name__)


class CompositeEventSource:
    """
    Queries every underlying source concurrently.

    Results are merged in source-list order, so sources earlier in the list
    win id collisions and are favored when ``limit`` cuts the merged list.
    """

    def __init__(self, sources: Sequence[EventSource]):
        self.sources = list(sources)

    async def find_by_event_id(self, event_id: int | str) -> Event | None:
        results = await asyncio.gather(
            *(source.find_by_event_id(event_id) for source in self.sources)
        )
        matches = [
            (source, event)
            for source, event in zip(self.sources, results)
            if event is not None
        ]
        if not matches:
            return None

        if len(matches) > 1:
            logger.warning(
                "Event id %r found in %d sources (%s); using %s",
                event_id,
                len(matches),
                ", ".join(type(source).__name__ for source, _ in matches),
                type(matches[0][0]).__name__,
            )
        return matches[0][1]

    async def find_by_genre(self, names: Sequence[str], limit: int | None = None) -> list[Event]:
        return await self._merge(lambda source: source.find_by_genre(names, limit), limit)

    async def find_by_keyword(self, keyword: str, limit: int | None = None) -> list[Event]:
        return await self._merge(lambda source: source.find_by_keyword(keyword, limit), limit)

    async def find_excluding_genre(
        self, names: Sequence[str], limit: int | None = None
    ) -> list[Event]:
        return await self._merge(
            lambda source: source.find_excluding_genre(names, limit), limit
        )

    async def _merge(
        self,
        query: Callable[[EventSource], Awaitable[list[Event]]],
        limit: int | None,
    ) -> list[Event]:
        """Run ``query`` on every source, concatenate in source order, then truncate."""
        results = await asyncio.gather(*(query(source) for source in self.sources))
        return truncate(list(itertools.chain.from_iterable(results)), limit)
