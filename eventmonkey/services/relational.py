"""Event source backed by EventMonkey's own relational store."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Sequence

from eventmonkey.models import Event, SourceType
from eventmonkey.services.base import DataSource, truncate

logger = logging.getLogger(__name__)


class RelationalEventSource:
    """
    Turns relational event records into canonical events.

    Multi-event lookups first resolve candidate ids, cut the list down to
    ``limit``, then hydrate each id through ``find_by_event_id``.
    """

    def __init__(self, data_source: DataSource):
        self.data_source = data_source

    async def find_by_event_id(self, event_id: int | str) -> Event | None:
        if isinstance(event_id, str):
            # TicketMaster ids are not numeric and cannot name a stored row.
            # int() accepts decimal digits only, not every isdigit() character
            if not event_id.isdecimal():
                return None
            event_id = int(event_id)

        details = await self.data_source.get_event_details(event_id)
        if details is None:
            return None

        genres, images = await asyncio.gather(
            self.data_source.get_event_genres(event_id),
            self.data_source.get_event_images(event_id),
        )

        return Event.from_details(
            event_id, SourceType.RELATIONAL, details, images=images, genres=genres
        )

    async def find_by_genre(self, names: Sequence[str], limit: int | None = None) -> list[Event]:
        return await self._hydrate(
            "genre", self.data_source.get_event_ids_with_genres(list(names)), limit
        )

    async def find_by_keyword(self, keyword: str, limit: int | None = None) -> list[Event]:
        return await self._hydrate(
            "keyword", self.data_source.get_event_ids_with_keyword(keyword), limit
        )

    async def find_excluding_genre(
        self, names: Sequence[str], limit: int | None = None
    ) -> list[Event]:
        return await self._hydrate(
            "excluding-genre",
            self.data_source.get_event_ids_excluding_genres(list(names)),
            limit,
        )

    async def find_by_organizer_id(
        self, organizer_id: int, limit: int | None = None
    ) -> list[Event]:
        """Events created by an organizer. Only the relational store has these."""
        return await self._hydrate(
            "organizer", self.data_source.get_event_ids_by_organizer(organizer_id), limit
        )

    async def find_all(self, limit: int | None = None) -> list[Event]:
        """Every stored event."""
        return await self._hydrate("all", self.data_source.get_all_event_ids(), limit)

    async def create_event(self, organizer_id: int | None, event: Event) -> Event | None:
        """Store a new event and return it as read back from storage."""
        event_id = await self.data_source.create_event(organizer_id, event)
        return await self.find_by_event_id(event_id)

    async def delete_event(self, event_id: int) -> bool:
        """Delete a stored event. Returns False if it did not exist."""
        return await self.data_source.delete_event(event_id)

    async def _hydrate(
        self, query: str, id_lookup: Awaitable[list[int]], limit: int | None
    ) -> list[Event]:
        """
        Resolve candidate ids into events.

        Output follows the candidate id order. Ids that no longer resolve
        (deleted between the id query and hydration) are dropped.
        """
        start = time.perf_counter()
        event_ids = truncate(await id_lookup, limit)

        events = await asyncio.gather(
            *(self.find_by_event_id(event_id) for event_id in event_ids)
        )
        found = [event for event in events if event is not None]

        if len(found) < len(event_ids):
            logger.debug(
                "[Relational] %d of %d candidate ids no longer resolve",
                len(event_ids) - len(found),
                len(event_ids),
            )
        logger.debug(
            "[Relational] %s query | events=%d duration=%.2fs",
            query,
            len(found),
            time.perf_counter() - start,
        )
        return found
