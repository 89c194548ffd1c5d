"""
Top-level orchestrator for event searches.

Route handlers and the CLI talk to ``EventManager``; it decides which event
source answers a request and stitches the per-filter results together.
"""

import asyncio
import logging
from collections.abc import Awaitable, Iterable
from typing import assert_never

from eventmonkey.config import get_settings
from eventmonkey.models import Event, SearchRequest, SourceSelector
from eventmonkey.services.base import EventSource
from eventmonkey.services.composite import CompositeEventSource
from eventmonkey.services.database import get_data_source
from eventmonkey.services.relational import RelationalEventSource
from eventmonkey.services.ticketmaster import (
    TicketmasterEventSource,
    get_ticketmaster_client,
)

logger = logging.getLogger(__name__)


class EventManager:
    """
    Answers event searches across the relational store and TicketMaster.

    The composite source lists the relational source first, so EventMonkey's
    own events win id collisions and limit ties.
    """

    def __init__(
        self,
        relational: RelationalEventSource,
        remote: EventSource,
        composite: EventSource | None = None,
        default_limit: int = 20,
    ):
        self.relational = relational
        self.remote = remote
        self.composite = composite or CompositeEventSource([relational, remote])
        self.default_limit = default_limit

    def select_source(self, selector: SourceSelector) -> EventSource:
        """Map a source selector onto the event source it names."""
        if selector is SourceSelector.RELATIONAL:
            return self.relational
        elif selector is SourceSelector.REMOTE:
            return self.remote
        elif selector is SourceSelector.COMPOSITE:
            return self.composite
        else:
            assert_never(selector)

    async def search(self, request: SearchRequest) -> list[Event]:
        """
        Run one lookup per filter set on ``request`` and concatenate the results.

        Lookups happen in the order event_id, classification, segment,
        organizer_id, keyword, and their results are appended in that order.
        A request with several filters gets the union of the lookups (with
        possible repeats), not their intersection. That matches how searches
        have always behaved here; whether an intersection was intended is an
        open product question.

        ``organizer_id`` always goes to the relational source, since only it
        knows which organizer created an event. A request with no filters
        returns an empty list.
        """
        if request.is_empty():
            return []

        source = self.select_source(request.source)
        limit = request.limit or self.default_limit

        lookups: list[Awaitable[list[Event]]] = []
        if request.event_id is not None:
            lookups.append(self._find_one(source, request.event_id))
        if request.classification:
            lookups.append(source.find_by_genre(request.classification, limit))
        if request.segment:
            lookups.append(source.find_by_genre(request.segment, limit))
        if request.organizer_id is not None:
            lookups.append(self.relational.find_by_organizer_id(request.organizer_id, limit))
        if request.keyword:
            lookups.append(source.find_by_keyword(request.keyword, limit))

        results = await asyncio.gather(*lookups)
        events = [event for result in results for event in result]

        logger.info(
            "Search | source=%s lookups=%d events=%d",
            request.source.value,
            len(lookups),
            len(events),
        )
        return events

    async def find_event_by_id(
        self, event_id: int | str, source: SourceSelector = SourceSelector.COMPOSITE
    ) -> Event | None:
        """Look up one event through the selected source."""
        return await self.select_source(source).find_by_event_id(event_id)

    async def get_all_events(self) -> list[Event]:
        """Every event stored by EventMonkey itself."""
        return await self.relational.find_all()

    async def get_recommended_events(
        self, interests: Iterable[str], limit: int | None = None
    ) -> list[Event]:
        """Events from any source matching a set of genre interests."""
        names = list(dict.fromkeys(interests))
        if not names:
            return []
        return await self.composite.find_by_genre(names, limit or self.default_limit)

    async def create_event(self, organizer_id: int | None, event: Event) -> Event | None:
        """Store an organizer's new event in the relational store."""
        created = await self.relational.create_event(organizer_id, event)
        logger.info("Organizer %s created event %s", organizer_id, created.id if created else None)
        return created

    async def delete_event(self, event_id: int) -> bool:
        """Delete a stored event. Returns False if it did not exist."""
        return await self.relational.delete_event(event_id)

    @staticmethod
    async def _find_one(source: EventSource, event_id: int | str) -> list[Event]:
        event = await source.find_by_event_id(event_id)
        return [event] if event is not None else []


# Singleton instance
_manager: EventManager | None = None


def get_event_manager() -> EventManager:
    """
    Get the singleton event manager, wired from settings.

    Without a TicketMaster API key the composite source covers only
    EventMonkey's own events; explicit remote searches still reach TicketMaster.
    """
    global _manager
    if _manager is None:
        settings = get_settings()
        relational = RelationalEventSource(get_data_source())
        remote = TicketmasterEventSource(get_ticketmaster_client())

        if settings.has_remote_catalog:
            sources: list[EventSource] = [relational, remote]
        else:
            logger.warning("TICKETMASTER_API_KEY not set; composite searches skip TicketMaster")
            sources = [relational]

        _manager = EventManager(
            relational=relational,
            remote=remote,
            composite=CompositeEventSource(sources),
            default_limit=settings.default_search_limit,
        )
    return _manager
