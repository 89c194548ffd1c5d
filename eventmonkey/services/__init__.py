"""
Services for the EventMonkey backend.

This module provides the event sources, the relational data source, and the
``EventManager`` that ties them together.

Event Sources
-------------
Every source satisfies the ``EventSource`` protocol, so they can be swapped
or combined freely. Searching both catalogs at once::

    from eventmonkey.services import (
        CompositeEventSource,
        RelationalEventSource,
        TicketmasterEventSource,
        get_data_source,
        get_ticketmaster_client,
    )

    relational = RelationalEventSource(get_data_source())
    remote = TicketmasterEventSource(get_ticketmaster_client())
    composite = CompositeEventSource([relational, remote])

    events = await composite.find_by_genre(["Rock"], limit=10)

Most callers want the manager instead::

    from eventmonkey.models import SearchRequest
    from eventmonkey.services import get_event_manager

    manager = get_event_manager()
    events = await manager.search(SearchRequest(keyword="jazz", limit=5))

Available Services
------------------
- EventSource, DataSource: Source and storage contracts
- RelationalEventSource: EventMonkey's own events
- EventMonkeyDataSource: SQL storage for EventMonkey's own events
- TicketmasterClient, TicketmasterEventSource: TicketMaster Discovery API
- CompositeEventSource: Fan-out over several sources
- EventManager: Search orchestration
"""

from .base import DataSource, EventSource, truncate
from .composite import CompositeEventSource
from .database import EventMonkeyDataSource, get_data_source
from .event_manager import EventManager, get_event_manager
from .relational import RelationalEventSource
from .ticketmaster import (
    TicketmasterClient,
    TicketmasterError,
    TicketmasterEventSource,
    get_ticketmaster_client,
)

__all__ = [
    "DataSource",
    "EventSource",
    "truncate",
    "CompositeEventSource",
    "EventMonkeyDataSource",
    "get_data_source",
    "EventManager",
    "get_event_manager",
    "RelationalEventSource",
    "TicketmasterClient",
    "TicketmasterError",
    "TicketmasterEventSource",
    "get_ticketmaster_client",
]
