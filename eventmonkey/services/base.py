"""
Contracts shared by the event sources.

Every event source (relational, TicketMaster, composite) answers the same
four queries, so callers can swap one for another or fan a query out to
several of them at once.

Usage:
    source: EventSource = CompositeEventSource([relational, ticketmaster])
    events = await source.find_by_keyword("jazz", limit=10)
"""

from collections.abc import Sequence
from typing import Protocol, TypeVar

from eventmonkey.models import Event, EventDetails, Genre, Image

T = TypeVar("T")


class EventSource(Protocol):
    """An origin of canonical events."""

    async def find_by_event_id(self, event_id: int | str) -> Event | None:
        """Return the event with this id, or None if this source lacks it."""
        ...

    async def find_by_genre(self, names: Sequence[str], limit: int | None = None) -> list[Event]:
        """Return events carrying any of the named genres."""
        ...

    async def find_by_keyword(self, keyword: str, limit: int | None = None) -> list[Event]:
        """Return events matching free-text ``keyword``."""
        ...

    async def find_excluding_genre(
        self, names: Sequence[str], limit: int | None = None
    ) -> list[Event]:
        """Return events carrying none of the named genres."""
        ...


class DataSource(Protocol):
    """Storage capabilities the relational event source is built on."""

    async def get_event_details(self, event_id: int) -> EventDetails | None: ...

    async def get_event_genres(self, event_id: int) -> list[Genre]: ...

    async def get_event_images(self, event_id: int) -> list[Image]: ...

    async def get_event_ids_with_genres(self, names: Sequence[str]) -> list[int]: ...

    async def get_event_ids_with_keyword(self, keyword: str) -> list[int]: ...

    async def get_event_ids_excluding_genres(self, names: Sequence[str]) -> list[int]: ...

    async def get_event_ids_by_organizer(self, organizer_id: int) -> list[int]: ...

    async def get_all_event_ids(self) -> list[int]: ...

    async def create_event(self, organizer_id: int | None, event: Event) -> int: ...

    async def delete_event(self, event_id: int) -> bool: ...


def truncate(items: Sequence[T], limit: int | None) -> list[T]:
    """First ``limit`` items, or all of them when ``limit`` is None."""
    if limit is None:
        return list(items)
    return list(items[:limit])
