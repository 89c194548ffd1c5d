"""
TicketMaster Discovery API client and event source.

Fetches live events from the TicketMaster catalog and maps them onto the
canonical event model.

API Documentation: https://developer.ticketmaster.com/products-and-docs/apis/discovery-api/v2/
"""

import logging
import time
from collections.abc import Sequence
from datetime import datetime
from typing import Any

import httpx

from eventmonkey.config import get_settings
from eventmonkey.models import (
    NO_DESCRIPTION,
    NO_LOCATION,
    Event,
    EventDates,
    Genre,
    Image,
    SourceType,
)
from eventmonkey.services.base import truncate

logger = logging.getLogger(__name__)

# TicketMaster's own page size when none is requested
DEFAULT_PAGE_SIZE = 20

LOCATION_SEPARATOR = "─"

CLASSIFICATION_LEVELS = ("segment", "genre", "subGenre")


class TicketmasterError(Exception):
    """The catalog was unreachable or answered with something unusable."""


class TicketmasterClient:
    """Async client for the TicketMaster Discovery API."""

    EVENTS_PATH = "/events.json"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.ticketmaster_api_key
        self.base_url = base_url or settings.ticketmaster_base_url
        self.timeout = timeout or settings.ticketmaster_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_events(self, filters: dict[str, Any]) -> dict[str, Any]:
        """
        Query the events endpoint.

        Args:
            filters: Discovery API filter parameters (id, keyword, size, ...)

        Returns:
            The decoded JSON response

        Raises:
            TicketmasterError: On transport failure, a non-2xx status, or a
                body that is not a JSON object
        """
        client = await self._get_client()
        params = {"apikey": self.api_key, **filters}

        try:
            response = await client.get(self.EVENTS_PATH, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            # The request URL carries the API key, so keep it out of the message
            raise TicketmasterError(
                f"TicketMaster responded with HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise TicketmasterError(f"TicketMaster request failed: {type(e).__name__}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise TicketmasterError("TicketMaster returned a non-JSON body") from e

        if not isinstance(data, dict):
            raise TicketmasterError("TicketMaster returned an unexpected payload")
        return data


class TicketmasterEventSource:
    """
    Event source over the TicketMaster catalog.

    ``limit`` doubles as the catalog page size; when a caller passes None
    the source asks for ``page_size`` events.
    """

    def __init__(self, client: TicketmasterClient, page_size: int = DEFAULT_PAGE_SIZE):
        self.client = client
        self.page_size = page_size

    async def find_by_event_id(self, event_id: int | str) -> Event | None:
        events = await self._request({"id": str(event_id)}, 1)
        return events[0] if events else None

    async def find_by_genre(self, names: Sequence[str], limit: int | None = None) -> list[Event]:
        if not names:
            return []
        return await self._request({"classificationName": ",".join(names)}, limit)

    async def find_by_keyword(self, keyword: str, limit: int | None = None) -> list[Event]:
        return await self._request({"keyword": keyword}, limit)

    async def find_excluding_genre(
        self, names: Sequence[str], limit: int | None = None
    ) -> list[Event]:
        filters: dict[str, Any] = {}
        if names:
            # Discovery API negative filter syntax
            filters["classificationName"] = ",".join(f"-{name}" for name in names)
        return await self._request(filters, limit)

    async def _request(self, filters: dict[str, Any], limit: int | None) -> list[Event]:
        """Fetch one page and map at most ``limit`` events from it."""
        size = self.page_size if limit is None else limit
        if size <= 0:
            return []

        logger.debug("[TicketMaster] Outbound Query | filters=%s size=%d", filters, size)
        start = time.perf_counter()

        data = await self.client.get_events({**filters, "size": size})

        embedded = data.get("_embedded") or {}
        raw_events = embedded.get("events") or []

        # Only pay the mapping cost for events we return
        events = [self.construct_event(raw) for raw in truncate(raw_events, size)]

        elapsed = time.perf_counter() - start
        if events:
            logger.debug(
                "[TicketMaster] Complete | events=%d duration=%.2fs", len(events), elapsed
            )
        else:
            logger.debug("[TicketMaster] No events found | duration=%.2fs", elapsed)
        return events

    def construct_event(self, raw: dict[str, Any]) -> Event:
        """
        Map a Discovery API event object onto the canonical model.

        Raises:
            TicketmasterError: If the object lacks an id or name, or a field
                has the wrong shape
        """
        try:
            event = Event(
                id=raw["id"],
                source=SourceType.REMOTE,
                name=raw["name"],
                description=self._description(raw),
                location=self._location(raw),
                url=raw.get("url"),
                dates=self._dates(raw),
            )

            for price in raw.get("priceRanges") or []:
                currency = price.get("currency")
                low, high = price.get("min"), price.get("max")
                if currency is None or (low is None and high is None):
                    continue
                event.merge_price_range(currency, high if low is None else low, high)

            for image in raw.get("images") or []:
                if not image.get("url"):
                    continue
                event.add_image(
                    Image(
                        ratio=image.get("ratio"),
                        width=image.get("width"),
                        height=image.get("height"),
                        url=image["url"],
                    )
                )

            for genre in self._genres(raw):
                event.add_genre(genre)

        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise TicketmasterError(f"Malformed TicketMaster event: {e!r}") from e

        return event

    @staticmethod
    def _description(raw: dict[str, Any]) -> str:
        return raw.get("description") or raw.get("info") or raw.get("pleaseNote") or NO_DESCRIPTION

    @staticmethod
    def _location(raw: dict[str, Any]) -> str:
        """Format the first venue as '{name} ─ {city}, {state or country code}', region optional."""
        venues = (raw.get("_embedded") or {}).get("venues") or []
        if not venues:
            return NO_LOCATION

        venue = venues[0]
        city = (venue.get("city") or {}).get("name", "")
        state = (venue.get("state") or {}).get("stateCode")
        region = state or (venue.get("country") or {}).get("countryCode", "")
        place = f"{city}, {region}" if region else city
        return f"{venue.get('name', '')} {LOCATION_SEPARATOR} {place}"

    @staticmethod
    def _dates(raw: dict[str, Any]) -> EventDates:
        dates = raw.get("dates") or {}
        return EventDates(
            start_date_time=_parse_timestamp(dates.get("start")),
            end_date_time=_parse_timestamp(dates.get("end")),
        )

    @staticmethod
    def _genres(raw: dict[str, Any]) -> list[Genre]:
        """Segment, genre and sub-genre names from every classification."""
        genres = []
        for classification in raw.get("classifications") or []:
            for level in CLASSIFICATION_LEVELS:
                entry = classification.get(level) or {}
                if entry.get("name"):
                    genres.append(Genre(name=entry["name"], external_id=entry.get("id")))
        return genres


def _parse_timestamp(entry: dict[str, Any] | None) -> datetime | None:
    """Prefer the exact ``dateTime`` over the date-only ``localDate``."""
    if not entry:
        return None
    value = entry.get("dateTime") or entry.get("localDate")
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


# Singleton instance
_client: TicketmasterClient | None = None


def get_ticketmaster_client() -> TicketmasterClient:
    """Get the singleton TicketMaster client."""
    global _client
    if _client is None:
        _client = TicketmasterClient()
    return _client
