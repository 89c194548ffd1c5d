"""
Relational data source for EventMonkey's own events.

Runs raw SQL through SQLAlchemy's async engine. The default URL points at a
local SQLite file (via aiosqlite); ``init_schema`` emits SQLite-flavoured DDL,
so other backends are expected to have their schema provisioned already.

Every call checks a connection out of the engine's pool inside an
``async with`` block, so it is returned even when a query fails.
"""

import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from eventmonkey.config import get_settings
from eventmonkey.models import (
    NO_DESCRIPTION,
    NO_LOCATION,
    Event,
    EventDates,
    EventDetails,
    Genre,
    Image,
    PriceRange,
)

logger = logging.getLogger(__name__)

SCHEMA = [
    """CREATE TABLE IF NOT EXISTS event (
        event_id INTEGER PRIMARY KEY,
        organizer_id INTEGER,
        name TEXT NOT NULL,
        description TEXT,
        location TEXT,
        url TEXT,
        start_date_time TEXT,
        end_date_time TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS genre (
        genre_id INTEGER PRIMARY KEY,
        name TEXT NOT NULL UNIQUE
    )""",
    """CREATE TABLE IF NOT EXISTS event_genre (
        event_genre_id INTEGER PRIMARY KEY,
        event_id INTEGER NOT NULL REFERENCES event (event_id),
        genre_id INTEGER NOT NULL REFERENCES genre (genre_id),
        UNIQUE (event_id, genre_id)
    )""",
    """CREATE TABLE IF NOT EXISTS image (
        image_id INTEGER PRIMARY KEY,
        event_id INTEGER NOT NULL REFERENCES event (event_id),
        ratio TEXT,
        width INTEGER,
        height INTEGER,
        url TEXT NOT NULL
    )""",
    """CREATE TABLE IF NOT EXISTS price_range (
        price_range_id INTEGER PRIMARY KEY,
        event_id INTEGER NOT NULL REFERENCES event (event_id),
        currency TEXT NOT NULL,
        min_price REAL NOT NULL,
        max_price REAL NOT NULL,
        UNIQUE (event_id, currency)
    )""",
    "CREATE INDEX IF NOT EXISTS idx_event_organizer ON event (organizer_id)",
    "CREATE INDEX IF NOT EXISTS idx_event_genre_genre ON event_genre (genre_id)",
]

# Event ids tagged with any of the given genre names
GENRE_MATCH_QUERY = text(
    """
    SELECT DISTINCT eg.event_id
    FROM event_genre eg
    JOIN genre g ON g.genre_id = eg.genre_id
    WHERE LOWER(g.name) IN :names
    ORDER BY eg.event_id
    """
).bindparams(bindparam("names", expanding=True))

GENRE_EXCLUDE_QUERY = text(
    """
    SELECT e.event_id
    FROM event e
    WHERE e.event_id NOT IN (
        SELECT eg.event_id
        FROM event_genre eg
        JOIN genre g ON g.genre_id = eg.genre_id
        WHERE LOWER(g.name) IN :names
    )
    ORDER BY e.event_id
    """
).bindparams(bindparam("names", expanding=True))


class EventMonkeyDataSource:
    """SQL-backed implementation of the relational ``DataSource`` contract."""

    def __init__(self, database_url: str | None = None, engine: AsyncEngine | None = None):
        """Initialize the data source.

        Args:
            database_url: SQLAlchemy async URL. Defaults to settings.database_url
            engine: Pre-built engine; takes precedence over ``database_url``
        """
        if engine is None:
            database_url = database_url or get_settings().database_url
            engine = create_async_engine(database_url)
        self.engine = engine

    async def init_schema(self) -> None:
        """Create tables if they don't exist."""
        url = self.engine.url
        if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

        async with self.engine.begin() as conn:
            for statement in SCHEMA:
                await conn.execute(text(statement))
        logger.info("Event schema ready at %s", url.render_as_string(hide_password=True))

    async def close(self) -> None:
        """Dispose of the engine's connection pool."""
        await self.engine.dispose()

    async def get_event_details(self, event_id: int) -> EventDetails | None:
        async with self.engine.connect() as conn:
            result = await conn.execute(
                text(
                    "SELECT name, description, location, url, start_date_time, end_date_time "
                    "FROM event WHERE event_id = :event_id"
                ),
                {"event_id": event_id},
            )
            row = result.mappings().first()
            if row is None:
                return None

            prices = await conn.execute(
                text(
                    "SELECT currency, min_price, max_price FROM price_range "
                    "WHERE event_id = :event_id ORDER BY price_range_id"
                ),
                {"event_id": event_id},
            )
            price_ranges = [
                PriceRange(currency=price["currency"], min=price["min_price"], max=price["max_price"])
                for price in prices.mappings().all()
            ]

        return EventDetails(
            name=row["name"],
            description=row["description"] or NO_DESCRIPTION,
            location=row["location"] or NO_LOCATION,
            url=row["url"],
            dates=EventDates(
                start_date_time=_parse_datetime(row["start_date_time"]),
                end_date_time=_parse_datetime(row["end_date_time"]),
            ),
            price_ranges=price_ranges,
        )

    async def get_event_genres(self, event_id: int) -> list[Genre]:
        async with self.engine.connect() as conn:
            result = await conn.execute(
                text(
                    "SELECT g.genre_id, g.name FROM genre g "
                    "JOIN event_genre eg ON eg.genre_id = g.genre_id "
                    "WHERE eg.event_id = :event_id ORDER BY eg.event_genre_id"
                ),
                {"event_id": event_id},
            )
            return [Genre(id=row["genre_id"], name=row["name"]) for row in result.mappings().all()]

    async def get_event_images(self, event_id: int) -> list[Image]:
        async with self.engine.connect() as conn:
            result = await conn.execute(
                text(
                    "SELECT image_id, ratio, width, height, url FROM image "
                    "WHERE event_id = :event_id ORDER BY image_id"
                ),
                {"event_id": event_id},
            )
            return [
                Image(
                    id=row["image_id"],
                    ratio=row["ratio"],
                    width=row["width"],
                    height=row["height"],
                    url=row["url"],
                )
                for row in result.mappings().all()
            ]

    async def get_event_ids_with_genres(self, names: Sequence[str]) -> list[int]:
        if not names:
            return []
        return await self._fetch_ids(GENRE_MATCH_QUERY, {"names": _lowered(names)})

    async def get_event_ids_with_keyword(self, keyword: str) -> list[int]:
        return await self._fetch_ids(
            text(
                "SELECT event_id FROM event "
                "WHERE LOWER(name) LIKE :pattern OR LOWER(description) LIKE :pattern "
                "ORDER BY event_id"
            ),
            {"pattern": f"%{keyword.lower()}%"},
        )

    async def get_event_ids_excluding_genres(self, names: Sequence[str]) -> list[int]:
        if not names:
            return await self.get_all_event_ids()
        return await self._fetch_ids(GENRE_EXCLUDE_QUERY, {"names": _lowered(names)})

    async def get_event_ids_by_organizer(self, organizer_id: int) -> list[int]:
        return await self._fetch_ids(
            text("SELECT event_id FROM event WHERE organizer_id = :organizer_id ORDER BY event_id"),
            {"organizer_id": organizer_id},
        )

    async def get_all_event_ids(self) -> list[int]:
        return await self._fetch_ids(text("SELECT event_id FROM event ORDER BY event_id"), {})

    async def create_event(self, organizer_id: int | None, event: Event) -> int:
        """Insert an event with its genres, images and price ranges.

        Genres are matched by exact name and created when missing. The whole
        insert runs in one transaction.

        Returns:
            The new event id
        """
        async with self.engine.begin() as conn:
            result = await conn.execute(
                text(
                    "INSERT INTO event (organizer_id, name, description, location, url, "
                    "start_date_time, end_date_time) VALUES (:organizer_id, :name, "
                    ":description, :location, :url, :start_date_time, :end_date_time)"
                ),
                {
                    "organizer_id": organizer_id,
                    "name": event.name,
                    "description": event.description,
                    "location": event.location,
                    "url": event.url,
                    "start_date_time": _format_datetime(event.dates.start_date_time),
                    "end_date_time": _format_datetime(event.dates.end_date_time),
                },
            )
            event_id = result.lastrowid

            for genre in event.genres:
                genre_id = await self._get_or_create_genre(conn, genre.name)
                await conn.execute(
                    text("INSERT INTO event_genre (event_id, genre_id) VALUES (:event_id, :genre_id)"),
                    {"event_id": event_id, "genre_id": genre_id},
                )

            for image in event.images:
                await conn.execute(
                    text(
                        "INSERT INTO image (event_id, ratio, width, height, url) "
                        "VALUES (:event_id, :ratio, :width, :height, :url)"
                    ),
                    {"event_id": event_id, **image.model_dump(exclude={"id"})},
                )

            for price in event.price_ranges:
                await conn.execute(
                    text(
                        "INSERT INTO price_range (event_id, currency, min_price, max_price) "
                        "VALUES (:event_id, :currency, :min_price, :max_price)"
                    ),
                    {
                        "event_id": event_id,
                        "currency": price.currency,
                        "min_price": price.min,
                        "max_price": price.max,
                    },
                )

        logger.info("Created event %s for organizer %s", event_id, organizer_id)
        return event_id

    async def delete_event(self, event_id: int) -> bool:
        """Delete an event and its associations.

        Returns:
            True if the event existed
        """
        async with self.engine.begin() as conn:
            for table in ("event_genre", "image", "price_range"):
                await conn.execute(
                    text(f"DELETE FROM {table} WHERE event_id = :event_id"),
                    {"event_id": event_id},
                )
            result = await conn.execute(
                text("DELETE FROM event WHERE event_id = :event_id"),
                {"event_id": event_id},
            )
            return result.rowcount > 0

    async def _fetch_ids(self, query, params: dict) -> list[int]:
        async with self.engine.connect() as conn:
            result = await conn.execute(query, params)
            return list(result.scalars().all())

    @staticmethod
    async def _get_or_create_genre(conn: AsyncConnection, name: str) -> int:
        result = await conn.execute(
            text("SELECT genre_id FROM genre WHERE name = :name"), {"name": name}
        )
        genre_id = result.scalar()
        if genre_id is not None:
            return genre_id

        result = await conn.execute(text("INSERT INTO genre (name) VALUES (:name)"), {"name": name})
        return result.lastrowid


def _lowered(names: Sequence[str]) -> list[str]:
    return [name.lower() for name in names]


def _format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


# Singleton instance
_data_source: EventMonkeyDataSource | None = None


def get_data_source() -> EventMonkeyDataSource:
    """Get the singleton relational data source."""
    global _data_source
    if _data_source is None:
        _data_source = EventMonkeyDataSource()
    return _data_source
