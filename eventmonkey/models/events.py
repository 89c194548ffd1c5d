"""Canonical event models shared by every event source."""

from collections.abc import Iterable
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

NO_DESCRIPTION = "No description available"
NO_LOCATION = "No location available"


class SourceType(str, Enum):
    """Provenance of an event."""

    RELATIONAL = "relational"
    REMOTE = "remote"


class Genre(BaseModel):
    """A genre label attached to an event."""

    id: int | None = Field(default=None, description="EventMonkey genre id")
    external_id: str | None = Field(default=None, description="TicketMaster classification id")
    name: str

    def matches(self, name: str) -> bool:
        """Case-insensitive name comparison."""
        return self.name.casefold() == name.casefold()


class Image(BaseModel):
    """Metadata for an image resource; the image itself lives at ``url``."""

    id: int | None = Field(default=None, description="EventMonkey image id")
    ratio: str | None = Field(default=None, description="Aspect ratio, e.g. '16_9'")
    width: int | None = None
    height: int | None = None
    url: str


class PriceRange(BaseModel):
    """Ticket price span for a single currency."""

    currency: str
    min: float
    max: float


class EventDates(BaseModel):
    """Start and end of an event; either side may be unknown."""

    start_date_time: datetime | None = None
    end_date_time: datetime | None = None


def merge_price_ranges(ranges: Iterable[PriceRange]) -> list[PriceRange]:
    """
    Coalesce price ranges so each currency appears once.

    The merged span for a currency runs from the lowest min to the highest
    max seen for it. Currencies keep their first-seen order.
    """
    merged: dict[str, PriceRange] = {}
    for price in ranges:
        current = merged.get(price.currency)
        if current is None:
            merged[price.currency] = PriceRange(
                currency=price.currency, min=price.min, max=price.max
            )
        else:
            current.min = min(current.min, price.min)
            current.max = max(current.max, price.max)
    return list(merged.values())


class EventDetails(BaseModel):
    """Scalar event fields as stored by the relational data source."""

    name: str
    description: str = NO_DESCRIPTION
    location: str = NO_LOCATION
    url: str | None = None
    dates: EventDates = Field(default_factory=EventDates)
    price_ranges: list[PriceRange] = Field(default_factory=list)


class Event(BaseModel):
    """
    Source-agnostic event.

    ``id`` is only unique within its ``source``: relational events carry
    integer ids, TicketMaster events carry opaque strings.

    The mutators exist for assembling an event from raw source data. They
    keep two invariants: one price range per currency, and no two genres
    with the same name.
    """

    id: int | str | None = None
    source: SourceType
    name: str
    description: str = NO_DESCRIPTION
    location: str = NO_LOCATION
    url: str | None = None
    dates: EventDates = Field(default_factory=EventDates)
    price_ranges: list[PriceRange] = Field(default_factory=list)
    images: list[Image] = Field(default_factory=list)
    genres: list[Genre] = Field(default_factory=list)

    @model_validator(mode="after")
    def _normalize_collections(self) -> "Event":
        self.price_ranges = merge_price_ranges(self.price_ranges)
        genres = self.genres
        self.genres = []
        for genre in genres:
            self.add_genre(genre)
        return self

    @classmethod
    def from_details(
        cls,
        event_id: int | str,
        source: SourceType,
        details: EventDetails,
        images: Iterable[Image] = (),
        genres: Iterable[Genre] = (),
    ) -> "Event":
        """Build an event from stored details plus its associations."""
        return cls(
            id=event_id,
            source=source,
            name=details.name,
            description=details.description,
            location=details.location,
            url=details.url,
            dates=details.dates,
            price_ranges=details.price_ranges,
            images=list(images),
            genres=list(genres),
        )

    def add_image(self, image: Image) -> None:
        """Append an image unless one with the same url is already attached."""
        if any(other.url == image.url for other in self.images):
            return
        self.images.append(image)

    def remove_image(self, image: Image) -> None:
        """Remove every matching image (by id, or by url when the id is unset)."""
        if image.id is not None:
            self.images = [other for other in self.images if other.id != image.id]
        else:
            self.images = [other for other in self.images if other.url != image.url]

    def add_genre(self, genre: Genre) -> None:
        """Append a genre unless one with the same name is already attached."""
        if any(other.name == genre.name for other in self.genres):
            return
        self.genres.append(genre)

    def remove_genre(self, genre: Genre) -> None:
        """Remove every matching genre (by id, or by name when the id is unset)."""
        if genre.id is not None:
            self.genres = [other for other in self.genres if other.id != genre.id]
        else:
            self.genres = [other for other in self.genres if not other.matches(genre.name)]

    def has_genre(self, name: str) -> bool:
        """Check for a genre, ignoring case."""
        return any(genre.matches(name) for genre in self.genres)

    def set_price_range(
        self, currency: str, min_price: float, max_price: float | None = None
    ) -> None:
        """Replace the price range for ``currency``; ``max_price`` defaults to ``min_price``."""
        if max_price is None:
            max_price = min_price
        price = PriceRange(currency=currency, min=min_price, max=max_price)
        for index, other in enumerate(self.price_ranges):
            if other.currency == currency:
                self.price_ranges[index] = price
                return
        self.price_ranges.append(price)

    def merge_price_range(
        self, currency: str, min_price: float, max_price: float | None = None
    ) -> None:
        """Widen the price range for ``currency`` to cover ``min_price``..``max_price``."""
        if max_price is None:
            max_price = min_price
        price = PriceRange(currency=currency, min=min_price, max=max_price)
        self.price_ranges = merge_price_ranges([*self.price_ranges, price])


class EventCreate(BaseModel):
    """Fields an organizer supplies when creating an event."""

    name: str = Field(min_length=1)
    description: str = NO_DESCRIPTION
    location: str = NO_LOCATION
    url: str | None = None
    dates: EventDates = Field(default_factory=EventDates)
    price_ranges: list[PriceRange] = Field(default_factory=list)
    images: list[Image] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list, description="Genre names")

    def to_event(self) -> Event:
        """Build an unsaved relational event from these fields."""
        return Event(
            source=SourceType.RELATIONAL,
            name=self.name,
            description=self.description,
            location=self.location,
            url=self.url,
            dates=self.dates,
            price_ranges=self.price_ranges,
            images=self.images,
            genres=[Genre(name=name) for name in self.genres],
        )
