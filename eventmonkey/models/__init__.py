"""Data models for EventMonkey."""

from .events import (
    NO_DESCRIPTION,
    NO_LOCATION,
    Event,
    EventCreate,
    EventDates,
    EventDetails,
    Genre,
    Image,
    PriceRange,
    SourceType,
    merge_price_ranges,
)
from .search import SearchRequest, SourceSelector

__all__ = [
    "NO_DESCRIPTION",
    "NO_LOCATION",
    "Event",
    "EventCreate",
    "EventDates",
    "EventDetails",
    "Genre",
    "Image",
    "PriceRange",
    "SearchRequest",
    "SourceSelector",
    "SourceType",
    "merge_price_ranges",
]
