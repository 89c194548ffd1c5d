"""Tests for the canonical event and search models."""

import pytest
from pydantic import ValidationError

from eventmonkey.models import (
    NO_DESCRIPTION,
    NO_LOCATION,
    Event,
    EventCreate,
    EventDetails,
    Genre,
    Image,
    PriceRange,
    SearchRequest,
    SourceSelector,
    SourceType,
    merge_price_ranges,
)


def _event(**kwargs) -> Event:
    return Event(source=SourceType.RELATIONAL, name="Test Event", **kwargs)


class TestPriceRanges:
    """Tests for price range merging."""

    def test_merge_coalesces_per_currency(self):
        """Ranges in the same currency widen to span every input."""
        merged = merge_price_ranges(
            [
                PriceRange(currency="USD", min=0, max=10),
                PriceRange(currency="USD", min=5, max=20),
                PriceRange(currency="EUR", min=1, max=2),
            ]
        )
        assert merged == [
            PriceRange(currency="USD", min=0, max=20),
            PriceRange(currency="EUR", min=1, max=2),
        ]

    def test_merge_does_not_mutate_inputs(self):
        """Merging leaves the caller's ranges untouched."""
        first = PriceRange(currency="USD", min=5, max=10)
        merge_price_ranges([first, PriceRange(currency="USD", min=0, max=50)])
        assert first.min == 5
        assert first.max == 10

    def test_event_construction_merges_ranges(self):
        """An event never carries two ranges for one currency."""
        event = _event(
            price_ranges=[
                PriceRange(currency="USD", min=10, max=15),
                PriceRange(currency="USD", min=8, max=12),
            ]
        )
        assert event.price_ranges == [PriceRange(currency="USD", min=8, max=15)]

    def test_merge_price_range_widens_existing(self):
        """Merging a new span into an event widens the existing one."""
        event = _event(price_ranges=[PriceRange(currency="USD", min=10, max=20)])
        event.merge_price_range("USD", 5, 15)
        event.merge_price_range("GBP", 7)
        assert event.price_ranges == [
            PriceRange(currency="USD", min=5, max=20),
            PriceRange(currency="GBP", min=7, max=7),
        ]

    def test_set_price_range_replaces_existing(self):
        """Setting a price range overwrites the span for that currency."""
        event = _event(price_ranges=[PriceRange(currency="USD", min=10, max=20)])
        event.set_price_range("USD", 30, 40)
        assert event.price_ranges == [PriceRange(currency="USD", min=30, max=40)]


class TestGenres:
    """Tests for genre handling on events."""

    def test_duplicate_genre_names_collapse(self):
        """Two genres with the same name become one."""
        event = _event(genres=[Genre(name="Rock"), Genre(name="Rock"), Genre(name="Jazz")])
        assert [genre.name for genre in event.genres] == ["Rock", "Jazz"]

    def test_add_genre_skips_existing_name(self):
        """add_genre ignores a genre already attached by name."""
        event = _event(genres=[Genre(id=1, name="Rock")])
        event.add_genre(Genre(id=2, name="Rock"))
        assert len(event.genres) == 1
        assert event.genres[0].id == 1

    def test_has_genre_ignores_case(self):
        """Genre lookup is case-insensitive."""
        event = _event(genres=[Genre(name="Hip-Hop/Rap")])
        assert event.has_genre("hip-hop/rap")
        assert not event.has_genre("Country")

    def test_remove_genre_by_id_and_name(self):
        """Genres are removed by id when known, else by name."""
        event = _event(genres=[Genre(id=1, name="Rock"), Genre(name="Jazz")])
        event.remove_genre(Genre(id=1, name="ignored"))
        event.remove_genre(Genre(name="JAZZ"))
        assert event.genres == []


class TestImages:
    """Tests for image handling on events."""

    def test_add_image_skips_duplicate_url(self):
        """An image url is attached at most once."""
        event = _event()
        event.add_image(Image(url="https://example.com/a.jpg", ratio="16_9"))
        event.add_image(Image(url="https://example.com/a.jpg", ratio="4_3"))
        assert len(event.images) == 1
        assert event.images[0].ratio == "16_9"

    def test_remove_image_by_url(self):
        """Images without an id are removed by url."""
        event = _event(images=[Image(url="https://example.com/a.jpg")])
        event.remove_image(Image(url="https://example.com/a.jpg"))
        assert event.images == []


class TestEventFromDetails:
    """Tests for Event.from_details."""

    def test_defaults_fill_missing_text(self):
        """Missing description and location fall back to sentinels."""
        event = Event.from_details(7, SourceType.RELATIONAL, EventDetails(name="Gig"))
        assert event.id == 7
        assert event.description == NO_DESCRIPTION
        assert event.location == NO_LOCATION

    def test_attaches_associations(self):
        """Genres and images are carried onto the event."""
        event = Event.from_details(
            7,
            SourceType.RELATIONAL,
            EventDetails(name="Gig"),
            images=[Image(id=3, url="https://example.com/a.jpg")],
            genres=[Genre(id=4, name="Rock")],
        )
        assert event.images[0].id == 3
        assert event.has_genre("rock")


class TestEventCreate:
    """Tests for the event creation body."""

    def test_to_event(self):
        """Genre names become genres on an unsaved relational event."""
        event = EventCreate(name="Open Mic", genres=["Comedy", "Comedy", "Live"]).to_event()
        assert event.id is None
        assert event.source is SourceType.RELATIONAL
        assert [genre.name for genre in event.genres] == ["Comedy", "Live"]
        assert event.location == NO_LOCATION

    def test_blank_name_rejected(self):
        """An empty name fails validation."""
        with pytest.raises(ValidationError):
            EventCreate(name="")


class TestSearchRequest:
    """Tests for SearchRequest."""

    def test_defaults(self):
        """A bare request searches the composite source and is empty."""
        request = SearchRequest()
        assert request.source is SourceSelector.COMPOSITE
        assert request.is_empty()

    def test_single_name_coerced_to_list(self):
        """A lone classification string becomes a one-element list."""
        request = SearchRequest(classification="Rock", segment=None)
        assert request.classification == ["Rock"]
        assert request.segment == []
        assert not request.is_empty()

    def test_source_parsed_from_string(self):
        """Source selectors parse from their string values."""
        assert SearchRequest(source="remote").source is SourceSelector.REMOTE

    def test_unknown_source_rejected(self):
        """Unknown source names fail validation."""
        with pytest.raises(ValidationError):
            SearchRequest(source="eventbrite")

    def test_limit_must_be_positive(self):
        """Zero and negative limits fail validation."""
        with pytest.raises(ValidationError):
            SearchRequest(keyword="jazz", limit=0)
