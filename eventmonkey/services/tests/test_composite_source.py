"""Tests for the composite event source."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from eventmonkey.models import Event, SourceType
from eventmonkey.services.composite import CompositeEventSource


def _event(event_id, source=SourceType.RELATIONAL) -> Event:
    return Event(id=event_id, source=source, name=f"Event {event_id}")


def _source(by_id=None, events=()) -> MagicMock:
    source = MagicMock()
    source.find_by_event_id = AsyncMock(return_value=by_id)
    source.find_by_genre = AsyncMock(return_value=list(events))
    source.find_by_keyword = AsyncMock(return_value=list(events))
    source.find_excluding_genre = AsyncMock(return_value=list(events))
    return source


class TestFindByEventId:
    """Tests for CompositeEventSource.find_by_event_id."""

    @pytest.mark.asyncio
    async def test_first_source_wins(self, caplog):
        """When several sources know an id, the earliest listed one wins."""
        relational_event = _event(1)
        remote_event = _event(1, SourceType.REMOTE)
        composite = CompositeEventSource([_source(relational_event), _source(remote_event)])

        with caplog.at_level(logging.WARNING, logger="eventmonkey.services.composite"):
            event = await composite.find_by_event_id(1)

        assert event is relational_event
        assert "found in 2 sources" in caplog.text

    @pytest.mark.asyncio
    async def test_falls_through_to_later_source(self):
        """A miss in the first source still finds the event in the second."""
        remote_event = _event("tm-1", SourceType.REMOTE)
        composite = CompositeEventSource([_source(None), _source(remote_event)])
        assert await composite.find_by_event_id("tm-1") is remote_event

    @pytest.mark.asyncio
    async def test_not_found_anywhere(self):
        """No source knowing the id gives None."""
        composite = CompositeEventSource([_source(None), _source(None)])
        assert await composite.find_by_event_id(1) is None

    @pytest.mark.asyncio
    async def test_every_source_is_queried(self):
        """All sources are asked, even after an early hit."""
        first, second = _source(_event(1)), _source(None)
        await CompositeEventSource([first, second]).find_by_event_id(1)
        first.find_by_event_id.assert_awaited_once_with(1)
        second.find_by_event_id.assert_awaited_once_with(1)


class TestMergedQueries:
    """Tests for the merged multi-event queries."""

    @pytest.mark.asyncio
    async def test_merge_then_truncate(self):
        """Results concatenate in source order and then cut to the limit."""
        a, b, c, d = _event("a"), _event("b"), _event("c"), _event("d")
        composite = CompositeEventSource([_source(events=[a, b]), _source(events=[c, d])])

        assert await composite.find_by_genre(["Rock"], limit=3) == [a, b, c]

    @pytest.mark.asyncio
    async def test_no_limit_returns_everything(self):
        """Without a limit every result is kept."""
        a, b, c = _event("a"), _event("b"), _event("c")
        composite = CompositeEventSource([_source(events=[a]), _source(events=[b, c])])

        assert await composite.find_by_keyword("jazz") == [a, b, c]

    @pytest.mark.asyncio
    async def test_arguments_forwarded(self):
        """Each source receives the same names and limit."""
        first, second = _source(), _source()
        await CompositeEventSource([first, second]).find_excluding_genre(["Sports"], 4)

        first.find_excluding_genre.assert_awaited_once_with(["Sports"], 4)
        second.find_excluding_genre.assert_awaited_once_with(["Sports"], 4)

    @pytest.mark.asyncio
    async def test_source_failure_propagates(self):
        """One failing source fails the whole query."""
        failing = _source()
        failing.find_by_keyword = AsyncMock(side_effect=RuntimeError("catalog down"))
        composite = CompositeEventSource([_source(events=[_event(1)]), failing])

        with pytest.raises(RuntimeError, match="catalog down"):
            await composite.find_by_keyword("jazz")
