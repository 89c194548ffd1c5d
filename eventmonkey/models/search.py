"""Search request models for event discovery."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class SourceSelector(str, Enum):
    """Which event source a search runs against."""

    RELATIONAL = "relational"
    REMOTE = "remote"
    COMPOSITE = "composite"


class SearchRequest(BaseModel):
    """
    Filters for an event search.

    Every field that is set triggers its own lookup; results are concatenated
    in field order (event_id, classification, segment, organizer_id, keyword).
    """

    source: SourceSelector = Field(
        default=SourceSelector.COMPOSITE, description="Event source to search"
    )
    event_id: int | str | None = Field(
        default=None, description="Numeric for relational events, opaque string for TicketMaster"
    )
    classification: list[str] = Field(
        default_factory=list, description="Genre names to match"
    )
    segment: list[str] = Field(
        default_factory=list, description="Segment (top-level genre) names to match"
    )
    organizer_id: int | None = Field(
        default=None, description="Organizer whose relational events to include"
    )
    keyword: str | None = Field(default=None, description="Free-text search")
    limit: int | None = Field(
        default=None, gt=0, description="Maximum results per lookup"
    )

    @field_validator("classification", "segment", mode="before")
    @classmethod
    def _coerce_names(cls, value: object) -> object:
        """Accept a single genre name in place of a list."""
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    def is_empty(self) -> bool:
        """True when no lookup field is set."""
        return (
            self.event_id is None
            and not self.classification
            and not self.segment
            and self.organizer_id is None
            and not self.keyword
        )
