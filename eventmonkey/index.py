"""API endpoints for EventMonkey event search."""

import logging

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from eventmonkey.config import configure_logging, get_settings
from eventmonkey.models import Event, EventCreate, SearchRequest, SourceSelector
from eventmonkey.services import EventManager, TicketmasterError, get_event_manager

load_dotenv()

# Configure logging from settings (uses LOG_LEVEL env var)
configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="EventMonkey")

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _catalog_unavailable(error: TicketmasterError) -> HTTPException:
    logger.error("Remote catalog failure: %s", error)
    return HTTPException(status_code=502, detail="The event catalog is unavailable right now.")


@app.get("/")
def root():
    """Root endpoint."""
    return {"status": "ok"}


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/api/events", response_model=list[Event])
async def search_events(
    source: SourceSelector = SourceSelector.COMPOSITE,
    event_id: str | None = Query(default=None, alias="eventId"),
    classification: list[str] = Query(default=[]),
    segment: list[str] = Query(default=[]),
    organizer_id: int | None = Query(default=None, alias="organizerId"),
    keyword: str | None = None,
    limit: int | None = Query(default=None, gt=0),
    manager: EventManager = Depends(get_event_manager),
):
    """Search events by id, classification, segment, organizer or keyword."""
    request = SearchRequest(
        source=source,
        event_id=event_id,
        classification=classification,
        segment=segment,
        organizer_id=organizer_id,
        keyword=keyword,
        limit=limit,
    )
    try:
        return await manager.search(request)
    except TicketmasterError as e:
        raise _catalog_unavailable(e) from e


@app.post("/api/events", response_model=Event, status_code=201)
async def create_event(
    body: EventCreate,
    organizer_id: int | None = Query(default=None, alias="organizerId"),
    manager: EventManager = Depends(get_event_manager),
):
    """Create an event in EventMonkey's own store."""
    event = await manager.create_event(organizer_id, body.to_event())
    if event is None:
        raise HTTPException(status_code=500, detail="Created event could not be read back")
    return event


@app.get("/api/events/all", response_model=list[Event])
async def all_events(manager: EventManager = Depends(get_event_manager)):
    """Every event stored by EventMonkey."""
    return await manager.get_all_events()


@app.get("/api/events/recommended", response_model=list[Event])
async def recommended_events(
    interest: list[str] = Query(default=[]),
    limit: int | None = Query(default=None, gt=0),
    manager: EventManager = Depends(get_event_manager),
):
    """Events from every source matching the caller's interests."""
    try:
        return await manager.get_recommended_events(interest, limit)
    except TicketmasterError as e:
        raise _catalog_unavailable(e) from e


@app.get("/api/events/{event_id}", response_model=Event)
async def get_event(
    event_id: str,
    source: SourceSelector = SourceSelector.COMPOSITE,
    manager: EventManager = Depends(get_event_manager),
):
    """Look up a single event."""
    try:
        event = await manager.find_event_by_id(event_id, source)
    except TicketmasterError as e:
        raise _catalog_unavailable(e) from e

    if event is None:
        raise HTTPException(status_code=404, detail=f"Event {event_id} not found")
    return event


@app.delete("/api/events/{event_id}", status_code=204)
async def delete_event(event_id: int, manager: EventManager = Depends(get_event_manager)):
    """Delete a stored event."""
    if not await manager.delete_event(event_id):
        raise HTTPException(status_code=404, detail=f"Event {event_id} not found")
