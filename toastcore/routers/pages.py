import logging

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from toastcore.models.page import SetDataForSlug
from toastcore.models.response import EventStreamResponse, PageResponse
from toastcore.services.errors import ParseError, ProtocolViolation
from toastcore.services.events import consume_events, parse_event_stream
from toastcore.services.normalizer import load_page

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter(prefix="/pages", tags=["Pages"])


@router.post(
    "/normalize",
    response_model=PageResponse,
    summary="Normalize a single page description",
    description=(
        "Validates a page payload, makes its slug absolute, drops an empty "
        "`data` object, and returns the record together with the relative "
        "output path derived from the slug."
    ),
)
@limiter.limit("30/minute")
async def normalize_page(request: Request) -> PageResponse:
    body = await request.body()
    try:
        page = load_page(body)
    except ParseError as exc:
        logger.warning("Rejected page payload: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))

    logger.info("Page normalized", extra={"slug": page.slug})
    return _to_response(page)


@router.post(
    "/events",
    response_model=EventStreamResponse,
    summary="Consume a terminated stream of page events",
    description=(
        "Accepts a JSON array of `{\"type\": \"set\", \"page\": {...}}` events "
        "followed by exactly one `{\"type\": \"end\"}`.  Returns every "
        "normalized page in order.  Events after `end` are a protocol "
        "violation (HTTP 409)."
    ),
)
@limiter.limit("10/minute")
async def consume_page_events(request: Request) -> EventStreamResponse:
    body = await request.body()
    try:
        pages = consume_events(parse_event_stream(body))
    except ParseError as exc:
        logger.warning("Rejected event stream: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
    except ProtocolViolation as exc:
        logger.warning("Event stream protocol violation: %s", exc)
        raise HTTPException(status_code=409, detail=str(exc))

    results = [_to_response(page) for page in pages]
    return EventStreamResponse(pages=results, count=len(results))


def _to_response(page: SetDataForSlug) -> PageResponse:
    return PageResponse(
        page=page.to_payload(),
        filepath=page.slug_as_relative_filepath().as_posix(),
    )
