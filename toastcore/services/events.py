"""Page event stream: a finite run of ``Set`` events closed by one ``End``.

Producers emit zero or more :class:`SetEvent` values, each carrying an
already-normalized page, then exactly one :class:`EndEvent`.  Consumers stop
at ``End``; a ``Set`` (or another ``End``) arriving afterwards is reported
as a :class:`ProtocolViolation` instead of being accepted.

Wire form of a single event::

    {"type": "set", "page": {...page payload...}}
    {"type": "end"}
"""

import asyncio
import logging
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Union,
)

from pydantic import TypeAdapter, ValidationError

from toastcore.models.event import EndEvent, Event, SetEvent
from toastcore.models.page import SetDataForSlug
from toastcore.services.errors import ParseError, ProtocolViolation
from toastcore.services.normalizer import load_page

logger = logging.getLogger(__name__)

_EVENT_LIST = TypeAdapter(List[Dict[str, Any]])


def _parse_set(payload: Dict[str, Any]) -> Event:
    if "page" not in payload:
        raise ParseError("Invalid set event: page: Field required (got nothing)", field="page")
    if not isinstance(payload["page"], dict):
        raise ParseError(
            f"Invalid set event: page: expected an object, got {type(payload['page']).__name__}",
            field="page",
        )
    try:
        return SetEvent(page=load_page(payload["page"]))
    except ParseError as exc:
        field = f"page.{exc.field}" if exc.field else "page"
        raise ParseError(str(exc), field=field, errors=exc.errors) from exc


def _parse_end(payload: Dict[str, Any]) -> Event:
    return EndEvent()


_EVENT_TYPES: Dict[str, Callable[[Dict[str, Any]], Event]] = {
    "set": _parse_set,
    "end": _parse_end,
}


def parse_event(payload: Any) -> Event:
    """Decode one wire event; ``Set`` pages come back normalized.

    Raises:
        ParseError: if *payload* is not an object, ``type`` is unknown, or
            the page payload is invalid.
    """
    if isinstance(payload, (SetEvent, EndEvent)):
        return payload
    if not isinstance(payload, dict):
        raise ParseError(f"Invalid event: expected an object, got {type(payload).__name__}")

    event_type = payload.get("type")
    parser = _EVENT_TYPES.get(event_type) if isinstance(event_type, str) else None
    if parser is None:
        raise ParseError(
            f"Invalid event: type: unknown tag {event_type!r}, expected 'set' or 'end'",
            field="type",
        )
    return parser(payload)


def parse_event_stream(text: Union[str, bytes]) -> List[Event]:
    """Decode a JSON array of wire events.  Does not check ordering."""
    try:
        payloads = _EVENT_LIST.validate_json(text)
    except ValidationError as exc:
        raise ParseError.from_validation_error(exc, document="event stream") from exc

    events = []
    for index, payload in enumerate(payloads):
        try:
            events.append(parse_event(payload))
        except ParseError as exc:
            field = f"{index}.{exc.field}" if exc.field else str(index)
            raise ParseError(f"Event {index}: {exc}", field=field, errors=exc.errors) from exc
    return events


def page_events(payloads: Iterable[Any]) -> Iterator[Event]:
    """Produce a well-formed stream from raw page payloads."""
    for payload in payloads:
        yield SetEvent(page=load_page(payload))
    yield EndEvent()


class EventConsumer:
    """Tracks one stream and enforces the Set*/End ordering."""

    def __init__(self) -> None:
        self.ended = False
        self.pages: List[SetDataForSlug] = []

    def feed(self, event: Event) -> Optional[SetDataForSlug]:
        """Accept *event*; return its page for ``Set``, ``None`` for ``End``."""
        if isinstance(event, EndEvent):
            if self.ended:
                raise ProtocolViolation("Received a second End event")
            self.ended = True
            logger.info("Page stream ended", extra={"pages": len(self.pages)})
            return None

        if isinstance(event, SetEvent):
            if self.ended:
                raise ProtocolViolation(
                    f"Received Set for slug {event.page.slug!r} after End"
                )
            self.pages.append(event.page)
            return event.page

        raise ProtocolViolation(f"Unknown event type {type(event).__name__}")

    def finish(self) -> List[SetDataForSlug]:
        """Return every page received; the stream must have ended."""
        if not self.ended:
            raise ProtocolViolation(
                f"Event stream stopped after {len(self.pages)} page(s) without an End event"
            )
        return list(self.pages)


def consume_events(events: Iterable[Event]) -> List[SetDataForSlug]:
    """Drain a finite stream and return its pages in order."""
    consumer = EventConsumer()
    for event in events:
        consumer.feed(event)
    return consumer.finish()


async def aconsume_events(events: AsyncIterable[Event]) -> List[SetDataForSlug]:
    """Async counterpart of :func:`consume_events`."""
    consumer = EventConsumer()
    async for event in events:
        consumer.feed(event)
    return consumer.finish()


class PageEventChannel:
    """Single-producer, single-consumer channel of page events.

    The producer calls :meth:`send` for each page and :meth:`close` once.
    The consumer iterates with ``async for``; iteration suspends while
    waiting for the next event and stops at ``End``.
    """

    def __init__(self) -> None:
        self._queue: "asyncio.Queue[Event]" = asyncio.Queue()
        self._closed = False
        self._consumer = EventConsumer()

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, page: SetDataForSlug) -> None:
        if self._closed:
            raise ProtocolViolation(f"Cannot send slug {page.slug!r}: channel is closed")
        self._queue.put_nowait(SetEvent(page=page.normalize()))

    def close(self) -> None:
        if self._closed:
            raise ProtocolViolation("Channel is already closed")
        self._closed = True
        self._queue.put_nowait(EndEvent())

    async def receive(self) -> Event:
        """Wait for the next raw event."""
        return await self._queue.get()

    def __aiter__(self) -> AsyncIterator[SetDataForSlug]:
        return self._pages()

    async def _pages(self) -> AsyncIterator[SetDataForSlug]:
        # End already consumed: nothing else can arrive
        if self._consumer.ended:
            return
        while True:
            page = self._consumer.feed(await self.receive())
            if page is None:
                return
            yield page
