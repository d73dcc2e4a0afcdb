"""
Message gateway for websocket-style event traffic.

Inbound messages have the shape {"event": <name>, "data": <any>}. Each one is
handed to the handler registered for its event name, which returns zero or
more outbound messages. A GatewayConnection delivers inbound messages to the
gateway one at a time, in arrival order, through a bounded queue.
"""

import asyncio
import contextlib
import inspect
import logging
import os
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Union

logger = logging.getLogger("events")

EVENT_QUEUE_SIZE = int(os.environ.get("EVENT_QUEUE_SIZE", "32"))

_STOPPED = object()

Message = Dict[str, Any]
HandlerResult = Union[None, Message, Iterable[Message]]
Handler = Callable[[Any], Union[HandlerResult, Awaitable[HandlerResult]]]


def _normalize(result: HandlerResult) -> List[Message]:
    if result is None:
        return []
    if isinstance(result, dict):
        return [result]
    return list(result)


class EventGateway:
    def __init__(self) -> None:
        self._handlers: Dict[str, Handler] = {}

    def on(self, event: str) -> Callable[[Handler], Handler]:
        def decorator(func: Handler) -> Handler:
            self._handlers[event] = func
            return func

        return decorator

    def register(self, event: str, handler: Handler) -> None:
        self._handlers[event] = handler

    @property
    def events(self) -> List[str]:
        return sorted(self._handlers)

    async def dispatch(self, message: Any) -> List[Message]:
        if not isinstance(message, dict) or not isinstance(message.get("event"), str):
            return [{"event": "error", "data": "Message must be an object with an 'event' field"}]
        event = message["event"]
        handler = self._handlers.get(event)
        if handler is None:
            logger.warning("Unknown event", extra={"event": event})
            return [{"event": "error", "data": f"Unknown event: {event}"}]
        try:
            result = handler(message.get("data"))
            if inspect.isawaitable(result):
                result = await result
            return _normalize(result)
        except Exception:
            logger.exception("Event handler failed", extra={"event": event})
            return [{"event": "error", "data": f"Failed to handle event: {event}"}]


def build_default_gateway() -> EventGateway:
    gateway = EventGateway()

    @gateway.on("events")
    def handle_events(_data: Any) -> List[Message]:
        return [{"event": "events", "data": item} for item in (1, 2, 3)]

    @gateway.on("identity")
    def handle_identity(data: Any) -> Message:
        return {"event": "identity", "data": data}

    return gateway


class GatewayConnection:
    """
    Per-connection pipeline: receive -> bounded queue -> gateway -> send.

    `receive` returns the next inbound message or None when the peer is gone;
    `send` delivers one outbound message. A full queue makes `run` stop reading
    until the consumer catches up. If the consumer dies (a failing `send`),
    `run` stops reading and re-raises its error.
    """

    def __init__(
        self,
        gateway: EventGateway,
        receive: Callable[[], Awaitable[Optional[Any]]],
        send: Callable[[Message], Awaitable[None]],
        maxsize: int = EVENT_QUEUE_SIZE,
    ):
        self.gateway = gateway
        self._receive = receive
        self._send = send
        self.queue: "asyncio.Queue[Optional[Any]]" = asyncio.Queue(maxsize=maxsize)

    async def _consume(self) -> None:
        while True:
            message = await self.queue.get()
            try:
                if message is None:
                    return
                for outbound in await self.gateway.dispatch(message):
                    await self._send(outbound)
            finally:
                self.queue.task_done()

    async def _until_consumer_stops(self, consumer: asyncio.Task, awaitable: Awaitable) -> Any:
        """
        Await `awaitable` unless the consumer finishes first.
        Returns _STOPPED when the consumer is gone and the awaitable was cancelled.
        """
        step = asyncio.ensure_future(awaitable)
        try:
            await asyncio.wait({step, consumer}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if not step.done():
                step.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await step
        if step.cancelled():
            return _STOPPED
        return step.result()

    async def run(self) -> None:
        consumer = asyncio.create_task(self._consume())
        try:
            while True:
                message = await self._until_consumer_stops(consumer, self._receive())
                if message is None or message is _STOPPED:
                    break
                if await self._until_consumer_stops(consumer, self.queue.put(message)) is _STOPPED:
                    break
            if not consumer.done():
                await self._until_consumer_stops(consumer, self.queue.put(None))
            # Re-raises a failed send instead of leaving it unretrieved.
            await consumer
        finally:
            if not consumer.done():
                consumer.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await consumer
