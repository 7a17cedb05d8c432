"""Inbound dispatch of bus events to typed subscribers.

The receiver taps the transport's wildcard stream once and fans every event
out to its subscriptions. For each event:

1. The primitive shape is checked (string channel, numeric timestamp, mapping
   payload).
2. The channel is resolved against the schema catalogue.
3. The payload is converted to internal casing and validated.
4. Each matching subscription's callback receives a ``Message``.

A failure at any step drops that single event with one warning; other events
and subscriptions are unaffected. Routing is done at most once per event and
shared between subscriptions.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from .casing import to_internal_case
from .channels import DEFAULT_RESOLVER, ChannelResolver
from .errors import (
    InvalidChannelError,
    MalformedMessageError,
    OmnibusConfigError,
    OmnibusMessageError,
    PayloadValidationError,
    UnknownChannelError,
)
from .protocol import Message, RawMessage, parse_event
from .schemas import (
    AnyPayload,
    CANCommandMessage,
    DAQMessage,
    ParsleyHealthMessage,
    ParsleyMessage,
    PayloadKind,
    RLCSMessage,
)
from .transport import Transport

_LOGGER = logging.getLogger(__name__)

MessageCallback = Callable[[Message[Any]], Any]
RawCallback = Callable[[RawMessage], Any]


class Subscription:
    """Handle for one registered callback.

    Calling the handle, or ``unsubscribe()``, detaches the callback. Detaching
    twice is harmless.
    """

    def __init__(
        self,
        receiver: Receiver,
        prefix: str,
        callback: Callable[[Any], Any],
        *,
        raw: bool = False,
    ) -> None:
        self.prefix = prefix
        self.callback = callback
        self.raw = raw
        self._receiver = receiver
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def matches(self, channel: str) -> bool:
        return self.prefix == "" or channel.startswith(self.prefix)

    def unsubscribe(self) -> None:
        """Stop delivering messages to this callback."""
        if not self._active:
            return
        self._active = False
        self._receiver._detach(self)

    __call__ = unsubscribe

    def __repr__(self) -> str:
        state = "active" if self._active else "detached"
        return f"<Subscription prefix={self.prefix!r} raw={self.raw} {state}>"


class _Route:
    """Per-event routing result, computed on first use."""

    __slots__ = ("event", "message", "done")

    def __init__(self, event: RawMessage) -> None:
        self.event = event
        self.message: Message[Any] | None = None
        self.done = False


class Receiver:
    """Typed subscriptions over a transport's wildcard event stream.

    Usage:
        receiver = Receiver(transport)
        handle = receiver.subscribe("DAQ", on_daq)
        ...
        handle.unsubscribe()
    """

    def __init__(
        self,
        transport: Transport,
        *,
        resolver: ChannelResolver = DEFAULT_RESOLVER,
        allow_unsafe: bool = False,
        name: str = "omnibus",
    ) -> None:
        self._transport = transport
        self._resolver = resolver
        self._allow_unsafe = allow_unsafe
        self._name = name
        self._subscriptions: list[Subscription] = []
        self._tasks: set[asyncio.Future[Any]] = set()
        self._closed = False
        transport.on_any(self._handle_event)

    @property
    def subscriptions(self) -> tuple[Subscription, ...]:
        return tuple(self._subscriptions)

    # -------------------------------------------------------------------------
    # Public API: Subscriptions
    # -------------------------------------------------------------------------

    def subscribe(self, prefix: str, callback: MessageCallback) -> Subscription:
        """Deliver validated messages whose channel starts with prefix.

        An empty prefix matches every channel.
        """
        return self._attach(Subscription(self, prefix, callback))

    def subscribe_all(self, callback: Callable[[Message[AnyPayload]], Any]) -> Subscription:
        """Deliver every validated message."""
        return self.subscribe("", callback)

    def receive_daq_message(
        self, channel: str, callback: Callable[[Message[DAQMessage]], Any]
    ) -> Subscription:
        return self._subscribe_kind(PayloadKind.DAQ, channel, callback)

    def receive_parsley_message(
        self, channel: str, callback: Callable[[Message[ParsleyMessage]], Any]
    ) -> Subscription:
        return self._subscribe_kind(PayloadKind.PARSLEY, channel, callback)

    def receive_can_command_message(
        self, channel: str, callback: Callable[[Message[CANCommandMessage]], Any]
    ) -> Subscription:
        return self._subscribe_kind(PayloadKind.CAN_COMMAND, channel, callback)

    def receive_parsley_health_message(
        self, channel: str, callback: Callable[[Message[ParsleyHealthMessage]], Any]
    ) -> Subscription:
        return self._subscribe_kind(PayloadKind.PARSLEY_HEALTH, channel, callback)

    def receive_rlcs_message(
        self, channel: str, callback: Callable[[Message[RLCSMessage]], Any]
    ) -> Subscription:
        return self._subscribe_kind(PayloadKind.RLCS, channel, callback)

    def receive_any_message(
        self, callback: Callable[[Message[AnyPayload]], Any]
    ) -> Subscription:
        return self.subscribe_all(callback)

    def receive_raw(self, callback: RawCallback) -> Subscription:
        """Deliver every well-formed event without routing or validation.

        Payloads keep their wire casing. Only available when the receiver was
        created with ``allow_unsafe=True``.

        Raises:
            OmnibusConfigError: If unsafe receiving is not enabled.
        """
        if not self._allow_unsafe:
            raise OmnibusConfigError("Unsafe receive is disabled for this client")
        return self._attach(Subscription(self, "", callback, raw=True))

    @property
    def pending_tasks(self) -> int:
        """Number of coroutine callbacks still running."""
        return len(self._tasks)

    def close(self) -> None:
        """Detach from the transport and cancel unfinished coroutine callbacks."""
        if self._closed:
            return
        self._closed = True
        self._transport.off_any(self._handle_event)
        for subscription in tuple(self._subscriptions):
            subscription.unsubscribe()
        for task in tuple(self._tasks):
            task.cancel()
        self._tasks.clear()

    # -------------------------------------------------------------------------
    # Internal: Registration
    # -------------------------------------------------------------------------

    def _subscribe_kind(
        self, kind: PayloadKind, channel: str, callback: MessageCallback
    ) -> Subscription:
        prefix = self._resolver.prefix_for(kind)
        if not channel.startswith(prefix):
            raise InvalidChannelError(channel, prefix)
        return self.subscribe(channel, callback)

    def _attach(self, subscription: Subscription) -> Subscription:
        if self._closed:
            subscription._active = False
            _LOGGER.warning("[%s] Subscribe after close ignored", self._name)
            return subscription
        # Copy-on-write so a dispatch in progress keeps its own snapshot.
        self._subscriptions = [*self._subscriptions, subscription]
        return subscription

    def _detach(self, subscription: Subscription) -> None:
        self._subscriptions = [s for s in self._subscriptions if s is not subscription]

    # -------------------------------------------------------------------------
    # Internal: Dispatch
    # -------------------------------------------------------------------------

    def _handle_event(self, channel: Any, *args: Any) -> None:
        subscriptions = self._subscriptions
        if not subscriptions:
            return

        try:
            event = parse_event(channel, args)
        except MalformedMessageError as err:
            _LOGGER.warning("[%s] Malformed message dropped: %s", self._name, err)
            return

        route = _Route(event)
        for subscription in subscriptions:
            if not subscription.active or not subscription.matches(event.channel):
                continue
            if subscription.raw:
                self._deliver(subscription, event)
                continue
            message = self._route(route)
            if message is not None:
                self._deliver(subscription, message)

    def _route(self, route: _Route) -> Message[Any] | None:
        if route.done:
            return route.message
        route.done = True
        try:
            route.message = self._build_message(route.event)
        except OmnibusMessageError as err:
            _LOGGER.warning("[%s] %s", self._name, err)
        return route.message

    def _build_message(self, event: RawMessage) -> Message[Any]:
        descriptor = self._resolver.resolve(event.channel)
        if descriptor is None:
            raise UnknownChannelError(event.channel)
        try:
            try:
                payload = descriptor.validate(to_internal_case(event.payload))
            except ValidationError as err:
                raise PayloadValidationError(event.channel, err) from err
        except RecursionError as err:
            raise MalformedMessageError(
                f"Payload on channel {event.channel!r} is nested too deeply"
            ) from err
        return Message(channel=event.channel, timestamp=event.timestamp, payload=payload)

    def _deliver(self, subscription: Subscription, message: Any) -> None:
        try:
            result = subscription.callback(message)
        except Exception:
            _LOGGER.exception(
                "[%s] Subscriber callback failed for channel %s",
                self._name,
                message.channel,
            )
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Future[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        err = task.exception()
        if err is not None:
            _LOGGER.error(
                "[%s] Subscriber coroutine failed: %s", self._name, err, exc_info=err
            )
