"""In-process realtime channel for vote changes."""

import itertools

import logfire

from taigi.adapter.error import ChannelClosedError
from taigi.domain.model import RealtimeVoteEvent
from taigi.domain.service.realtime import Unsubscribe, VoteChannel, VoteEventHandler


class LocalVoteChannel(VoteChannel):
    """Fan-out of vote table changes to handlers in this process.

    Handlers run one after another in subscription order. A failing handler
    is logged and does not stop delivery to the others.
    """

    def __init__(self, name: str = "community_votes") -> None:
        self._name = name
        self._handlers: dict[int, VoteEventHandler] = {}
        self._handler_ids = itertools.count()
        self._closed = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: VoteEventHandler) -> Unsubscribe:
        token = next(self._handler_ids)
        self._handlers[token] = handler
        logfire.debug("Realtime handler subscribed", channel=self._name)

        def unsubscribe() -> None:
            self._handlers.pop(token, None)

        return unsubscribe

    async def publish(self, event: RealtimeVoteEvent) -> None:
        """Deliver an event to every current subscriber.

        Raises:
            ChannelClosedError: If the channel was closed
        """
        if self._closed:
            raise ChannelClosedError(f"Channel {self._name} is closed")

        with logfire.span(
            "realtime.publish",
            channel=self._name,
            event_type=event.event_type.value,
            definition_id=str(event.vote.definition_id),
        ):
            for handler in list(self._handlers.values()):
                try:
                    await handler(event)
                except Exception:
                    logfire.exception(
                        "Realtime handler failed",
                        channel=self._name,
                        event_type=event.event_type.value,
                    )

    def close(self) -> None:
        """Drop every subscriber and refuse further events."""
        self._handlers.clear()
        self._closed = True
