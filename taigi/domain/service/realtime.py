"""Realtime notification capability."""

from collections.abc import Awaitable, Callable
from typing import Optional

import logfire

from taigi.domain.model import RealtimeVoteEvent

VoteEventHandler = Callable[[RealtimeVoteEvent], Awaitable[None]]
Unsubscribe = Callable[[], None]


class VoteChannel:
    """Generic realtime channel interface for vote table changes."""

    @property
    def name(self) -> str:
        raise NotImplementedError

    def subscribe(self, handler: VoteEventHandler) -> Unsubscribe:
        """Register a handler for every vote change.

        Args:
            handler: Async callable receiving each event

        Returns:
            Function removing this registration
        """
        raise NotImplementedError

    async def publish(self, event: RealtimeVoteEvent) -> None:
        """Deliver an event to every subscribed handler."""
        raise NotImplementedError


async def announce_write(
    channel: Optional[VoteChannel], event: RealtimeVoteEvent
) -> None:
    """Publish a vote change that is already stored.

    The write stands whatever happens here, so a channel failure is logged
    and not raised to the writer.
    """
    if channel is None:
        return

    try:
        await channel.publish(event)
    except Exception:
        logfire.exception(
            "Could not announce vote change",
            channel=channel.name,
            event_type=event.event_type.value,
            definition_id=str(event.vote.definition_id),
        )
