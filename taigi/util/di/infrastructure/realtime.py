"""Realtime infrastructure providers."""

from collections.abc import Iterator

from dishka import Scope, provide

from taigi.adapter.realtime import LocalVoteChannel
from taigi.config import VotingSettings
from taigi.domain.service import VoteChannel
from taigi.util.di.base import ProviderBase


class RealtimeProvider(ProviderBase):
    """Realtime channel provider - concrete, shared by every request."""

    @provide(scope=Scope.APP)
    def get_vote_channel(self, settings: VotingSettings) -> Iterator[VoteChannel]:
        """Provide the in-process vote change channel, closed on shutdown."""
        channel = LocalVoteChannel(name=settings.realtime_channel)
        yield channel
        channel.close()
