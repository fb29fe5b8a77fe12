"""Configuration providers."""

from dishka import Scope, provide

from taigi.config import AuthSettings, Settings, VotingSettings
from taigi.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Settings read once per process from the environment (and ``.env``).

    Sub-sections are exposed separately so services depend only on the part
    of the configuration they read.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        return Settings()

    @provide(scope=Scope.APP)
    def provide_auth_settings(self, settings: Settings) -> AuthSettings:
        return settings.auth

    @provide(scope=Scope.APP)
    def provide_voting_settings(self, settings: Settings) -> VotingSettings:
        """Timeouts, rate limit and realtime channel name for voting."""
        return settings.voting
