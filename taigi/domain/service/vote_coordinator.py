"""Vote coordinator domain service.

Bridges the in-memory VoteModel, the display cache of loaded definitions and
the remote vote store. Writes are applied optimistically to the display
cache, persisted remotely, then either confirmed or rolled back.
"""

import asyncio
import itertools
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import logfire

from taigi.config import VotingSettings
from taigi.domain.error import VoteErrorCode
from taigi.domain.model import (
    Definition,
    RealtimeVoteEvent,
    ScoredDefinition,
    UserVoteEntry,
    Vote,
    VoteAggregate,
    VoteSummary,
    VoteUpdateEvent,
)
from taigi.domain.model.vote import utc_now
from taigi.domain.repository import VoteRepository
from taigi.domain.result import Err, Ok, Result, fail
from taigi.domain.value import (
    DefinitionId,
    TimeWindow,
    UserId,
    VoteDelta,
    VoteEventType,
    VoteType,
)
from taigi.util.locks import KeyedLock

from .base import Service
from .identity import IdentityProvider
from .realtime import Unsubscribe, VoteChannel
from .validation import validate_create_vote, validate_definition_id
from .vote_model import VoteModel

VoteUpdateCallback = Callable[[VoteUpdateEvent], Any]


@dataclass
class _PendingChange:
    """What an optimistic update overwrote, for rollback."""

    user_id: UserId
    definition_id: DefinitionId
    snapshot: Vote | None
    previous_entry: UserVoteEntry | None
    previous_user_vote: VoteType | None
    applied: VoteDelta


class VoteCoordinator(Service):
    """Domain service coordinating local vote state with the remote store."""

    def __init__(
        self,
        vote_model: VoteModel,
        vote_repository: VoteRepository,
        vote_channel: VoteChannel,
        identity: IdentityProvider,
        settings: VotingSettings,
    ) -> None:
        """Initialize vote coordinator.

        Args:
            vote_model: In-memory vote index
            vote_repository: Remote vote store
            vote_channel: Realtime channel for other users' vote changes
            identity: Source of the signed-in user
            settings: Voting settings (timeouts, rate limit)
        """
        self.vote_model = vote_model
        self.vote_repository = vote_repository
        self.vote_channel = vote_channel
        self.identity = identity
        self.settings = settings

        self._user_votes: dict[DefinitionId, UserVoteEntry] = {}
        self._definitions: dict[DefinitionId, ScoredDefinition] = {}
        self._callbacks: dict[int, VoteUpdateCallback] = {}
        self._callback_ids = itertools.count()
        self._locks: KeyedLock[tuple[UserId, DefinitionId]] = KeyedLock()
        self._unsubscribe_realtime: Unsubscribe | None = None

    # Display cache

    def track_definitions(self, definitions: Iterable[Definition]) -> None:
        """Add loaded definitions to the display cache, replacing stale copies."""
        for definition in definitions:
            if not isinstance(definition, ScoredDefinition):
                definition = ScoredDefinition.from_definition(definition)
            self._definitions[definition.id] = definition

    def get_definition(self, definition_id: DefinitionId) -> ScoredDefinition | None:
        return self._definitions.get(definition_id)

    def get_user_vote(self, definition_id: DefinitionId) -> UserVoteEntry | None:
        """The signed-in user's vote on a definition, as displayed."""
        return self._user_votes.get(definition_id)

    def get_vote_summary(self, definition_id: DefinitionId) -> VoteSummary:
        """Counters for a definition from the display cache.

        Unknown definitions report zeros.
        """
        definition = self._definitions.get(definition_id)
        if definition is None:
            return VoteSummary()

        return VoteSummary(
            upvotes=definition.upvotes,
            downvotes=definition.downvotes,
            score=definition.vote_score,
            user_vote=definition.user_vote,
        )

    # Writes

    async def submit_vote(self, definition_id: Any, vote_type: Any) -> Result[Vote]:
        """Cast or change the signed-in user's vote on a definition.

        Args:
            definition_id: Definition UUID
            vote_type: "upvote" or "downvote"

        Returns:
            Ok with the persisted vote, or Err with one of UNAUTHORIZED,
            VALIDATION_ERROR, NOT_FOUND, RATE_LIMITED, SELF_VOTE,
            DUPLICATE_VOTE or REMOTE_ERROR
        """
        user = await self.identity.get_current_user()
        if user is None:
            return fail(VoteErrorCode.UNAUTHORIZED, "You must be logged in to vote")

        validated = validate_create_vote(definition_id, vote_type)
        if isinstance(validated, Err):
            return validated
        vote_input = validated.value
        def_id = vote_input.definition_id

        with logfire.span(
            "vote_coordinator.submit_vote",
            definition_id=str(def_id),
            user_id=str(user.id),
            vote_type=vote_input.vote_type.value,
        ):
            async with self._locks.hold((user.id, def_id)):
                definition = self._definitions.get(def_id)
                if definition is None:
                    logfire.warn("Vote on untracked definition", definition_id=str(def_id))
                    return fail(VoteErrorCode.NOT_FOUND, "Definition not found")

                snapshot = self.vote_model.get_user_vote(user.id, def_id)
                if snapshot is None:
                    limited = await self._rate_limited(user.id)
                    if isinstance(limited, Err):
                        return limited
                    if limited.value:
                        logfire.warn("Vote rate limit reached", user_id=str(user.id))
                        return fail(
                            VoteErrorCode.RATE_LIMITED,
                            "You have reached your voting limit. Please try again later",
                            {"limit": self.settings.daily_vote_limit},
                        )

                created = self.vote_model.create_vote(
                    vote_input, user.id, definition.user_id
                )
                if isinstance(created, Err):
                    logfire.info(
                        "Vote rejected",
                        code=created.code.value,
                        definition_id=str(def_id),
                    )
                    return created

                previous_type = snapshot.vote_type if snapshot else None
                new_type = vote_input.vote_type

                # Optimistic update
                change = _PendingChange(
                    user_id=user.id,
                    definition_id=def_id,
                    snapshot=snapshot,
                    previous_entry=self._user_votes.get(def_id),
                    previous_user_vote=definition.user_vote,
                    applied=definition.apply_delta(
                        VoteDelta.for_transition(previous_type, new_type)
                    ),
                )
                self._user_votes[def_id] = UserVoteEntry(
                    vote_type=new_type, user_id=user.id
                )
                definition.user_vote = new_type

                try:
                    record = await asyncio.wait_for(
                        self.vote_repository.upsert_vote(def_id, user.id, new_type),
                        timeout=self.settings.remote_timeout_seconds,
                    )
                except asyncio.CancelledError:
                    self._rollback(change)
                    raise
                except asyncio.TimeoutError:
                    self._rollback(change)
                    logfire.error("Vote upsert timed out", definition_id=str(def_id))
                    return fail(VoteErrorCode.REMOTE_ERROR, "Remote request timed out")
                except Exception as e:
                    self._rollback(change)
                    logfire.error(
                        "Vote upsert failed", definition_id=str(def_id), error=str(e)
                    )
                    return fail(
                        VoteErrorCode.REMOTE_ERROR, str(e) or "Failed to save vote"
                    )

                self.vote_model.put_vote(record)

            logfire.info(
                "Vote saved",
                definition_id=str(def_id),
                previous_vote_type=previous_type.value if previous_type else None,
            )
            self._emit(
                VoteUpdateEvent(
                    definition_id=def_id,
                    new_vote_type=new_type,
                    previous_vote_type=previous_type,
                )
            )
            return Ok(record)

    async def remove_vote(self, definition_id: Any) -> Result[bool]:
        """Remove the signed-in user's vote on a definition.

        Args:
            definition_id: Definition UUID

        Returns:
            Ok(True), or Err with one of UNAUTHORIZED, VALIDATION_ERROR,
            NOT_FOUND, FORBIDDEN or REMOTE_ERROR
        """
        user = await self.identity.get_current_user()
        if user is None:
            return fail(VoteErrorCode.UNAUTHORIZED, "You must be logged in to vote")

        validated = validate_definition_id(definition_id)
        if isinstance(validated, Err):
            return validated
        def_id = validated.value

        with logfire.span(
            "vote_coordinator.remove_vote",
            definition_id=str(def_id),
            user_id=str(user.id),
        ):
            async with self._locks.hold((user.id, def_id)):
                snapshot = self.vote_model.get_user_vote(user.id, def_id)
                if snapshot is None:
                    return fail(VoteErrorCode.NOT_FOUND, "No vote to remove")

                removed = self.vote_model.remove_vote(snapshot.id, user.id)
                if isinstance(removed, Err):
                    return removed

                definition = self._definitions.get(def_id)
                applied = VoteDelta()
                previous_user_vote = None
                if definition is not None:
                    previous_user_vote = definition.user_vote
                    applied = definition.apply_delta(
                        VoteDelta.for_transition(snapshot.vote_type, None)
                    )
                    definition.user_vote = None

                change = _PendingChange(
                    user_id=user.id,
                    definition_id=def_id,
                    snapshot=snapshot,
                    previous_entry=self._user_votes.pop(def_id, None),
                    previous_user_vote=previous_user_vote,
                    applied=applied,
                )

                try:
                    await asyncio.wait_for(
                        self.vote_repository.delete_vote(def_id, user.id),
                        timeout=self.settings.remote_timeout_seconds,
                    )
                except asyncio.CancelledError:
                    self._rollback(change)
                    raise
                except asyncio.TimeoutError:
                    self._rollback(change)
                    logfire.error("Vote delete timed out", definition_id=str(def_id))
                    return fail(VoteErrorCode.REMOTE_ERROR, "Remote request timed out")
                except Exception as e:
                    self._rollback(change)
                    logfire.error(
                        "Vote delete failed", definition_id=str(def_id), error=str(e)
                    )
                    return fail(
                        VoteErrorCode.REMOTE_ERROR, str(e) or "Failed to remove vote"
                    )

            logfire.info("Vote removed", definition_id=str(def_id))
            self._emit(
                VoteUpdateEvent(
                    definition_id=def_id,
                    new_vote_type=None,
                    previous_vote_type=snapshot.vote_type,
                )
            )
            return Ok(True)

    def _rollback(self, change: _PendingChange) -> None:
        """Undo an optimistic update."""
        if change.previous_entry is None:
            self._user_votes.pop(change.definition_id, None)
        else:
            self._user_votes[change.definition_id] = change.previous_entry

        definition = self._definitions.get(change.definition_id)
        if definition is not None:
            definition.apply_delta(change.applied.inverse())
            definition.user_vote = change.previous_user_vote

        self.vote_model.restore_vote(
            change.user_id, change.definition_id, change.snapshot
        )
        logfire.info("Rolled back optimistic vote", definition_id=str(change.definition_id))

    async def _rate_limited(self, user_id: UserId) -> Result[bool]:
        """Whether the user has used up the votes allowed in the window.

        Stored votes count as well as the ones this coordinator holds, so
        votes cast in earlier requests or on other definitions are included.
        """
        limit = self.settings.daily_vote_limit
        if limit is None:
            return Ok(False)

        now = utc_now()
        window = TimeWindow(
            start=now - timedelta(hours=self.settings.rate_limit_window_hours), end=now
        )
        if self.vote_model.has_user_reached_vote_limit(user_id, limit, window):
            return Ok(True)

        try:
            stored = await asyncio.wait_for(
                self.vote_repository.count_votes_since(user_id, window.start),
                timeout=self.settings.remote_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logfire.error("Counting recent votes timed out", user_id=str(user_id))
            return fail(VoteErrorCode.REMOTE_ERROR, "Remote request timed out")
        except Exception as e:
            logfire.error("Counting recent votes failed", error=str(e))
            return fail(VoteErrorCode.REMOTE_ERROR, str(e) or "Failed to load votes")

        return Ok(stored >= limit)

    # Reads from the remote store

    async def fetch_user_votes(
        self, definition_ids: Iterable[DefinitionId]
    ) -> Result[list[Vote]]:
        """Load the signed-in user's votes for the given definitions.

        The remote answer is authoritative: definitions without a returned
        vote are marked as not voted.

        Returns:
            Ok with the votes found, or Err(UNAUTHORIZED / REMOTE_ERROR)
        """
        user = await self.identity.get_current_user()
        if user is None:
            return fail(VoteErrorCode.UNAUTHORIZED, "You must be logged in to vote")

        ids = list(dict.fromkeys(definition_ids))
        if not ids:
            return Ok([])

        with logfire.span(
            "vote_coordinator.fetch_user_votes", user_id=str(user.id), count=len(ids)
        ):
            try:
                votes = await asyncio.wait_for(
                    self.vote_repository.fetch_votes_for_user(user.id, ids),
                    timeout=self.settings.remote_timeout_seconds,
                )
            except asyncio.TimeoutError:
                logfire.error("Fetching user votes timed out", user_id=str(user.id))
                return fail(VoteErrorCode.REMOTE_ERROR, "Remote request timed out")
            except Exception as e:
                logfire.error("Fetching user votes failed", error=str(e))
                return fail(VoteErrorCode.REMOTE_ERROR, str(e) or "Failed to load votes")

            found = {vote.definition_id: vote for vote in votes}
            for def_id in ids:
                vote = found.get(def_id)
                self.vote_model.restore_vote(user.id, def_id, vote)

                if vote is None:
                    self._user_votes.pop(def_id, None)
                else:
                    self._user_votes[def_id] = UserVoteEntry(
                        vote_type=vote.vote_type, user_id=user.id
                    )

                definition = self._definitions.get(def_id)
                if definition is not None:
                    definition.user_vote = vote.vote_type if vote else None

            return Ok(list(found.values()))

    async def refresh_definition_votes(
        self, definition_id: DefinitionId
    ) -> Result[VoteAggregate]:
        """Overwrite a definition's counters with the remote aggregate."""
        try:
            aggregate = await asyncio.wait_for(
                self.vote_repository.fetch_aggregate(definition_id),
                timeout=self.settings.remote_timeout_seconds,
            )
        except asyncio.TimeoutError:
            return fail(VoteErrorCode.REMOTE_ERROR, "Remote request timed out")
        except Exception as e:
            logfire.error(
                "Refreshing vote counts failed",
                definition_id=str(definition_id),
                error=str(e),
            )
            return fail(VoteErrorCode.REMOTE_ERROR, str(e) or "Failed to load votes")

        definition = self._definitions.get(definition_id)
        if definition is not None:
            definition.apply_aggregate(aggregate)
        return Ok(aggregate)

    # Observers

    def on_vote_update(self, callback: VoteUpdateCallback) -> Callable[[], None]:
        """Register a callback for successful vote changes.

        Returns:
            Function removing the callback; calling it again does nothing
        """
        token = next(self._callback_ids)
        self._callbacks[token] = callback

        def unsubscribe() -> None:
            self._callbacks.pop(token, None)

        return unsubscribe

    def _emit(self, event: VoteUpdateEvent) -> None:
        for callback in list(self._callbacks.values()):
            try:
                callback(event)
            except Exception:
                logfire.exception(
                    "Vote update callback failed",
                    definition_id=str(event.definition_id),
                )

    # Realtime

    def start_realtime(self) -> None:
        """Subscribe to the realtime channel. Does nothing if already subscribed."""
        if self._unsubscribe_realtime is not None:
            return
        self._unsubscribe_realtime = self.vote_channel.subscribe(
            self.handle_realtime_event
        )
        logfire.info("Subscribed to vote changes", channel=self.vote_channel.name)

    def stop_realtime(self) -> None:
        if self._unsubscribe_realtime is None:
            return
        self._unsubscribe_realtime()
        self._unsubscribe_realtime = None
        logfire.info("Unsubscribed from vote changes", channel=self.vote_channel.name)

    async def handle_realtime_event(self, event: RealtimeVoteEvent) -> None:
        """Apply a vote change made elsewhere to the local state.

        The signed-in user's own writes come back on the channel too. Those
        the local state already reflects are skipped; the user's votes from
        another client are applied like anyone else's and also update the
        user's displayed vote.
        """
        vote = event.vote
        def_id = vote.definition_id
        new_type = None if event.event_type == VoteEventType.DELETE else vote.vote_type

        user = await self.identity.get_current_user()
        own = user is not None and vote.user_id == user.id
        held = self.vote_model.get_user_vote(vote.user_id, def_id)
        held_type = held.vote_type if held else None

        if own and held_type == new_type:
            return

        with logfire.span(
            "vote_coordinator.handle_realtime_event",
            event_type=event.event_type.value,
            definition_id=str(def_id),
            own=own,
        ):
            if own:
                # Counted locally from what this coordinator holds for the user
                previous_type = held_type
            elif event.event_type == VoteEventType.DELETE:
                previous_type = vote.vote_type
            elif event.event_type == VoteEventType.INSERT:
                previous_type = None
            elif event.old is not None:
                previous_type = event.old.vote_type
            else:
                previous_type = held_type

            if new_type is None:
                self.vote_model.restore_vote(vote.user_id, def_id, None)
            else:
                self.vote_model.put_vote(vote)

            if own:
                if new_type is None:
                    self._user_votes.pop(def_id, None)
                else:
                    self._user_votes[def_id] = UserVoteEntry(
                        vote_type=new_type, user_id=vote.user_id
                    )

            definition = self._definitions.get(def_id)
            if definition is not None:
                definition.apply_delta(VoteDelta.for_transition(previous_type, new_type))
                if own:
                    definition.user_vote = new_type

                # An in-flight local write would be clobbered by the refresh
                if user is None or not self._locks.is_locked((user.id, def_id)):
                    refreshed = await self.refresh_definition_votes(def_id)
                    if isinstance(refreshed, Err):
                        logfire.warn(
                            "Could not refresh vote counts",
                            definition_id=str(def_id),
                            error=refreshed.message,
                        )

            self._emit(
                VoteUpdateEvent(
                    definition_id=def_id,
                    new_vote_type=new_type,
                    previous_vote_type=previous_type,
                )
            )

    def reset(self) -> None:
        """Drop cached state, observers and the realtime subscription."""
        self.stop_realtime()
        self._user_votes.clear()
        self._definitions.clear()
        self._callbacks.clear()
