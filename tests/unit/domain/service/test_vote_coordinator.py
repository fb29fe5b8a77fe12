"""Unit tests for VoteCoordinator."""

import asyncio
from uuid import uuid4

import pytest

from taigi.adapter.realtime import LocalVoteChannel
from taigi.config import VotingSettings
from taigi.domain.error import VoteErrorCode
from taigi.domain.model import ScoredDefinition, VoteAggregate, VoteUpdateEvent
from taigi.domain.result import Err, Ok
from taigi.domain.service import (
    CurrentUser,
    SessionIdentity,
    VoteCoordinator,
    VoteModel,
)
from taigi.domain.value import UserId, VoteType
from taigi.persistence.repository.inmemory import InMemoryVoteRepository
from tests.conftest import make_definition
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class FailingVoteRepository(InMemoryVoteRepository):
    """Vote store whose writes fail with a given error."""

    def __init__(self, error: Exception) -> None:
        super().__init__()
        self.error = error

    async def upsert_vote(self, definition_id, user_id, vote_type):
        raise self.error

    async def delete_vote(self, definition_id, user_id):
        raise self.error


class SlowVoteRepository(InMemoryVoteRepository):
    """Vote store whose upserts hang until cancelled."""

    def __init__(self) -> None:
        super().__init__()
        self.started = asyncio.Event()

    async def upsert_vote(self, definition_id, user_id, vote_type):
        self.started.set()
        await asyncio.sleep(3600)
        return await super().upsert_vote(definition_id, user_id, vote_type)


class GatedVoteRepository(InMemoryVoteRepository):
    """Vote store whose first upsert waits for a gate, then fails."""

    def __init__(self) -> None:
        super().__init__()
        self.started = asyncio.Event()
        self.gate = asyncio.Event()
        self.calls = 0

    async def upsert_vote(self, definition_id, user_id, vote_type):
        self.calls += 1
        if self.calls == 1:
            self.started.set()
            await self.gate.wait()
            raise ConnectionError("connection reset")
        return await super().upsert_vote(definition_id, user_id, vote_type)


def build_coordinator(
    repository: InMemoryVoteRepository | None = None,
    user_id: UserId | None = None,
    settings: VotingSettings | None = None,
    channel: LocalVoteChannel | None = None,
) -> VoteCoordinator:
    identity = SessionIdentity(CurrentUser(id=user_id) if user_id else None)
    return VoteCoordinator(
        vote_model=VoteModel(),
        vote_repository=repository or InMemoryVoteRepository(),
        vote_channel=channel or LocalVoteChannel(),
        identity=identity,
        settings=settings or VotingSettings(),
    )


def counters(definition: ScoredDefinition) -> tuple:
    return (
        definition.vote_score,
        definition.upvotes,
        definition.downvotes,
        definition.user_vote,
    )


class TestSubmitVote:
    """Tests for submit_vote."""

    @pytest.mark.asyncio
    async def test_vote_lifecycle_between_author_and_voter(self):
        """Upvote, switch, remove, then the author's own vote is refused."""
        # Arrange
        author, voter = UserId(uuid4()), UserId(uuid4())
        definition = make_definition(author_id=author)
        coordinator = build_coordinator(user_id=voter)
        coordinator.track_definitions([definition])
        events: list[VoteUpdateEvent] = []
        coordinator.on_vote_update(events.append)
        tracked = coordinator.get_definition(definition.id)

        # Act & Assert - upvote
        result = await coordinator.submit_vote(str(definition.id), "upvote")
        assert isinstance(result, Ok)
        assert counters(tracked) == (1, 1, 0, VoteType.UPVOTE)

        # switch to downvote
        result = await coordinator.submit_vote(str(definition.id), "downvote")
        assert isinstance(result, Ok)
        assert counters(tracked) == (-1, 0, 1, VoteType.DOWNVOTE)

        # remove
        removed = await coordinator.remove_vote(str(definition.id))
        assert removed == Ok(True)
        assert counters(tracked) == (0, 0, 0, None)
        assert coordinator.get_user_vote(definition.id) is None

        # author tries to vote
        coordinator.identity.sign_in(author)
        refused = await coordinator.submit_vote(str(definition.id), "upvote")
        assert isinstance(refused, Err)
        assert refused.code == VoteErrorCode.SELF_VOTE
        assert counters(tracked) == (0, 0, 0, None)

        assert [(e.previous_vote_type, e.new_vote_type) for e in events] == [
            (None, VoteType.UPVOTE),
            (VoteType.UPVOTE, VoteType.DOWNVOTE),
            (VoteType.DOWNVOTE, None),
        ]
        assert coordinator.vote_model.validate_integrity().is_valid

    @pytest.mark.asyncio
    async def test_anonymous_user_is_refused(self):
        definition = make_definition()
        coordinator = build_coordinator()
        coordinator.track_definitions([definition])

        result = await coordinator.submit_vote(definition.id, VoteType.UPVOTE)

        assert isinstance(result, Err)
        assert result.code == VoteErrorCode.UNAUTHORIZED
        assert result.message == "You must be logged in to vote"

    @pytest.mark.asyncio
    async def test_malformed_input_is_refused(self):
        coordinator = build_coordinator(user_id=UserId(uuid4()))

        bad_id = await coordinator.submit_vote("not-a-uuid", "upvote")
        bad_type = await coordinator.submit_vote(str(uuid4()), "sideways")

        assert isinstance(bad_id, Err)
        assert bad_id.code == VoteErrorCode.VALIDATION_ERROR
        assert "definition ID" in bad_id.message
        assert isinstance(bad_type, Err)
        assert bad_type.code == VoteErrorCode.VALIDATION_ERROR
        assert "upvote" in bad_type.message

    @pytest.mark.asyncio
    async def test_untracked_definition(self):
        coordinator = build_coordinator(user_id=UserId(uuid4()))

        result = await coordinator.submit_vote(str(uuid4()), "upvote")

        assert isinstance(result, Err)
        assert result.code == VoteErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_duplicate_vote_is_propagated(self):
        """The second identical vote fails and leaves counters alone."""
        # Arrange
        definition = make_definition()
        coordinator = build_coordinator(user_id=UserId(uuid4()))
        coordinator.track_definitions([definition])
        await coordinator.submit_vote(definition.id, "upvote")

        # Act
        result = await coordinator.submit_vote(definition.id, "upvote")

        # Assert
        assert isinstance(result, Err)
        assert result.code == VoteErrorCode.DUPLICATE_VOTE
        assert counters(coordinator.get_definition(definition.id)) == (
            1,
            1,
            0,
            VoteType.UPVOTE,
        )

    @pytest.mark.asyncio
    async def test_remote_failure_rolls_back(self):
        """A failed upsert restores counters, user vote and the index."""
        # Arrange
        definition = ScoredDefinition.from_definition(
            make_definition(), VoteAggregate.from_counts(upvotes=4, downvotes=1)
        )
        voter = UserId(uuid4())
        coordinator = build_coordinator(
            repository=FailingVoteRepository(ConnectionError("connection reset")),
            user_id=voter,
        )
        coordinator.track_definitions([definition])
        events = []
        coordinator.on_vote_update(events.append)

        # Act
        result = await coordinator.submit_vote(definition.id, "downvote")

        # Assert
        assert isinstance(result, Err)
        assert result.code == VoteErrorCode.REMOTE_ERROR
        assert result.message == "connection reset"
        assert counters(definition) == (3, 4, 1, None)
        assert coordinator.get_user_vote(definition.id) is None
        assert coordinator.vote_model.get_user_vote(voter, definition.id) is None
        assert events == []

    @pytest.mark.asyncio
    async def test_failed_switch_restores_previous_vote(self):
        """A failed switch puts the earlier vote back everywhere."""
        # Arrange
        voter = UserId(uuid4())
        definition = make_definition()
        repository = InMemoryVoteRepository()
        coordinator = build_coordinator(repository=repository, user_id=voter)
        coordinator.track_definitions([definition])
        first = await coordinator.submit_vote(definition.id, "upvote")
        tracked = coordinator.get_definition(definition.id)

        async def broken(*args, **kwargs):
            raise RuntimeError("service unavailable")

        repository.upsert_vote = broken

        # Act
        result = await coordinator.submit_vote(definition.id, "downvote")

        # Assert
        assert isinstance(result, Err)
        assert counters(tracked) == (1, 1, 0, VoteType.UPVOTE)
        assert coordinator.get_user_vote(definition.id).vote_type == VoteType.UPVOTE
        assert coordinator.vote_model.get_user_vote(voter, definition.id) == first.value

    @pytest.mark.asyncio
    async def test_timeout_rolls_back(self):
        definition = make_definition()
        coordinator = build_coordinator(
            repository=SlowVoteRepository(),
            user_id=UserId(uuid4()),
            settings=VotingSettings(remote_timeout_seconds=0.01),
        )
        coordinator.track_definitions([definition])

        result = await coordinator.submit_vote(definition.id, "upvote")

        assert isinstance(result, Err)
        assert result.code == VoteErrorCode.REMOTE_ERROR
        assert result.message == "Remote request timed out"
        assert counters(coordinator.get_definition(definition.id)) == (0, 0, 0, None)

    @pytest.mark.asyncio
    async def test_cancellation_rolls_back_and_propagates(self):
        # Arrange
        definition = make_definition()
        repository = SlowVoteRepository()
        coordinator = build_coordinator(repository=repository, user_id=UserId(uuid4()))
        coordinator.track_definitions([definition])
        task = asyncio.create_task(coordinator.submit_vote(definition.id, "upvote"))
        await repository.started.wait()
        assert counters(coordinator.get_definition(definition.id))[0] == 1

        # Act
        task.cancel()

        # Assert
        with pytest.raises(asyncio.CancelledError):
            await task
        assert counters(coordinator.get_definition(definition.id)) == (0, 0, 0, None)
        assert coordinator.get_user_vote(definition.id) is None

    @pytest.mark.asyncio
    async def test_same_key_operations_are_serialized(self):
        """A second vote waits until the first one's rollback completed."""
        # Arrange
        definition = make_definition()
        repository = GatedVoteRepository()
        coordinator = build_coordinator(repository=repository, user_id=UserId(uuid4()))
        coordinator.track_definitions([definition])
        tracked = coordinator.get_definition(definition.id)

        first = asyncio.create_task(coordinator.submit_vote(definition.id, "upvote"))
        await repository.started.wait()
        second = asyncio.create_task(coordinator.submit_vote(definition.id, "downvote"))
        await asyncio.sleep(0)

        # Second operation has not touched the display state yet
        assert counters(tracked) == (1, 1, 0, VoteType.UPVOTE)

        # Act
        repository.gate.set()
        first_result, second_result = await asyncio.gather(first, second)

        # Assert
        assert isinstance(first_result, Err)
        assert isinstance(second_result, Ok)
        assert counters(tracked) == (-1, 0, 1, VoteType.DOWNVOTE)
        assert coordinator.vote_model.validate_integrity().is_valid

    @pytest.mark.asyncio
    async def test_rate_limit(self):
        """New votes past the limit are refused, switching is still allowed."""
        # Arrange
        first, second = make_definition(), make_definition()
        coordinator = build_coordinator(
            user_id=UserId(uuid4()),
            settings=VotingSettings(daily_vote_limit=1),
        )
        coordinator.track_definitions([first, second])
        await coordinator.submit_vote(first.id, "upvote")

        # Act
        limited = await coordinator.submit_vote(second.id, "upvote")
        switched = await coordinator.submit_vote(first.id, "downvote")

        # Assert
        assert isinstance(limited, Err)
        assert limited.code == VoteErrorCode.RATE_LIMITED
        assert isinstance(switched, Ok)

    @pytest.mark.asyncio
    async def test_rate_limit_counts_stored_votes(self):
        """Votes stored by earlier sessions count towards the limit."""
        # Arrange
        repository = InMemoryVoteRepository()
        voter = UserId(uuid4())
        settings = VotingSettings(daily_vote_limit=2)
        definitions = [make_definition() for _ in range(3)]
        for definition in definitions[:2]:
            earlier = build_coordinator(
                repository=repository, user_id=voter, settings=settings
            )
            earlier.track_definitions([definition])
            assert isinstance(await earlier.submit_vote(definition.id, "upvote"), Ok)

        coordinator = build_coordinator(
            repository=repository, user_id=voter, settings=settings
        )
        coordinator.track_definitions([definitions[2]])

        # Act
        result = await coordinator.submit_vote(definitions[2].id, "upvote")

        # Assert
        assert isinstance(result, Err)
        assert result.code == VoteErrorCode.RATE_LIMITED
        assert counters(coordinator.get_definition(definitions[2].id)) == (
            0,
            0,
            0,
            None,
        )

    @pytest.mark.asyncio
    async def test_closed_channel_does_not_undo_stored_vote(self):
        """A vote that reached the store is kept even if announcing it fails."""
        # Arrange
        channel = LocalVoteChannel()
        repository = InMemoryVoteRepository(channel=channel)
        voter = UserId(uuid4())
        definition = make_definition()
        coordinator = build_coordinator(
            repository=repository, user_id=voter, channel=channel
        )
        coordinator.track_definitions([definition])
        channel.close()

        # Act
        result = await coordinator.submit_vote(definition.id, "upvote")

        # Assert
        assert isinstance(result, Ok)
        assert counters(coordinator.get_definition(definition.id)) == (
            1,
            1,
            0,
            VoteType.UPVOTE,
        )
        stored = await repository.fetch_votes_for_user(voter, [definition.id])
        assert [v.vote_type for v in stored] == [VoteType.UPVOTE]

        removed = await coordinator.remove_vote(definition.id)
        assert isinstance(removed, Ok)
        assert await repository.fetch_votes_for_user(voter, [definition.id]) == []


class TestRemoveVote:
    """Tests for remove_vote."""

    @pytest.mark.asyncio
    async def test_nothing_to_remove(self):
        definition = make_definition()
        coordinator = build_coordinator(user_id=UserId(uuid4()))
        coordinator.track_definitions([definition])

        result = await coordinator.remove_vote(definition.id)

        assert isinstance(result, Err)
        assert result.code == VoteErrorCode.NOT_FOUND
        assert result.message == "No vote to remove"

    @pytest.mark.asyncio
    async def test_remote_failure_rolls_back(self):
        # Arrange
        voter = UserId(uuid4())
        definition = make_definition()
        repository = InMemoryVoteRepository()
        coordinator = build_coordinator(repository=repository, user_id=voter)
        coordinator.track_definitions([definition])
        await coordinator.submit_vote(definition.id, "downvote")

        async def broken(*args, **kwargs):
            raise RuntimeError("service unavailable")

        repository.delete_vote = broken

        # Act
        result = await coordinator.remove_vote(definition.id)

        # Assert
        assert isinstance(result, Err)
        assert result.code == VoteErrorCode.REMOTE_ERROR
        assert counters(coordinator.get_definition(definition.id)) == (
            -1,
            0,
            1,
            VoteType.DOWNVOTE,
        )
        assert coordinator.vote_model.get_user_vote(voter, definition.id) is not None


class TestObservers:
    """Tests for on_vote_update."""

    @pytest.mark.asyncio
    async def test_failing_observer_does_not_block_others(self):
        # Arrange
        definition = make_definition()
        coordinator = build_coordinator(user_id=UserId(uuid4()))
        coordinator.track_definitions([definition])
        received = []

        def broken(event):
            raise RuntimeError("observer bug")

        coordinator.on_vote_update(broken)
        coordinator.on_vote_update(received.append)

        # Act
        result = await coordinator.submit_vote(definition.id, "upvote")

        # Assert
        assert isinstance(result, Ok)
        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_unsubscribe_is_idempotent(self):
        definition = make_definition()
        coordinator = build_coordinator(user_id=UserId(uuid4()))
        coordinator.track_definitions([definition])
        received = []
        unsubscribe = coordinator.on_vote_update(received.append)

        unsubscribe()
        unsubscribe()
        await coordinator.submit_vote(definition.id, "upvote")

        assert received == []


class TestRealtime:
    """Tests for remote-sourced vote changes."""

    @pytest.mark.asyncio
    async def test_other_users_votes_update_counters(self):
        # Arrange
        channel = LocalVoteChannel()
        repository = InMemoryVoteRepository(channel=channel)
        definition = make_definition()
        coordinator = build_coordinator(
            repository=repository, user_id=UserId(uuid4()), channel=channel
        )
        coordinator.track_definitions([definition])
        coordinator.start_realtime()
        events = []
        coordinator.on_vote_update(events.append)
        other = UserId(uuid4())

        # Act & Assert
        await repository.upsert_vote(definition.id, other, VoteType.UPVOTE)
        assert counters(coordinator.get_definition(definition.id))[:3] == (1, 1, 0)

        await repository.upsert_vote(definition.id, other, VoteType.DOWNVOTE)
        assert counters(coordinator.get_definition(definition.id))[:3] == (-1, 0, 1)

        await repository.delete_vote(definition.id, other)
        assert counters(coordinator.get_definition(definition.id))[:3] == (0, 0, 0)

        assert coordinator.vote_model.get_user_vote(other, definition.id) is None
        assert [(e.previous_vote_type, e.new_vote_type) for e in events] == [
            (None, VoteType.UPVOTE),
            (VoteType.UPVOTE, VoteType.DOWNVOTE),
            (VoteType.DOWNVOTE, None),
        ]

    @pytest.mark.asyncio
    async def test_own_echo_is_ignored(self):
        """The user's own write, echoed back by the channel, counts once."""
        channel = LocalVoteChannel()
        repository = InMemoryVoteRepository(channel=channel)
        definition = make_definition()
        coordinator = build_coordinator(
            repository=repository, user_id=UserId(uuid4()), channel=channel
        )
        coordinator.track_definitions([definition])
        coordinator.start_realtime()

        await coordinator.submit_vote(definition.id, "upvote")

        assert counters(coordinator.get_definition(definition.id)) == (
            1,
            1,
            0,
            VoteType.UPVOTE,
        )

    @pytest.mark.asyncio
    async def test_own_votes_from_another_client_are_applied(self):
        """A second device signed in as the same user keeps the first in sync."""
        # Arrange
        channel = LocalVoteChannel()
        repository = InMemoryVoteRepository(channel=channel)
        voter = UserId(uuid4())
        definition = make_definition()
        first_device = build_coordinator(
            repository=repository, user_id=voter, channel=channel
        )
        second_device = build_coordinator(
            repository=repository, user_id=voter, channel=channel
        )
        for device in (first_device, second_device):
            device.track_definitions([definition])
            device.start_realtime()

        # Act
        await second_device.submit_vote(definition.id, "upvote")

        # Assert
        assert counters(first_device.get_definition(definition.id)) == (
            1,
            1,
            0,
            VoteType.UPVOTE,
        )
        assert first_device.get_user_vote(definition.id).vote_type == VoteType.UPVOTE
        repeated = await first_device.submit_vote(definition.id, "upvote")
        assert isinstance(repeated, Err)
        assert repeated.code == VoteErrorCode.DUPLICATE_VOTE

        await second_device.remove_vote(definition.id)
        assert counters(first_device.get_definition(definition.id)) == (0, 0, 0, None)
        assert first_device.get_user_vote(definition.id) is None
        assert first_device.vote_model.validate_integrity().is_valid

    @pytest.mark.asyncio
    async def test_start_and_stop_are_idempotent(self):
        channel = LocalVoteChannel()
        coordinator = build_coordinator(channel=channel)

        coordinator.start_realtime()
        coordinator.start_realtime()
        assert channel.subscriber_count == 1

        coordinator.stop_realtime()
        coordinator.stop_realtime()
        assert channel.subscriber_count == 0


class TestHydration:
    """Tests for fetch_user_votes, refresh and summaries."""

    @pytest.mark.asyncio
    async def test_fetch_user_votes_hydrates_state(self):
        # Arrange
        voter = UserId(uuid4())
        voted, untouched = make_definition(), make_definition()
        repository = InMemoryVoteRepository()
        await repository.upsert_vote(voted.id, voter, VoteType.DOWNVOTE)
        coordinator = build_coordinator(repository=repository, user_id=voter)
        coordinator.track_definitions([voted, untouched])

        # Act
        result = await coordinator.fetch_user_votes([voted.id, untouched.id])

        # Assert
        assert isinstance(result, Ok)
        assert len(result.value) == 1
        assert coordinator.get_definition(voted.id).user_vote == VoteType.DOWNVOTE
        assert coordinator.get_definition(untouched.id).user_vote is None
        assert coordinator.get_user_vote(voted.id).vote_type == VoteType.DOWNVOTE
        assert (await coordinator.remove_vote(voted.id)) == Ok(True)

    @pytest.mark.asyncio
    async def test_fetch_user_votes_requires_user(self):
        coordinator = build_coordinator()

        result = await coordinator.fetch_user_votes([uuid4()])

        assert isinstance(result, Err)
        assert result.code == VoteErrorCode.UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_refresh_definition_votes(self):
        definition = make_definition()
        repository = InMemoryVoteRepository()
        for _ in range(2):
            await repository.upsert_vote(definition.id, UserId(uuid4()), VoteType.UPVOTE)
        coordinator = build_coordinator(repository=repository)
        coordinator.track_definitions([definition])

        result = await coordinator.refresh_definition_votes(definition.id)

        assert result == Ok(VoteAggregate(score=2, upvotes=2, downvotes=0))
        assert coordinator.get_vote_summary(definition.id).score == 2

    @pytest.mark.asyncio
    async def test_summary_of_unknown_definition_and_reset(self):
        definition = make_definition()
        coordinator = build_coordinator(user_id=UserId(uuid4()))
        coordinator.track_definitions([definition])
        await coordinator.submit_vote(definition.id, "upvote")

        coordinator.reset()

        summary = coordinator.get_vote_summary(definition.id)
        assert (summary.upvotes, summary.downvotes, summary.score) == (0, 0, 0)
        assert coordinator.get_user_vote(definition.id) is None


class TestContainerWiring:
    """The coordinator resolved from the container uses the session identity."""

    @pytest.mark.asyncio
    async def test_signed_in_session_can_vote(self, unit_env):
        # Arrange
        identity = await unit_env.get(SessionIdentity)
        coordinator = await unit_env.get(VoteCoordinator)
        definition = make_definition()
        coordinator.track_definitions([definition])
        identity.sign_in(UserId(uuid4()))

        # Act
        result = await coordinator.submit_vote(definition.id, "upvote")

        # Assert
        assert isinstance(result, Ok)
