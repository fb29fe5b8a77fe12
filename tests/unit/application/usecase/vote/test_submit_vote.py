"""Unit tests for SubmitVoteUseCase."""

from uuid import uuid4

import pytest

from taigi.adapter.realtime import LocalVoteChannel
from taigi.application.usecase.vote import SubmitVoteRequest, SubmitVoteUseCase
from taigi.config import VotingSettings
from taigi.domain.error import VoteErrorCode
from taigi.domain.repository import DefinitionRepository, VoteRepository
from taigi.domain.result import Err, Ok
from taigi.domain.service import SessionIdentity, VoteCoordinator, VoteModel
from taigi.domain.value import UserId, VoteType
from taigi.persistence.repository.inmemory import (
    InMemoryDefinitionRepository,
    InMemoryVoteRepository,
)
from tests.conftest import make_definition
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestSubmitVoteUseCase:
    """Tests for the submit vote flow."""

    @pytest.mark.asyncio
    async def test_vote_counts_existing_votes(self, unit_env):
        """Counters start from the stored votes of other users."""
        # Arrange
        use_case = await unit_env.get(SubmitVoteUseCase)
        definition_repo = await unit_env.get(DefinitionRepository)
        vote_repo = await unit_env.get(VoteRepository)
        definition = await definition_repo.save(make_definition())
        await vote_repo.upsert_vote(definition.id, UserId(uuid4()), VoteType.UPVOTE)
        voter = uuid4()

        # Act
        result = await use_case.execute(
            SubmitVoteRequest(
                definition_id=str(definition.id),
                vote_type="upvote",
                user_id=str(voter),
            )
        )

        # Assert
        assert isinstance(result, Ok)
        response = result.value
        assert response.vote_type == VoteType.UPVOTE
        assert response.summary.score == 2
        assert response.summary.upvotes == 2
        assert response.summary.user_vote == VoteType.UPVOTE
        stored = await vote_repo.fetch_votes_for_user(UserId(voter), [definition.id])
        assert len(stored) == 1

    @pytest.mark.asyncio
    async def test_switch_uses_stored_vote(self, unit_env):
        """A stored upvote becomes a downvote in one request."""
        # Arrange
        use_case = await unit_env.get(SubmitVoteUseCase)
        definition_repo = await unit_env.get(DefinitionRepository)
        vote_repo = await unit_env.get(VoteRepository)
        definition = await definition_repo.save(make_definition())
        voter = UserId(uuid4())
        await vote_repo.upsert_vote(definition.id, voter, VoteType.UPVOTE)

        # Act
        result = await use_case.execute(
            SubmitVoteRequest(
                definition_id=str(definition.id),
                vote_type="downvote",
                user_id=str(voter),
            )
        )

        # Assert
        assert isinstance(result, Ok)
        assert result.value.summary.score == -1
        assert (await vote_repo.fetch_aggregate(definition.id)).score == -1

    @pytest.mark.asyncio
    async def test_author_cannot_vote(self, unit_env):
        use_case = await unit_env.get(SubmitVoteUseCase)
        definition_repo = await unit_env.get(DefinitionRepository)
        author = UserId(uuid4())
        definition = await definition_repo.save(make_definition(author_id=author))

        result = await use_case.execute(
            SubmitVoteRequest(
                definition_id=str(definition.id), vote_type="upvote", user_id=str(author)
            )
        )

        assert isinstance(result, Err)
        assert result.code == VoteErrorCode.SELF_VOTE

    @pytest.mark.asyncio
    async def test_unknown_definition(self, unit_env):
        use_case = await unit_env.get(SubmitVoteUseCase)

        result = await use_case.execute(
            SubmitVoteRequest(
                definition_id=str(uuid4()), vote_type="upvote", user_id=str(uuid4())
            )
        )

        assert isinstance(result, Err)
        assert result.code == VoteErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_malformed_user_id(self, unit_env):
        use_case = await unit_env.get(SubmitVoteUseCase)

        result = await use_case.execute(
            SubmitVoteRequest(
                definition_id=str(uuid4()), vote_type="upvote", user_id="someone"
            )
        )

        assert isinstance(result, Err)
        assert result.code == VoteErrorCode.UNAUTHORIZED


class TestSubmitVoteRateLimit:
    """The daily limit spans requests and definitions."""

    @pytest.mark.asyncio
    async def test_limit_applies_across_definitions(self):
        # Arrange
        definition_repo = InMemoryDefinitionRepository()
        vote_repo = InMemoryVoteRepository()
        settings = VotingSettings(daily_vote_limit=2)
        definitions = [await definition_repo.save(make_definition()) for _ in range(3)]
        voter = str(uuid4())

        def request_use_case() -> SubmitVoteUseCase:
            # One coordinator per request, as wired for HTTP
            identity = SessionIdentity()
            coordinator = VoteCoordinator(
                vote_model=VoteModel(),
                vote_repository=vote_repo,
                vote_channel=LocalVoteChannel(),
                identity=identity,
                settings=settings,
            )
            return SubmitVoteUseCase(identity, coordinator, definition_repo)

        # Act
        results = [
            await request_use_case().execute(
                SubmitVoteRequest(
                    definition_id=str(definition.id), vote_type="upvote", user_id=voter
                )
            )
            for definition in definitions
        ]

        # Assert
        assert [type(r) for r in results] == [Ok, Ok, Err]
        assert results[2].code == VoteErrorCode.RATE_LIMITED
        assert (await vote_repo.fetch_aggregate(definitions[2].id)).upvotes == 0
