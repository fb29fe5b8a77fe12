"""Unit tests for RemoveVoteUseCase."""

from uuid import uuid4

import pytest

from taigi.application.usecase.vote import RemoveVoteRequest, RemoveVoteUseCase
from taigi.domain.error import VoteErrorCode
from taigi.domain.repository import DefinitionRepository, VoteRepository
from taigi.domain.result import Err, Ok
from taigi.domain.value import UserId, VoteType
from tests.conftest import make_definition
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestRemoveVoteUseCase:
    """Tests for the remove vote flow."""

    @pytest.mark.asyncio
    async def test_removes_stored_vote(self, unit_env):
        # Arrange
        use_case = await unit_env.get(RemoveVoteUseCase)
        definition_repo = await unit_env.get(DefinitionRepository)
        vote_repo = await unit_env.get(VoteRepository)
        definition = await definition_repo.save(make_definition())
        voter = UserId(uuid4())
        await vote_repo.upsert_vote(definition.id, voter, VoteType.DOWNVOTE)

        # Act
        result = await use_case.execute(
            RemoveVoteRequest(definition_id=str(definition.id), user_id=str(voter))
        )

        # Assert
        assert isinstance(result, Ok)
        assert result.value.success
        assert result.value.summary.score == 0
        assert result.value.summary.user_vote is None
        assert await vote_repo.find_by_definition(definition.id) == []

    @pytest.mark.asyncio
    async def test_nothing_to_remove(self, unit_env):
        use_case = await unit_env.get(RemoveVoteUseCase)
        definition_repo = await unit_env.get(DefinitionRepository)
        definition = await definition_repo.save(make_definition())

        result = await use_case.execute(
            RemoveVoteRequest(definition_id=str(definition.id), user_id=str(uuid4()))
        )

        assert isinstance(result, Err)
        assert result.code == VoteErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_malformed_definition_id(self, unit_env):
        use_case = await unit_env.get(RemoveVoteUseCase)

        result = await use_case.execute(
            RemoveVoteRequest(definition_id="word-17", user_id=str(uuid4()))
        )

        assert isinstance(result, Err)
        assert result.code == VoteErrorCode.VALIDATION_ERROR
