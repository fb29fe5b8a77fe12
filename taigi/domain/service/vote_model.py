"""In-memory vote index.

VoteModel is the single source of truth for who voted what on which
definition. It performs no I/O: the coordinator feeds it authoritative
records and asks it for business-rule decisions.
"""

from collections.abc import Iterable
from uuid import uuid4

from taigi.domain.error import VoteErrorCode
from taigi.domain.model import (
    DefinitionScore,
    IntegrityReport,
    Vote,
    VoteSummary,
    VotingStats,
)
from taigi.domain.model.vote import utc_now
from taigi.domain.result import Ok, Result, fail
from taigi.domain.value import DefinitionId, TimeWindow, UserId, VoteId, VoteType

from .base import Service
from .validation import CreateVoteInput


class VoteModel(Service):
    """Index of votes by id, by user and by definition.

    All three indices change together through ``_write``, which replaces the
    vote held for one (user, definition) pair.
    """

    def __init__(self, initial_votes: Iterable[Vote] = ()) -> None:
        """Initialize the index.

        Args:
            initial_votes: Votes to load, later entries win for the same pair
        """
        self._by_id: dict[VoteId, Vote] = {}
        self._by_user: dict[UserId, dict[DefinitionId, Vote]] = {}
        self._by_definition: dict[DefinitionId, list[Vote]] = {}
        self.load_votes(initial_votes)

    def load_votes(self, votes: Iterable[Vote]) -> None:
        """Replace the whole index with ``votes``."""
        self._by_id.clear()
        self._by_user.clear()
        self._by_definition.clear()

        for vote in votes:
            self._write(vote.user_id, vote.definition_id, vote)

    def export_votes(self) -> list[Vote]:
        """All votes currently held."""
        return list(self._by_id.values())

    def _write(
        self, user_id: UserId, definition_id: DefinitionId, vote: Vote | None
    ) -> Vote | None:
        """Replace the vote held for (user, definition) in every index.

        Args:
            user_id: Voter
            definition_id: Definition voted on
            vote: New vote for the pair, or None to drop it

        Returns:
            The vote previously held for the pair, if any
        """
        previous = self._by_user.get(user_id, {}).get(definition_id)

        if previous is not None:
            del self._by_id[previous.id]

            user_votes = self._by_user[user_id]
            del user_votes[definition_id]
            if not user_votes:
                del self._by_user[user_id]

        definition_votes = self._by_definition.get(definition_id, [])
        position = next(
            (
                i
                for i, v in enumerate(definition_votes)
                if previous is not None and v.id == previous.id
            ),
            None,
        )

        if vote is None:
            if position is not None:
                definition_votes.pop(position)
            if not definition_votes:
                self._by_definition.pop(definition_id, None)
            return previous

        self._by_id[vote.id] = vote
        self._by_user.setdefault(user_id, {})[definition_id] = vote

        # A vote keeping its identity keeps its place among the definition's votes
        if position is not None and definition_votes[position].id == vote.id:
            definition_votes[position] = vote
        else:
            if position is not None:
                definition_votes.pop(position)
            definition_votes.append(vote)
        self._by_definition[definition_id] = definition_votes

        return previous

    def create_vote(
        self,
        vote_input: CreateVoteInput,
        user_id: UserId,
        definition_author_id: UserId,
    ) -> Result[Vote]:
        """Cast a vote, or switch the type of the user's existing vote.

        Args:
            vote_input: Validated definition id and vote type
            user_id: Voter
            definition_author_id: Author of the definition

        Returns:
            Ok with the new or updated vote, or Err(SELF_VOTE / DUPLICATE_VOTE)
        """
        if user_id == definition_author_id:
            return fail(VoteErrorCode.SELF_VOTE, "You cannot vote on your own content")

        existing = self.get_user_vote(user_id, vote_input.definition_id)
        if existing is not None:
            # Repeating the held vote is rejected rather than ignored
            if existing.vote_type == vote_input.vote_type:
                return fail(
                    VoteErrorCode.DUPLICATE_VOTE, "You have already cast this vote"
                )
            return self.update_vote(existing.id, vote_input.vote_type)

        vote = Vote(
            id=VoteId(uuid4()),
            definition_id=vote_input.definition_id,
            user_id=user_id,
            vote_type=vote_input.vote_type,
            created_at=utc_now(),
        )
        self._write(user_id, vote.definition_id, vote)
        return Ok(vote)

    def update_vote(self, vote_id: VoteId, new_vote_type: VoteType) -> Result[Vote]:
        """Change the type of an existing vote and refresh its timestamp."""
        existing = self._by_id.get(vote_id)
        if existing is None:
            return fail(VoteErrorCode.NOT_FOUND, "Vote not found")

        updated = existing.model_copy(
            update={"vote_type": new_vote_type, "created_at": utc_now()}
        )
        self._write(existing.user_id, existing.definition_id, updated)
        return Ok(updated)

    def remove_vote(self, vote_id: VoteId, requesting_user_id: UserId) -> Result[bool]:
        """Remove a vote on behalf of its owner.

        Returns:
            Ok(True), or Err(NOT_FOUND / FORBIDDEN)
        """
        vote = self._by_id.get(vote_id)
        if vote is None:
            return fail(VoteErrorCode.NOT_FOUND, "Vote not found")

        if vote.user_id != requesting_user_id:
            return fail(VoteErrorCode.FORBIDDEN, "You can only remove your own votes")

        self._write(vote.user_id, vote.definition_id, None)
        return Ok(True)

    def put_vote(self, vote: Vote) -> Vote | None:
        """Store an authoritative vote record without business-rule checks.

        Returns:
            The vote previously held for the same (user, definition)
        """
        return self._write(vote.user_id, vote.definition_id, vote)

    def restore_vote(
        self, user_id: UserId, definition_id: DefinitionId, snapshot: Vote | None
    ) -> None:
        """Put a (user, definition) pair back to an earlier snapshot."""
        self._write(user_id, definition_id, snapshot)

    def get_user_vote(self, user_id: UserId, definition_id: DefinitionId) -> Vote | None:
        return self._by_user.get(user_id, {}).get(definition_id)

    def get_votes_for_definition(self, definition_id: DefinitionId) -> list[Vote]:
        return list(self._by_definition.get(definition_id, []))

    def get_votes_by_user(self, user_id: UserId) -> list[Vote]:
        return list(self._by_user.get(user_id, {}).values())

    def get_vote_summary(
        self, definition_id: DefinitionId, user_id: UserId | None = None
    ) -> VoteSummary:
        """Count votes on a definition.

        Args:
            definition_id: Definition to summarise
            user_id: Viewer whose own vote should be reported, if any
        """
        votes = self._by_definition.get(definition_id, [])
        upvotes = sum(1 for v in votes if v.vote_type == VoteType.UPVOTE)
        downvotes = sum(1 for v in votes if v.vote_type == VoteType.DOWNVOTE)

        user_vote = None
        if user_id is not None:
            own = self.get_user_vote(user_id, definition_id)
            user_vote = own.vote_type if own else None

        return VoteSummary(
            upvotes=upvotes,
            downvotes=downvotes,
            score=upvotes - downvotes,
            user_vote=user_vote,
        )

    def calculate_score(self, definition_id: DefinitionId) -> int:
        """Upvotes minus downvotes, 0 when nobody voted."""
        return sum(
            1 if v.vote_type == VoteType.UPVOTE else -1
            for v in self._by_definition.get(definition_id, [])
        )

    def get_top_voted_definitions(self, limit: int = 10) -> list[DefinitionScore]:
        """Definitions ranked by score, highest first.

        Equal scores are ordered by definition id so the ranking does not
        depend on insertion order.
        """
        scores = [
            DefinitionScore(
                definition_id=definition_id, score=self.calculate_score(definition_id)
            )
            for definition_id in self._by_definition
        ]
        scores.sort(key=lambda s: (-s.score, str(s.definition_id)))
        return scores[: max(limit, 0)]

    def get_voting_stats(self) -> VotingStats:
        votes = list(self._by_id.values())
        return VotingStats(
            total_votes=len(votes),
            total_upvotes=sum(1 for v in votes if v.vote_type == VoteType.UPVOTE),
            total_downvotes=sum(1 for v in votes if v.vote_type == VoteType.DOWNVOTE),
            unique_voters=len({v.user_id for v in votes}),
            definitions_with_votes=len(self._by_definition),
        )

    def get_user_vote_count(
        self, user_id: UserId, time_window: TimeWindow | None = None
    ) -> int:
        """Number of votes held by a user, optionally cast within a window."""
        votes = self.get_votes_by_user(user_id)
        if time_window is None:
            return len(votes)
        return sum(1 for v in votes if time_window.contains(v.created_at))

    def has_user_reached_vote_limit(
        self, user_id: UserId, limit: int, time_window: TimeWindow
    ) -> bool:
        return self.get_user_vote_count(user_id, time_window) >= limit

    def validate_integrity(self) -> IntegrityReport:
        """Check that the three indices agree. Never mutates."""
        errors: list[str] = []

        for user_id, user_votes in self._by_user.items():
            for definition_id, vote in user_votes.items():
                if self._by_id.get(vote.id) != vote:
                    errors.append(f"Vote {vote.id} in user map but not in main map")
                if vote.user_id != user_id:
                    errors.append(f"Vote {vote.id} has incorrect userId in user map")
                if vote.definition_id != definition_id:
                    errors.append(
                        f"Vote {vote.id} has incorrect definitionId in user map"
                    )

        for definition_id, votes in self._by_definition.items():
            seen_users: set[UserId] = set()
            for vote in votes:
                if self._by_id.get(vote.id) != vote:
                    errors.append(
                        f"Vote {vote.id} in definition map but not in main map"
                    )
                if vote.definition_id != definition_id:
                    errors.append(
                        f"Vote {vote.id} has incorrect definitionId in definition map"
                    )
                if vote.user_id in seen_users:
                    errors.append(
                        f"User {vote.user_id} has duplicate votes on definition "
                        f"{definition_id}"
                    )
                seen_users.add(vote.user_id)

        for vote_id, vote in self._by_id.items():
            if vote.id != vote_id:
                errors.append(f"Vote {vote.id} stored under id {vote_id}")
            if self.get_user_vote(vote.user_id, vote.definition_id) != vote:
                errors.append(f"Vote {vote.id} missing from user map")
            if vote not in self._by_definition.get(vote.definition_id, []):
                errors.append(f"Vote {vote.id} missing from definition map")

        return IntegrityReport(is_valid=not errors, errors=errors)
