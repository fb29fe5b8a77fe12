"""Aggregate deltas for vote transitions."""

from taigi.domain.value.common import ValueObject
from taigi.domain.value.types import VoteType


class VoteDelta(ValueObject):
    """Change to a definition's score and counters caused by one transition.

    ``previous -> new`` where either side may be None (no vote):

    | previous -> new     | score | upvotes | downvotes |
    |---------------------|-------|---------|-----------|
    | none -> upvote      |  +1   |   +1    |     0     |
    | none -> downvote    |  -1   |    0    |    +1     |
    | upvote -> downvote  |  -2   |   -1    |    +1     |
    | downvote -> upvote  |  +2   |   +1    |    -1     |
    | upvote -> none      |  -1   |   -1    |     0     |
    | downvote -> none    |  +1   |    0    |    -1     |
    """

    score: int = 0
    upvotes: int = 0
    downvotes: int = 0

    @classmethod
    def for_transition(
        cls, previous: VoteType | None, new: VoteType | None
    ) -> "VoteDelta":
        """Build the delta for moving from ``previous`` to ``new``.

        Identical endpoints (including none -> none) yield a zero delta.
        """
        upvotes = _count(new, VoteType.UPVOTE) - _count(previous, VoteType.UPVOTE)
        downvotes = _count(new, VoteType.DOWNVOTE) - _count(
            previous, VoteType.DOWNVOTE
        )
        return cls(score=upvotes - downvotes, upvotes=upvotes, downvotes=downvotes)

    def inverse(self) -> "VoteDelta":
        """Delta that undoes this one."""
        return VoteDelta(
            score=-self.score, upvotes=-self.upvotes, downvotes=-self.downvotes
        )

    @property
    def is_zero(self) -> bool:
        return self.score == 0 and self.upvotes == 0 and self.downvotes == 0


def _count(vote_type: VoteType | None, wanted: VoteType) -> int:
    return 1 if vote_type == wanted else 0
