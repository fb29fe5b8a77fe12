"""Vote use cases."""

from .get_vote_summary import (
    GetVoteSummaryRequest,
    GetVoteSummaryResponse,
    GetVoteSummaryUseCase,
)
from .remove_vote import RemoveVoteRequest, RemoveVoteResponse, RemoveVoteUseCase
from .submit_vote import SubmitVoteRequest, SubmitVoteResponse, SubmitVoteUseCase

__all__ = [
    "GetVoteSummaryRequest",
    "GetVoteSummaryResponse",
    "GetVoteSummaryUseCase",
    "RemoveVoteRequest",
    "RemoveVoteResponse",
    "RemoveVoteUseCase",
    "SubmitVoteRequest",
    "SubmitVoteResponse",
    "SubmitVoteUseCase",
]
