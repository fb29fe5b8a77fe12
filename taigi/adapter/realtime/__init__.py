"""Realtime vote change delivery."""

from .channel import LocalVoteChannel

__all__ = ["LocalVoteChannel"]
