"""Errors raised by adapters to outside systems."""


class AdapterError(Exception):
    """An adapter could not complete an operation."""


class ChannelClosedError(AdapterError):
    """Raised when publishing on a realtime channel that has been closed."""
