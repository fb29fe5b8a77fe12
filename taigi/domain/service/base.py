"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold voting logic that spans several entities, such as
    the vote index and the coordinator bridging it to persistence.
    """

    pass
