"""Repository layer - data access abstractions and implementations."""

from portfolio_client.repositories.protocols import ReplicaRepository

__all__ = [
    "ReplicaRepository",
]
