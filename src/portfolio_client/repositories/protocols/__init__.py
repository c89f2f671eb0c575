"""Repository protocol definitions (interfaces)."""

from portfolio_client.repositories.protocols.replica_repo import ReplicaRepository

__all__ = [
    "ReplicaRepository",
]
