"""SQLAlchemy repository implementations."""

from portfolio_client.repositories.sqlalchemy.database import (
    create_sqlite_engine,
    get_engine,
    get_session_factory,
    get_session,
    init_db_with_path,
    reset_database,
    Base,
)
from portfolio_client.repositories.sqlalchemy.replica_repo import (
    SqlAlchemyReplicaRepository,
    DEFAULT_SNAPSHOT_RETENTION,
)

__all__ = [
    "create_sqlite_engine",
    "get_engine",
    "get_session_factory",
    "get_session",
    "init_db_with_path",
    "reset_database",
    "Base",
    "SqlAlchemyReplicaRepository",
    "DEFAULT_SNAPSHOT_RETENTION",
]
