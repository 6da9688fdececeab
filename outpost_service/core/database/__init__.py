"""Document store adapters.

Stores:
    - MemoryDocumentStore: in-process dict documents (tests, local development)
    - SQLAlchemyDocumentStore: async SQLAlchemy session factory + declarative model

Exceptions:
    - RepositoryError: Base store error
    - InvalidFilterError: Unsupported operator, stage or field
"""

from outpost_service.core.database.exceptions import InvalidFilterError, RepositoryError
from outpost_service.core.database.memory import MemoryDocumentStore
from outpost_service.core.database.sql import SQLAlchemyDocumentStore

__all__ = [
    "InvalidFilterError",
    "MemoryDocumentStore",
    "RepositoryError",
    "SQLAlchemyDocumentStore",
]
