# argfolio/services/storage/__init__.py
"""
Document store implementations and the typed repository on top of them.

Usage:
    from argfolio.services.storage import InMemoryDocumentStore, PortfolioRepository

    repo = PortfolioRepository(InMemoryDocumentStore())
    repo.put_movement(movement)
"""

from argfolio.services.storage.memory import InMemoryDocumentStore
from argfolio.services.storage.repository import PortfolioRepository
from argfolio.services.storage.sql import SqlDocumentStore

__all__ = [
    "InMemoryDocumentStore",
    "SqlDocumentStore",
    "PortfolioRepository",
]
