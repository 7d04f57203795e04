"""
Singleton wiring for the registry, content store and sweeper.
"""
from typing import Optional

from .content_store import ContentStore
from .registry import IdentityRegistry
from .sweeper import RetentionSweeper

_store: Optional[ContentStore] = None
_registry: Optional[IdentityRegistry] = None
_sweeper: Optional[RetentionSweeper] = None


def get_content_store() -> ContentStore:
    """
    Return the process-wide content store so partition handles are shared by all requests.
    """
    global _store
    if _store is None:
        _store = ContentStore()
    return _store


def get_registry() -> IdentityRegistry:
    global _registry
    if _registry is None:
        _registry = IdentityRegistry(get_content_store())
    return _registry


def get_sweeper() -> RetentionSweeper:
    global _sweeper
    if _sweeper is None:
        _sweeper = RetentionSweeper(get_registry(), get_content_store())
    return _sweeper


def reset():
    """Drop all singletons; the next getter call builds fresh ones."""
    global _store, _registry, _sweeper
    _store = _registry = _sweeper = None
