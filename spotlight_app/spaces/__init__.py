"""User collection ("space") lookup and enrichment cache."""

from .cache import SpaceCache, SpaceLookup, SpaceEntry, CacheState, SNAPSHOT_KEY, SPACES_KEY
from .locator import CollectionLocator

__all__ = ['SpaceCache', 'SpaceLookup', 'SpaceEntry', 'CacheState', 'CollectionLocator', 'SNAPSHOT_KEY', 'SPACES_KEY']
