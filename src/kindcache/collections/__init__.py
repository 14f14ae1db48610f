"""Typed adapters, one per structural kind.

Each adapter takes the shared :class:`~kindcache.connection.CacheConnection`
and a codec strategy, so ``SetAdapter(connection, ScalarCodec(int))`` and
``SetAdapter(connection, BytesCodec())`` are the same code over different
element types.
"""

from kindcache.collections.base import KindAdapter
from kindcache.collections.dictionaries import DictionaryAdapter
from kindcache.collections.lists import ListAdapter
from kindcache.collections.queues import QueueAdapter
from kindcache.collections.sets import SetAdapter
from kindcache.collections.strings import StringAdapter

__all__ = [
    "KindAdapter",
    "StringAdapter",
    "SetAdapter",
    "ListAdapter",
    "DictionaryAdapter",
    "QueueAdapter",
]
