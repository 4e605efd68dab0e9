# Models package init
"""
Importing this package registers every mapped class with Base.metadata, so
string relationship targets ("Memory", "MemoryPhoto") resolve no matter which
model module a caller imported first.
"""

from app.models.memory import MEMORY_TYPES, MEMORY_TYPE_NOTE, MEMORY_TYPE_SONG, Memory, MemoryPhoto
from app.models.scrapbook import Scrapbook

__all__ = [
    "MEMORY_TYPES",
    "MEMORY_TYPE_NOTE",
    "MEMORY_TYPE_SONG",
    "Memory",
    "MemoryPhoto",
    "Scrapbook",
]
