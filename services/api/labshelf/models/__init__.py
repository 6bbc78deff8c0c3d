from labshelf.models.base import Base
from labshelf.models.storage_entry import StorageEntry


__all__ = [
    "Base",
    "StorageEntry",
]
