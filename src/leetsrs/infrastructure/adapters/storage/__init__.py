# Infrastructure Storage Adapters Package
from .file_store import FileStore
from .memory_store import InMemoryStore

__all__ = ["FileStore", "InMemoryStore"]
