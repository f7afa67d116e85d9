from ledgerstore.backends.file import FileBackend
from ledgerstore.backends.memory import MemoryBackend

__all__ = ["FileBackend", "MemoryBackend"]
