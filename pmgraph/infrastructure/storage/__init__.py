"""JSON file storage with Result-based error handling."""

from pmgraph.infrastructure.storage.json_storage import JsonStorage

__all__ = ["JsonStorage"]
