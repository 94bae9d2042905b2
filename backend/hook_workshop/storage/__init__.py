"""Session persistence."""

from hook_workshop.storage.project_store import ProjectStore, storage_key

__all__ = ["ProjectStore", "storage_key"]
