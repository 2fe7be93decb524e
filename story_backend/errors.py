from __future__ import annotations


class StoryBackendError(Exception):
    """Base class for every error raised by the story backend."""


class StartupError(StoryBackendError):
    """Data directory or database file could not be prepared. Fatal."""


class StoreError(StoryBackendError):
    """A storage operation failed; ``str(err)`` is the database's description."""


class StoreBusyError(StoreError):
    """The store lock could not be acquired within the configured timeout."""
