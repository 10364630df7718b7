"""Shared enums for models and API."""

from enum import Enum


class PhotoType(str, Enum):
    """Stage of a monthly goal photo."""

    BEFORE = "before"
    PROGRESS = "progress"
    AFTER = "after"


class StorageBackend(str, Enum):
    """Which store serves the API."""

    AUTO = "auto"
    POSTGRES = "postgres"
    MEMORY = "memory"
