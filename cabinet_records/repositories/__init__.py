"""Data access repositories."""

from .base import BaseRepository
from .record_repository import RecordRepository
from .version_repository import VersionRepository
from .other_version_repository import OtherVersionRepository
from .cabinet_repository import CabinetRepository, UserRepository
from .note_repository import NoteRepository

__all__ = [
    "BaseRepository",
    "RecordRepository",
    "VersionRepository",
    "OtherVersionRepository",
    "CabinetRepository",
    "UserRepository",
    "NoteRepository",
]
