"""Database models."""

from .user import User
from .cabinet import Cabinet, CabinetMember, MEMBER_FULL_ROLE
from .record import Record, RecordStatus, FILE_DESCRIPTOR_FIELDS
from .record_version import RecordVersion
from .record_other_version import RecordOtherVersion
from .note import RecordNoteComment, NoteType, NoteAction
from .pdf_file import PdfFile
from .activity import ActivityLog, ActivityType, ResourceType, Notification

__all__ = [
    "User", "Cabinet", "CabinetMember", "MEMBER_FULL_ROLE",
    "Record", "RecordStatus", "FILE_DESCRIPTOR_FIELDS",
    "RecordVersion", "RecordOtherVersion",
    "RecordNoteComment", "NoteType", "NoteAction",
    "PdfFile",
    "ActivityLog", "ActivityType", "ResourceType", "Notification",
]
