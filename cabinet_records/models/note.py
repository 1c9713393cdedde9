"""RecordNoteComment model."""

import uuid
from enum import Enum

from sqlalchemy import Column, Index, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base, utcnow


class NoteType(str, Enum):
    NOTE = "note"
    COMMENT = "comment"
    SYSTEM = "system"


class NoteAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class RecordNoteComment(Base):
    """Timestamped note, comment or system entry attached to a record."""

    __tablename__ = "record_notes_comments"
    __table_args__ = (
        Index("ix_record_notes_comments_record_type", "record_id", "type"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    record_id = Column(String(36), ForeignKey("records.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    type = Column(String(20), nullable=False, default=NoteType.NOTE.value)
    action = Column(String(20), nullable=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    record = relationship("Record", back_populates="note_entries")
    creator = relationship("User")
