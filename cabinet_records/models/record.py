"""Record model."""

import uuid
from enum import Enum

from sqlalchemy import Column, Index, String, Text, Integer, BigInteger, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from ..database import Base, utcnow


class RecordStatus(str, Enum):
    """Approval state of a record.

    draft -> pending -> approved | rejected; archived is set explicitly.
    """
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ARCHIVED = "archived"


# Columns mirrored from the active file revision onto Record.
FILE_DESCRIPTOR_FIELDS = ("file_name", "file_path", "file_size", "file_type", "file_hash")


class Record(Base):
    """Canonical document entry inside a cabinet.

    ``version`` always equals the RecordVersion whose file descriptor is
    currently mirrored in the file_* columns.
    """

    __tablename__ = "records"
    __table_args__ = (
        Index("ix_records_cabinet_id", "cabinet_id"),
        Index("ix_records_creator_id", "creator_id"),
        Index("ix_records_status", "status"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    cabinet_id = Column(String(36), ForeignKey("cabinets.id", ondelete="CASCADE"), nullable=False)
    creator_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    status = Column(String(20), nullable=False, default=RecordStatus.DRAFT.value)

    # {"<fieldId>": {"fieldId": 1, "type": "Text Only", "value": "..."}}
    custom_fields = Column(JSON, nullable=False, default=dict)
    tags = Column(JSON, nullable=False, default=list)
    # "metadata" is reserved on declarative classes
    record_metadata = Column("metadata", JSON, nullable=True)

    version = Column(Integer, nullable=False, default=1)

    # Active file descriptor
    file_name = Column(String(255), nullable=True)
    file_path = Column(String(1000), nullable=True)
    file_size = Column(BigInteger, nullable=True)
    file_type = Column(String(100), nullable=True)
    file_hash = Column(String(128), nullable=True)

    is_template = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    last_modified_by = Column(String(36), ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Soft delete marker (NULL = live). Never written by RecordService.
    deleted_at = Column(DateTime(timezone=True), nullable=True, default=None)

    # Relationships
    cabinet = relationship("Cabinet")
    creator = relationship("User", foreign_keys=[creator_id])
    versions = relationship(
        "RecordVersion",
        back_populates="record",
        cascade="all, delete-orphan",
        order_by="RecordVersion.version.desc()",
    )
    note_entries = relationship(
        "RecordNoteComment",
        back_populates="record",
        cascade="all, delete-orphan",
    )
    other_versions = relationship(
        "RecordOtherVersion",
        back_populates="original_record",
        cascade="all, delete-orphan",
    )
    pdf_file = relationship(
        "PdfFile",
        back_populates="record",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def file_descriptor(self) -> dict:
        return {name: getattr(self, name) for name in FILE_DESCRIPTOR_FIELDS}
