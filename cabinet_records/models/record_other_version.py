"""RecordOtherVersion model: full-record snapshots created by "modify"."""

import uuid

from sqlalchemy import Column, Index, String, Text, Integer, BigInteger, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from ..database import Base, utcnow


class RecordOtherVersion(Base):
    """Denormalized snapshot of a record's state.

    Has its own version counter, independent from RecordVersion. The first
    snapshot is version 2 since the original record counts as version 1.
    version is unique per original record.
    """

    __tablename__ = "records_other_versions"
    __table_args__ = (
        Index("ix_records_other_versions_original", "original_record_id", "version", unique=True),
        Index("ix_records_other_versions_cabinet_id", "cabinet_id"),
        Index("ix_records_other_versions_status", "status"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    original_record_id = Column(String(36), ForeignKey("records.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    cabinet_id = Column(String(36), ForeignKey("cabinets.id", ondelete="CASCADE"), nullable=False)
    creator_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    file_name = Column(String(255), nullable=True)
    file_path = Column(String(1000), nullable=True)
    file_size = Column(BigInteger, nullable=True)
    file_type = Column(String(100), nullable=True)
    file_hash = Column(String(128), nullable=True)

    version = Column(Integer, nullable=False, default=2)
    status = Column(String(20), nullable=False, default="draft")
    record_metadata = Column("metadata", JSON, nullable=True)
    custom_fields = Column(JSON, nullable=False, default=dict)
    tags = Column(JSON, nullable=False, default=list)
    is_template = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    last_modified_by = Column(String(36), ForeignKey("users.id"), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True, default=None)

    original_record = relationship("Record", back_populates="other_versions")
