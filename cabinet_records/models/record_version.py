"""RecordVersion model: append-only file revision history."""

import uuid

from sqlalchemy import Column, Index, String, Text, Integer, BigInteger, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base, utcnow


class RecordVersion(Base):
    """One uploaded file revision of a record.

    version is unique per record and strictly increasing.
    """

    __tablename__ = "record_versions"
    __table_args__ = (
        Index("ix_record_versions_record_version", "record_id", "version", unique=True),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    record_id = Column(String(36), ForeignKey("records.id", ondelete="CASCADE"), nullable=False)
    version = Column(Integer, nullable=False)

    file_name = Column(String(255), nullable=True)
    file_path = Column(String(1000), nullable=True)
    file_size = Column(BigInteger, nullable=True)
    file_type = Column(String(100), nullable=True)
    file_hash = Column(String(128), nullable=True)

    uploaded_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    note = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    record = relationship("Record", back_populates="versions")
