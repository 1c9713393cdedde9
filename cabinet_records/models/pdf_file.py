"""PdfFile model: extracted content side record for a record's PDF."""

import uuid

from sqlalchemy import Column, String, Text, Integer, BigInteger, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class PdfFile(Base):
    """One-to-one with Record. Created opportunistically; may be absent."""

    __tablename__ = "pdf_files"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    record_id = Column(String(36), ForeignKey("records.id", ondelete="CASCADE"), nullable=False, unique=True)
    original_file_name = Column(String(255), nullable=False)
    file_path = Column(String(1000), nullable=False)
    file_size = Column(BigInteger, nullable=False)
    file_hash = Column(String(128), nullable=False)
    page_count = Column(Integer, nullable=False, default=1)
    extracted_text = Column(Text, nullable=True)
    # {"fields": [{"name": "Total", "value": "$12.00"}, ...]}
    extracted_metadata = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    record = relationship("Record", back_populates="pdf_file")
