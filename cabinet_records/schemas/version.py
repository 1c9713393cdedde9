"""Record version schemas."""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class VersionCreate(BaseModel):
    """File revision to append to a record's history."""
    file_name: str
    file_size: int
    file_type: str
    file_path: str
    file_hash: str
    uploaded_by: str
    note: Optional[str] = None

    def file_descriptor(self) -> dict:
        return self.model_dump(include={"file_name", "file_path", "file_size", "file_type", "file_hash"})


class VersionResponse(BaseModel):
    """Schema for record version response."""
    id: str
    record_id: str
    version: int
    file_name: Optional[str] = None
    file_path: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    file_hash: Optional[str] = None
    uploaded_by: Optional[str] = None
    note: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
