"""Record schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..models.record import RecordStatus
from .pdf import UploadedFile

DEFAULT_PRIORITY = "Medium"


class RecordCreate(BaseModel):
    """Schema for creating a record."""
    title: str
    cabinet_id: str
    creator_id: str
    description: Optional[str] = None
    custom_fields: Dict[str, Any] = {}
    status: RecordStatus = RecordStatus.DRAFT
    is_template: bool = False
    is_active: bool = True
    tags: List[str] = []
    metadata: Optional[Dict[str, Any]] = None
    pdf_file: Optional[UploadedFile] = None


class RecordUpdate(BaseModel):
    """Partial record edits. Only fields explicitly set are applied.

    ``note`` is recorded as the activity detail; ``comments`` becomes a
    comment entry on the record.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[RecordStatus] = None
    custom_fields: Optional[Dict[str, Any]] = None
    tags: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None
    is_template: Optional[bool] = None
    is_active: Optional[bool] = None
    note: Optional[str] = None
    comments: Optional[str] = None

    def field_edits(self) -> Dict[str, Any]:
        """Column edits explicitly supplied by the caller."""
        return self.model_dump(mode="json", exclude_unset=True, exclude={"note", "comments"})


class RecordModify(BaseModel):
    """Schema for snapshotting a modified record as a RecordOtherVersion."""
    record_id: str
    title: str
    cabinet_id: str
    creator_id: str
    custom_fields: Dict[str, Any] = {}
    status: RecordStatus = RecordStatus.DRAFT
    tags: List[str] = []
    pdf_file: Optional[UploadedFile] = None


class UserSummary(BaseModel):
    id: str
    first_name: str
    last_name: str
    avatar: Optional[str] = None

    class Config:
        from_attributes = True


class CabinetSummary(BaseModel):
    id: str
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class NoteResponse(BaseModel):
    """A note, comment or system entry on a record."""
    id: str
    content: str
    type: str
    action: Optional[str] = None
    created_by: str
    created_at: datetime
    creator: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class PdfFileResponse(BaseModel):
    id: str
    original_file_name: str
    file_path: str
    file_size: int
    file_hash: str
    page_count: int
    extracted_text: Optional[str] = None
    extracted_metadata: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class RecordResponse(BaseModel):
    """Record columns as returned to callers."""
    id: str
    title: str
    description: Optional[str] = None
    cabinet_id: str
    creator_id: str
    status: str
    custom_fields: Dict[str, Any] = {}
    tags: List[str] = []
    metadata: Optional[Dict[str, Any]] = Field(default=None, validation_alias="record_metadata")
    version: int
    file_name: Optional[str] = None
    file_path: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    file_hash: Optional[str] = None
    is_template: bool = False
    is_active: bool = True
    last_modified_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RecordDetail(RecordResponse):
    """Record hydrated with its cabinet, creator, latest note and comments."""
    cabinet: Optional[CabinetSummary] = None
    creator: Optional[UserSummary] = None
    note: Optional[NoteResponse] = None
    comments: List[NoteResponse] = []


class RecordWithPdf(RecordDetail):
    pdf_file: Optional[PdfFileResponse] = None


class OtherVersionResponse(BaseModel):
    """A modify-snapshot of a record."""
    id: str
    original_record_id: str
    title: str
    description: Optional[str] = None
    cabinet_id: str
    creator_id: str
    version: int
    status: str
    custom_fields: Dict[str, Any] = {}
    tags: List[str] = []
    metadata: Optional[Dict[str, Any]] = Field(default=None, validation_alias="record_metadata")
    file_name: Optional[str] = None
    file_path: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    file_hash: Optional[str] = None
    is_template: bool = False
    is_active: bool = True
    last_modified_by: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CabinetRecordItem(RecordDetail):
    """Listing row; priority comes from metadata['priority']."""
    priority: str = DEFAULT_PRIORITY


class CabinetRecordsPage(BaseModel):
    """Paginated cabinet listing."""
    records: List[CabinetRecordItem]
    total: int
    page: int
    limit: int
    total_pages: int = Field(serialization_alias="totalPages")
