"""Pydantic schemas for service inputs and outputs."""

from .field import FieldType, CustomFieldDefinition, ValidatedField
from .pdf import UploadedFile, ExtractedField, PdfExtractResult
from .record import (
    RecordCreate, RecordUpdate, RecordModify,
    UserSummary, CabinetSummary, NoteResponse, PdfFileResponse,
    RecordResponse, RecordDetail, RecordWithPdf, OtherVersionResponse,
    CabinetRecordItem, CabinetRecordsPage,
)
from .version import VersionCreate, VersionResponse

__all__ = [
    "FieldType",
    "CustomFieldDefinition",
    "ValidatedField",
    "UploadedFile",
    "ExtractedField",
    "PdfExtractResult",
    "RecordCreate",
    "RecordUpdate",
    "RecordModify",
    "UserSummary",
    "CabinetSummary",
    "NoteResponse",
    "PdfFileResponse",
    "RecordResponse",
    "RecordDetail",
    "RecordWithPdf",
    "OtherVersionResponse",
    "CabinetRecordItem",
    "CabinetRecordsPage",
    "VersionCreate",
    "VersionResponse",
]
