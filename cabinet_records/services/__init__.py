"""Business logic services."""

from .record_service import RecordService
from .version_service import VersionService
from .pdf_extractor import PdfExtractor, process_pdf_file
from .storage_service import StorageBase, LocalFileStorage, R2Storage, get_storage

__all__ = [
    "RecordService",
    "VersionService",
    "PdfExtractor",
    "process_pdf_file",
    "StorageBase",
    "LocalFileStorage",
    "R2Storage",
    "get_storage",
]
