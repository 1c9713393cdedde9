"""PDF upload and extraction schemas."""

from typing import List, Optional

from pydantic import BaseModel


class UploadedFile(BaseModel):
    """An uploaded file as received from a multipart request."""
    original_name: str
    content: bytes
    content_type: str = "application/pdf"
    size: Optional[int] = None

    def model_post_init(self, __context) -> None:
        if self.size is None:
            self.size = len(self.content)


class ExtractedField(BaseModel):
    """A field guessed from PDF text."""
    name: str
    value: str


class PdfExtractResult(BaseModel):
    """Outcome of a PDF extraction (real or fallback)."""
    extracted_text: str
    extracted_fields: List[ExtractedField] = []
    page_count: int = 1
