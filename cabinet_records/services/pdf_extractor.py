"""Best-effort PDF text and field extraction.

The extractor writes the upload to a scratch file, reads positioned words
with PyMuPDF, rebuilds reading-order lines and guesses ``key: value`` fields
plus common invoice fields. It is heuristic: callers treat any failure as
"use the fallback metadata" and carry on.
"""

import logging
import re
import uuid
from pathlib import Path
from typing import Iterable, List, Optional

import fitz  # PyMuPDF

from ..core.config import settings
from ..exceptions import PdfProcessingError
from ..schemas.pdf import ExtractedField, PdfExtractResult, UploadedFile

logger = logging.getLogger(__name__)

# Words whose top edges differ by at most this much share a line.
LINE_Y_TOLERANCE = 1.0

# Lines after an address introducer that may belong to the address block.
ADDRESS_LOOKAHEAD = 4

FALLBACK_TEXT = "PDF text extraction failed"

COMMON_FIELDS = ("invoice", "date", "due date", "subtotal", "tax", "total", "amount", "payment", "po number")
MONETARY_FIELDS = frozenset({"total", "subtotal", "amount", "tax"})
DATE_FIELDS = frozenset({"date", "due date"})

_ADDRESS_INTRODUCER = re.compile(r"bill to|ship to|address|customer|client", re.IGNORECASE)
_KEY_VALUE = re.compile(r"([^:]+):\s*(.*)")
_LABELED_LINE = re.compile(r"\w+\s*:")
_CURRENCY = re.compile(r"[$€£]\s*[\d,]+\.?\d*")
_DATE = re.compile(r"\d{1,4}[/-]\d{1,2}[/-]\d{1,4}|\d{1,2}\s+[A-Za-z]+\s+\d{1,4}")
_DIGIT = re.compile(r"\d")


def fallback_result(original_name: str, size: int) -> PdfExtractResult:
    """Placeholder metadata used whenever extraction fails."""
    return PdfExtractResult(
        extracted_text=FALLBACK_TEXT,
        extracted_fields=[
            ExtractedField(name="Document Name", value=original_name),
            ExtractedField(name="File Size", value=f"{int(size / 1024 + 0.5)} KB"),
        ],
        page_count=1,
    )


def build_lines(words: Iterable[tuple]) -> List[str]:
    """Group PyMuPDF word tuples ``(x0, y0, x1, y1, text, ...)`` into lines.

    Words are ordered top to bottom; a new line starts whenever the vertical
    position moves by more than LINE_Y_TOLERANCE. Words within a line are
    ordered left to right and joined by single spaces.
    """
    lines: List[str] = []
    current: list[tuple[float, str]] = []
    current_y: Optional[float] = None

    for word in sorted(words, key=lambda w: w[1]):
        x0, y0, text = word[0], word[1], word[4]
        if current_y is None or abs(y0 - current_y) > LINE_Y_TOLERANCE:
            if current:
                lines.append(" ".join(t for _, t in sorted(current, key=lambda c: c[0])))
            current = []
            current_y = y0
        current.append((x0, text))

    if current:
        lines.append(" ".join(t for _, t in sorted(current, key=lambda c: c[0])))
    return lines


def extract_key_values(lines: Iterable[str]) -> List[ExtractedField]:
    """Emit ``key: value`` pairs with a non-empty value and a key longer than one char."""
    fields: List[ExtractedField] = []
    for line in lines:
        match = _KEY_VALUE.match(line)
        if not match:
            continue
        key, value = match.group(1).strip(), match.group(2).strip()
        if value and len(key) > 1:
            fields.append(ExtractedField(name=key, value=value))
    return fields


def _value_for_common_field(field: str, line: str, next_line: Optional[str]) -> str:
    if ":" in line:
        after_colon = line.split(":")[1].strip()
        if after_colon:
            return after_colon

    if _DIGIT.search(line):
        numeric_words = [w for w in line.split() if _DIGIT.search(w)]
        if field in MONETARY_FIELDS:
            match = _CURRENCY.search(line)
            if match:
                return match.group(0)
        elif field in DATE_FIELDS:
            match = _DATE.search(line)
            if match:
                return match.group(0)
        return " ".join(numeric_words)

    if next_line and not _LABELED_LINE.search(next_line):
        return next_line
    return ""


def analyze_text_structure(
    lines: List[str],
    known_names: Iterable[str] = (),
) -> List[ExtractedField]:
    """Secondary pass for address blocks and common invoice fields.

    A field name is emitted at most once, compared case-insensitively against
    *known_names* and everything this pass has already found.
    """
    found: List[ExtractedField] = []
    seen = {name.lower() for name in known_names}

    def emit(name: str, value: str) -> None:
        if value and name.lower() not in seen:
            seen.add(name.lower())
            found.append(ExtractedField(name=name, value=value))

    for i, raw_line in enumerate(lines):
        line = raw_line.strip()
        if not line:
            continue

        if _ADDRESS_INTRODUCER.search(line) and i + 1 < len(lines):
            address_parts = []
            for candidate in lines[i + 1:i + 1 + ADDRESS_LOOKAHEAD]:
                candidate = candidate.strip()
                if not candidate or ":" in candidate:
                    break
                address_parts.append(candidate)
            if address_parts:
                emit(line.replace(":", "", 1).strip(), " ".join(address_parts))

        lowered = line.lower()
        next_line = lines[i + 1].strip() if i + 1 < len(lines) else None
        for field in COMMON_FIELDS:
            if field in lowered:
                value = _value_for_common_field(field, line, next_line)
                emit(field[0].upper() + field[1:], value)

    return found


class PdfExtractor:
    """Extracts text, page count and field guesses from PDF bytes."""

    def __init__(self, scratch_dir: Optional[str] = None):
        self.scratch_dir = Path(scratch_dir or settings.upload_dir)

    def extract(self, pdf_bytes: bytes) -> PdfExtractResult:
        """Parse *pdf_bytes*.

        Raises:
            PdfProcessingError: the bytes could not be written or parsed.
        """
        scratch_path = self.scratch_dir / f"temp_{uuid.uuid4().hex}.pdf"
        try:
            scratch_path.write_bytes(pdf_bytes)
            page_lines = self._read_lines(scratch_path)
        except Exception as e:
            logger.error("Error extracting PDF content: %s", e)
            raise PdfProcessingError() from e
        finally:
            self._remove_scratch(scratch_path)

        all_lines = [line for lines in page_lines for line in lines]
        extracted_text = "".join(f"{line}\n" for line in all_lines)
        basic_fields = extract_key_values(all_lines)
        structured = analyze_text_structure(
            extracted_text.split("\n"),
            known_names=(f.name for f in basic_fields),
        )

        return PdfExtractResult(
            extracted_text=extracted_text,
            extracted_fields=basic_fields + structured,
            page_count=len(page_lines),
        )

    @staticmethod
    def _read_lines(path: Path) -> List[List[str]]:
        with fitz.open(str(path)) as document:
            return [build_lines(page.get_text("words")) for page in document]

    @staticmethod
    def _remove_scratch(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Error removing temp file %s: %s", path, e)

    def extract_or_fallback(self, upload: UploadedFile) -> PdfExtractResult:
        """Extract, substituting the fallback shape on failure. Never raises."""
        try:
            return self.extract(upload.content)
        except PdfProcessingError:
            logger.warning(
                "PDF processing failed, using fallback metadata",
                extra={"file_name": upload.original_name},
            )
            return fallback_result(upload.original_name, upload.size or 0)


def process_pdf_file(upload: UploadedFile, extractor: Optional[PdfExtractor] = None) -> PdfExtractResult:
    """Standalone entry point: extracted content, or fallback metadata."""
    return (extractor or PdfExtractor()).extract_or_fallback(upload)
