"""Tests for PDF text and field extraction.

Real PDFs are generated with PyMuPDF so the full extract path runs; the
line and structure heuristics are also tested directly on plain lines.
"""

import pytest

from cabinet_records.exceptions import PdfProcessingError
from cabinet_records.schemas.pdf import UploadedFile
from cabinet_records.services.pdf_extractor import (
    FALLBACK_TEXT,
    PdfExtractor,
    analyze_text_structure,
    build_lines,
    extract_key_values,
    fallback_result,
    process_pdf_file,
)
from tests.conftest import make_pdf


def _as_dict(fields) -> dict:
    return {f.name: f.value for f in fields}


class TestBuildLines:
    """Word boxes are regrouped into reading-order lines."""

    def test_words_on_same_row_joined_left_to_right(self):
        words = [
            (120, 10.0, 150, 20, "World"),
            (10, 10.4, 50, 20, "Hello"),
        ]
        assert build_lines(words) == ["Hello World"]

    def test_rows_further_apart_than_tolerance_split(self):
        words = [
            (10, 30.0, 40, 40, "second"),
            (10, 10.0, 40, 20, "first"),
        ]
        assert build_lines(words) == ["first", "second"]

    def test_no_words_no_lines(self):
        assert build_lines([]) == []


class TestKeyValues:

    def test_colon_lines_become_fields(self):
        fields = extract_key_values(["Invoice Number: INV-001", "Customer: Acme"])
        assert _as_dict(fields) == {"Invoice Number": "INV-001", "Customer": "Acme"}

    def test_empty_value_and_short_key_skipped(self):
        assert extract_key_values(["Notes:", "X: 1", "no colon here"]) == []


class TestAnalyzeTextStructure:

    def test_address_block_collected(self):
        lines = ["Bill To:", "Acme Corp", "1 Main St", "Springfield", "Phone: 555"]
        fields = _as_dict(analyze_text_structure(lines))
        assert fields["Bill To"] == "Acme Corp 1 Main St Springfield"

    def test_address_lookahead_limited_to_four_lines(self):
        lines = ["Ship to", "a", "b", "c", "d", "e"]
        fields = _as_dict(analyze_text_structure(lines))
        assert fields["Ship to"] == "a b c d"

    def test_currency_picked_for_monetary_field(self):
        fields = _as_dict(analyze_text_structure(["Amount due $ 300.00 now"]))
        assert fields["Amount"] == "$ 300.00"

    def test_date_picked_for_date_field(self):
        fields = _as_dict(analyze_text_structure(["Date 12/05/2024 ref 7"]))
        assert fields["Date"] == "12/05/2024"

    def test_following_line_used_when_unlabeled(self):
        fields = _as_dict(analyze_text_structure(["Payment", "Bank transfer"]))
        assert fields["Payment"] == "Bank transfer"

    def test_following_labeled_line_not_used(self):
        fields = _as_dict(analyze_text_structure(["Payment", "Terms: 30 days"]))
        assert "Payment" not in fields

    def test_known_names_not_repeated(self):
        fields = analyze_text_structure(["Total: $5.00"], known_names=["TOTAL"])
        assert fields == []

    def test_each_name_emitted_once(self):
        fields = analyze_text_structure(["Tax: 1.00", "Tax: 2.00"])
        assert _as_dict(fields) == {"Tax": "1.00"}


class TestExtract:
    """End-to-end extraction of generated PDFs."""

    def test_text_and_fields_extracted(self, extractor):
        pdf = make_pdf([["Invoice Number: INV-001", "Total: $1,250.00"]])
        result = extractor.extract(pdf)

        assert "Invoice Number: INV-001" in result.extracted_text
        fields = _as_dict(result.extracted_fields)
        assert fields["Invoice Number"] == "INV-001"
        assert fields["Total"] == "$1,250.00"
        assert result.page_count == 1

    def test_key_value_fields_come_first(self, extractor):
        pdf = make_pdf([["Customer: Acme", "Invoice INV-9"]])
        names = [f.name for f in extractor.extract(pdf).extracted_fields]
        assert names[0] == "Customer"
        assert "Invoice" in names

    def test_page_count(self, extractor):
        pdf = make_pdf([["Page one"], ["Page two"], ["Page three"]])
        assert extractor.extract(pdf).page_count == 3

    def test_scratch_file_removed(self, extractor, tmp_path):
        extractor.extract(make_pdf([["Hello"]]))
        assert list(tmp_path.glob("temp_*.pdf")) == []

    def test_corrupt_bytes_raise(self, extractor, tmp_path):
        with pytest.raises(PdfProcessingError) as exc_info:
            extractor.extract(b"this is not a pdf")
        assert exc_info.value.status_code == 500
        assert list(tmp_path.glob("temp_*.pdf")) == []


class TestFallback:
    """Unparseable uploads degrade to fixed metadata."""

    def test_fallback_shape(self):
        result = fallback_result("scan.pdf", 2048)
        assert result.extracted_text == FALLBACK_TEXT
        assert _as_dict(result.extracted_fields) == {"Document Name": "scan.pdf", "File Size": "2 KB"}
        assert result.page_count == 1

    def test_size_rounds_half_up(self):
        assert _as_dict(fallback_result("a.pdf", 1536).extracted_fields)["File Size"] == "2 KB"
        assert _as_dict(fallback_result("a.pdf", 1000).extracted_fields)["File Size"] == "1 KB"

    def test_corrupt_upload_returns_fallback(self, extractor):
        upload = UploadedFile(original_name="broken.pdf", content=b"\x00" * 2048)
        result = process_pdf_file(upload, extractor)
        assert result.extracted_text == FALLBACK_TEXT
        assert _as_dict(result.extracted_fields)["Document Name"] == "broken.pdf"
        assert _as_dict(result.extracted_fields)["File Size"] == "2 KB"

    def test_missing_scratch_dir_returns_fallback(self, tmp_path):
        extractor = PdfExtractor(scratch_dir=str(tmp_path / "missing"))
        upload = UploadedFile(original_name="a.pdf", content=make_pdf([["Hi"]]))
        assert extractor.extract_or_fallback(upload).extracted_text == FALLBACK_TEXT
