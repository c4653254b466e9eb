from __future__ import annotations

import pytest
from docx import Document
from pypdf import PdfWriter

from ingest import load_source, read_docx


def test_load_markdown_brief(tmp_path):
    brief = tmp_path / "brief.md"
    brief.write_text("\n  Handmade mugs for slow mornings.  \n", encoding="utf-8")
    assert load_source(brief) == "Handmade mugs for slow mornings."


def test_load_docx_paragraphs(tmp_path):
    path = tmp_path / "copy.docx"
    doc = Document()
    doc.add_paragraph("First paragraph.")
    doc.add_paragraph("Second paragraph.")
    doc.save(str(path))

    assert read_docx(path) == "First paragraph.\nSecond paragraph."
    assert load_source(path) == "First paragraph.\nSecond paragraph."


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_source(tmp_path / "nope.txt")


def test_unsupported_suffix(tmp_path):
    path = tmp_path / "brief.rtf"
    path.write_text("text", encoding="utf-8")
    with pytest.raises(ValueError, match="Unsupported file type .rtf"):
        load_source(path)


def test_corrupt_docx(tmp_path):
    path = tmp_path / "broken.docx"
    path.write_text("not a zip", encoding="utf-8")
    with pytest.raises(ValueError, match="not a valid DOCX file"):
        load_source(path)


def test_pdf_without_text_is_rejected(tmp_path):
    path = tmp_path / "blank.pdf"
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    with open(path, "wb") as handle:
        writer.write(handle)

    with pytest.raises(ValueError, match="No text could be extracted"):
        load_source(path)


def test_empty_text_file(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_text("   ", encoding="utf-8")
    with pytest.raises(ValueError, match="No text could be extracted"):
        load_source(path)
