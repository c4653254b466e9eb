from __future__ import annotations

"""Read briefs and existing copy from text, Word and PDF files."""

from pathlib import Path
from typing import List
from xml.etree import ElementTree as ET
from zipfile import BadZipFile, ZipFile

from loguru import logger
from pypdf import PdfReader

TEXT_SUFFIXES = {".txt", ".md", ".markdown"}
SUPPORTED_SUFFIXES = TEXT_SUFFIXES | {".docx", ".pdf"}
WORD_NS = {"w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main"}


def read_text_file(path: Path | str) -> str:
    return Path(path).read_text(encoding="utf-8").strip()


def read_docx(path: Path | str) -> str:
    """Return concatenated paragraph text from a DOCX file."""
    with ZipFile(path) as zf:
        xml = zf.read("word/document.xml")
    root = ET.fromstring(xml)
    paragraphs: List[str] = []
    for para in root.findall(".//w:p", WORD_NS):
        texts = [node.text or "" for node in para.findall(".//w:t", WORD_NS)]
        if texts:
            paragraphs.append("".join(texts))
    return "\n".join(paragraphs).strip()


def read_pdf(path: Path | str) -> str:
    """Return concatenated text from every page of a PDF file."""
    reader = PdfReader(str(path))
    pages: List[str] = []
    for page in reader.pages:
        text = page.extract_text() or ""
        pages.append(text.strip())
    return "\n".join(pages).strip()


def load_source(path: Path | str) -> str:
    """Load a brief or original copy, picking the reader from the file suffix."""
    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"Source file not found: {source}")
    suffix = source.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(
            f"Unsupported file type {suffix or '(none)'}; expected one of {', '.join(sorted(SUPPORTED_SUFFIXES))}"
        )
    if suffix == ".pdf":
        text = read_pdf(source)
    elif suffix == ".docx":
        try:
            text = read_docx(source)
        except (BadZipFile, KeyError) as exc:
            raise ValueError(f"{source.name} is not a valid DOCX file") from exc
    else:
        text = read_text_file(source)
    if not text:
        raise ValueError(f"No text could be extracted from {source.name}")
    logger.info("Loaded {} characters from {}", len(text), source.name)
    return text


__all__ = ["SUPPORTED_SUFFIXES", "load_source", "read_docx", "read_pdf", "read_text_file"]
