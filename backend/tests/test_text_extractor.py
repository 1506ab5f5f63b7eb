"""Tests for document text extraction."""

import io

import docx
import pymupdf
import pytest

from edtech.services.errors import ExtractionError
from edtech.services.text_extractor import TextExtractor, text_extractor


async def test_plain_text():
    kind, text = await text_extractor.extract("notes.txt", b"Mitosis has four phases.")
    assert kind == "txt"
    assert text == "Mitosis has four phases."


async def test_markdown_is_text():
    kind, text = await text_extractor.extract("README.MD", b"# Unit 3\n\nForces")
    assert kind == "txt"
    assert "Forces" in text


async def test_control_characters_removed():
    _, text = await text_extractor.extract("notes.txt", b"Atoms\x00 and\x07 ions")
    assert text == "Atoms and ions"


async def test_docx():
    document = docx.Document()
    document.add_paragraph("Newton's first law")
    document.add_paragraph("")
    document.add_paragraph("Objects in motion stay in motion.")
    buffer = io.BytesIO()
    document.save(buffer)

    kind, text = await text_extractor.extract("physics.docx", buffer.getvalue())

    assert kind == "docx"
    assert text == "Newton's first law\n\nObjects in motion stay in motion."


async def test_pdf():
    pdf = pymupdf.open()
    page = pdf.new_page()
    page.insert_text((72, 72), "The water cycle")
    data = pdf.tobytes()
    pdf.close()

    kind, text = await text_extractor.extract("water.pdf", data)

    assert kind == "pdf"
    assert "The water cycle" in text


async def test_unsupported_type():
    with pytest.raises(ExtractionError, match="Unsupported"):
        await text_extractor.extract("slides.pptx", b"...")


async def test_corrupt_file():
    with pytest.raises(ExtractionError, match="Could not read text"):
        await text_extractor.extract("broken.pdf", b"not a pdf")


async def test_empty_file():
    with pytest.raises(ExtractionError, match="No readable text"):
        await text_extractor.extract("empty.txt", b"   \n")


def test_detect_kind():
    assert TextExtractor.detect_kind("Report.PDF") == "pdf"
    assert TextExtractor.detect_kind("essay.docx") == "docx"
