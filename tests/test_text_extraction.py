import io
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from docx import Document as DocxDocument
from langchain_core.messages import AIMessage
from pypdf import PdfWriter

from casedesk.api.text_extraction import ContentCategory, TextExtractor, classify_content, normalize_mime, strip_html


@pytest.mark.parametrize(
    "mime, filename, expected",
    [
        ("application/pdf", "brief.pdf", ContentCategory.PDF),
        ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", "a.docx", ContentCategory.WORD),
        ("application/msword", "a.doc", ContentCategory.WORD),
        ("text/plain; charset=utf-8", "notes.txt", ContentCategory.PLAIN_TEXT),
        ("text/csv", "rows.csv", ContentCategory.PLAIN_TEXT),
        ("text/html", "page.html", ContentCategory.HTML),
        ("image/jpg", "scan.jpg", ContentCategory.IMAGE),
        ("image/tiff", "scan.tiff", ContentCategory.UNSUPPORTED),
        ("audio/mpeg", "call.mp3", ContentCategory.AUDIO),
        ("application/zip", "bundle.zip", ContentCategory.UNSUPPORTED),
        (None, "brief.PDF", ContentCategory.PDF),
        ("application/octet-stream", "memo.docx", ContentCategory.WORD),
        ("", "unknown.bin", ContentCategory.UNSUPPORTED),
    ],
)
def test_classify_content(mime, filename, expected):
    assert classify_content(mime, filename) is expected


def test_normalize_mime():
    assert normalize_mime("IMAGE/JPG") == "image/jpeg"
    assert normalize_mime("text/html; charset=utf-8") == "text/html"
    assert normalize_mime(None, "clip.wav") == "audio/wav"


def test_plain_text_is_decoded_and_trimmed():
    assert TextExtractor().extract(b"  hello\n", "text/plain", "a.txt") == "hello"


def test_invalid_utf8_is_ignored():
    assert TextExtractor().extract(b"ok\xff\xfe!", "text/plain", "a.txt") == "ok!"


def test_blank_text_is_none():
    assert TextExtractor().extract(b"   \n ", "text/plain", "a.txt") is None


def test_unsupported_is_none():
    assert TextExtractor().extract(b"PK\x03\x04", "application/zip", "a.zip") is None


def test_word_document_paragraphs():
    buffer = io.BytesIO()
    document = DocxDocument()
    document.add_paragraph("First paragraph")
    document.add_paragraph("Second paragraph")
    document.save(buffer)

    text = TextExtractor().extract(buffer.getvalue(), "application/vnd.openxmlformats-officedocument"
                                   ".wordprocessingml.document", "memo.docx")
    assert text == "First paragraph\nSecond paragraph"


def test_pdf_without_text_is_none():
    buffer = io.BytesIO()
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    writer.write(buffer)
    assert TextExtractor().extract(buffer.getvalue(), "application/pdf", "blank.pdf") is None


def test_corrupt_pdf_is_none():
    assert TextExtractor().extract(b"not a pdf at all", "application/pdf", "broken.pdf") is None


def test_html_without_model_is_tag_stripped():
    markup = b"<html><head><style>p{}</style></head><body><h1>Title</h1><p>Body &amp; more</p></body></html>"
    text = TextExtractor().extract(markup, "text/html", "page.html")
    assert "Title" in text
    assert "Body & more" in text
    assert "<" not in text
    assert "p{}" not in text

    tricky = b'<p title="a > b">Body</p><!-- <b>internal note</b> --><p>End</p>'
    assert TextExtractor().extract(tricky, "text/html", "page.html") == "Body\nEnd"


def test_html_with_model_uses_markdown_conversion():
    model = MagicMock()
    model.invoke.return_value = AIMessage(content="# Title\n\nBody")
    text = TextExtractor(chat_model=model).extract(b"<h1>Title</h1><p>Body</p>", "text/html", "page.html")
    assert text == "# Title\n\nBody"
    human = model.invoke.call_args.args[0][1]
    assert human.content[0]["text"] == "<h1>Title</h1><p>Body</p>"


def test_image_goes_to_vision_model_as_data_url():
    model = MagicMock()
    model.invoke.return_value = AIMessage(content="A signed contract.")
    text = TextExtractor(chat_model=model).extract(b"\x89PNG fake", "image/png", "scan.png")
    assert text == "A signed contract."
    part = model.invoke.call_args.args[0][1].content[0]
    assert part["type"] == "image_url"
    assert part["image_url"]["url"].startswith("data:image/png;base64,")


def test_image_without_model_is_none():
    assert TextExtractor().extract(b"\x89PNG fake", "image/png", "scan.png") is None


def test_audio_is_transcribed():
    client = MagicMock()
    client.audio.transcriptions.create.return_value = SimpleNamespace(text=" Hello from the call ")
    text = TextExtractor(openai_client=client).extract(b"ID3 fake", "audio/mpeg", "call.mp3")
    assert text == "Hello from the call"
    kwargs = client.audio.transcriptions.create.call_args.kwargs
    assert kwargs["model"] == "whisper-1"
    assert kwargs["file"].name == "call.mp3"


def test_handler_failure_is_none():
    model = MagicMock()
    model.invoke.side_effect = RuntimeError("rate limited")
    assert TextExtractor(chat_model=model).extract(b"\x89PNG", "image/png", "scan.png") is None


def test_strip_html_keeps_one_block_per_line():
    assert strip_html("<p>a</p>\n\n\n<p>b</p><script>var x = 1;</script>") == "a\nb"
