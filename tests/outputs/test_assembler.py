"""Tests for output record assembly."""

import base64

from comfyrun.execution.job import OutputDescriptor
from comfyrun.outputs.assembler import OutputRecord, assemble_records, format_file_size
from comfyrun.outputs.fetcher import ArtifactResult
from comfyrun.outputs.transcoder import TranscodedContent


def _success(index, filename, data=b"x" * 2048, extension="png", mime_type="image/png"):
    return ArtifactResult(
        index=index,
        descriptor=OutputDescriptor(filename, "sub", "output"),
        success=True,
        content=TranscodedContent(data=data, extension=extension, mime_type=mime_type),
        error=None,
    )


def _failure(index, filename, error="boom"):
    return ArtifactResult(
        index=index,
        descriptor=OutputDescriptor(filename, "", "temp"),
        success=False,
        content=None,
        error=error,
    )


def test_format_file_size():
    """Test kilobyte formatting with one decimal."""
    assert format_file_size(0) == "0 kB"
    assert format_file_size(2048) == "2 kB"
    assert format_file_size(1536) == "1.5 kB"
    assert format_file_size(1100) == "1.1 kB"
    assert format_file_size(1075) == "1 kB"


def test_assemble_keeps_order_and_count():
    """Test that every result yields a record, in descriptor order."""
    results = [_failure(1, "b.png"), _success(0, "a.png"), _success(2, "c.png")]

    records = assemble_records(results)

    assert [r.filename for r in records] == ["a.png", "b.png", "c.png"]
    assert [r.success for r in records] == [True, False, True]


def test_success_record_fields():
    record = assemble_records([_success(0, "a.png", extension="jpeg", mime_type="image/jpeg")])[0]

    assert record.subfolder == "sub"
    assert record.location_kind == "output"
    assert record.file_type == "jpeg"
    assert record.mime_type == "image/jpeg"
    assert record.content_kind == "image"
    assert record.file_size == "2 kB"
    assert record.error is None


def test_failure_record_fields():
    record = assemble_records([_failure(0, "b.png", error="404 Not Found")])[0]

    assert record.success is False
    assert record.error == "404 Not Found"
    assert record.content is None
    assert record.file_size is None
    assert record.content_kind is None


def test_content_kind():
    assert OutputRecord("a.mp3", "", "output", content=b"1", file_type="mp3").content_kind == "audio"
    assert OutputRecord("a.wav", "", "output", content=b"1", file_type="wav").content_kind == "document"


def test_to_item_success():
    """Test the metadata and binary views of a successful record."""
    record = OutputRecord("clip.mp3", "", "output", content=b"abc", file_type="mp3", mime_type="audio/mpeg")

    item = record.to_item()

    encoded = base64.b64encode(b"abc").decode("ascii")
    assert item["json"] == {
        "filename": "clip.mp3",
        "type": "output",
        "subfolder": "",
        "data": encoded,
        "fileType": "mp3",
        "mimeType": "audio/mpeg",
    }
    assert item["binary"]["data"] == {
        "fileName": "clip.mp3",
        "data": encoded,
        "fileType": "audio",
        "fileSize": "0 kB",
        "fileExtension": "mp3",
        "mimeType": "audio/mpeg",
    }


def test_to_item_failure_has_only_metadata():
    item = OutputRecord("b.png", "", "temp", error="boom").to_item()

    assert item == {"json": {"filename": "b.png", "type": "temp", "subfolder": "", "error": "boom"}}
