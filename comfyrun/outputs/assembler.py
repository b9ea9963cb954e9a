"""Assembly of fetch results into the records returned to callers."""

import base64
import math
from dataclasses import dataclass
from typing import Optional

from .fetcher import ArtifactResult
from .transcoder import is_image_file


@dataclass
class OutputRecord:
    """One output file of a workflow run, or the error that replaced it."""

    filename: str
    subfolder: str
    location_kind: str
    content: Optional[bytes] = None
    file_type: Optional[str] = None
    mime_type: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.content is not None

    @property
    def content_kind(self) -> Optional[str]:
        """Declared kind of the content: image, audio or document."""
        if self.file_type is None:
            return None
        if self.file_type == "mp3":
            return "audio"
        if is_image_file(self.file_type):
            return "image"
        return "document"

    @property
    def file_size(self) -> Optional[str]:
        if self.content is None:
            return None
        return format_file_size(len(self.content))

    def to_item(self) -> dict:
        """Return the metadata view and, for successes, the binary view."""
        metadata = {
            "filename": self.filename,
            "type": self.location_kind,
            "subfolder": self.subfolder,
        }
        if not self.success:
            metadata["error"] = self.error
            return {"json": metadata}

        encoded = base64.b64encode(self.content).decode("ascii")
        metadata.update({"data": encoded, "fileType": self.file_type, "mimeType": self.mime_type})
        return {
            "json": metadata,
            "binary": {
                "data": {
                    "fileName": self.filename,
                    "data": encoded,
                    "fileType": self.content_kind,
                    "fileSize": self.file_size,
                    "fileExtension": self.file_type,
                    "mimeType": self.mime_type,
                }
            },
        }


def format_file_size(size_bytes: int) -> str:
    """Format a byte count as kilobytes with one decimal, e.g. "12.5 kB"."""
    # Round half up; whole values print without a trailing ".0"
    kilobytes = math.floor(size_bytes / 1024 * 10 + 0.5) / 10
    if kilobytes.is_integer():
        return f"{int(kilobytes)} kB"
    return f"{kilobytes} kB"


def assemble_records(results: list[ArtifactResult]) -> list[OutputRecord]:
    """Build one record per result, keeping descriptor order."""
    records = []
    for result in sorted(results, key=lambda r: r.index):
        descriptor = result.descriptor
        if result.success and result.content is not None:
            records.append(
                OutputRecord(
                    filename=descriptor.filename,
                    subfolder=descriptor.subfolder,
                    location_kind=descriptor.location_kind,
                    content=result.content.data,
                    file_type=result.content.extension,
                    mime_type=result.content.mime_type,
                )
            )
        else:
            records.append(
                OutputRecord(
                    filename=descriptor.filename,
                    subfolder=descriptor.subfolder,
                    location_kind=descriptor.location_kind,
                    error=result.error or "Unknown error",
                )
            )
    return records
