"""Workflow job datastructures."""

import json
from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Optional, Union

from .errors import InvalidRequestError


OutputFormat = Literal["jpeg", "png"]
LocationKind = Literal["output", "temp", "other"]

SUPPORTED_FILE_TYPES = frozenset({"png", "jpg", "mp3"})
DEFAULT_FILE_TYPES = frozenset({"png", "jpg"})
OUTPUT_FORMATS = ("jpeg", "png")

DEFAULT_JPEG_QUALITY = 80
DEFAULT_TIMEOUT_MINUTES = 30


@dataclass(frozen=True)
class JobRequest:
    """A job-graph document plus the parameters that control its run."""

    workflow: dict
    allowed_file_types: frozenset = DEFAULT_FILE_TYPES
    output_format: OutputFormat = "jpeg"
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    timeout_minutes: int = DEFAULT_TIMEOUT_MINUTES

    @classmethod
    def from_params(
        cls,
        workflow: str,
        allowed_file_types: Optional[Iterable[str]] = None,
        output_format: str = "jpeg",
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
        timeout: int = DEFAULT_TIMEOUT_MINUTES,
    ) -> "JobRequest":
        """Build a request from caller-facing parameters.

        Args:
            workflow: Job graph as a JSON string
            allowed_file_types: Extensions to keep from the outputs (png, jpg, mp3)
            output_format: Re-encoding format for images (jpeg or png)
            jpeg_quality: JPEG quality 1-100, ignored for png
            timeout: Minutes to wait for the job to finish

        Raises:
            InvalidRequestError: If any parameter is invalid.
        """
        try:
            document = json.loads(workflow)
        except (TypeError, ValueError) as e:
            raise InvalidRequestError(f"Workflow is not valid JSON: {e}") from e

        if not isinstance(document, dict):
            raise InvalidRequestError("Workflow must be a JSON object")

        if allowed_file_types is None:
            file_types = DEFAULT_FILE_TYPES
        else:
            file_types = frozenset(t.lower() for t in allowed_file_types)
        unknown = file_types - SUPPORTED_FILE_TYPES
        if unknown:
            raise InvalidRequestError(f"Unsupported file types: {', '.join(sorted(unknown))}")

        if output_format not in OUTPUT_FORMATS:
            raise InvalidRequestError(f"Unsupported output format: {output_format}")

        # bool is an int subclass
        if isinstance(jpeg_quality, bool) or not isinstance(jpeg_quality, int):
            raise InvalidRequestError("JPEG quality must be an integer")
        if output_format == "jpeg" and not 1 <= jpeg_quality <= 100:
            raise InvalidRequestError(f"JPEG quality must be between 1 and 100, got {jpeg_quality}")

        if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout < 1:
            raise InvalidRequestError(f"Timeout must be a positive number of minutes, got {timeout}")

        return cls(
            workflow=document,
            allowed_file_types=file_types,
            output_format=output_format,
            jpeg_quality=jpeg_quality,
            timeout_minutes=timeout,
        )


@dataclass(frozen=True)
class JobHandle:
    """Identifier of one queued execution."""

    prompt_id: str


@dataclass(frozen=True)
class OutputDescriptor:
    """A retrievable output file reported by the server."""

    filename: str
    subfolder: str
    location_kind: LocationKind

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["OutputDescriptor"]:
        """Parse one entry of a node's output list, or None if malformed."""
        if not isinstance(payload, dict):
            return None

        filename = payload.get("filename")
        if not isinstance(filename, str) or not filename:
            return None

        subfolder = payload.get("subfolder") or ""
        if not isinstance(subfolder, str):
            subfolder = str(subfolder)

        kind = payload.get("type")
        location_kind = kind if kind in ("output", "temp") else "other"

        return cls(filename=filename, subfolder=subfolder, location_kind=location_kind)


@dataclass
class Artifact:
    """Raw bytes retrieved for a descriptor."""

    descriptor: OutputDescriptor
    data: bytes
    extension: str


# Status variants observed while polling


@dataclass(frozen=True)
class Pending:
    """Job queued or running."""

    pass


@dataclass(frozen=True)
class Completed:
    """Job finished with outputs (node id -> node output)."""

    outputs: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Failed:
    """Job finished unsuccessfully."""

    reason: str


JobStatus = Union[Pending, Completed, Failed]
