"""Concurrent artifact retrieval with per-file failure isolation."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Optional

from comfyrun.execution.job import Artifact, OutputDescriptor
from comfyrun.remote.client import ComfyClient

from .resolver import get_file_extension
from .transcoder import TranscodedContent, transcode


logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


@dataclass
class ArtifactResult:
    """Outcome of retrieving and re-encoding one descriptor."""

    index: int
    descriptor: OutputDescriptor
    success: bool
    content: Optional[TranscodedContent]
    error: Optional[str]


def _fetch_one(
    client: ComfyClient,
    index: int,
    descriptor: OutputDescriptor,
    output_format: str,
    jpeg_quality: int,
) -> ArtifactResult:
    """Download and transcode a single descriptor, capturing any failure."""
    logger.info(
        f"Downloading {descriptor.location_kind} file: {descriptor.filename}",
        extra={"event": "artifact_downloading", "artifact": descriptor.filename},
    )
    try:
        data = client.view(descriptor)
        artifact = Artifact(descriptor=descriptor, data=data, extension=get_file_extension(descriptor.filename))
        content = transcode(artifact, output_format, jpeg_quality)
    except Exception as e:
        logger.error(
            f"Failed to download file {descriptor.filename}: {e}",
            extra={"event": "artifact_failed", "artifact": descriptor.filename},
        )
        return ArtifactResult(index=index, descriptor=descriptor, success=False, content=None, error=str(e))

    logger.info(
        f"Downloaded {descriptor.filename} ({len(content.data)} bytes)",
        extra={"event": "artifact_downloaded", "artifact": descriptor.filename},
    )
    return ArtifactResult(index=index, descriptor=descriptor, success=True, content=content, error=None)


def fetch_artifacts(
    client: ComfyClient,
    descriptors: list[OutputDescriptor],
    output_format: str,
    jpeg_quality: int,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[ArtifactResult]:
    """Retrieve all descriptors concurrently.

    Returns one result per descriptor, in descriptor order, whatever order the
    downloads finish in.
    """
    if not descriptors:
        return []

    results: list[Optional[ArtifactResult]] = [None] * len(descriptors)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(_fetch_one, client, index, descriptor, output_format, jpeg_quality): index
            for index, descriptor in enumerate(descriptors)
        }

        for future in as_completed(futures):
            result = future.result()
            results[result.index] = result

    return results
