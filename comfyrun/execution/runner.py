"""Workflow runner: submit, wait, then collect the outputs."""

import logging
import time
from typing import Callable, Optional

import requests

from comfyrun.outputs.assembler import OutputRecord, assemble_records
from comfyrun.outputs.fetcher import DEFAULT_MAX_WORKERS, fetch_artifacts
from comfyrun.outputs.resolver import resolve_outputs
from comfyrun.remote.client import ComfyClient
from comfyrun.remote.poller import wait_for_completion
from comfyrun.remote.submitter import submit_job

from .errors import InvalidRequestError, WorkflowError
from .job import JobRequest


logger = logging.getLogger(__name__)


def run_workflow(
    client: ComfyClient,
    request: JobRequest,
    *,
    sleep: Callable[[float], None] = time.sleep,
    max_workers: int = DEFAULT_MAX_WORKERS,
    max_missing_polls: Optional[int] = None,
) -> list[OutputRecord]:
    """Execute a workflow on the server and return its output records.

    Args:
        client: Server client
        request: Job graph and run parameters
        sleep: Sleep function used between polls
        max_workers: Concurrent downloads
        max_missing_polls: See wait_for_completion

    Returns:
        One record per allowed output file, in the order the server listed
        them. Files that failed to download carry an error instead of content.

    Raises:
        InvalidRequestError: If max_workers is below 1. Raised before
            anything is sent to the server.
        WorkflowError: If submission, execution or polling fails.
    """
    if max_workers < 1:
        raise InvalidRequestError(f"max_workers must be at least 1, got {max_workers}")

    logger.info(f"Executing with API URL: {client.api_url}", extra={"event": "run_started"})

    try:
        handle = submit_job(client, request)
        completed = wait_for_completion(
            client,
            handle,
            request.timeout_minutes,
            sleep=sleep,
            max_missing_polls=max_missing_polls,
        )
    except WorkflowError:
        raise
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Execution error: {e}", extra={"event": "run_failed"})
        raise WorkflowError(f"ComfyUI API Error: {e}") from e

    descriptors = resolve_outputs(completed.outputs, request.allowed_file_types)
    logger.info(
        f"Found {len(descriptors)} output files to retrieve",
        extra={"event": "outputs_resolved", "prompt_id": handle.prompt_id},
    )

    results = fetch_artifacts(
        client,
        descriptors,
        request.output_format,
        request.jpeg_quality,
        max_workers=max_workers,
    )
    records = assemble_records(results)

    failed = sum(1 for record in records if not record.success)
    logger.info(
        f"Retrieved {len(records) - failed}/{len(records)} files",
        extra={"event": "run_finished", "prompt_id": handle.prompt_id},
    )
    return records
