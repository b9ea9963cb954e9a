"""Job submission against the ComfyUI server."""

import logging

import requests

from comfyrun.execution.errors import SubmissionError
from comfyrun.execution.job import JobHandle, JobRequest

from .client import ComfyClient


logger = logging.getLogger(__name__)


def submit_job(client: ComfyClient, request: JobRequest) -> JobHandle:
    """Check the server is alive, then queue the job graph.

    Queuing is not idempotent (a second POST creates a second job), so nothing
    here retries.

    Raises:
        SubmissionError: If the server is unreachable, rejects the job, or
            returns no prompt id.
    """
    logger.info("Checking API connection", extra={"event": "liveness_check"})
    try:
        client.system_stats()
    except requests.RequestException as e:
        raise SubmissionError(f"ComfyUI server is not reachable: {e}") from e

    logger.info("Queueing prompt", extra={"event": "job_queueing"})
    try:
        response = client.queue_prompt(request.workflow)
    except requests.RequestException as e:
        raise SubmissionError(f"ComfyUI rejected the workflow: {e}") from e
    except ValueError as e:
        raise SubmissionError(f"Invalid response while queueing prompt: {e}") from e

    prompt_id = response.get("prompt_id") if isinstance(response, dict) else None
    if not prompt_id or not isinstance(prompt_id, str):
        raise SubmissionError("Failed to get prompt ID from ComfyUI")

    logger.info(
        f"Prompt queued with ID: {prompt_id}",
        extra={"event": "job_submitted", "prompt_id": prompt_id},
    )
    return JobHandle(prompt_id=prompt_id)
