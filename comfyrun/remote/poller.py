"""Status polling for queued jobs."""

import logging
import time
from typing import Callable, Optional

from comfyrun.execution.errors import ExecutionFailure, PollTimeoutError
from comfyrun.execution.job import Completed, Failed, JobHandle, JobStatus, Pending

from .client import ComfyClient


logger = logging.getLogger(__name__)

INITIAL_DELAY_SECONDS = 5.0
POLL_INTERVAL_SECONDS = 1.0
POLLS_PER_MINUTE = 60


def classify_history(history: dict, prompt_id: str) -> JobStatus:
    """Map a /history response onto a job status.

    A missing entry or status marker is not an error; the history store can
    lag behind the queue.
    """
    entry = history.get(prompt_id) if isinstance(history, dict) else None
    if not isinstance(entry, dict):
        return Pending()

    status = entry.get("status")
    if not isinstance(status, dict) or not status.get("completed"):
        return Pending()

    if status.get("status_str") == "error":
        return Failed("Workflow execution failed")

    outputs = entry.get("outputs")
    if not isinstance(outputs, dict):
        return Failed("No outputs found in workflow result")

    return Completed(outputs=outputs)


def wait_for_completion(
    client: ComfyClient,
    handle: JobHandle,
    timeout_minutes: int,
    *,
    sleep: Callable[[float], None] = time.sleep,
    initial_delay: float = INITIAL_DELAY_SECONDS,
    poll_interval: float = POLL_INTERVAL_SECONDS,
    max_missing_polls: Optional[int] = None,
) -> Completed:
    """Poll the server until the job completes.

    Args:
        client: Server client
        handle: Handle returned by submit_job
        timeout_minutes: Poll budget; one poll per interval, 60 per minute
        sleep: Sleep function, replaced in tests
        initial_delay: Grace period before the first poll
        poll_interval: Delay before each poll
        max_missing_polls: Fail after this many consecutive polls where the
            job is absent from history. None keeps polling until timeout.

    Raises:
        ExecutionFailure: If the job errored or finished without outputs.
        PollTimeoutError: If the budget runs out first.
    """
    prompt_id = handle.prompt_id
    max_attempts = timeout_minutes * POLLS_PER_MINUTE
    missing = 0

    sleep(initial_delay)
    for attempt in range(1, max_attempts + 1):
        sleep(poll_interval)
        logger.debug(
            f"Checking execution status (attempt {attempt}/{max_attempts})",
            extra={"event": "poll", "prompt_id": prompt_id},
        )

        history = client.get_history(prompt_id)
        if not isinstance(history, dict) or not isinstance(history.get(prompt_id), dict):
            missing += 1
            logger.debug("Prompt not found in history", extra={"event": "poll_missing", "prompt_id": prompt_id})
            if max_missing_polls is not None and missing >= max_missing_polls:
                raise ExecutionFailure(f"Prompt {prompt_id} not found in history after {missing} polls")
            continue
        missing = 0

        status = classify_history(history, prompt_id)
        if isinstance(status, Pending):
            continue

        if isinstance(status, Failed):
            logger.error(status.reason, extra={"event": "job_failed", "prompt_id": prompt_id})
            raise ExecutionFailure(status.reason)

        logger.info(
            f"Execution completed after {attempt} polls",
            extra={"event": "job_completed", "prompt_id": prompt_id},
        )
        return status

    logger.error(
        f"Execution timeout after {timeout_minutes} minutes",
        extra={"event": "job_timeout", "prompt_id": prompt_id},
    )
    raise PollTimeoutError(timeout_minutes)
