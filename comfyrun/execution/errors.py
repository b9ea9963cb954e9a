"""Error taxonomy for workflow execution."""


class WorkflowError(Exception):
    """Raised when a workflow run fails as a whole."""

    pass


class SubmissionError(WorkflowError):
    """Raised when a job cannot be queued on the server."""

    pass


class InvalidRequestError(SubmissionError):
    """Raised when caller parameters are rejected before submission."""

    pass


class ExecutionFailure(WorkflowError):
    """Raised when the server reports the job itself failed."""

    pass


class PollTimeoutError(WorkflowError, TimeoutError):
    """Raised when the job does not finish within the poll budget."""

    def __init__(self, timeout_minutes: int):
        super().__init__(f"Execution timeout after {timeout_minutes} minutes")
        self.timeout_minutes = timeout_minutes


class ArtifactError(Exception):
    """Raised when a single output file cannot be retrieved or re-encoded.

    Never escapes the output pipeline; it is recorded on the affected record.
    """

    pass
