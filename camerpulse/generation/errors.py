from typing import Optional


class PipelineError(Exception):
    """Base class for fatal generation failures."""

    public_message = "Autonomous poll generation failed"


class UpstreamFailure(PipelineError):
    """Completion API unreachable or answered with a non-2xx status."""

    public_message = "Completion API request failed"

    def __init__(self, status_code: Optional[int], detail: str = ""):
        self.status_code = status_code
        self.detail = detail
        if status_code is None:
            message = f"Completion API unreachable: {detail}"
        else:
            message = f"Completion API returned HTTP {status_code}: {detail}"
        super().__init__(message.strip().rstrip(":"))


class MalformedResponse(PipelineError):
    """Completion content is not the JSON poll document we asked for."""

    public_message = "Malformed completion response"


class PersistenceFailure(PipelineError):
    """Primary poll write (or a transactional generation write) failed."""

    public_message = "Failed to persist generated poll"
