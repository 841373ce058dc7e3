"""
Spotter Errors.

Responsibilities:
- AnalysisFailed for pipeline control flow
- InvalidInput for clip precondition failures
- Structured error object builder

Invariants:
- Every failure carries the clip name and the stage it happened in
- Failures are terminal for one analysis only; history is never touched
"""


USER_SAFE_MESSAGE = "Failed to analyze the audio clip. Please try again."


def build_error(
    code: str,
    message: str,
    stage: str,
    detail: dict | None = None,
) -> dict:
    """
    Build structured error object.

    Args:
        code: Error code (e.g., "CLASSIFY_FAILED")
        message: Human-readable error message
        stage: Stage name where error occurred
        detail: Optional additional details

    Returns:
        Structured error dictionary.
    """
    error: dict = {
        "code": code,
        "message": message,
        "stage": stage,
    }
    if detail is not None:
        error["detail"] = detail
    return error


class SpotterError(Exception):
    """Base class for all errors raised by the analysis pipeline."""


class AnalysisFailed(SpotterError):
    """
    Raised when an external collaborator fails during an analysis.

    Covers classifier gateway errors, timeouts and unusable responses, and
    failures of the advisory or summary generators when they are invoked.
    No result is assembled or stored.

    Attributes:
        stage: Pipeline stage that failed (e.g., "classify")
        clip_name: Name of the clip being analyzed
        reason: Internal description of the failure
        cause: Underlying exception, if any
    """

    def __init__(
        self,
        stage: str,
        clip_name: str,
        reason: str,
        cause: BaseException | None = None,
    ):
        self.stage = stage
        self.clip_name = clip_name
        self.reason = reason
        self.cause = cause
        super().__init__(f"{USER_SAFE_MESSAGE} (clip '{clip_name}', stage '{stage}')")

    def to_dict(self) -> dict:
        detail = {"clip_name": self.clip_name, "reason": self.reason}
        if self.cause is not None:
            detail["cause"] = type(self.cause).__name__
        return build_error(
            code=f"{self.stage.upper()}_FAILED",
            message=USER_SAFE_MESSAGE,
            stage=self.stage,
            detail=detail,
        )


class InvalidInput(SpotterError):
    """
    Raised when a clip payload fails basic preconditions.

    Rejected before the pipeline starts; no external call is made.
    """

    stage = "validate"

    def __init__(self, clip_name: str, reason: str):
        self.clip_name = clip_name
        self.reason = reason
        super().__init__(f"Invalid audio clip '{clip_name}': {reason}")

    def to_dict(self) -> dict:
        return build_error(
            code="INVALID_INPUT",
            message=str(self),
            stage=self.stage,
            detail={"clip_name": self.clip_name, "reason": self.reason},
        )
