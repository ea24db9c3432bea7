from typing import Optional, Dict, Any


class MISBaseError(Exception):
    """
    Root exception of the MIS project.
    Every custom exception must inherit from this class.

    Attributes:
        code (str): error identifier (e.g. 'SESSION_EXPIRED')
        message (str): human readable message
        details (Optional[Dict[str, Any]]): extra debugging information
        status_code (int): HTTP status used by the API error handler
    """
    status_code: int = 500

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(f"[{code}] {message}")


class ConfigurationError(MISBaseError):
    """Raised when loading or validating settings fails."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="CONF_ERROR", message=message, details=details, status_code=500)


class SessionNotFoundError(MISBaseError):
    """No live engine or snapshot exists for the requested session."""
    def __init__(self, session_id: str):
        super().__init__(
            code="SESSION_NOT_FOUND",
            message=f"Session {session_id} not found",
            details={"session_id": session_id},
            status_code=404
        )


class PrerequisiteMissingError(MISBaseError):
    """A candidate profile must exist before an interview can start."""
    def __init__(self, user_id: str):
        super().__init__(
            code="PREREQUISITE_MISSING",
            message="Candidate profile not found. Please create one before starting an interview.",
            details={"user_id": user_id, "next": "profile"},
            status_code=412
        )


class SessionExpiredError(MISBaseError):
    """A concrete session id has neither a snapshot nor a result."""
    def __init__(self, session_id: str):
        super().__init__(
            code="SESSION_EXPIRED",
            message="Interview session not found or expired. Please start over.",
            details={"session_id": session_id},
            status_code=410
        )


class SessionCreationError(MISBaseError):
    """The session generator could not produce a new interview."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="SESSION_CREATION_FAILED", message=message, details=details, status_code=502)


class SessionCompletedError(MISBaseError):
    """The session already reached its terminal state and cannot move."""
    def __init__(self, session_id: str):
        super().__init__(
            code="SESSION_COMPLETED",
            message=f"Session {session_id} is already completed",
            details={"session_id": session_id},
            status_code=409
        )


class SessionNotCompleteError(MISBaseError):
    """Finish was requested before the last question was reached."""
    def __init__(self, session_id: str, section_index: int, question_index: int):
        super().__init__(
            code="SESSION_NOT_COMPLETE",
            message="The interview can only be finished from its last question",
            details={
                "session_id": session_id,
                "section_index": section_index,
                "question_index": question_index
            },
            status_code=409
        )


class SessionAlreadySubmittedError(MISBaseError):
    """The session was already scored successfully."""
    def __init__(self, session_id: str):
        super().__init__(
            code="SESSION_ALREADY_SUBMITTED",
            message=f"Session {session_id} was already submitted",
            details={"session_id": session_id},
            status_code=409
        )


class SubmissionInProgressError(MISBaseError):
    """A submission for this session is already in flight."""
    def __init__(self, session_id: str):
        super().__init__(
            code="SUBMISSION_IN_PROGRESS",
            message=f"Submission for session {session_id} is already in progress",
            details={"session_id": session_id},
            status_code=423
        )


class SubmissionFailedError(MISBaseError):
    """The scoring service rejected or failed the submission. Retry is allowed."""
    def __init__(self, session_id: str, reason: str):
        super().__init__(
            code="SUBMISSION_FAILED",
            message="Failed to submit interview for feedback.",
            details={"session_id": session_id, "reason": reason, "retryable": True},
            status_code=502
        )


class InvalidAnswerError(MISBaseError):
    """Answer does not fit the question (unknown id or option)."""
    def __init__(self, question_id: str, message: str):
        super().__init__(
            code="INVALID_ANSWER",
            message=message,
            details={"question_id": question_id},
            status_code=422
        )


class PersistenceError(MISBaseError):
    """Snapshot store read/write failure."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="PERSISTENCE_ERROR", message=message, details=details, status_code=503)
