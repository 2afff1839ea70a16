"""
Pipeline error taxonomy.

Every public summarization / Q&A operation either returns a fully validated,
redacted result or raises one of the three kinds below. Model and transport
failures are not classified here; they surface as RuntimeError.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of structural/content failure kinds."""

    INVALID_REQUEST = "invalid_request"
    NOT_FOUND = "not_found"
    OUTPUT_VALIDATION = "output_validation"


class MeetingLensError(Exception):
    """Base class for classified pipeline failures."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class InvalidRequestError(MeetingLensError):
    """Bad or empty input, unparsable model output, un-chunkable content."""

    kind = ErrorKind.INVALID_REQUEST


class NotFoundError(MeetingLensError):
    """No transcript to answer against, or no relevant Q&A context."""

    kind = ErrorKind.NOT_FOUND


class OutputValidationError(MeetingLensError):
    """Empty or unsafe/disallowed output after redaction."""

    kind = ErrorKind.OUTPUT_VALIDATION
