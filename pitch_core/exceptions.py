"""Custom exceptions for the pitch coach rubric pipeline."""

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .schema import Rejected


class ErrorCategory(str, Enum):
    """How a failure is reported to the HTTP caller."""

    CONFIGURATION = "configuration"
    UPSTREAM = "upstream"
    EXTRACTION = "extraction"
    VALIDATION = "validation"
    CLIENT_INPUT = "client_input"


class PitchCoachError(Exception):
    """Base exception for all application errors."""

    category: ErrorCategory = ErrorCategory.UPSTREAM

    def __init__(self, message: str, subject: str = "rubric draft"):
        super().__init__(message)
        self.subject = subject


# Configuration Errors
class ConfigurationError(PitchCoachError):
    """Configuration-related errors."""

    category = ErrorCategory.CONFIGURATION


class MissingCredentialsError(ConfigurationError):
    """Missing required credentials."""

    pass


# Request Errors
class ClientInputError(PitchCoachError):
    """The request cannot be served; raised before any upstream call."""

    category = ErrorCategory.CLIENT_INPUT


# Pipeline Errors
class PipelineError(PitchCoachError):
    """Pipeline processing errors."""

    pass


class UpstreamError(PipelineError):
    """The completion API failed or could not be reached."""

    category = ErrorCategory.UPSTREAM


class EmptyCompletionError(UpstreamError):
    """The completion API answered without any text."""

    def __init__(self, message: str = "Empty response from language model", subject: str = "rubric draft"):
        super().__init__(message, subject=subject)


class JSONExtractionError(PipelineError):
    """No JSON value could be recovered from the model output."""

    category = ErrorCategory.EXTRACTION


class DraftValidationError(PipelineError):
    """JSON was recovered but does not match the expected schema."""

    category = ErrorCategory.VALIDATION

    def __init__(self, rejection: "Rejected", subject: str = "rubric draft"):
        super().__init__(rejection.reason, subject=subject)
        self.rejection = rejection

    @property
    def path(self) -> Optional[str]:
        return self.rejection.path
