"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class ImpactEngineError(Exception):
    """Base exception for impact_engine."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(ImpactEngineError):
    """Resource not found."""

    pass


class LLMError(ImpactEngineError):
    """LLM-related error."""

    pass


class LLMValidationError(LLMError):
    """LLM output validation failed."""

    def __init__(self, message: str, raw_output: str):
        super().__init__(message, details={"raw_output": raw_output})
        self.raw_output = raw_output


class InfrastructureError(ImpactEngineError):
    """Infrastructure-related error (upstream API, file system, etc.)."""

    pass


class ReportGenerationError(ImpactEngineError):
    """The PDF report could not be assembled or saved."""

    pass


class ReportInProgressError(ImpactEngineError):
    """A report for the same project is already being generated."""

    pass
