"""
Custom Exception Classes for the ATS Match API
"""
import asyncio
import functools
import inspect
import time
from random import uniform
from typing import Dict, Any

from fastapi import HTTPException
from pymongo.errors import PyMongoError


class ATSBaseException(Exception):
    """Base exception for the ATS Match API"""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None,
        cause: Exception = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/response"""
        result = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ValidationError(ATSBaseException):
    """Raised when data validation fails"""

    def __init__(self, message: str, field: str = None, value: Any = None, **kwargs):
        details = kwargs.pop('details', {})
        if field:
            details['field'] = field
        if value is not None:
            details['invalid_value'] = str(value)
        kwargs.setdefault('error_code', "VALIDATION_ERROR")
        super().__init__(message, details=details, **kwargs)


class UnsupportedFormatError(ValidationError):
    """Raised when a resume document is not PDF or plain text"""

    def __init__(self, message: str = None, mime_type: str = None, filename: str = None, **kwargs):
        details = kwargs.pop('details', {})
        if mime_type:
            details['mime_type'] = mime_type
        if filename:
            details['filename'] = filename
        super().__init__(
            message or "Unsupported file format. Please upload a PDF or text file.",
            error_code="UNSUPPORTED_FORMAT",
            details=details,
            **kwargs
        )


class DocumentReadError(ValidationError):
    """Raised when a supported document cannot be read"""

    def __init__(self, message: str, document_type: str = None, **kwargs):
        details = kwargs.pop('details', {})
        if document_type:
            details['document_type'] = document_type
        super().__init__(message, error_code="DOCUMENT_READ_ERROR", details=details, **kwargs)


class DatabaseError(ATSBaseException):
    """Raised when database operations fail"""

    def __init__(self, message: str, operation: str = None, collection: str = None, **kwargs):
        details = kwargs.pop('details', {})
        if operation:
            details['operation'] = operation
        if collection:
            details['collection'] = collection
        super().__init__(message, error_code="DATABASE_ERROR", details=details, **kwargs)


class ProcessingError(ATSBaseException):
    """Raised when candidate/job processing fails"""

    def __init__(self, message: str, document_id: str = None, document_type: str = None, **kwargs):
        details = kwargs.pop('details', {})
        if document_id:
            details['document_id'] = document_id
        if document_type:
            details['document_type'] = document_type
        kwargs.setdefault('error_code', "PROCESSING_ERROR")
        super().__init__(message, details=details, **kwargs)


class ExtractionFailedError(ProcessingError):
    """Raised when a resume could not be turned into a candidate profile"""

    def __init__(self, message: str, candidate_id: str = None, failure_kind: str = None, **kwargs):
        details = kwargs.pop('details', {})
        details['stage'] = "extraction"
        if failure_kind:
            details['failure_kind'] = failure_kind
        super().__init__(
            message,
            document_id=candidate_id,
            document_type="resume",
            error_code="EXTRACTION_FAILED",
            details=details,
            **kwargs
        )


class ScoringFailedError(ProcessingError):
    """Raised when the match scoring call did not produce a usable result"""

    def __init__(self, message: str, candidate_id: str = None, job_id: str = None, failure_kind: str = None, **kwargs):
        details = kwargs.pop('details', {})
        details['stage'] = "scoring"
        if job_id:
            details['job_id'] = job_id
        if failure_kind:
            details['failure_kind'] = failure_kind
        super().__init__(
            message,
            document_id=candidate_id,
            document_type="candidate",
            error_code="SCORING_FAILED",
            details=details,
            **kwargs
        )


class ConfigurationError(ATSBaseException):
    """Raised when configuration is invalid or missing"""

    def __init__(self, message: str, config_key: str = None, config_value: Any = None, **kwargs):
        details = kwargs.pop('details', {})
        if config_key:
            details['config_key'] = config_key
        if config_value is not None:
            details['config_value'] = str(config_value)
        super().__init__(message, error_code="CONFIGURATION_ERROR", details=details, **kwargs)


class ExternalServiceError(ATSBaseException):
    """Raised when external service calls fail"""

    def __init__(self, message: str, service_name: str = None, status_code: int = None, **kwargs):
        details = kwargs.pop('details', {})
        if service_name:
            details['service_name'] = service_name
        if status_code:
            details['status_code'] = status_code
        kwargs.setdefault('error_code', "EXTERNAL_SERVICE_ERROR")
        super().__init__(message, details=details, **kwargs)


class TransientServiceError(ExternalServiceError):
    """Raised for failures worth retrying: dropped connections, gateway errors"""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="TRANSIENT_SERVICE_ERROR", **kwargs)


class LLMTimeoutError(ExternalServiceError):
    """Raised when the language model does not answer within its timeout"""

    def __init__(self, message: str, timeout: float = None, **kwargs):
        details = kwargs.pop('details', {})
        if timeout is not None:
            details['timeout_seconds'] = timeout
        super().__init__(message, error_code="LLM_TIMEOUT", details=details, **kwargs)


class MalformedResponseError(ExternalServiceError):
    """Raised when the language model answers with something other than the agreed JSON"""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="MALFORMED_RESPONSE", **kwargs)


STATUS_CODE_MAPPING = [
    (UnsupportedFormatError, 400),
    (DocumentReadError, 400),
    (ValidationError, 400),
    (ConfigurationError, 400),
    (DatabaseError, 500),
    (ExtractionFailedError, 500),
    (ScoringFailedError, 500),
    (ProcessingError, 500),
    (LLMTimeoutError, 504),
    (ExternalServiceError, 502),
]


def status_code_for(exc: ATSBaseException) -> int:
    """Most specific HTTP status for an exception, walking its class hierarchy"""
    for exc_type in type(exc).__mro__:
        for mapped_type, status_code in STATUS_CODE_MAPPING:
            if exc_type is mapped_type:
                return status_code
    return 500


def map_to_http_exception(exc: ATSBaseException) -> HTTPException:
    """Map custom exceptions to HTTP exceptions"""
    detail = {
        "error": exc.to_dict(),
        "message": exc.message
    }
    return HTTPException(status_code=status_code_for(exc), detail=detail)


class ExceptionContext:
    """Context manager for handling exceptions with additional context"""

    def __init__(self, operation: str, logger=None, **context):
        self.operation = operation
        self.logger = logger
        self.context = context

    def __enter__(self):
        if self.logger:
            self.logger.debug(f"Starting operation: {self.operation}", extra=self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            if self.logger:
                self.logger.debug(f"Operation completed: {self.operation}", extra=self.context)
            return False

        if self.logger:
            self.logger.error(
                f"Operation failed: {self.operation} - {exc_val}",
                extra={**self.context, "exception_type": exc_type.__name__}
            )

        # Custom and HTTP exceptions already carry their status; cancellation is not an error
        if isinstance(exc_val, (ATSBaseException, HTTPException)) or not isinstance(exc_val, Exception):
            return False

        if isinstance(exc_val, (KeyError, ValueError, TypeError)):
            raise ValidationError(
                f"Validation error in {self.operation}: {str(exc_val)}",
                details=dict(self.context),
                cause=exc_val
            ) from exc_val
        if isinstance(exc_val, PyMongoError):
            raise DatabaseError(
                f"Database error in {self.operation}: {str(exc_val)}",
                operation=self.operation,
                details=dict(self.context),
                cause=exc_val
            ) from exc_val
        raise ProcessingError(
            f"Processing error in {self.operation}: {str(exc_val)}",
            details=dict(self.context),
            cause=exc_val
        ) from exc_val


def retry_with_logging(
    max_attempts: int = 3,
    backoff_factor: float = 1.0,
    exceptions: tuple = (Exception,),
    logger=None
):
    """Decorator to retry operations with exponential backoff and jitter"""

    def decorator(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            for attempt in range(max_attempts):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if logger:
                        logger.warning(
                            f"Attempt {attempt + 1}/{max_attempts} failed for {func.__name__}: {str(e)}"
                        )
                    if attempt == max_attempts - 1:
                        if logger:
                            logger.error(f"All {max_attempts} attempts failed for {func.__name__}")
                        raise
                    await asyncio.sleep(backoff_factor * (2 ** attempt) + uniform(0, backoff_factor))

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if logger:
                        logger.warning(
                            f"Attempt {attempt + 1}/{max_attempts} failed for {func.__name__}: {str(e)}"
                        )
                    if attempt == max_attempts - 1:
                        if logger:
                            logger.error(f"All {max_attempts} attempts failed for {func.__name__}")
                        raise
                    time.sleep(backoff_factor * (2 ** attempt) + uniform(0, backoff_factor))

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
