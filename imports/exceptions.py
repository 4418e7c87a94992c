"""
Custom exception hierarchy for the imports application.

Data sources raise these typed errors; the API layer and management commands
translate them into HTTP responses and command errors in one place.

Exception Hierarchy:
    ImportServiceError (base)
    ├── SourceReadError
    ├── UnsupportedFormatError
    ├── InvalidSubmissionError
    └── UnknownDataSourceError

Usage Examples:
    >>> raise SourceReadError('line 3: unexpected end of data', file_name='contacts.csv')
    SourceReadError: Spreadsheet not loaded. line 3: unexpected end of data

    >>> raise UnsupportedFormatError('report.xlsx', 'xlsx')
    UnsupportedFormatError: Unsupported file format 'xlsx' for report.xlsx
"""

from typing import Dict, Optional


class ImportServiceError(Exception):
    """Base exception for all import data source operations.

    Example:
        try:
            data_source.initialize()
        except ImportServiceError as e:
            logger.error(f"Data source error: {e}")
            return error_response(str(e))
    """
    pass


class SourceReadError(ImportServiceError):
    """Raised when the selected file cannot be parsed.

    This is a configuration-level error: the user must pick a different file
    or fix the one they selected. The underlying parser message is kept so it
    can be shown to the user.

    Attributes:
        reason: Message from the underlying parser
        file_name: Name of the file that failed to load
    """

    PREFIX = 'Spreadsheet not loaded. '

    def __init__(self, reason: str, file_name: Optional[str] = None):
        """Initialize with the parser message.

        Args:
            reason: Message describing why the file could not be read
            file_name: Optional name of the file being read
        """
        self.reason = reason
        self.file_name = file_name
        super().__init__(f"{self.PREFIX}{reason}")


class UnsupportedFormatError(ImportServiceError):
    """Raised when the file is not delimited text.

    Only CSV reaches this data source in normal operation, so this signals an
    internal error rather than a user mistake. No fallback parser is tried.

    Attributes:
        file_name: Name of the rejected file
        detected_format: Format identified from the file contents
    """

    def __init__(self, file_name: str, detected_format: str):
        self.file_name = file_name
        self.detected_format = detected_format
        super().__init__(f"Unsupported file format '{detected_format}' for {file_name}")


class InvalidSubmissionError(ImportServiceError):
    """Raised when a submitted value is missing or unusable.

    Attributes:
        field: Name of the submitted field
        reason: Explanation of the problem
    """

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class UnknownDataSourceError(ImportServiceError):
    """Raised when a job names a data source that is not registered.

    Attributes:
        name: The requested data source name
        available: Names of the registered data sources
    """

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        super().__init__(f"Unknown data source: '{name}'. Available data sources: {available}")


# Error code mapping for API responses
ERROR_CODES = {
    SourceReadError: 'SOURCE_READ_ERROR',
    UnsupportedFormatError: 'UNSUPPORTED_FORMAT',
    InvalidSubmissionError: 'INVALID_SUBMISSION',
    UnknownDataSourceError: 'UNKNOWN_DATA_SOURCE',
}

# Errors the user can fix by changing the submitted configuration
CONFIGURATION_ERRORS = (SourceReadError, InvalidSubmissionError, UnknownDataSourceError)


def get_error_code(exception: ImportServiceError) -> str:
    """Get standardized error code for an exception.

    Example:
        >>> get_error_code(SourceReadError('bad quote'))
        'SOURCE_READ_ERROR'
    """
    return ERROR_CODES.get(type(exception), 'IMPORT_SERVICE_ERROR')


def to_error_dict(exception: ImportServiceError, request_id: Optional[str] = None) -> Dict:
    """Convert exception to standardized error dictionary for API responses.

    Args:
        exception: The exception to convert
        request_id: Optional request identifier for tracking

    Returns:
        Dictionary with error details in API-friendly format
    """
    error_dict = {
        'error': {
            'code': get_error_code(exception),
            'message': str(exception),
        }
    }

    if isinstance(exception, SourceReadError):
        error_dict['error']['details'] = {
            'reason': exception.reason,
            'file_name': exception.file_name,
        }
    elif isinstance(exception, UnsupportedFormatError):
        error_dict['error']['details'] = {
            'file_name': exception.file_name,
            'detected_format': exception.detected_format,
        }
    elif isinstance(exception, InvalidSubmissionError):
        error_dict['error']['details'] = {
            'field': exception.field,
            'reason': exception.reason,
        }

    if request_id:
        error_dict['error']['request_id'] = request_id

    return error_dict
