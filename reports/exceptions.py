"""
Report Exceptions
Custom exceptions for consistent error handling across report services.
"""


class ReportError(Exception):
    """Base exception for report errors."""
    error_code = 'report_error'
    status_code = 400

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self):
        return {
            'success': False,
            'error': self.error_code,
            'message': self.message,
            'details': self.details
        }


class ValidationError(ReportError):
    """Raised for missing or malformed input."""
    error_code = 'validation_error'
    status_code = 400

    def __init__(self, message: str, field: str = None, **kwargs):
        details = kwargs
        if field:
            details['field'] = field
        super().__init__(message, details)


class InvalidDateFormatError(ValidationError):
    """Raised when a date cannot be parsed."""
    error_code = 'invalid_date_format'

    def __init__(self, message: str = 'Invalid date format. Please use YYYY-MM-DD.', field: str = None, value=None):
        extra = {}
        if value is not None:
            extra['value'] = str(value)
        super().__init__(message, field=field, **extra)


class InvalidDateRangeError(ValidationError):
    """Raised when the end date falls before the start date."""
    error_code = 'invalid_date_range'

    def __init__(self, message: str = 'End date cannot be before start date', start=None, end=None):
        extra = {}
        if start is not None:
            extra['start_date'] = str(start)
        if end is not None:
            extra['end_date'] = str(end)
        super().__init__(message, **extra)


class InvalidOperatorError(ReportError):
    """Raised when the operator is unknown or not an operations user."""
    error_code = 'invalid_operator'
    status_code = 400

    def __init__(self, message: str = 'Invalid operations user', operations_id=None):
        details = {}
        if operations_id is not None:
            details['operations_id'] = operations_id
        super().__init__(message, details)


class DuplicateReportError(ReportError):
    """Raised when a report already exists for the same key."""
    error_code = 'duplicate_report'
    status_code = 409


class ReportNotFoundError(ReportError):
    """Raised when a report id does not exist."""
    error_code = 'not_found'
    status_code = 404

    def __init__(self, message: str, report_id=None):
        details = {}
        if report_id is not None:
            details['report_id'] = report_id
        super().__init__(message, details)
