"""Errors raised while building reports.

Each carries the HTTP status it maps to; the application renders them as
``{"message": ...}``."""


class ReportError(Exception):
    status_code: int = 500


class InvalidReportParameterError(ReportError):
    status_code = 400


class InvalidRangeError(InvalidReportParameterError):
    pass


class InvalidPeriodError(InvalidReportParameterError):
    pass


class InvalidGroupError(InvalidReportParameterError):
    pass


class ReportFailedError(ReportError):
    status_code = 500
