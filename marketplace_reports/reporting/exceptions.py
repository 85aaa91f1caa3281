"""
Reporting Exceptions
"""


class ReportError(Exception):
    """Base class for report export failures"""


class InvalidCredentialsError(ReportError):
    """Admin email/password did not match"""


class CredentialLookupError(ReportError):
    """Admin credentials could not be read from the data store"""


class ReportRenderError(ReportError):
    """PDF document could not be produced"""
