"""
    Errors raised by apexcov.
    Every error is terminal for the run and is reported as one line.
"""


class ApexcovError(Exception):
    """
        Base class for all apexcov errors.
    """


class ValidationError(ApexcovError):
    """
        Missing or invalid inputs, raised before any network call.
    """


class AuthError(ApexcovError):
    """
        Login to the SOAP API failed.
    """


class FetchError(ApexcovError):
    """
        The Tooling API coverage query failed.
    """


class PersistError(ApexcovError):
    """
        The coverage report could not be written.
    """
