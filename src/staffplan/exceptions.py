"""Custom exceptions for staffplan."""


class StaffplanError(Exception):
    """Base exception for all staffplan errors."""

    pass


class ValidationError(StaffplanError):
    """Raised when a plan or config file has an invalid structure."""

    pass


class ParseError(StaffplanError):
    """Raised when YAML parsing fails."""

    pass
