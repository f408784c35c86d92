"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class LoanBookAPIError(DomainException):
    """Loan book API returned an error or is unavailable"""

    pass


class InvalidLoanDataError(DomainException):
    """Loan record is malformed beyond what the classifier can default"""

    pass
