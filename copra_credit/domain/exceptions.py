"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class TransactionStoreError(DomainException):
    """Transaction store returned an error or is unavailable"""

    pass


class LoanStoreError(DomainException):
    """Loan store returned an error or is unavailable"""

    pass


class LoanNotEligibleError(DomainException):
    """Supplier has no completed transactions to borrow against"""

    pass


class InvalidLoanAmountError(DomainException):
    """Requested loan amount is not a positive number"""

    pass


class InvalidLoanTransitionError(DomainException):
    """Loan action is not allowed from the loan's current status"""

    pass


class InvalidPaymentError(DomainException):
    """Manual payment is malformed or cannot be applied to the loan"""

    pass
