"""
Exception hierarchy shared by the packaging, receiving and allocation modules
"""
from typing import Iterable, List, Optional, Union


class StockflowError(Exception):
    """Base exception for stockflow errors"""
    pass


class ValidationError(StockflowError):
    """Raised when input is rejected before anything is sent to the API"""

    def __init__(self, errors: Union[str, Iterable[str]]):
        if isinstance(errors, str):
            errors = [errors]
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors))


class ConstraintViolation(ValidationError):
    """Raised when a submitted selection would exceed the available pool"""

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Cannot allocate {requested} units. "
            f"Only {available} units remain in this opportunity."
        )


class InvalidTransitionError(StockflowError):
    """Raised when acting on an opportunity that is no longer pending"""

    def __init__(self, opportunity_id: str, status: str, action: str):
        self.opportunity_id = opportunity_id
        self.status = status
        self.action = action
        super().__init__(
            f"Cannot {action} opportunity {opportunity_id}: status is '{status}'"
        )


class CommitFailure(StockflowError):
    """Raised when a remote commit (allocate, dismiss, receive) fails"""

    def __init__(self, operation: str, reference: str, cause: Optional[Exception] = None):
        self.operation = operation
        self.reference = reference
        self.cause = cause
        message = f"{operation} failed for {reference}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


__all__ = [
    'StockflowError',
    'ValidationError',
    'ConstraintViolation',
    'InvalidTransitionError',
    'CommitFailure',
]
