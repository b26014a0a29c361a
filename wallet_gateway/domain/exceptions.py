"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    message = "Request could not be processed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self.args[0])


class AdminNotFound(DomainException):
    """No admin with the given code"""

    def __init__(self, admin_code: str):
        super().__init__(f"Not found admin with admin code: {admin_code}")
        self.admin_code = admin_code


class UserNotFound(DomainException):
    message = "User not found"


class SenderNotFound(DomainException):
    message = "Sender not found"


class ReceiverNotFound(DomainException):
    message = "Receiver not found"


class SameUserError(DomainException):
    """Transfer sender and receiver are the same account"""

    message = "Sender and receiver must not be the same user"


class InsufficientAmount(DomainException):
    """Amount is non-positive or exceeds the available balance"""

    message = "Insufficient amount"


class AccessDenied(DomainException):
    """Acting admin is deactivated, out of scope, or not authenticated"""

    message = "User is not authorized to perform this action."


class AlreadyActivated(DomainException):
    message = "Admin is already activated"


class AlreadyDeactivated(DomainException):
    message = "Admin is already deactivated"


class UserAlreadyCreated(DomainException):
    message = "User is already created."


class StoreFailure(DomainException):
    """Underlying store could not complete the atomic unit"""

    message = "Store failure"


class WithdrawError(StoreFailure):
    message = "Withdraw could not be completed"


class DepositError(StoreFailure):
    message = "Deposit could not be completed"


class AdminCreationError(StoreFailure):
    message = "Admin could not be created"
