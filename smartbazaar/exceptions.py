# smartbazaar/exceptions.py
class SmartBazaarError(Exception):
    """Base class for errors raised by the order engine."""
    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class InvalidInput(SmartBazaarError):
    status_code = 422


class NotFound(SmartBazaarError):
    status_code = 404


class Unauthorized(SmartBazaarError):
    status_code = 403


class InsufficientStock(SmartBazaarError):
    status_code = 409


class IllegalTransition(SmartBazaarError):
    status_code = 409


class TransactionConflict(SmartBazaarError):
    """The optimistic transaction kept losing races; the caller may try again."""
    status_code = 503
