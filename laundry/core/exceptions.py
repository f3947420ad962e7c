"""Domain errors raised by the order engine.

Not-found is never an exception here: service methods return None/False
and the HTTP layer maps that to 404.
"""


class OrderError(Exception):
    """Base class for order engine errors."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class OrderValidationError(OrderError):
    """Request rejected before any write was attempted."""

    status_code = 400


class OrderConflictError(OrderError):
    """The change conflicts with existing data."""

    status_code = 409
    retryable = False


class OrderHasInvoicesError(OrderConflictError):
    """Order cannot be deleted because invoices reference it."""

    def __init__(self, order_id: int, invoice_count: int):
        super().__init__(
            "Cannot delete order that has invoices. Cancel the order instead."
        )
        self.order_id = order_id
        self.invoice_count = invoice_count


class OrderNumberConflictError(OrderConflictError):
    """Order number collided on every attempt."""

    retryable = True

    def __init__(self, attempts: int):
        super().__init__(
            f"Could not allocate a unique order number after {attempts} attempts"
        )
        self.attempts = attempts


class OrderPersistenceError(OrderError):
    """
    Database failure inside an order transaction.

    The transaction has been rolled back. The original exception is
    chained as __cause__ and exposed through `detail` for debug output.
    """

    status_code = 500

    def __init__(self, message: str, detail: str = ""):
        super().__init__(message)
        self.detail = detail
