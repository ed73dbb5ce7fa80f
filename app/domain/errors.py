# app/domain/errors.py


class StoreError(Exception):
    """Base for errors that map straight to an HTTP response."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StoreError):
    status_code = 400
    default_message = "Invalid request"


class NotFound(StoreError):
    status_code = 404
    default_message = "Not found"


class OutOfStock(StoreError):
    status_code = 400
    default_message = "Insufficient stock"


class EmptyCart(StoreError):
    status_code = 400
    default_message = "Cart is empty. Cannot create order."


class InvalidStatus(StoreError):
    status_code = 400
    default_message = "Invalid status"


class Unauthorized(StoreError):
    status_code = 401
    default_message = "Authorization header missing"


class Forbidden(StoreError):
    status_code = 403
    default_message = "Forbidden: insufficient role"


class Conflict(StoreError):
    status_code = 409
    default_message = "Concurrent modification, please retry"


class DatastoreUnavailable(StoreError):
    status_code = 503
    default_message = "Database connection not available"


class StockConflict(Exception):
    """A product row changed between read and compare-and-set write."""

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Stock of product {product_id} changed concurrently")
