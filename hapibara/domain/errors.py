# hapibara/domain/errors.py
"""
Wyjatki domenowe. Serwisy je rzucaja, api/errors.py zamienia je na
odpowiedz {"success": false, "error": ...} z odpowiednim statusem HTTP.
"""


class HapiBaraError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(HapiBaraError):
    status_code = 400
    default_message = "Invalid request"


class AuthenticationRequired(HapiBaraError):
    status_code = 401
    default_message = "Authentication required"


class NotFoundError(HapiBaraError):
    status_code = 404
    default_message = "Not found"


class ConflictError(HapiBaraError):
    status_code = 409
    default_message = "Conflicting update, please retry"


class InsufficientInventory(HapiBaraError):
    status_code = 400

    def __init__(self, product_name: str, message: str | None = None):
        self.product_name = product_name
        super().__init__(message or f"Insufficient inventory for {product_name}")


class EmptyCart(HapiBaraError):
    status_code = 400
    default_message = "Cart is empty"


class MissingShippingAddress(HapiBaraError):
    status_code = 400
    default_message = "Shipping address is required"


class PersistenceFailure(HapiBaraError):
    """Storage fault. Raised only after the surrounding transaction was rolled back."""

    status_code = 500
    default_message = "Could not save your changes, please try again"
