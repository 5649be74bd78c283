"""
Error taxonomy shared by the services and the HTTP layer.

Every error carries the HTTP status it maps to, so the app can register a
single handler for the whole family.
"""


class TradeHubError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# Validation errors: rejected before any mutation
class ValidationError(TradeHubError):
    status_code = 400


class InvalidPriceError(ValidationError):
    pass


# Lookup failures
class NotFoundError(TradeHubError):
    status_code = 404


class ProductNotFoundError(NotFoundError):
    pass


class OrderNotFoundError(NotFoundError):
    pass


class PartnerNotFoundError(NotFoundError):
    pass


# Integrity violations
class IntegrityViolation(TradeHubError):
    status_code = 409


class AlreadyPaidOutError(IntegrityViolation):
    def __init__(self, order_id: str):
        super().__init__("Order has already been paid out to the partner")
        self.order_id = order_id


class PayoutNotEligibleError(IntegrityViolation):
    pass


# Transient / upstream failures
class EmailDeliveryError(TradeHubError):
    status_code = 500
