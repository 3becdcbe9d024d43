"""Domain errors raised by the payment link store and mapped to HTTP responses in main."""


class PaymentLinkError(Exception):
    """Base class; carries the HTTP status the API answers with."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class PaymentLinkValidationError(PaymentLinkError, ValueError):
    """Bad create request or a payment amount the link does not allow."""

    status_code = 400


class PaymentLinkNotFound(PaymentLinkError):
    status_code = 404

    def __init__(self, message: str = "Payment link not found") -> None:
        super().__init__(message)


class PaymentLinkForbidden(PaymentLinkError):
    status_code = 403

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class PaymentLinkInactive(PaymentLinkError):
    status_code = 410

    def __init__(self, message: str = "Payment link is no longer active") -> None:
        super().__init__(message)
