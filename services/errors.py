"""
Excepciones de negocio de los servicios.
Cada una lleva el código HTTP con el que la traducen los endpoints.
"""


class ServiceError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class QuoteValidationError(ServiceError):
    """Borrador incompleto; missing_fields lista lo que falta"""
    status_code = 422

    def __init__(self, detail: str, missing_fields=None):
        super().__init__(detail)
        self.missing_fields = list(missing_fields or [])


class QuoteNotFoundError(ServiceError):
    status_code = 404


class QuoteStateError(ServiceError):
    status_code = 409


class QuotePersistenceError(ServiceError):
    status_code = 500


class ReservationConflictError(ServiceError):
    status_code = 409


class PaymentGatewayError(ServiceError):
    status_code = 503


class ReservationNotFoundError(ServiceError):
    status_code = 404


class PaymentNotFoundError(ServiceError):
    status_code = 404


class CustomerRequestNotFoundError(ServiceError):
    status_code = 404
