"""
Servicios de negocio: opciones en cascada, cotizaciones, precios, reservas y pagos
"""

from .quote_builder import QuoteBuilderService, get_quote_for_user
from .pricing import PricingService
from .reservation_converter import ReservationService
from .payment_gateway import PaymentService

__all__ = [
    "QuoteBuilderService",
    "get_quote_for_user",
    "PricingService",
    "ReservationService",
    "PaymentService",
]
