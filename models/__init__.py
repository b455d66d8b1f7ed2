"""
Archivo de inicialización del paquete models.
Expone todas las clases para que SQLAlchemy (Base.metadata) las detecte
al importar 'models'.
"""

# 1. Usuarios
from .usuario import User, RolUsuario

# 2. Datos de referencia (nombres + grillas de precios)
from .referencia import (
    ScheduleInfo,
    CruiseInfo,
    PaymentInfo,
    RoomInfo,
    CarInfo,
    CategoryInfo,
    RoomPrice,
    CarPrice,
    AirportPrice,
    RentPrice,
    TourPrice,
    HotelPrice,
)

# 3. Filas de servicio
from .servicios import AirportService, RentcarService, TourService, HotelService

# 4. Cotización
from .quote import Quote, QuoteRoom, QuoteCar, QuoteItem, QuotePriceSummary

# 5. Reserva y pagos
from .reservation import Reservation, ReservationPayment

# 6. Solicitudes del cliente
from .customer_request import CustomerRequest

__all__ = [
    "User", "RolUsuario",
    "ScheduleInfo", "CruiseInfo", "PaymentInfo", "RoomInfo", "CarInfo", "CategoryInfo",
    "RoomPrice", "CarPrice", "AirportPrice", "RentPrice", "TourPrice", "HotelPrice",
    "AirportService", "RentcarService", "TourService", "HotelService",
    "Quote", "QuoteRoom", "QuoteCar", "QuoteItem", "QuotePriceSummary",
    "Reservation", "ReservationPayment",
    "CustomerRequest",
]
