"""
Modelos del agregado Cotización (quote)
Incluye: Quote, QuoteRoom, QuoteCar, QuoteItem, QuotePriceSummary
Los hijos no tienen ciclo de vida propio: se borran con la cotización.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Column, Integer, String, ForeignKey, Date, DateTime, Numeric, Text, JSON,
    Index, CheckConstraint
)
from sqlalchemy.orm import relationship

from database.conexion import Base


# ========================================================================
# ENUMS
# ========================================================================

class EstadoQuoteEnum(str, Enum):
    """Estados de la cotización"""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CONFIRMED = "confirmed"
    RESERVED = "reserved"


class TipoServicioEnum(str, Enum):
    """Servicios que se cotizan como línea genérica (quote_item)"""
    AIRPORT = "airport"
    RENTCAR = "rentcar"
    TOUR = "tour"
    HOTEL = "hotel"


# approved y confirmed se tratan como estados distintos
ESTADOS_RESERVABLES = (
    EstadoQuoteEnum.APPROVED.value,
    EstadoQuoteEnum.CONFIRMED.value,
    EstadoQuoteEnum.COMPLETED.value,
)

MAX_ROOMS_PER_QUOTE = 3

ETIQUETA_PRECIO_PENDIENTE = "견적 대기"


class EstadoPagoQuoteEnum(str, Enum):
    """Estado de cobro de la cotización, sincronizado desde los pagos de su reserva"""
    UNPAID = "unpaid"
    PAID = "paid"


# ----------- QUOTE -----------
class Quote(Base):
    __tablename__ = "quote"
    __table_args__ = (
        Index("idx_quote_user", "user_id"),
        Index("idx_quote_status", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(String(20), nullable=False, default=EstadoQuoteEnum.DRAFT.value)
    title = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)

    # Selección de crucero
    checkin = Column(Date, nullable=True)
    schedule_code = Column(String(30), nullable=True)
    cruise_code = Column(String(30), nullable=True)
    payment_code = Column(String(30), nullable=True)

    # Financiero
    discount_rate = Column(Numeric(5, 2), nullable=False, default=0)  # porcentaje
    total_price = Column(Numeric(14, 2), nullable=False, default=0)
    payment_status = Column(String(20), nullable=False, default=EstadoPagoQuoteEnum.UNPAID.value)

    manager_note = Column(Text, nullable=True)

    # Auditoría
    submitted_at = Column(DateTime, nullable=True)
    approved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="quotes")
    rooms = relationship("QuoteRoom", back_populates="quote", cascade="all, delete-orphan",
                         order_by="QuoteRoom.id")
    cars = relationship("QuoteCar", back_populates="quote", cascade="all, delete-orphan",
                        order_by="QuoteCar.id")
    items = relationship("QuoteItem", back_populates="quote", cascade="all, delete-orphan",
                         order_by="QuoteItem.id")
    price_summary = relationship("QuotePriceSummary", back_populates="quote", uselist=False,
                                 cascade="all, delete-orphan")
    reservation = relationship("Reservation", back_populates="quote", uselist=False)

    @property
    def ya_cotizada(self) -> bool:
        return self.price_summary is not None and self.price_summary.priced_at is not None

    @property
    def precio_pendiente(self) -> bool:
        return not self.total_price or float(self.total_price) <= 0

    @property
    def total_label(self) -> str:
        """Texto que ve el cliente en el listado"""
        if self.precio_pendiente:
            return ETIQUETA_PRECIO_PENDIENTE
        return f"{int(self.total_price):,}동"

    def is_editable(self) -> bool:
        return self.status == EstadoQuoteEnum.DRAFT.value

    def is_reservable(self) -> bool:
        return self.status in ESTADOS_RESERVABLES

    def __repr__(self):
        return f"<Quote(id={self.id}, user_id={self.user_id}, status='{self.status}')>"


# ----------- QUOTE ROOM -----------
class QuoteRoom(Base):
    __tablename__ = "quote_room"
    __table_args__ = (
        Index("idx_quote_room_quote", "quote_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    quote_id = Column(Integer, ForeignKey("quote.id", ondelete="CASCADE"), nullable=False)
    room_code = Column(String(30), nullable=False)
    category = Column(String(30), nullable=True)

    person_count = Column(Integer, nullable=False, default=0)
    infant_count = Column(Integer, nullable=False, default=0)
    extra_adult_count = Column(Integer, nullable=False, default=0)
    extra_child_count = Column(Integer, nullable=False, default=0)

    # Pricing (se completa en el paso de precios)
    room_price_code = Column(String(30), nullable=True)
    room_unit_price = Column(Numeric(14, 2), nullable=False, default=0)
    room_total_price = Column(Numeric(14, 2), nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)

    quote = relationship("Quote", back_populates="rooms")

    @property
    def huespedes_pagos(self) -> int:
        """Personas que pagan tarifa (los infantes no)"""
        return (self.person_count or 0) + (self.extra_adult_count or 0) + (self.extra_child_count or 0)


# ----------- QUOTE CAR -----------
class QuoteCar(Base):
    __tablename__ = "quote_car"
    __table_args__ = (
        Index("idx_quote_car_quote", "quote_id"),
        CheckConstraint("car_count >= 1", name="ck_quote_car_count"),
    )

    id = Column(Integer, primary_key=True, index=True)
    quote_id = Column(Integer, ForeignKey("quote.id", ondelete="CASCADE"), nullable=False)
    vehicle_code = Column(String(30), nullable=False)
    car_category_code = Column(String(30), nullable=False)
    passenger_type = Column(String(30), nullable=True)
    car_count = Column(Integer, nullable=False, default=1)

    car_unit_price = Column(Numeric(14, 2), nullable=False, default=0)
    car_total_price = Column(Numeric(14, 2), nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)

    quote = relationship("Quote", back_populates="cars")


# ----------- QUOTE ITEM -----------
class QuoteItem(Base):
    """Línea genérica que apunta a una fila de servicio (airport, rentcar, tour, hotel)"""
    __tablename__ = "quote_item"
    __table_args__ = (
        Index("idx_quote_item_quote", "quote_id"),
        Index("idx_quote_item_servicio", "service_type", "service_ref_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    quote_id = Column(Integer, ForeignKey("quote.id", ondelete="CASCADE"), nullable=False)
    service_type = Column(String(20), nullable=False)
    service_ref_id = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(14, 2), nullable=False, default=0)
    total_price = Column(Numeric(14, 2), nullable=False, default=0)
    options = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    quote = relationship("Quote", back_populates="items")

    def __repr__(self):
        return f"<QuoteItem(quote_id={self.quote_id}, service='{self.service_type}', ref={self.service_ref_id})>"


# ----------- QUOTE PRICE SUMMARY -----------
class QuotePriceSummary(Base):
    """Resumen derivado: nunca es fuente de verdad, se recalcula desde las líneas"""
    __tablename__ = "quote_price_summary"

    id = Column(Integer, primary_key=True, index=True)
    quote_id = Column(Integer, ForeignKey("quote.id", ondelete="CASCADE"), nullable=False, unique=True)
    checkin = Column(Date, nullable=True)
    discount_rate = Column(Numeric(5, 2), nullable=False, default=0)

    total_room_price = Column(Numeric(14, 2), nullable=False, default=0)
    total_car_price = Column(Numeric(14, 2), nullable=False, default=0)
    total_item_price = Column(Numeric(14, 2), nullable=False, default=0)
    grand_total = Column(Numeric(14, 2), nullable=False, default=0)
    final_total = Column(Numeric(14, 2), nullable=False, default=0)

    priced_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    quote = relationship("Quote", back_populates="price_summary")
