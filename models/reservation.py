"""
Modelos de Reserva y Pago de reserva
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    Column, Integer, String, ForeignKey, DateTime, Numeric, Text, JSON, Index
)
from sqlalchemy.orm import relationship

from database.conexion import Base


class EstadoReservaEnum(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class EstadoPagoEnum(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


# ----------- RESERVATION -----------
class Reservation(Base):
    __tablename__ = "reservation"
    __table_args__ = (
        Index("idx_reservation_user", "user_id"),
        Index("idx_reservation_status", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    # Una reserva por cotización
    quote_id = Column(Integer, ForeignKey("quote.id"), nullable=False, unique=True)
    type = Column(String(20), nullable=False, default="cruise")
    status = Column(String(20), nullable=False, default=EstadoReservaEnum.PENDING.value)
    total_amount = Column(Numeric(14, 2), nullable=False, default=0)

    # Contacto / solicitante
    contact_name = Column(String(60), nullable=True)
    contact_phone = Column(String(30), nullable=True)
    contact_email = Column(String(120), nullable=True)
    emergency_contact = Column(String(60), nullable=True)
    applicant_name = Column(String(60), nullable=True)
    applicant_email = Column(String(120), nullable=True)
    applicant_phone = Column(String(30), nullable=True)
    special_requests = Column(Text, nullable=True)

    applied_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="reservations")
    quote = relationship("Quote", back_populates="reservation")
    payments = relationship("ReservationPayment", back_populates="reservation",
                            cascade="all, delete-orphan", order_by="ReservationPayment.id")

    def _suma_pagos(self, *estados: str) -> Decimal:
        return sum(
            (Decimal(str(p.amount or 0)) for p in self.payments if p.payment_status in estados),
            Decimal("0"),
        )

    @property
    def total_pagado(self) -> Decimal:
        return self._suma_pagos(EstadoPagoEnum.COMPLETED.value)

    @property
    def saldo(self) -> Decimal:
        """Lo que falta cobrar; los pagos pending ya comprometen su monto"""
        comprometido = self._suma_pagos(EstadoPagoEnum.COMPLETED.value, EstadoPagoEnum.PENDING.value)
        return Decimal(str(self.total_amount or 0)) - comprometido

    @property
    def pagada(self) -> bool:
        total = Decimal(str(self.total_amount or 0))
        return total > 0 and self.total_pagado >= total

    def __repr__(self):
        return f"<Reservation(id={self.id}, quote_id={self.quote_id}, status='{self.status}')>"


# ----------- RESERVATION PAYMENT -----------
class ReservationPayment(Base):
    """Solo el callback de la pasarela cambia payment_status"""
    __tablename__ = "reservation_payment"
    __table_args__ = (
        Index("idx_resv_payment_reservation", "reservation_id"),
        Index("idx_resv_payment_status", "payment_status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    reservation_id = Column(Integer, ForeignKey("reservation.id", ondelete="CASCADE"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    payment_status = Column(String(20), nullable=False, default=EstadoPagoEnum.PENDING.value)
    payment_method = Column(String(30), nullable=True)
    gateway = Column(String(30), nullable=True)
    transaction_id = Column(String(100), nullable=True)
    raw_response = Column(JSON, nullable=True)
    memo = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    reservation = relationship("Reservation", back_populates="payments")
