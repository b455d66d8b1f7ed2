"""
Filas de servicio referenciadas por quote_item.service_ref_id
Cada tipo guarda su código de grilla y los datos propios del pedido.
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, Text
from datetime import datetime

from database.conexion import Base


class AirportService(Base):
    __tablename__ = "airport"

    id = Column(Integer, primary_key=True, index=True)
    airport_code = Column(String(30), nullable=False)
    passenger_count = Column(Integer, nullable=False, default=1)
    flight_number = Column(String(30), nullable=True)
    pickup_datetime = Column(DateTime, nullable=True)
    special_requests = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class RentcarService(Base):
    __tablename__ = "rentcar"

    id = Column(Integer, primary_key=True, index=True)
    rentcar_code = Column(String(30), nullable=False)
    rentcar_count = Column(Integer, nullable=False, default=1)
    pickup_datetime = Column(DateTime, nullable=True)
    pickup_location = Column(String(200), nullable=True)
    destination = Column(String(200), nullable=True)
    special_requests = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class TourService(Base):
    __tablename__ = "tour"

    id = Column(Integer, primary_key=True, index=True)
    tour_code = Column(String(30), nullable=False)
    tour_date = Column(Date, nullable=True)
    participant_count = Column(Integer, nullable=False, default=1)
    pickup_location = Column(String(200), nullable=True)
    special_requests = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class HotelService(Base):
    __tablename__ = "hotel"

    id = Column(Integer, primary_key=True, index=True)
    hotel_code = Column(String(30), nullable=False)
    checkin_date = Column(Date, nullable=True)
    checkout_date = Column(Date, nullable=True)
    room_count = Column(Integer, nullable=False, default=1)
    guest_count = Column(Integer, nullable=False, default=1)
    special_requests = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


# service_type -> (modelo, columna del código)
SERVICE_TABLES = {
    "airport": (AirportService, "airport_code"),
    "rentcar": (RentcarService, "rentcar_code"),
    "tour": (TourService, "tour_code"),
    "hotel": (HotelService, "hotel_code"),
}
