"""
Datos de referencia (solo lectura para la aplicación)
- Tablas *_info: resolución de código -> nombre visible
- Grillas de precios: filas por combinación de códigos con ventana de vigencia
"""
from sqlalchemy import Column, Integer, String, Date, Numeric, Index

from database.conexion import Base


# ========================================================================
# TABLAS DE NOMBRES (code, name)
# ========================================================================

class _InfoMixin:
    code = Column(String(30), primary_key=True)
    name = Column(String(100), nullable=False)

    def __repr__(self):
        return f"<{type(self).__name__}(code='{self.code}', name='{self.name}')>"


class ScheduleInfo(_InfoMixin, Base):
    __tablename__ = "schedule_info"


class CruiseInfo(_InfoMixin, Base):
    __tablename__ = "cruise_info"


class PaymentInfo(_InfoMixin, Base):
    __tablename__ = "payment_info"


class RoomInfo(_InfoMixin, Base):
    __tablename__ = "room_info"


class CarInfo(_InfoMixin, Base):
    __tablename__ = "car_info"


class CategoryInfo(_InfoMixin, Base):
    __tablename__ = "category_info"


# ========================================================================
# GRILLAS DE PRECIOS
# ========================================================================

class RoomPrice(Base):
    """Precio de camarote por crucero/itinerario/forma de pago"""
    __tablename__ = "room_price"
    __table_args__ = (
        Index("idx_room_price_cascade", "schedule_code", "cruise_code", "payment_code"),
        Index("idx_room_price_vigencia", "start_date", "end_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    room_code = Column(String(30), nullable=False)
    schedule_code = Column(String(30), nullable=False)
    cruise_code = Column(String(30), nullable=False)
    payment_code = Column(String(30), nullable=False)
    room_category = Column(String(30), nullable=True)
    price = Column(Numeric(14, 2), nullable=False, default=0)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)


class CarPrice(Base):
    """Precio de vehículo de traslado para un crucero (vigencia opcional)"""
    __tablename__ = "car_price"
    __table_args__ = (
        Index("idx_car_price_cascade", "schedule_code", "cruise_code", "category_code"),
    )

    id = Column(Integer, primary_key=True, index=True)
    car_code = Column(String(30), nullable=False)
    schedule_code = Column(String(30), nullable=False)
    cruise_code = Column(String(30), nullable=False)
    category_code = Column(String(30), nullable=False)
    passenger_type = Column(String(30), nullable=True)
    price = Column(Numeric(14, 2), nullable=False, default=0)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)


class AirportPrice(Base):
    __tablename__ = "airport_price"
    __table_args__ = (
        Index("idx_airport_price_lookup", "airport_category", "airport_route", "airport_car_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    airport_code = Column(String(30), nullable=False, unique=True)
    airport_category = Column(String(30), nullable=False)  # 픽업, 샌딩
    airport_route = Column(String(100), nullable=False)
    airport_car_type = Column(String(50), nullable=False)
    price = Column(Numeric(14, 2), nullable=False, default=0)


class RentPrice(Base):
    __tablename__ = "rent_price"
    __table_args__ = (
        Index("idx_rent_price_lookup", "rent_category", "rent_route", "rent_car_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    rent_code = Column(String(30), nullable=False, unique=True)
    rent_category = Column(String(30), nullable=False)
    rent_route = Column(String(100), nullable=False)
    rent_car_type = Column(String(50), nullable=False)
    price = Column(Numeric(14, 2), nullable=False, default=0)


class TourPrice(Base):
    __tablename__ = "tour_price"
    __table_args__ = (
        Index("idx_tour_price_lookup", "tour_name", "tour_vehicle", "tour_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    tour_code = Column(String(30), nullable=False, unique=True)
    tour_name = Column(String(100), nullable=False)
    tour_vehicle = Column(String(50), nullable=False)
    tour_type = Column(String(30), nullable=False)
    tour_capacity = Column(Integer, nullable=False)
    price = Column(Numeric(14, 2), nullable=False, default=0)


class HotelPrice(Base):
    __tablename__ = "hotel_price"
    __table_args__ = (
        Index("idx_hotel_price_lookup", "hotel_name", "room_name", "room_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    hotel_code = Column(String(30), nullable=False)
    hotel_name = Column(String(100), nullable=False)
    room_name = Column(String(100), nullable=False)
    room_type = Column(String(50), nullable=False)
    price = Column(Numeric(14, 2), nullable=False, default=0)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
