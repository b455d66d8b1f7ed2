"""
Schemas para agregar servicios itemizados a una cotización
El código de grilla se resuelve a partir de la selección (no se elige libremente).
"""
from typing import Optional, Literal
from datetime import date, datetime
from pydantic import BaseModel, Field, PositiveInt, constr, model_validator


class AirportItemCreate(BaseModel):
    service_type: Literal["airport"] = "airport"
    airport_category: constr(strip_whitespace=True, min_length=1)
    airport_route: constr(strip_whitespace=True, min_length=1)
    airport_car_type: constr(strip_whitespace=True, min_length=1)
    quantity: PositiveInt = 1
    passenger_count: PositiveInt = 1
    flight_number: Optional[str] = Field(None, max_length=30)
    pickup_datetime: Optional[datetime] = None
    special_requests: Optional[str] = None


class RentcarItemCreate(BaseModel):
    service_type: Literal["rentcar"] = "rentcar"
    rent_category: constr(strip_whitespace=True, min_length=1)
    rent_route: constr(strip_whitespace=True, min_length=1)
    rent_car_type: constr(strip_whitespace=True, min_length=1)
    quantity: PositiveInt = 1
    pickup_datetime: Optional[datetime] = None
    pickup_location: Optional[str] = Field(None, max_length=200)
    destination: Optional[str] = Field(None, max_length=200)
    special_requests: Optional[str] = None


class TourItemCreate(BaseModel):
    service_type: Literal["tour"] = "tour"
    tour_name: constr(strip_whitespace=True, min_length=1)
    tour_vehicle: constr(strip_whitespace=True, min_length=1)
    tour_type: constr(strip_whitespace=True, min_length=1)
    tour_capacity: PositiveInt
    quantity: PositiveInt = 1
    tour_date: Optional[date] = None
    participant_count: PositiveInt = 1
    pickup_location: Optional[str] = Field(None, max_length=200)
    special_requests: Optional[str] = None


class HotelItemCreate(BaseModel):
    service_type: Literal["hotel"] = "hotel"
    hotel_name: constr(strip_whitespace=True, min_length=1)
    room_name: constr(strip_whitespace=True, min_length=1)
    room_type: constr(strip_whitespace=True, min_length=1)
    checkin_date: date
    checkout_date: date
    room_count: PositiveInt = 1
    guest_count: PositiveInt = 1
    special_requests: Optional[str] = None

    @model_validator(mode="after")
    def validar_fechas(self):
        if self.checkout_date <= self.checkin_date:
            raise ValueError("체크아웃 날짜는 체크인 이후여야 합니다.")
        return self

    @property
    def quantity(self) -> int:
        """Noches x habitaciones"""
        return (self.checkout_date - self.checkin_date).days * self.room_count
