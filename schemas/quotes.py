from typing import Optional, List, Dict, Any
from decimal import Decimal
from datetime import date, datetime
from pydantic import BaseModel, Field, ConfigDict, condecimal, constr, model_validator

from models.quote import MAX_ROOMS_PER_QUOTE


# ========== BORRADOR (formulario de cotización) ==========

class RoomSelection(BaseModel):
    room_code: Optional[str] = None
    category: Optional[str] = None
    person_count: int = Field(0, ge=0)
    infant_count: int = Field(0, ge=0)
    extra_adult_count: int = Field(0, ge=0)
    extra_child_count: int = Field(0, ge=0)

    def is_complete(self) -> bool:
        return bool(self.room_code) and self.person_count > 0


class CarSelection(BaseModel):
    car_category_code: Optional[str] = None
    vehicle_code: Optional[str] = None
    passenger_type: Optional[str] = None
    car_count: int = Field(1, ge=1)

    def is_complete(self) -> bool:
        return bool(self.car_category_code) and bool(self.vehicle_code)


class QuoteDraft(BaseModel):
    """
    Estado del formulario de cotización de crucero.
    Los campos son opcionales para poder informar qué falta antes de habilitar el envío.
    """
    title: Optional[constr(strip_whitespace=True, max_length=200)] = None
    description: Optional[str] = None
    checkin: Optional[date] = None
    schedule_code: Optional[str] = None
    cruise_code: Optional[str] = None
    payment_code: Optional[str] = None
    discount_rate: condecimal(ge=0, le=100, max_digits=5, decimal_places=2) = Decimal("0")
    rooms: List[RoomSelection] = Field(default_factory=list, max_length=MAX_ROOMS_PER_QUOTE)
    cars: List[CarSelection] = Field(default_factory=list)

    def add_room(self, room: Optional[RoomSelection] = None) -> bool:
        """Agrega un camarote; no hace nada si ya hay MAX_ROOMS_PER_QUOTE"""
        if len(self.rooms) >= MAX_ROOMS_PER_QUOTE:
            return False
        self.rooms.append(room or RoomSelection())
        return True

    def remove_room(self, index: int) -> None:
        if 0 <= index < len(self.rooms):
            self.rooms.pop(index)

    def missing_fields(self) -> List[str]:
        faltantes = []
        if not self.checkin:
            faltantes.append("체크인 날짜")
        if not self.schedule_code:
            faltantes.append("일정")
        if not self.cruise_code:
            faltantes.append("크루즈")
        if not self.payment_code:
            faltantes.append("결제방식")
        if not any(room.is_complete() for room in self.rooms):
            faltantes.append("객실")
        for idx, car in enumerate(self.cars, start=1):
            if not car.is_complete():
                faltantes.append(f"차량 {idx}")
        return faltantes

    def can_submit(self) -> bool:
        return not self.missing_fields()


class DraftCheck(BaseModel):
    can_submit: bool
    missing_fields: List[str]


class QuoteUpdate(BaseModel):
    title: Optional[constr(strip_whitespace=True, max_length=200)] = None
    description: Optional[str] = None
    discount_rate: Optional[condecimal(ge=0, le=100, max_digits=5, decimal_places=2)] = None

    @model_validator(mode="before")
    @classmethod
    def validar_datos(cls, data):
        if isinstance(data, dict) and data:
            return data
        raise ValueError("수정할 항목이 없습니다.")


class QuoteReject(BaseModel):
    manager_note: Optional[str] = None


# ========== LECTURA ==========

class QuoteRoomRead(BaseModel):
    id: int
    room_code: str
    category: Optional[str] = None
    person_count: int
    infant_count: int
    extra_adult_count: int
    extra_child_count: int
    room_price_code: Optional[str] = None
    room_unit_price: condecimal(max_digits=14, decimal_places=2)
    room_total_price: condecimal(max_digits=14, decimal_places=2)

    model_config = ConfigDict(from_attributes=True)


class QuoteCarRead(BaseModel):
    id: int
    vehicle_code: str
    car_category_code: str
    passenger_type: Optional[str] = None
    car_count: int
    car_unit_price: condecimal(max_digits=14, decimal_places=2)
    car_total_price: condecimal(max_digits=14, decimal_places=2)

    model_config = ConfigDict(from_attributes=True)


class QuoteItemRead(BaseModel):
    id: int
    service_type: str
    service_ref_id: int
    quantity: int
    unit_price: condecimal(max_digits=14, decimal_places=2)
    total_price: condecimal(max_digits=14, decimal_places=2)
    options: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(from_attributes=True)


class QuotePriceSummaryRead(BaseModel):
    checkin: Optional[date] = None
    discount_rate: condecimal(max_digits=5, decimal_places=2)
    total_room_price: condecimal(max_digits=14, decimal_places=2)
    total_car_price: condecimal(max_digits=14, decimal_places=2)
    total_item_price: condecimal(max_digits=14, decimal_places=2)
    grand_total: condecimal(max_digits=14, decimal_places=2)
    final_total: condecimal(max_digits=14, decimal_places=2)
    priced_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class QuoteListItem(BaseModel):
    id: int
    title: Optional[str] = None
    status: str
    payment_status: str = "unpaid"
    checkin: Optional[date] = None
    total_price: condecimal(max_digits=14, decimal_places=2)
    total_label: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class QuoteRead(QuoteListItem):
    user_id: int
    description: Optional[str] = None
    schedule_code: Optional[str] = None
    cruise_code: Optional[str] = None
    payment_code: Optional[str] = None
    discount_rate: condecimal(max_digits=5, decimal_places=2)
    manager_note: Optional[str] = None
    submitted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    rooms: List[QuoteRoomRead] = Field(default_factory=list)
    cars: List[QuoteCarRead] = Field(default_factory=list)
    items: List[QuoteItemRead] = Field(default_factory=list)
    price_summary: Optional[QuotePriceSummaryRead] = None
