from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, PositiveInt, constr

from models.customer_request import TipoSolicitudEnum, UrgenciaEnum, EstadoSolicitudEnum


class CustomerRequestCreate(BaseModel):
    request_type: TipoSolicitudEnum = TipoSolicitudEnum.OTHER
    title: constr(strip_whitespace=True, min_length=1, max_length=200)
    description: constr(strip_whitespace=True, min_length=1)
    urgency_level: UrgenciaEnum = UrgenciaEnum.NORMAL
    related_quote_id: Optional[PositiveInt] = None
    related_reservation_id: Optional[PositiveInt] = None


class CustomerRequestUpdate(BaseModel):
    """Respuesta del staff"""
    status: EstadoSolicitudEnum
    response_message: Optional[str] = None


class CustomerRequestRead(BaseModel):
    id: int
    user_id: int
    request_type: str
    request_category: str
    title: str
    description: str
    urgency_level: str
    status: str
    related_quote_id: Optional[int] = None
    related_reservation_id: Optional[int] = None
    response_message: Optional[str] = None
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
