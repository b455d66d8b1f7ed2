from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, ConfigDict, condecimal

from schemas.auth import ProfileUpdate


class ReservationRequest(BaseModel):
    """Formulario de reserva a partir de una cotización confirmada"""
    profile: ProfileUpdate = Field(default_factory=ProfileUpdate)
    contact_name: Optional[str] = Field(None, max_length=60)
    contact_phone: Optional[str] = Field(None, max_length=30)
    contact_email: Optional[EmailStr] = None
    emergency_contact: Optional[str] = Field(None, max_length=60)
    applicant_name: Optional[str] = Field(None, max_length=60)
    applicant_email: Optional[EmailStr] = None
    applicant_phone: Optional[str] = Field(None, max_length=30)
    special_requests: Optional[str] = None
    type: str = Field("cruise", max_length=20)


class ReservationPaymentRead(BaseModel):
    id: int
    reservation_id: int
    amount: condecimal(max_digits=14, decimal_places=2)
    payment_status: str
    payment_method: Optional[str] = None
    gateway: Optional[str] = None
    transaction_id: Optional[str] = None
    memo: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ReservationRead(BaseModel):
    id: int
    user_id: int
    quote_id: int
    type: str
    status: str
    total_amount: condecimal(max_digits=14, decimal_places=2)
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    emergency_contact: Optional[str] = None
    applicant_name: Optional[str] = None
    applicant_email: Optional[str] = None
    applicant_phone: Optional[str] = None
    special_requests: Optional[str] = None
    applied_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    payments: List[ReservationPaymentRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
