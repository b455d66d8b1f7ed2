from typing import Optional
from pydantic import BaseModel, Field, PositiveInt, condecimal


class PaymentCreate(BaseModel):
    """Solicitud de pago para una reserva; sin monto se cobra el saldo pendiente"""
    amount: Optional[condecimal(gt=0, max_digits=14, decimal_places=2)] = None
    payment_method: str = Field("card", max_length=30)
    memo: Optional[str] = None


class PaymentLinkRequest(BaseModel):
    payment_id: PositiveInt = Field(..., alias="paymentId")

    model_config = {"populate_by_name": True}


class PaymentLinkResponse(BaseModel):
    url: str


class ReceiptRead(BaseModel):
    status: str
    code: Optional[str] = None
    error: Optional[str] = None
    success: bool
    message: str
