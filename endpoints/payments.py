"""
Endpoints de la pasarela OnePay y del recibo de pago
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from database import conexion
from models.reservation import ReservationPayment
from models.usuario import User
from schemas.payments import PaymentLinkRequest, PaymentLinkResponse, ReceiptRead
from schemas.reservations import ReservationPaymentRead
from services import payment_gateway
from services.errors import ServiceError
from utils.dependencies import get_current_user, service_http_error
from utils.logging_utils import log_event
from utils.rate_limiter import limiter, PAYMENT_LIMIT


router = APIRouter(tags=["Pagos"])


def _pago_del_usuario(db: Session, payment_id: int, user: User) -> ReservationPayment:
    pago = db.query(ReservationPayment).filter(ReservationPayment.id == payment_id).first()
    if not pago or (pago.reservation.user_id != user.id and not user.es_staff):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="결제를 찾을 수 없습니다."
        )
    return pago


@router.post("/api/payments/onepay/create", response_model=PaymentLinkResponse)
@limiter.limit(PAYMENT_LIMIT)
def crear_link_onepay(
    request: Request,
    datos: PaymentLinkRequest,
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    """URL firmada de OnePay para un pago pending; el cliente redirige el navegador a ella"""
    pago = _pago_del_usuario(db, datos.payment_id, current_user)
    if pago.payment_status != "pending":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="이미 처리된 결제입니다."
        )

    client_ip = request.client.host if request.client else "127.0.0.1"
    try:
        url = payment_gateway.build_payment_url(pago, client_ip=client_ip)
    except ServiceError as e:
        raise service_http_error(e)

    log_event("pagos", current_user.email, "Link de pago generado", f"payment_id={pago.id}")
    return {"url": url}


@router.get("/api/payments/onepay/return")
def retorno_onepay(request: Request, db: Session = Depends(conexion.get_db)):
    """Callback de OnePay: actualiza el pago y redirige al recibo"""
    try:
        _, destino = payment_gateway.PaymentService.process_return(db, dict(request.query_params))
    except ServiceError as e:
        raise service_http_error(e)
    return RedirectResponse(url=destino, status_code=status.HTTP_302_FOUND)


@router.get("/payments/{payment_id}", response_model=ReservationPaymentRead)
def obtener_pago(
    payment_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    return _pago_del_usuario(db, payment_id, current_user)


@router.get("/payments/{payment_id}/receipt", response_model=ReceiptRead)
def recibo_pago(
    payment_id: int = Path(..., gt=0),
    estado: Optional[str] = Query(None, alias="status"),
    code: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    """Mensaje del recibo a partir de los parámetros con los que volvió la pasarela"""
    pago = _pago_del_usuario(db, payment_id, current_user)
    if not estado:
        estado = "success" if pago.payment_status == "completed" else "failed"
    return payment_gateway.describe_receipt(estado, code, error)
