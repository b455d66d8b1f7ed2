"""
Pagos de reservas vía OnePay (redirección)

Flujo:
  1. POST /reservations/{id}/payments        -> pago pending
  2. POST /api/payments/onepay/create        -> URL firmada de OnePay
  3. GET  /api/payments/onepay/return        -> verifica firma, actualiza el pago
                                                y redirige al recibo
La firma es HMAC-SHA256 (clave hex) sobre los parámetros vpc_* ordenados.
"""

import hashlib
import hmac
from decimal import Decimal
from typing import Dict, Mapping, Optional, Tuple
from urllib.parse import urlencode

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import config
from models.quote import EstadoPagoQuoteEnum
from models.reservation import Reservation, ReservationPayment, EstadoPagoEnum, EstadoReservaEnum
from models.usuario import User
from services.errors import (
    PaymentGatewayError, PaymentNotFoundError, QuoteStateError, QuotePersistenceError
)
from utils.logging_utils import log_event, log_warning, log_error
from utils.timezone import gateway_timestamp


HASH_PARAM = "vpc_SecureHash"
HASH_TYPE_PARAM = "vpc_SecureHashType"
RESPONSE_CODE_PARAM = "vpc_TxnResponseCode"
CODIGO_APROBADO = "0"

MENSAJE_EXITO = "결제가 성공적으로 완료되었습니다."
MENSAJE_FALLO = "결제가 완료되지 않았습니다."
MENSAJE_HASH = "응답 검증에 실패했습니다. 고객센터로 문의해주세요."


# ========================================================================
# FIRMA
# ========================================================================

def _hash_data(params: Mapping[str, str]) -> str:
    campos = sorted(
        (k, v) for k, v in params.items()
        if k.startswith(("vpc_", "user_")) and k not in (HASH_PARAM, HASH_TYPE_PARAM)
        and v not in (None, "")
    )
    return "&".join(f"{k}={v}" for k, v in campos)


def sign(params: Mapping[str, str], hash_key: Optional[str] = None) -> str:
    key = hash_key if hash_key is not None else config.ONEPAY_HASH_KEY
    try:
        key_bytes = bytes.fromhex(key)
    except ValueError as e:
        raise PaymentGatewayError("결제 설정이 올바르지 않습니다.") from e
    digest = hmac.new(key_bytes, _hash_data(params).encode("utf-8"), hashlib.sha256)
    return digest.hexdigest().upper()


def verify(params: Mapping[str, str], hash_key: Optional[str] = None) -> bool:
    recibido = params.get(HASH_PARAM)
    if not recibido:
        return False
    try:
        esperado = sign(params, hash_key)
    except PaymentGatewayError:
        return False
    return hmac.compare_digest(esperado, recibido.upper())


def merchant_ref(payment_id: int) -> str:
    return f"{payment_id}_{gateway_timestamp()}"


def payment_id_from_ref(ref: Optional[str]) -> Optional[int]:
    if not ref:
        return None
    try:
        return int(ref.split("_", 1)[0])
    except ValueError:
        return None


# ========================================================================
# URL DE PAGO Y RETORNO
# ========================================================================

def build_payment_url(payment: ReservationPayment, client_ip: str = "127.0.0.1") -> str:
    if not config.is_payment_configured():
        raise PaymentGatewayError("결제 시스템이 설정되지 않았습니다.")

    # OnePay recibe el monto x100 sin decimales
    monto = int(Decimal(str(payment.amount or 0)) * 100)
    params = {
        "vpc_Version": config.ONEPAY_VERSION,
        "vpc_Command": config.ONEPAY_COMMAND,
        "vpc_Currency": config.PAYMENT_CURRENCY,
        "vpc_AccessCode": config.ONEPAY_ACCESS_CODE,
        "vpc_Merchant": config.ONEPAY_MERCHANT_ID,
        "vpc_Locale": config.ONEPAY_LOCALE,
        "vpc_ReturnURL": config.ONEPAY_RETURN_URL,
        "vpc_MerchTxnRef": merchant_ref(payment.id),
        "vpc_OrderInfo": f"reservation-{payment.reservation_id}",
        "vpc_Amount": str(monto),
        "vpc_TicketNo": client_ip,
    }
    params[HASH_PARAM] = sign(params)
    return f"{config.ONEPAY_PAYMENT_URL}?{urlencode(params)}"


def receipt_url(payment_id: int, success: bool, code: Optional[str], hash_error: bool = False) -> str:
    query = {"status": "success" if success else "failed"}
    if code not in (None, ""):
        query["code"] = code
    if hash_error:
        query["error"] = "hash"
    return f"{config.APP_BASE_URL}/mypage/payments/individual/{payment_id}/receipt?{urlencode(query)}"


def describe_receipt(status: Optional[str], code: Optional[str] = None,
                     error: Optional[str] = None) -> Dict[str, object]:
    """Mensaje del recibo a partir de los parámetros de retorno"""
    if error == "hash":
        return {"status": status or "failed", "code": code, "error": error,
                "success": False, "message": MENSAJE_HASH}
    if status == "success":
        return {"status": status, "code": code, "error": None,
                "success": True, "message": MENSAJE_EXITO}

    motivo = ""
    if code:
        motivo = config.ONEPAY_RESPONSE_MESSAGES.get(code, f"코드 {code}")
    mensaje = f"{MENSAJE_FALLO} {motivo}".strip()
    return {"status": status or "failed", "code": code, "error": error,
            "success": False, "message": mensaje}


def sync_paid_status(reservation: Reservation) -> bool:
    """
    Cuando los pagos completados cubren el total, la reserva pasa a confirmed
    y su cotización queda paid. No hace commit.
    """
    if not reservation.pagada:
        return False
    if reservation.status == EstadoReservaEnum.PENDING.value:
        reservation.status = EstadoReservaEnum.CONFIRMED.value
    if reservation.quote is not None:
        reservation.quote.payment_status = EstadoPagoQuoteEnum.PAID.value
    return True


class PaymentService:

    @staticmethod
    def create_payment(db: Session, user: User, reservation: Reservation,
                       amount=None, payment_method: str = "card",
                       memo: Optional[str] = None) -> ReservationPayment:
        """Pago pending; sin monto se cobra el saldo de la reserva"""
        if reservation.status == EstadoReservaEnum.CANCELLED.value:
            raise QuoteStateError("취소된 예약은 결제할 수 없습니다.")

        saldo = reservation.saldo
        if saldo <= 0:
            raise QuoteStateError("결제할 금액이 없습니다.")
        monto = Decimal(str(amount)) if amount is not None else saldo
        if monto <= 0:
            raise QuoteStateError("결제할 금액이 없습니다.")
        if monto > saldo:
            raise QuoteStateError(f"결제 금액이 남은 금액({int(saldo):,}동)을 초과합니다.")

        try:
            payment = ReservationPayment(
                reservation_id=reservation.id,
                amount=monto,
                payment_status=EstadoPagoEnum.PENDING.value,
                payment_method=payment_method,
                gateway=config.PAYMENT_GATEWAY_NAME,
                memo=memo,
            )
            db.add(payment)
            db.commit()
            db.refresh(payment)
        except SQLAlchemyError as e:
            db.rollback()
            log_error("pagos", user.email, "Error creando pago",
                      f"reservation_id={reservation.id}, error={e}")
            raise QuotePersistenceError("결제 정보 저장 중 오류가 발생했습니다.") from e

        log_event("pagos", user.email, "Pago creado",
                  f"payment_id={payment.id}, reservation_id={reservation.id}, monto={monto}")
        return payment

    @staticmethod
    def process_return(db: Session, params: Mapping[str, str]) -> Tuple[int, str]:
        """
        Procesa el retorno de OnePay y devuelve (payment_id, url_del_recibo).
        Con firma inválida el pago no se toca y el recibo muestra error=hash.
        """
        payment_id = payment_id_from_ref(params.get("vpc_MerchTxnRef"))
        payment = None
        if payment_id is not None:
            payment = db.query(ReservationPayment).filter(ReservationPayment.id == payment_id).first()
        if not payment:
            log_warning("pagos", "onepay", "Retorno sin pago", f"ref={params.get('vpc_MerchTxnRef')}")
            raise PaymentNotFoundError("결제를 찾을 수 없습니다.")

        code = params.get(RESPONSE_CODE_PARAM)
        if not verify(params):
            log_warning("pagos", "onepay", "Firma invalida", f"payment_id={payment.id}, code={code}")
            return payment.id, receipt_url(payment.id, False, code, hash_error=True)

        aprobado = code == CODIGO_APROBADO
        if payment.payment_status == EstadoPagoEnum.COMPLETED.value:
            # retorno repetido: un pago completado no vuelve atrás
            return payment.id, receipt_url(payment.id, True, code)

        try:
            payment.payment_status = (
                EstadoPagoEnum.COMPLETED.value if aprobado else EstadoPagoEnum.FAILED.value
            )
            payment.transaction_id = params.get("vpc_TransactionNo") or payment.transaction_id
            payment.raw_response = dict(params)
            if aprobado:
                sync_paid_status(payment.reservation)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            log_error("pagos", "onepay", "Error actualizando pago", f"payment_id={payment.id}, error={e}")
            raise QuotePersistenceError("결제 결과 저장 중 오류가 발생했습니다.") from e

        log_event("pagos", "onepay", "Retorno procesado",
                  f"payment_id={payment.id}, status={payment.payment_status}, code={code}")
        return payment.id, receipt_url(payment.id, aprobado, code)
