from decimal import Decimal
from urllib.parse import urlparse, parse_qsl

import pytest

import config
from conftest import auth_headers
from models.quote import Quote
from models.reservation import Reservation, ReservationPayment
from schemas.reservations import ReservationRequest
from services import PricingService, ReservationService
from services.payment_gateway import sign, verify, describe_receipt

CLAVE = "A3EFDFABA8653DF2342E8DAC29B51AF0"


# ========== FIRMA ==========

def test_firma_y_verificacion():
    params = {"vpc_Amount": "100000", "vpc_MerchTxnRef": "1_20260601120000", "vpc_Version": "2"}
    params["vpc_SecureHash"] = sign(params, CLAVE)

    assert verify(params, CLAVE) is True
    assert verify(dict(params, vpc_Amount="1"), CLAVE) is False
    assert verify({k: v for k, v in params.items() if k != "vpc_SecureHash"}, CLAVE) is False


def test_firma_ignora_orden_y_parametros_ajenos():
    a = {"vpc_B": "2", "vpc_A": "1", "otro": "x"}
    b = {"vpc_A": "1", "vpc_B": "2"}
    assert sign(a, CLAVE) == sign(b, CLAVE)


def test_clave_invalida_no_verifica():
    params = {"vpc_Amount": "1", "vpc_SecureHash": "ABC"}
    assert verify(params, "no-es-hex") is False


# ========== RECIBO ==========

@pytest.mark.parametrize("code, motivo", [
    ("1", "은행/승인 거절"),
    ("2", "은행 통신 오류"),
    ("3", "카드가 허용되지 않음"),
    ("4", "카드 만료"),
    ("5", "불충분한 잔액"),
    ("7", "사용자 취소"),
    ("99", "코드 99"),
])
def test_mensajes_de_rechazo(code, motivo):
    recibo = describe_receipt("failed", code)
    assert recibo["success"] is False
    assert recibo["message"] == f"결제가 완료되지 않았습니다. {motivo}"


def test_mensaje_exito():
    recibo = describe_receipt("success", "0")
    assert recibo["success"] is True
    assert recibo["message"] == "결제가 성공적으로 완료되었습니다."


def test_error_de_firma_tiene_aviso_propio():
    recibo = describe_receipt("failed", "0", "hash")
    assert recibo["success"] is False
    assert recibo["message"] == "응답 검증에 실패했습니다. 고객센터로 문의해주세요."


# ========== FLUJO HTTP ==========

@pytest.fixture
def reserva(db, guest, staff, make_quote):
    quote = make_quote(guest, status="submitted")
    PricingService.apply_pricing(db, staff, quote)
    quote.status = "approved"
    db.commit()
    return ReservationService.convert_quote(db, guest, quote.id, ReservationRequest())


@pytest.fixture
def pago(client, guest, reserva):
    response = client.post(f"/reservations/{reserva.id}/payments", json={}, headers=auth_headers(guest))
    assert response.status_code == 201
    return response.json()


def _retorno(url_pago, code):
    """Parámetros que OnePay devolvería para la URL generada"""
    enviados = dict(parse_qsl(urlparse(url_pago).query))
    params = {
        "vpc_MerchTxnRef": enviados["vpc_MerchTxnRef"],
        "vpc_Amount": enviados["vpc_Amount"],
        "vpc_TxnResponseCode": code,
        "vpc_TransactionNo": "998877",
        "vpc_Message": "Approved" if code == "0" else "Declined",
    }
    params["vpc_SecureHash"] = sign(params, CLAVE)
    return params


def test_pago_pendiente_por_saldo(pago):
    assert pago["payment_status"] == "pending"
    assert pago["gateway"] == "onepay"
    assert Decimal(pago["amount"]) == Decimal("10600000")


def test_link_firmado(client, guest, pago):
    response = client.post("/api/payments/onepay/create", json={"paymentId": pago["id"]},
                           headers=auth_headers(guest))
    assert response.status_code == 200
    url = response.json()["url"]

    assert url.startswith(config.ONEPAY_PAYMENT_URL)
    params = dict(parse_qsl(urlparse(url).query))
    assert params["vpc_Amount"] == "1060000000"
    assert params["vpc_Currency"] == "VND"
    assert params["vpc_MerchTxnRef"].startswith(f"{pago['id']}_")
    assert verify(params, CLAVE)


def test_link_de_pago_ajeno(client, otro_usuario, pago):
    response = client.post("/api/payments/onepay/create", json={"paymentId": pago["id"]},
                           headers=auth_headers(otro_usuario))
    assert response.status_code == 404


def test_retorno_aprobado(client, db, guest, pago):
    url = client.post("/api/payments/onepay/create", json={"paymentId": pago["id"]},
                      headers=auth_headers(guest)).json()["url"]

    response = client.get("/api/payments/onepay/return", params=_retorno(url, "0"), follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"].endswith(
        f"/mypage/payments/individual/{pago['id']}/receipt?status=success&code=0"
    )

    db.expire_all()
    registro = db.query(ReservationPayment).filter(ReservationPayment.id == pago["id"]).first()
    assert registro.payment_status == "completed"
    assert registro.transaction_id == "998877"
    assert registro.raw_response["vpc_TxnResponseCode"] == "0"

    # el pago cubre el total: reserva confirmada y cotización paid
    reserva = db.query(Reservation).filter(Reservation.id == registro.reservation_id).first()
    assert reserva.status == "confirmed"
    assert db.query(Quote).filter(Quote.id == reserva.quote_id).first().payment_status == "paid"

    # un pago completado no admite otro link
    response = client.post("/api/payments/onepay/create", json={"paymentId": pago["id"]},
                           headers=auth_headers(guest))
    assert response.status_code == 409


def test_retorno_rechazado(client, db, guest, pago):
    url = client.post("/api/payments/onepay/create", json={"paymentId": pago["id"]},
                      headers=auth_headers(guest)).json()["url"]

    response = client.get("/api/payments/onepay/return", params=_retorno(url, "5"), follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"].endswith("receipt?status=failed&code=5")

    db.expire_all()
    assert db.query(ReservationPayment).first().payment_status == "failed"

    # un pago fallido libera el saldo
    response = client.post(f"/reservations/{pago['reservation_id']}/payments", json={}, headers=auth_headers(guest))
    assert response.status_code == 201
    assert Decimal(response.json()["amount"]) == Decimal("10600000")


def test_retorno_con_firma_invalida(client, db, guest, pago):
    url = client.post("/api/payments/onepay/create", json={"paymentId": pago["id"]},
                      headers=auth_headers(guest)).json()["url"]
    params = _retorno(url, "0")
    params["vpc_Amount"] = "1"

    response = client.get("/api/payments/onepay/return", params=params, follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"].endswith("receipt?status=failed&code=0&error=hash")

    db.expire_all()
    registro = db.query(ReservationPayment).first()
    assert registro.payment_status == "pending"
    assert registro.raw_response is None


def test_retorno_de_pago_inexistente(client):
    params = {"vpc_MerchTxnRef": "999_20260601120000", "vpc_TxnResponseCode": "0"}
    params["vpc_SecureHash"] = sign(params, CLAVE)
    assert client.get("/api/payments/onepay/return", params=params, follow_redirects=False).status_code == 404


def test_recibo(client, guest, pago):
    response = client.get(f"/payments/{pago['id']}/receipt", params={"status": "failed", "code": "7"},
                          headers=auth_headers(guest))
    assert response.status_code == 200
    assert response.json()["message"] == "결제가 완료되지 않았습니다. 사용자 취소"


def test_reserva_sin_precio_no_genera_pago(client, db, guest, make_quote):
    quote = make_quote(guest, status="approved")
    reserva = ReservationService.convert_quote(db, guest, quote.id, ReservationRequest())

    response = client.post(f"/reservations/{reserva.id}/payments", json={}, headers=auth_headers(guest))
    assert response.status_code == 409


# ========== SALDO ==========

def test_pago_pendiente_compromete_el_saldo(client, guest, pago):
    response = client.post(f"/reservations/{pago['reservation_id']}/payments", json={},
                           headers=auth_headers(guest))
    assert response.status_code == 409


def test_monto_no_supera_el_saldo(client, db, guest, reserva):
    url = f"/reservations/{reserva.id}/payments"

    assert client.post(url, json={"amount": "53000000"}, headers=auth_headers(guest)).status_code == 409

    parcial = client.post(url, json={"amount": "4000000"}, headers=auth_headers(guest))
    assert parcial.status_code == 201

    resto = client.post(url, json={}, headers=auth_headers(guest))
    assert resto.status_code == 201
    assert Decimal(resto.json()["amount"]) == Decimal("6600000")

    assert client.post(url, json={"amount": "1"}, headers=auth_headers(guest)).status_code == 409
    db.expire_all()
    assert db.query(ReservationPayment).count() == 2


def test_pago_parcial_no_marca_pagada(client, db, guest, reserva):
    pago = client.post(f"/reservations/{reserva.id}/payments", json={"amount": "4000000"},
                       headers=auth_headers(guest)).json()
    url = client.post("/api/payments/onepay/create", json={"paymentId": pago["id"]},
                      headers=auth_headers(guest)).json()["url"]

    response = client.get("/api/payments/onepay/return", params=_retorno(url, "0"), follow_redirects=False)
    assert response.status_code == 302

    db.expire_all()
    registro = db.query(Reservation).filter(Reservation.id == reserva.id).first()
    assert registro.total_pagado == Decimal("4000000")
    assert registro.status == "pending"
    assert db.query(Quote).filter(Quote.id == registro.quote_id).first().payment_status == "unpaid"
