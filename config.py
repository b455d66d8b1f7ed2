"""
Configuración de la pasarela de pago (OnePay) y de la aplicación
"""
import os

from dotenv import load_dotenv

load_dotenv()

# OnePay Configuration
ONEPAY_PAYMENT_URL = os.getenv("ONEPAY_PAYMENT_URL", "https://mtf.onepay.vn/paygate/vpcpay.op")
ONEPAY_MERCHANT_ID = os.getenv("ONEPAY_MERCHANT_ID", "TESTONEPAY")
ONEPAY_ACCESS_CODE = os.getenv("ONEPAY_ACCESS_CODE", "6BEB2546")
ONEPAY_HASH_KEY = os.getenv("ONEPAY_HASH_KEY", "")  # hex
ONEPAY_VERSION = "2"
ONEPAY_COMMAND = "pay"
ONEPAY_LOCALE = os.getenv("ONEPAY_LOCALE", "vn")

APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:3000").rstrip("/")
ONEPAY_RETURN_URL = os.getenv(
    "ONEPAY_RETURN_URL", "http://localhost:8000/api/payments/onepay/return"
)

# Payment Configuration
PAYMENT_CURRENCY = "VND"
PAYMENT_GATEWAY_NAME = "onepay"
PAYMENT_SYSTEM_ENABLED = bool(ONEPAY_HASH_KEY)

# CORS
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

# Mensajes de rechazo de la pasarela (vpc_TxnResponseCode)
ONEPAY_RESPONSE_MESSAGES = {
    "1": "은행/승인 거절",
    "2": "은행 통신 오류",
    "3": "카드가 허용되지 않음",
    "4": "카드 만료",
    "5": "불충분한 잔액",
    "7": "사용자 취소",
}


def is_payment_configured() -> bool:
    """Verifica si OnePay está correctamente configurado"""
    return bool(ONEPAY_HASH_KEY) and bool(ONEPAY_MERCHANT_ID) and bool(ONEPAY_ACCESS_CODE)
