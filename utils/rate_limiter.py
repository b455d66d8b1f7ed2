"""
Rate Limiting
Protección contra fuerza bruta en login y abuso de la creación de links de pago
"""
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
import os

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[os.getenv("RATE_LIMIT_DEFAULT", "100/minute")],
    storage_uri=os.getenv("REDIS_URL", "memory://"),  # Redis en producción
    strategy="fixed-window"
)

LOGIN_LIMIT = os.getenv("RATE_LIMIT_LOGIN", "20/minute")
PAYMENT_LIMIT = os.getenv("RATE_LIMIT_PAYMENT", "30/minute")


def setup_rate_limiting(app):
    """Configurar rate limiting en la aplicación FastAPI"""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    return limiter
