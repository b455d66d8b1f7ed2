from datetime import datetime
import os
import pytz

# Zona horaria del negocio (cruceros en Ha Long, precios en VND)
BUSINESS_TIMEZONE_STR = os.getenv("BUSINESS_TIMEZONE", "Asia/Ho_Chi_Minh")
BUSINESS_TZ = pytz.timezone(BUSINESS_TIMEZONE_STR)


def get_local_now() -> datetime:
    """Returns current time in business timezone"""
    return datetime.now(BUSINESS_TZ)


def gateway_timestamp() -> str:
    """Marca de tiempo compacta para referencias de transacción (yyyymmddHHMMSS)"""
    return get_local_now().strftime("%Y%m%d%H%M%S")
