from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from database.conexion import Base, engine
import models  # asegura que todos los modelos estén registrados
from utils.logging_utils import log_event, log_error
from utils.rate_limiter import setup_rate_limiting

try:
    Base.metadata.create_all(bind=engine)
    log_event("startup", "sistema", "Tablas creadas (o ya existian)")
except Exception as e:
    log_error("startup", "sistema", "Error creando tablas", f"error={e}")

app = FastAPI(title="Travel Quotes API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
setup_rate_limiting(app)

from endpoints import auth, usuarios, opciones, quotes, reservations, payments, customer_requests
app.include_router(auth.router)
app.include_router(usuarios.router)
app.include_router(opciones.router)
app.include_router(quotes.router)
app.include_router(reservations.router)
app.include_router(payments.router)
app.include_router(customer_requests.router)


@app.get("/")
def read_root():
    return {"message": "Travel Quotes API", "payments_enabled": config.is_payment_configured()}
