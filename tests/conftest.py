import os
import sys
from datetime import date

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Base en memoria y pasarela configurada antes de importar la app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "clave-de-tests"
os.environ["ONEPAY_HASH_KEY"] = "A3EFDFABA8653DF2342E8DAC29B51AF0"
os.environ["APP_BASE_URL"] = "http://localhost:3000"

import pytest
from fastapi.testclient import TestClient

from main import app
from database.conexion import Base, SessionLocal, engine
from models.usuario import User, RolUsuario
from models.quote import Quote
from schemas.quotes import QuoteDraft, RoomSelection, CarSelection
from seed_reference_data import seed_reference_data
from services import QuoteBuilderService
from utils.auth import get_password_hash, create_access_token
from utils.rate_limiter import limiter

limiter.enabled = False

PASSWORD = "Secreto123"
CHECKIN = date(2026, 6, 1)


@pytest.fixture(autouse=True)
def limpiar_tablas():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def reference_data(db):
    seed_reference_data(db)


def crear_usuario(db, email, role=RolUsuario.GUEST.value, name="홍길동"):
    user = User(email=email, hashed_password=get_password_hash(PASSWORD), name=name, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    token = create_access_token({"sub": user.email, "user_id": user.id, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def guest(db):
    return crear_usuario(db, "guest@example.com")


@pytest.fixture
def otro_usuario(db):
    return crear_usuario(db, "otro@example.com", name="김철수")


@pytest.fixture
def staff(db):
    return crear_usuario(db, "manager@example.com", role=RolUsuario.MANAGER.value, name="매니저")


@pytest.fixture
def guest_headers(guest):
    return auth_headers(guest)


@pytest.fixture
def staff_headers(staff):
    return auth_headers(staff)


def draft_completo(**cambios):
    datos = dict(
        title="하롱베이 크루즈",
        checkin=CHECKIN,
        schedule_code="1N2D",
        cruise_code="CR_PARADISE",
        payment_code="PAY_CARD",
        rooms=[RoomSelection(room_code="R_DLX", category="adult", person_count=2,
                             infant_count=1, extra_adult_count=1)],
        cars=[CarSelection(car_category_code="CAT_RT", vehicle_code="C_SEDAN", car_count=2)],
    )
    datos.update(cambios)
    return QuoteDraft(**datos)


@pytest.fixture
def make_quote(db, reference_data):
    """Crea una cotización completa del usuario y le fija el estado pedido"""
    def _make(user, status="draft", **cambios):
        quote = QuoteBuilderService.build_quote(db, user, draft_completo(**cambios))
        if status != "draft":
            quote.status = status
            db.commit()
            db.refresh(quote)
        return quote
    return _make


def recargar_quote(db, quote_id):
    db.expire_all()
    return db.query(Quote).filter(Quote.id == quote_id).first()
