"""
Script para cargar datos de referencia de ejemplo (nombres y grillas de precios)
Ejecutar: python seed_reference_data.py
"""
import sys
from datetime import date

from sqlalchemy.orm import Session

from database.conexion import SessionLocal, engine, Base
import models  # registra todos los modelos
from models.referencia import (
    ScheduleInfo, CruiseInfo, PaymentInfo, RoomInfo, CarInfo, CategoryInfo,
    RoomPrice, CarPrice, AirportPrice, RentPrice, TourPrice, HotelPrice,
)

TEMPORADA_INICIO = date(2026, 1, 1)
TEMPORADA_FIN = date(2026, 12, 31)

NOMBRES = {
    ScheduleInfo: [("1N2D", "1박2일"), ("2N3D", "2박3일")],
    CruiseInfo: [("CR_PARADISE", "파라다이스 크루즈"), ("CR_AMBASSADOR", "앰버서더 크루즈")],
    PaymentInfo: [("PAY_CARD", "카드결제"), ("PAY_CASH", "현금결제")],
    # R_EXEC no tiene nombre: se muestra el código
    RoomInfo: [("R_DLX", "디럭스 발코니"), ("R_SUITE", "스위트")],
    CarInfo: [("C_SEDAN", "세단"), ("C_VAN", "리무진 밴")],
    CategoryInfo: [("CAT_RT", "왕복"), ("CAT_OW", "편도")],
}

# (schedule, cruise, payment, room, category, price, start, end)
ROOM_PRICES = [
    ("1N2D", "CR_PARADISE", "PAY_CARD", "R_DLX", "adult", 3000000, TEMPORADA_INICIO, TEMPORADA_FIN),
    ("1N2D", "CR_PARADISE", "PAY_CARD", "R_DLX", "child", 1500000, TEMPORADA_INICIO, TEMPORADA_FIN),
    ("1N2D", "CR_PARADISE", "PAY_CARD", "R_SUITE", "adult", 5000000, TEMPORADA_INICIO, TEMPORADA_FIN),
    ("1N2D", "CR_PARADISE", "PAY_CASH", "R_DLX", "adult", 2900000, TEMPORADA_INICIO, TEMPORADA_FIN),
    ("1N2D", "CR_AMBASSADOR", "PAY_CARD", "R_EXEC", "adult", 4000000, TEMPORADA_INICIO, TEMPORADA_FIN),
    ("2N3D", "CR_PARADISE", "PAY_CARD", "R_DLX", "adult", 5500000, date(2025, 1, 1), date(2025, 12, 31)),
]

# (schedule, cruise, category, car, price)
CAR_PRICES = [
    ("1N2D", "CR_PARADISE", "CAT_RT", "C_SEDAN", 800000),
    ("1N2D", "CR_PARADISE", "CAT_RT", "C_VAN", 1200000),
    ("1N2D", "CR_PARADISE", "CAT_OW", "C_SEDAN", 450000),
]

AIRPORT_PRICES = [
    ("A001", "픽업", "노이바이공항-하노이시내", "승용차", 300000),
    ("A002", "픽업", "노이바이공항-하노이시내", "SUV", 450000),
    ("A003", "샌딩", "하노이시내-노이바이공항", "승용차", 280000),
]

RENT_PRICES = [
    ("RC01", "하롱베이", "하노이-하롱", "7인승", 1500000),
    ("RC02", "하롱베이", "하노이-하롱", "16인승", 2500000),
]

TOUR_PRICES = [
    ("T01", "하롱베이 투어", "리무진", "단독", 4, 2000000),
    ("T02", "하롱베이 투어", "리무진", "단독", 9, 3500000),
    ("T03", "닌빈 투어", "버스", "조인", 20, 900000),
]

HOTEL_PRICES = [
    ("H01", "하롱 호텔", "디럭스", "더블", 1500000, TEMPORADA_INICIO, TEMPORADA_FIN),
    ("H02", "하롱 호텔", "디럭스", "트윈", 1400000, None, None),
]


def seed_reference_data(db: Session) -> bool:
    """Carga los datos si la base está vacía. Devuelve False si ya había datos."""
    if db.query(ScheduleInfo).first():
        return False

    for modelo, filas in NOMBRES.items():
        for code, name in filas:
            db.add(modelo(code=code, name=name))

    for schedule, cruise, payment, room, categoria, precio, inicio, fin in ROOM_PRICES:
        db.add(RoomPrice(
            schedule_code=schedule, cruise_code=cruise, payment_code=payment,
            room_code=room, room_category=categoria, price=precio,
            start_date=inicio, end_date=fin,
        ))

    for schedule, cruise, categoria, car, precio in CAR_PRICES:
        db.add(CarPrice(
            schedule_code=schedule, cruise_code=cruise, category_code=categoria,
            car_code=car, price=precio,
        ))

    for code, categoria, ruta, vehiculo, precio in AIRPORT_PRICES:
        db.add(AirportPrice(airport_code=code, airport_category=categoria, airport_route=ruta,
                            airport_car_type=vehiculo, price=precio))

    for code, categoria, ruta, vehiculo, precio in RENT_PRICES:
        db.add(RentPrice(rent_code=code, rent_category=categoria, rent_route=ruta,
                         rent_car_type=vehiculo, price=precio))

    for code, nombre, vehiculo, tipo, capacidad, precio in TOUR_PRICES:
        db.add(TourPrice(tour_code=code, tour_name=nombre, tour_vehicle=vehiculo,
                         tour_type=tipo, tour_capacity=capacidad, price=precio))

    for code, hotel, habitacion, tipo, precio, inicio, fin in HOTEL_PRICES:
        db.add(HotelPrice(hotel_code=code, hotel_name=hotel, room_name=habitacion, room_type=tipo,
                          price=precio, start_date=inicio, end_date=fin))

    db.commit()
    return True


if __name__ == "__main__":
    print("🚢 Portal de Cotizaciones - Datos de referencia")
    print("=" * 50)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if seed_reference_data(db):
            print("✅ Datos de referencia cargados")
        else:
            print("⚠️  Ya existen datos de referencia, omitiendo...")
    except Exception as e:
        db.rollback()
        print(f"\n❌ Error cargando datos de referencia: {str(e)}")
        sys.exit(1)
    finally:
        db.close()
