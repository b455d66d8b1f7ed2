from datetime import date
from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from models.referencia import RoomPrice
from services import option_cascade
from services.option_cascade import CascadeSelection


def codes(options):
    return [o["code"] for o in options]


# ========== CADENA DE CRUCERO ==========

def test_itinerarios_con_nombre(db, reference_data):
    opciones = option_cascade.list_schedules(db)
    assert opciones == [
        {"code": "1N2D", "label": "1박2일"},
        {"code": "2N3D", "label": "2박3일"},
    ]


def test_cruceros_vigentes_para_el_checkin(db, reference_data):
    seleccion = CascadeSelection(schedule_code="1N2D", checkin="2026-06-01")
    opciones = option_cascade.list_cruises(db, seleccion)

    assert codes(opciones) == ["CR_AMBASSADOR", "CR_PARADISE"]
    assert opciones[1]["label"] == "파라다이스 크루즈"

    # cada crucero listado tiene al menos una tarifa vigente en esa fecha
    for code in codes(opciones):
        fila = db.query(RoomPrice).filter(
            RoomPrice.schedule_code == "1N2D",
            RoomPrice.cruise_code == code,
            RoomPrice.start_date <= date(2026, 6, 1),
            RoomPrice.end_date >= date(2026, 6, 1),
        ).first()
        assert fila is not None


def test_cruceros_fuera_de_vigencia(db, reference_data):
    assert option_cascade.list_cruises(db, CascadeSelection(schedule_code="1N2D", checkin="2027-02-01")) == []
    # 2N3D solo tiene tarifas 2025
    assert option_cascade.list_cruises(db, CascadeSelection(schedule_code="2N3D", checkin="2026-06-01")) == []


def test_sin_clave_previa_lista_vacia(db, reference_data):
    assert option_cascade.list_cruises(db, CascadeSelection(checkin="2026-06-01")) == []
    assert option_cascade.list_cruises(db, CascadeSelection(schedule_code="1N2D")) == []
    assert option_cascade.list_payments(db, CascadeSelection(schedule_code="1N2D", checkin="2026-06-01")) == []
    assert option_cascade.list_vehicles(db, CascadeSelection(schedule_code="1N2D", cruise_code="CR_PARADISE")) == []


def test_formas_de_pago_sin_duplicados(db, reference_data):
    seleccion = CascadeSelection(schedule_code="1N2D", checkin="2026-06-01", cruise_code="CR_PARADISE")
    assert option_cascade.list_payments(db, seleccion) == [
        {"code": "PAY_CARD", "label": "카드결제"},
        {"code": "PAY_CASH", "label": "현금결제"},
    ]


def test_camarotes_sin_duplicados(db, reference_data):
    seleccion = CascadeSelection(schedule_code="1N2D", checkin="2026-06-01",
                                 cruise_code="CR_PARADISE", payment_code="PAY_CARD")
    assert codes(option_cascade.list_rooms(db, seleccion)) == ["R_DLX", "R_SUITE"]


def test_camarote_sin_nombre_muestra_codigo(db, reference_data):
    seleccion = CascadeSelection(schedule_code="1N2D", checkin="2026-06-01",
                                 cruise_code="CR_AMBASSADOR", payment_code="PAY_CARD")
    assert option_cascade.list_rooms(db, seleccion) == [{"code": "R_EXEC", "label": "R_EXEC"}]


def test_categorias_de_camarote(db, reference_data):
    seleccion = CascadeSelection(schedule_code="1N2D", checkin="2026-06-01", cruise_code="CR_PARADISE",
                                 payment_code="PAY_CARD", room_code="R_DLX")
    assert codes(option_cascade.list_room_categories(db, seleccion)) == ["adult", "child"]


def test_error_de_consulta_devuelve_lista_vacia(db, reference_data):
    seleccion = CascadeSelection(schedule_code="1N2D", checkin="2026-06-01")
    with patch.object(db, "query", side_effect=SQLAlchemyError("conexion perdida")), \
            patch("services.option_cascade.log_warning") as log:
        assert option_cascade.list_cruises(db, seleccion) == []
        assert option_cascade.list_schedules(db) == []
    assert log.called


# ========== SELECCIÓN ==========

def test_cambiar_nivel_limpia_los_dependientes():
    seleccion = CascadeSelection(checkin="2026-06-01", schedule_code="1N2D", cruise_code="CR_PARADISE",
                                 payment_code="PAY_CARD", room_code="R_DLX",
                                 car_category_code="CAT_RT", vehicle_code="C_SEDAN")

    seleccion.set("payment_code", "PAY_CASH")
    assert seleccion.room_code is None
    assert seleccion.cruise_code == "CR_PARADISE"
    assert seleccion.vehicle_code == "C_SEDAN"

    seleccion.set("schedule_code", "2N3D")
    assert seleccion.as_dict() == {
        "checkin": date(2026, 6, 1),
        "schedule_code": "2N3D",
        "cruise_code": None,
        "payment_code": None,
        "room_code": None,
        "car_category_code": None,
        "vehicle_code": None,
    }


def test_mismo_valor_no_limpia():
    seleccion = CascadeSelection(schedule_code="1N2D", cruise_code="CR_PARADISE", payment_code="PAY_CARD")
    seleccion.set("cruise_code", "CR_PARADISE")
    assert seleccion.payment_code == "PAY_CARD"


def test_cambiar_checkin_limpia_crucero():
    seleccion = CascadeSelection(checkin=date(2026, 6, 1), schedule_code="1N2D", cruise_code="CR_PARADISE")
    seleccion.set("checkin", "2026-07-01")
    assert seleccion.checkin == date(2026, 7, 1)
    assert seleccion.schedule_code == "1N2D"
    assert seleccion.cruise_code is None


def test_campo_desconocido():
    with pytest.raises(KeyError):
        CascadeSelection().set("hotel_code", "H01")


# ========== CADENA DE VEHÍCULO ==========

def test_categorias_y_vehiculos(db, reference_data):
    seleccion = CascadeSelection(schedule_code="1N2D", checkin="2026-06-01", cruise_code="CR_PARADISE")
    assert option_cascade.list_car_categories(db, seleccion) == [
        {"code": "CAT_OW", "label": "편도"},
        {"code": "CAT_RT", "label": "왕복"},
    ]

    seleccion.set("car_category_code", "CAT_RT")
    assert codes(option_cascade.list_vehicles(db, seleccion)) == ["C_SEDAN", "C_VAN"]


# ========== GRILLAS COMPUESTAS ==========

def test_airport_nivel_por_nivel(db, reference_data):
    nivel, opciones = option_cascade.list_composite_options(db, "airport", {})
    assert nivel == "airport_category"
    assert codes(opciones) == ["샌딩", "픽업"]

    nivel, opciones = option_cascade.list_composite_options(db, "airport", {"airport_category": "픽업"})
    assert nivel == "airport_route"
    assert codes(opciones) == ["노이바이공항-하노이시내"]

    fila = option_cascade.find_composite_code(db, "airport", {
        "airport_category": "픽업", "airport_route": "노이바이공항-하노이시내", "airport_car_type": "SUV",
    })
    assert option_cascade.code_of("airport", fila) == "A002"


def test_codigo_con_seleccion_incompleta(db, reference_data):
    assert option_cascade.find_composite_code(db, "rentcar", {"rent_category": "하롱베이"}) is None


def test_tour_capacidad_como_texto(db, reference_data):
    fila = option_cascade.find_composite_code(db, "tour", {
        "tour_name": "하롱베이 투어", "tour_vehicle": "리무진", "tour_type": "단독", "tour_capacity": "9",
    })
    assert fila.tour_code == "T02"


def test_hotel_respeta_vigencia(db, reference_data):
    doble = {"hotel_name": "하롱 호텔", "room_name": "디럭스", "room_type": "더블"}
    twin = {"hotel_name": "하롱 호텔", "room_name": "디럭스", "room_type": "트윈"}

    assert option_cascade.find_composite_code(db, "hotel", doble, checkin=date(2026, 5, 1)).hotel_code == "H01"
    assert option_cascade.find_composite_code(db, "hotel", doble, checkin=date(2027, 5, 1)) is None
    # sin ventana: vale para cualquier fecha
    assert option_cascade.find_composite_code(db, "hotel", twin, checkin=date(2027, 5, 1)).hotel_code == "H02"


# ========== HTTP ==========

def test_api_cruceros(client, reference_data):
    response = client.get("/options/cruises", params={"schedule_code": "1N2D", "checkin": "2026-06-01"})
    assert response.status_code == 200
    assert codes(response.json()) == ["CR_AMBASSADOR", "CR_PARADISE"]


def test_api_fecha_invalida(client, reference_data):
    response = client.get("/options/cruises", params={"schedule_code": "1N2D", "checkin": "mañana"})
    assert response.status_code == 422


def test_api_grilla_compuesta(client, reference_data):
    response = client.get("/options/airport", params={"airport_category": "픽업"})
    assert response.status_code == 200
    assert response.json()["level"] == "airport_route"

    response = client.get("/options/airport/code", params={
        "airport_category": "픽업", "airport_route": "노이바이공항-하노이시내", "airport_car_type": "승용차",
    })
    assert response.status_code == 200
    assert response.json() == {"code": "A001", "price": 300000.0}


def test_api_codigo_inexistente(client, reference_data):
    response = client.get("/options/rentcar/code", params={
        "rent_category": "하롱베이", "rent_route": "하노이-하롱", "rent_car_type": "45인승",
    })
    assert response.status_code == 404


def test_api_servicio_desconocido(client, reference_data):
    assert client.get("/options/yacht").status_code == 422
