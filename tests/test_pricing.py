from decimal import Decimal
from unittest.mock import patch

import pytest

from conftest import recargar_quote
from schemas.quotes import RoomSelection, QuoteUpdate
from schemas.servicios import AirportItemCreate
from services import PricingService, QuoteBuilderService
from services.errors import QuoteStateError
from services.pricing import final_total


def test_final_total_redondeo():
    assert final_total(Decimal("1000"), Decimal("33.33")) == Decimal("666.70")
    assert final_total(Decimal("100.005"), 0) == Decimal("100.01")
    assert final_total(None, None) == Decimal("0.00")


def test_precios_de_camarote_vehiculo_y_servicio(db, guest, staff, make_quote):
    quote = make_quote(guest, discount_rate=Decimal("10"))
    QuoteBuilderService.add_service_item(db, guest, quote, AirportItemCreate(
        airport_category="픽업", airport_route="노이바이공항-하노이시내", airport_car_type="승용차",
    ))

    PricingService.apply_pricing(db, staff, quote)
    quote = recargar_quote(db, quote.id)

    room = quote.rooms[0]
    # 2 personas + 1 adulto extra; el infante no paga
    assert room.room_unit_price == Decimal("3000000.00")
    assert room.room_total_price == Decimal("9000000.00")
    assert room.room_price_code == "R_DLX"

    car = quote.cars[0]
    assert car.car_unit_price == Decimal("800000.00")
    assert car.car_total_price == Decimal("1600000.00")

    item = quote.items[0]
    assert item.total_price == Decimal("300000.00")

    summary = quote.price_summary
    assert summary.total_room_price + summary.total_car_price + summary.total_item_price == summary.grand_total
    assert summary.grand_total == Decimal("10900000.00")
    assert summary.final_total == Decimal("9810000.00")
    assert quote.total_price == summary.final_total
    assert summary.priced_at is not None
    assert quote.total_label == "9,810,000동"


def test_crucero_sin_servicios_suma_camarotes_y_vehiculos(db, guest, staff, make_quote):
    quote = make_quote(guest, status="submitted")
    PricingService.apply_pricing(db, staff, quote)
    quote = recargar_quote(db, quote.id)

    rooms = sum(r.room_total_price for r in quote.rooms)
    cars = sum(c.car_total_price for c in quote.cars)
    assert quote.price_summary.grand_total == rooms + cars
    assert quote.total_price == Decimal("10600000.00")


def test_categoria_de_camarote_elige_tarifa(db, guest, staff, make_quote):
    quote = make_quote(guest, status="submitted", rooms=[
        RoomSelection(room_code="R_DLX", category="child", person_count=1),
    ])
    PricingService.apply_pricing(db, staff, quote)
    quote = recargar_quote(db, quote.id)
    assert quote.rooms[0].room_unit_price == Decimal("1500000.00")


def test_linea_sin_tarifa_queda_en_cero(db, guest, staff, make_quote):
    quote = make_quote(guest, status="submitted", payment_code="PAY_CASH", rooms=[
        RoomSelection(room_code="R_SUITE", person_count=2),
    ])
    with patch("services.pricing.log_warning") as log:
        PricingService.apply_pricing(db, staff, quote)

    quote = recargar_quote(db, quote.id)
    assert quote.rooms[0].room_total_price == Decimal("0.00")
    assert quote.rooms[0].room_price_code is None
    assert log.called


def test_no_se_cotiza_una_reserva(db, guest, staff, make_quote):
    quote = make_quote(guest, status="reserved")
    with pytest.raises(QuoteStateError):
        PricingService.apply_pricing(db, staff, quote)


def test_api_precios_solo_staff(client, guest, guest_headers, staff_headers, make_quote):
    quote = make_quote(guest, status="submitted")

    assert client.post(f"/quotes/{quote.id}/pricing", headers=guest_headers).status_code == 403

    response = client.post(f"/quotes/{quote.id}/pricing", headers=staff_headers)
    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["total_price"]) == Decimal("10600000")
    assert data["total_label"] == "10,600,000동"
    assert Decimal(data["price_summary"]["grand_total"]) == Decimal("10600000")


def test_resumen_sin_lineas(db, guest, staff, make_quote):
    quote = make_quote(guest, status="submitted")
    for room in list(quote.rooms):
        quote.rooms.remove(room)
    for car in list(quote.cars):
        quote.cars.remove(car)
    db.commit()

    PricingService.apply_pricing(db, staff, quote)
    quote = recargar_quote(db, quote.id)
    assert quote.price_summary.grand_total == Decimal("0.00")
    assert quote.total_label == "견적 대기"


# ========== CAMBIOS DESPUÉS DE COTIZAR ==========

def test_cambiar_descuento_recalcula_total(db, guest, staff, make_quote):
    quote = make_quote(guest)
    PricingService.apply_pricing(db, staff, quote)

    QuoteBuilderService.update_quote(db, guest, quote, QuoteUpdate(discount_rate=Decimal("50")))
    quote = recargar_quote(db, quote.id)

    summary = quote.price_summary
    assert summary.discount_rate == Decimal("50.00")
    assert summary.grand_total == Decimal("10600000.00")
    assert summary.final_total == Decimal("5300000.00")
    assert quote.total_price == Decimal("5300000.00")


def test_descuento_sin_cotizar_sigue_pendiente(db, guest, make_quote):
    quote = make_quote(guest)
    QuoteBuilderService.update_quote(db, guest, quote, QuoteUpdate(discount_rate=Decimal("10")))
    quote = recargar_quote(db, quote.id)

    assert quote.price_summary.discount_rate == Decimal("10.00")
    assert quote.total_label == "견적 대기"


def test_servicio_agregado_despues_de_cotizar_entra_en_el_total(db, guest, staff, make_quote):
    quote = make_quote(guest)
    PricingService.apply_pricing(db, staff, quote)

    item = QuoteBuilderService.add_service_item(db, guest, quote, AirportItemCreate(
        airport_category="픽업", airport_route="노이바이공항-하노이시내", airport_car_type="승용차",
    ))
    assert item.total_price == Decimal("300000.00")

    quote = recargar_quote(db, quote.id)
    summary = quote.price_summary
    assert summary.total_item_price == Decimal("300000.00")
    assert summary.grand_total == Decimal("10900000.00")
    assert quote.total_price == Decimal("10900000.00")
    assert quote.total_label == "10,900,000동"


def test_servicio_en_borrador_sin_cotizar_no_fija_total(db, guest, make_quote):
    quote = make_quote(guest)
    item = QuoteBuilderService.add_service_item(db, guest, quote, AirportItemCreate(
        airport_category="픽업", airport_route="노이바이공항-하노이시내", airport_car_type="승용차",
        quantity=2,
    ))
    assert item.unit_price == Decimal("300000.00")
    assert item.total_price == Decimal("600000.00")

    quote = recargar_quote(db, quote.id)
    assert quote.total_label == "견적 대기"
