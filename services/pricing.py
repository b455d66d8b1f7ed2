"""
Paso de precios de una cotización

Reglas:
- Camarote: unitario de room_price (itinerario, crucero, pago, camarote, vigencia)
  total = unitario x (personas + adultos extra + niños extra); los infantes no pagan
- Vehículo: unitario de car_price; total = unitario x cantidad
- Servicio: unitario de la grilla del servicio; total = unitario x cantidad
- grand_total = camarotes + vehículos + servicios
- final_total = grand_total x (1 - descuento/100), redondeado a 2 decimales
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.quote import Quote, QuoteRoom, QuoteCar, QuoteItem, QuotePriceSummary, EstadoQuoteEnum
from models.referencia import RoomPrice, CarPrice
from models.servicios import SERVICE_TABLES
from models.usuario import User
from services.errors import QuoteStateError, QuotePersistenceError
from services.option_cascade import COMPOSITE_GRIDS, window_filter
from utils.logging_utils import log_event, log_warning, log_error


CENTAVOS = Decimal("0.01")


def _safe_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def final_total(grand_total, discount_rate) -> Decimal:
    descuento = _safe_decimal(discount_rate)
    return _money(_safe_decimal(grand_total) * (Decimal("100") - descuento) / Decimal("100"))


def unit_price_of(row) -> Decimal:
    return _safe_decimal(row.price if row is not None else 0)


def line_total(unit_price, quantity) -> Decimal:
    return _money(_safe_decimal(unit_price) * (quantity or 0))


# ========================================================================
# BÚSQUEDA DE PRECIOS UNITARIOS
# ========================================================================

def _room_price(db: Session, quote: Quote, room: QuoteRoom) -> Optional[RoomPrice]:
    if not quote.checkin:
        return None
    query = db.query(RoomPrice).filter(
        RoomPrice.schedule_code == quote.schedule_code,
        RoomPrice.cruise_code == quote.cruise_code,
        RoomPrice.payment_code == quote.payment_code,
        RoomPrice.room_code == room.room_code,
        window_filter(RoomPrice, quote.checkin),
    )
    if room.category:
        por_categoria = query.filter(RoomPrice.room_category == room.category).order_by(RoomPrice.id).first()
        if por_categoria:
            return por_categoria
    return query.order_by(RoomPrice.id).first()


def _car_price(db: Session, quote: Quote, car: QuoteCar) -> Optional[CarPrice]:
    query = db.query(CarPrice).filter(
        CarPrice.schedule_code == quote.schedule_code,
        CarPrice.cruise_code == quote.cruise_code,
        CarPrice.category_code == car.car_category_code,
        CarPrice.car_code == car.vehicle_code,
    )
    if quote.checkin:
        query = query.filter(window_filter(CarPrice, quote.checkin, nullable=True))
    if car.passenger_type:
        query = query.filter(or_(CarPrice.passenger_type.is_(None),
                                 CarPrice.passenger_type == car.passenger_type))
    return query.order_by(CarPrice.id).first()


def _item_price(db: Session, item: QuoteItem):
    modelo_servicio, columna_codigo = SERVICE_TABLES[item.service_type]
    fila = db.query(modelo_servicio).filter(modelo_servicio.id == item.service_ref_id).first()
    if not fila:
        return None
    grid = COMPOSITE_GRIDS[item.service_type]
    query = db.query(grid.model).filter(
        getattr(grid.model, grid.code_column) == getattr(fila, columna_codigo)
    )
    if grid.dated and getattr(fila, "checkin_date", None):
        query = query.filter(window_filter(grid.model, fila.checkin_date, nullable=True))
    return query.order_by(grid.model.id).first()


# ========================================================================
# SERVICIO
# ========================================================================

class PricingService:

    @staticmethod
    def recompute_summary(db: Session, quote: Quote) -> QuotePriceSummary:
        """Recalcula el resumen desde las líneas; no hace commit"""
        total_rooms = sum((_safe_decimal(r.room_total_price) for r in quote.rooms), Decimal("0"))
        total_cars = sum((_safe_decimal(c.car_total_price) for c in quote.cars), Decimal("0"))
        total_items = sum((_safe_decimal(i.total_price) for i in quote.items), Decimal("0"))
        grand = _money(total_rooms + total_cars + total_items)

        summary = quote.price_summary
        if summary is None:
            summary = QuotePriceSummary(quote_id=quote.id)
            quote.price_summary = summary
            db.add(summary)

        summary.checkin = quote.checkin
        summary.discount_rate = _safe_decimal(quote.discount_rate)
        summary.total_room_price = _money(total_rooms)
        summary.total_car_price = _money(total_cars)
        summary.total_item_price = _money(total_items)
        summary.grand_total = grand
        summary.final_total = final_total(grand, quote.discount_rate)
        summary.priced_at = datetime.utcnow()

        quote.total_price = summary.final_total
        return summary

    @staticmethod
    def apply_pricing(db: Session, staff: User, quote: Quote) -> Quote:
        """
        Completa precios unitarios y totales de todas las líneas y el resumen.
        Las líneas sin tarifa quedan en 0 y se registran como advertencia.
        Todo en una transacción: si falla, la cotización queda sin precio pero válida.
        """
        if quote.status in (EstadoQuoteEnum.RESERVED.value, EstadoQuoteEnum.REJECTED.value):
            raise QuoteStateError(f"현재 상태({quote.status})에서는 가격을 산정할 수 없습니다.")

        sin_tarifa = []
        try:
            for room in quote.rooms:
                fila = _room_price(db, quote, room)
                if fila is None:
                    sin_tarifa.append(f"room:{room.room_code}")
                unitario = unit_price_of(fila)
                room.room_price_code = fila.room_code if fila else None
                room.room_unit_price = unitario
                room.room_total_price = line_total(unitario, room.huespedes_pagos)

            for car in quote.cars:
                fila = _car_price(db, quote, car)
                if fila is None:
                    sin_tarifa.append(f"car:{car.vehicle_code}")
                unitario = unit_price_of(fila)
                car.car_unit_price = unitario
                car.car_total_price = line_total(unitario, car.car_count)

            for item in quote.items:
                fila = _item_price(db, item)
                if fila is None:
                    sin_tarifa.append(f"{item.service_type}:{item.service_ref_id}")
                unitario = unit_price_of(fila)
                item.unit_price = unitario
                item.total_price = line_total(unitario, item.quantity)

            PricingService.recompute_summary(db, quote)
            db.commit()
            db.refresh(quote)
        except SQLAlchemyError as e:
            db.rollback()
            log_error("pricing", staff.email, "Error calculando precios", f"quote_id={quote.id}, error={e}")
            raise QuotePersistenceError("가격 산정 중 오류가 발생했습니다.") from e

        if sin_tarifa:
            log_warning("pricing", staff.email, "Lineas sin tarifa",
                        f"quote_id={quote.id}, lineas={sin_tarifa}")
        log_event("pricing", staff.email, "Precios aplicados",
                  f"quote_id={quote.id}, total={quote.total_price}")
        return quote
