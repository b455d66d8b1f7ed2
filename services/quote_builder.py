"""
Armado y edición del agregado Cotización
- Creación: quote -> resumen de precios -> camarotes -> vehículos (una sola transacción)
- Servicios itemizados: fila del servicio + quote_item (una sola transacción)
- Transiciones: draft -> submitted -> approved | rejected
"""

from datetime import datetime
from typing import Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.quote import (
    Quote, QuoteRoom, QuoteCar, QuoteItem, QuotePriceSummary, EstadoQuoteEnum
)
from models.servicios import AirportService, RentcarService, TourService, HotelService
from models.usuario import User
from schemas.quotes import QuoteDraft, QuoteUpdate
from schemas.servicios import (
    AirportItemCreate, RentcarItemCreate, TourItemCreate, HotelItemCreate
)
from services.errors import (
    QuoteValidationError, QuoteNotFoundError, QuoteStateError, QuotePersistenceError
)
from services.option_cascade import find_composite_code, code_of
from services.pricing import PricingService, unit_price_of, line_total
from utils.logging_utils import log_event, log_error


TITULO_POR_DEFECTO = "크루즈 견적"

ServiceItemCreate = Union[AirportItemCreate, RentcarItemCreate, TourItemCreate, HotelItemCreate]


def get_quote_for_user(db: Session, quote_id: int, user: User) -> Quote:
    """Cotización visible para el usuario (dueño o staff); si no, 404"""
    quote = db.query(Quote).filter(Quote.id == quote_id).first()
    if not quote or (quote.user_id != user.id and not user.es_staff):
        raise QuoteNotFoundError("견적을 찾을 수 없습니다.")
    return quote


class QuoteBuilderService:
    """Escrituras sobre el agregado Cotización"""

    @staticmethod
    def build_quote(db: Session, user: User, draft: QuoteDraft) -> Quote:
        """
        Crea la cotización con sus líneas a precio cero.
        Un borrador incompleto no escribe nada. Ante cualquier error de la base
        se revierte todo: no quedan cotizaciones sin camarotes ni resúmenes huérfanos.
        """
        faltantes = draft.missing_fields()
        if faltantes:
            raise QuoteValidationError(
                "필수 항목을 입력해주세요: " + ", ".join(faltantes), faltantes
            )

        try:
            quote = Quote(
                user_id=user.id,
                status=EstadoQuoteEnum.DRAFT.value,
                title=draft.title or TITULO_POR_DEFECTO,
                description=draft.description,
                checkin=draft.checkin,
                schedule_code=draft.schedule_code,
                cruise_code=draft.cruise_code,
                payment_code=draft.payment_code,
                discount_rate=draft.discount_rate,
                total_price=0,
            )
            db.add(quote)
            db.flush()  # id generado para las líneas

            db.add(QuotePriceSummary(
                quote_id=quote.id,
                checkin=draft.checkin,
                discount_rate=draft.discount_rate,
            ))

            for room in draft.rooms:
                if not room.is_complete():
                    continue
                db.add(QuoteRoom(
                    quote_id=quote.id,
                    room_code=room.room_code,
                    category=room.category,
                    person_count=room.person_count,
                    infant_count=room.infant_count,
                    extra_adult_count=room.extra_adult_count,
                    extra_child_count=room.extra_child_count,
                ))

            for car in draft.cars:
                db.add(QuoteCar(
                    quote_id=quote.id,
                    vehicle_code=car.vehicle_code,
                    car_category_code=car.car_category_code,
                    passenger_type=car.passenger_type,
                    car_count=car.car_count,
                ))

            db.commit()
            db.refresh(quote)
        except SQLAlchemyError as e:
            db.rollback()
            log_error("quotes", user.email, "Error creando cotizacion", f"error={e}")
            raise QuotePersistenceError("견적 저장 중 오류가 발생했습니다.") from e

        log_event("quotes", user.email, "Cotizacion creada",
                  f"quote_id={quote.id}, rooms={len(quote.rooms)}, cars={len(quote.cars)}")
        return quote

    @staticmethod
    def add_service_item(db: Session, user: User, quote: Quote, payload: ServiceItemCreate) -> QuoteItem:
        """Agrega un servicio (airport/rentcar/tour/hotel) resolviendo su código de grilla"""
        if not quote.is_editable():
            raise QuoteStateError("제출된 견적은 수정할 수 없습니다.")

        servicio = payload.service_type
        seleccion = payload.model_dump()
        checkin = payload.checkin_date if servicio == "hotel" else None
        fila_precio = find_composite_code(db, servicio, seleccion, checkin=checkin)
        if fila_precio is None:
            raise QuoteValidationError("선택한 조건에 맞는 서비스를 찾을 수 없습니다.")
        codigo = code_of(servicio, fila_precio)

        try:
            fila = _build_service_row(payload, codigo)
            db.add(fila)
            db.flush()

            unitario = unit_price_of(fila_precio)
            item = QuoteItem(
                quote_id=quote.id,
                service_type=servicio,
                service_ref_id=fila.id,
                quantity=payload.quantity,
                unit_price=unitario,
                total_price=line_total(unitario, payload.quantity),
                options={"code": codigo, **_json_options(payload)},
            )
            quote.items.append(item)
            # una cotización ya cotizada incorpora la línea nueva a su total
            if quote.ya_cotizada:
                PricingService.recompute_summary(db, quote)
            db.commit()
            db.refresh(item)
        except SQLAlchemyError as e:
            db.rollback()
            log_error("quotes", user.email, "Error agregando servicio",
                      f"quote_id={quote.id}, service={servicio}, error={e}")
            raise QuotePersistenceError("서비스 저장 중 오류가 발생했습니다.") from e

        log_event("quotes", user.email, "Servicio agregado",
                  f"quote_id={quote.id}, service={servicio}, code={codigo}")
        return item

    @staticmethod
    def update_quote(db: Session, user: User, quote: Quote, data: QuoteUpdate) -> Quote:
        if not quote.is_editable():
            raise QuoteStateError("제출된 견적은 수정할 수 없습니다.")

        cambios = data.model_dump(exclude_unset=True)
        for campo, valor in cambios.items():
            setattr(quote, campo, valor)
        if "discount_rate" in cambios:
            if quote.ya_cotizada:
                PricingService.recompute_summary(db, quote)
            elif quote.price_summary:
                quote.price_summary.discount_rate = cambios["discount_rate"]

        _commit(db, user, quote, "Cotizacion editada", f"campos={sorted(cambios)}")
        return quote

    @staticmethod
    def submit_quote(db: Session, user: User, quote: Quote) -> Quote:
        _require_status(quote, EstadoQuoteEnum.DRAFT.value)
        quote.status = EstadoQuoteEnum.SUBMITTED.value
        quote.submitted_at = datetime.utcnow()
        _commit(db, user, quote, "Cotizacion enviada")
        return quote

    @staticmethod
    def approve_quote(db: Session, staff: User, quote: Quote) -> Quote:
        _require_status(quote, EstadoQuoteEnum.SUBMITTED.value)
        quote.status = EstadoQuoteEnum.APPROVED.value
        quote.approved_at = datetime.utcnow()
        _commit(db, staff, quote, "Cotizacion aprobada")
        return quote

    @staticmethod
    def reject_quote(db: Session, staff: User, quote: Quote, manager_note: Optional[str] = None) -> Quote:
        _require_status(quote, EstadoQuoteEnum.SUBMITTED.value, EstadoQuoteEnum.APPROVED.value)
        quote.status = EstadoQuoteEnum.REJECTED.value
        if manager_note:
            quote.manager_note = manager_note
        _commit(db, staff, quote, "Cotizacion rechazada")
        return quote


# ========================================================================
# HELPERS
# ========================================================================

def _require_status(quote: Quote, *estados: str) -> None:
    if quote.status not in estados:
        raise QuoteStateError(f"현재 상태({quote.status})에서는 처리할 수 없습니다.")


def _commit(db: Session, user: User, quote: Quote, accion: str, detalle: str = "") -> None:
    try:
        db.commit()
        db.refresh(quote)
    except SQLAlchemyError as e:
        db.rollback()
        log_error("quotes", user.email, f"Error: {accion}", f"quote_id={quote.id}, error={e}")
        raise QuotePersistenceError("견적 저장 중 오류가 발생했습니다.") from e
    log_event("quotes", user.email, accion, f"quote_id={quote.id} {detalle}".strip())


def _build_service_row(payload: ServiceItemCreate, codigo: str):
    if isinstance(payload, AirportItemCreate):
        return AirportService(
            airport_code=codigo,
            passenger_count=payload.passenger_count,
            flight_number=payload.flight_number,
            pickup_datetime=payload.pickup_datetime,
            special_requests=payload.special_requests,
        )
    if isinstance(payload, RentcarItemCreate):
        return RentcarService(
            rentcar_code=codigo,
            rentcar_count=payload.quantity,
            pickup_datetime=payload.pickup_datetime,
            pickup_location=payload.pickup_location,
            destination=payload.destination,
            special_requests=payload.special_requests,
        )
    if isinstance(payload, TourItemCreate):
        return TourService(
            tour_code=codigo,
            tour_date=payload.tour_date,
            participant_count=payload.participant_count,
            pickup_location=payload.pickup_location,
            special_requests=payload.special_requests,
        )
    return HotelService(
        hotel_code=codigo,
        checkin_date=payload.checkin_date,
        checkout_date=payload.checkout_date,
        room_count=payload.room_count,
        guest_count=payload.guest_count,
        special_requests=payload.special_requests,
    )


def _json_options(payload: ServiceItemCreate) -> dict:
    """Selección original guardada en quote_item.options (serializable a JSON)"""
    return payload.model_dump(mode="json", exclude={"service_type", "special_requests"})
