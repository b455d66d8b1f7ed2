"""
Endpoints de cotizaciones (견적)
- Alta desde el formulario de crucero, edición mientras es borrador, envío
- Servicios itemizados (airport, rentcar, tour, hotel)
- Staff: precios, aprobación, rechazo
- Avance simulado de la cotización enviada
- Conversión a reserva
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session

from database import conexion
from models.quote import Quote
from models.usuario import User
from schemas.quotes import (
    QuoteDraft, DraftCheck, QuoteUpdate, QuoteReject, QuoteRead, QuoteListItem, QuoteItemRead
)
from schemas.reservations import ReservationRequest, ReservationRead
from schemas.servicios import (
    AirportItemCreate, RentcarItemCreate, TourItemCreate, HotelItemCreate
)
from services import QuoteBuilderService, PricingService, ReservationService, get_quote_for_user
from services.errors import ServiceError, QuoteNotFoundError
from services.status_workflow import STAGES, stage_snapshot
from utils.dependencies import get_current_user, require_staff, service_http_error
from utils.logging_utils import log_event


router = APIRouter(prefix="/quotes", tags=["Cotizaciones"])


def _cargar(db: Session, quote_id: int, user: User) -> Quote:
    try:
        return get_quote_for_user(db, quote_id, user)
    except ServiceError as e:
        raise service_http_error(e)


def _cargar_propia(db: Session, quote_id: int, user: User) -> Quote:
    """Solo el dueño puede editar su cotización"""
    quote = _cargar(db, quote_id, user)
    if quote.user_id != user.id:
        raise service_http_error(QuoteNotFoundError("견적을 찾을 수 없습니다."))
    return quote


# ========== BORRADOR ==========

@router.post("/validate", response_model=DraftCheck)
def validar_borrador(draft: QuoteDraft, current_user: User = Depends(get_current_user)):
    """Qué falta para habilitar el botón de envío"""
    faltantes = draft.missing_fields()
    return {"can_submit": not faltantes, "missing_fields": faltantes}


@router.post("", response_model=QuoteRead, status_code=status.HTTP_201_CREATED)
def crear_cotizacion(
    draft: QuoteDraft,
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Crea la cotización con camarotes y vehículos a precio cero.
    Si falta algún dato obligatorio responde 422 sin escribir nada.
    """
    try:
        return QuoteBuilderService.build_quote(db, current_user, draft)
    except ServiceError as e:
        raise service_http_error(e)


@router.get("", response_model=List[QuoteListItem])
def listar_cotizaciones(
    estado: Optional[str] = Query(None, alias="status"),
    todas: bool = Query(False, alias="all", description="Solo staff: cotizaciones de todos los usuarios"),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    query = db.query(Quote)
    if not (todas and current_user.es_staff):
        query = query.filter(Quote.user_id == current_user.id)
    if estado:
        query = query.filter(Quote.status == estado)
    return query.order_by(Quote.created_at.desc(), Quote.id.desc()).all()


@router.get("/{quote_id}", response_model=QuoteRead)
def obtener_cotizacion(
    quote_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    return _cargar(db, quote_id, current_user)


@router.patch("/{quote_id}", response_model=QuoteRead)
def editar_cotizacion(
    datos: QuoteUpdate,
    quote_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    quote = _cargar_propia(db, quote_id, current_user)
    try:
        return QuoteBuilderService.update_quote(db, current_user, quote, datos)
    except ServiceError as e:
        raise service_http_error(e)


@router.post("/{quote_id}/submit", response_model=QuoteRead)
def enviar_cotizacion(
    quote_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    quote = _cargar_propia(db, quote_id, current_user)
    try:
        return QuoteBuilderService.submit_quote(db, current_user, quote)
    except ServiceError as e:
        raise service_http_error(e)


# ========== SERVICIOS ITEMIZADOS ==========

def _agregar_item(db: Session, user: User, quote_id: int, payload):
    quote = _cargar_propia(db, quote_id, user)
    try:
        return QuoteBuilderService.add_service_item(db, user, quote, payload)
    except ServiceError as e:
        raise service_http_error(e)


@router.post("/{quote_id}/items/airport", response_model=QuoteItemRead, status_code=status.HTTP_201_CREATED)
def agregar_airport(
    payload: AirportItemCreate,
    quote_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    return _agregar_item(db, current_user, quote_id, payload)


@router.post("/{quote_id}/items/rentcar", response_model=QuoteItemRead, status_code=status.HTTP_201_CREATED)
def agregar_rentcar(
    payload: RentcarItemCreate,
    quote_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    return _agregar_item(db, current_user, quote_id, payload)


@router.post("/{quote_id}/items/tour", response_model=QuoteItemRead, status_code=status.HTTP_201_CREATED)
def agregar_tour(
    payload: TourItemCreate,
    quote_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    return _agregar_item(db, current_user, quote_id, payload)


@router.post("/{quote_id}/items/hotel", response_model=QuoteItemRead, status_code=status.HTTP_201_CREATED)
def agregar_hotel(
    payload: HotelItemCreate,
    quote_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    return _agregar_item(db, current_user, quote_id, payload)


# ========== STAFF ==========

@router.post("/{quote_id}/pricing", response_model=QuoteRead)
def calcular_precios(
    quote_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    staff: User = Depends(require_staff)
):
    quote = _cargar(db, quote_id, staff)
    try:
        return PricingService.apply_pricing(db, staff, quote)
    except ServiceError as e:
        raise service_http_error(e)


@router.post("/{quote_id}/approve", response_model=QuoteRead)
def aprobar_cotizacion(
    quote_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    staff: User = Depends(require_staff)
):
    quote = _cargar(db, quote_id, staff)
    try:
        return QuoteBuilderService.approve_quote(db, staff, quote)
    except ServiceError as e:
        raise service_http_error(e)


@router.post("/{quote_id}/reject", response_model=QuoteRead)
def rechazar_cotizacion(
    datos: QuoteReject,
    quote_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    staff: User = Depends(require_staff)
):
    quote = _cargar(db, quote_id, staff)
    try:
        return QuoteBuilderService.reject_quote(db, staff, quote, datos.manager_note)
    except ServiceError as e:
        raise service_http_error(e)


# ========== AVANCE SIMULADO ==========

@router.get("/{quote_id}/progress/{stage}")
def avance_cotizacion(
    stage: str,
    quote_id: int = Path(..., gt=0),
    elapsed: float = Query(0, ge=0, description="Segundos transcurridos en la etapa"),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Paso actual de la etapa y URL siguiente. No cambia el estado de la cotización:
    solo la vuelve a leer para mostrarla.
    """
    if stage not in STAGES:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="존재하지 않는 단계입니다."
        )
    quote = _cargar(db, quote_id, current_user)
    return {
        "progress": stage_snapshot(stage, elapsed, quote.id),
        "quote": QuoteRead.model_validate(quote),
    }


# ========== RESERVA ==========

@router.post("/{quote_id}/reservation", response_model=ReservationRead, status_code=status.HTTP_201_CREATED)
def reservar_cotizacion(
    datos: ReservationRequest,
    quote_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Convierte una cotización aprobada/confirmada en reserva.
    Guarda el perfil, promueve guest -> user y marca la cotización como reserved.
    """
    try:
        reserva = ReservationService.convert_quote(db, current_user, quote_id, datos)
    except ServiceError as e:
        log_event("reservas", current_user.email, "Reserva rechazada", f"quote_id={quote_id}, motivo={e.detail}")
        raise service_http_error(e)
    return reserva
