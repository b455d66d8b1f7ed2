"""
Endpoints de solicitudes del cliente (요청사항)
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from database import conexion
from models.customer_request import CustomerRequest
from models.usuario import User
from schemas.customer_requests import (
    CustomerRequestCreate, CustomerRequestUpdate, CustomerRequestRead
)
from services.customer_requests import CustomerRequestService, get_request_for_user
from services.errors import ServiceError
from utils.dependencies import get_current_user, require_staff, service_http_error


router = APIRouter(prefix="/requests", tags=["Solicitudes"])


@router.post("", response_model=CustomerRequestRead, status_code=status.HTTP_201_CREATED)
def crear_solicitud(
    datos: CustomerRequestCreate,
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return CustomerRequestService.create_request(db, current_user, datos)
    except ServiceError as e:
        raise service_http_error(e)


@router.get("", response_model=List[CustomerRequestRead])
def listar_solicitudes(
    estado: Optional[str] = Query(None, alias="status"),
    todas: bool = Query(False, alias="all", description="Solo staff: solicitudes de todos los usuarios"),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    query = db.query(CustomerRequest)
    if not (todas and current_user.es_staff):
        query = query.filter(CustomerRequest.user_id == current_user.id)
    if estado:
        query = query.filter(CustomerRequest.status == estado)
    return query.order_by(CustomerRequest.created_at.desc(), CustomerRequest.id.desc()).all()


@router.get("/{request_id}", response_model=CustomerRequestRead)
def obtener_solicitud(
    request_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return get_request_for_user(db, request_id, current_user)
    except ServiceError as e:
        raise service_http_error(e)


@router.patch("/{request_id}", response_model=CustomerRequestRead)
def responder_solicitud(
    datos: CustomerRequestUpdate,
    request_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    staff: User = Depends(require_staff)
):
    """Cambio de estado y respuesta del staff; al cerrar se registra processed_at"""
    try:
        solicitud = get_request_for_user(db, request_id, staff)
        return CustomerRequestService.respond(db, staff, solicitud, datos)
    except ServiceError as e:
        raise service_http_error(e)
