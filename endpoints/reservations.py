"""
Endpoints de reservas del cliente
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session

from database import conexion
from models.reservation import Reservation
from models.usuario import User
from schemas.payments import PaymentCreate
from schemas.reservations import ReservationRead, ReservationPaymentRead
from services import PaymentService
from services.errors import ServiceError
from utils.dependencies import get_current_user, service_http_error


router = APIRouter(prefix="/reservations", tags=["Reservas"])


def _reserva_visible(db: Session, reservation_id: int, user: User) -> Reservation:
    reserva = db.query(Reservation).filter(Reservation.id == reservation_id).first()
    if not reserva or (reserva.user_id != user.id and not user.es_staff):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="예약을 찾을 수 없습니다."
        )
    return reserva


@router.get("", response_model=List[ReservationRead])
def listar_reservas(
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    return (
        db.query(Reservation)
        .filter(Reservation.user_id == current_user.id)
        .order_by(Reservation.id.desc())
        .all()
    )


@router.get("/{reservation_id}", response_model=ReservationRead)
def obtener_reserva(
    reservation_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    return _reserva_visible(db, reservation_id, current_user)


@router.post("/{reservation_id}/payments", response_model=ReservationPaymentRead,
             status_code=status.HTTP_201_CREATED)
def crear_pago(
    datos: PaymentCreate,
    reservation_id: int = Path(..., gt=0),
    db: Session = Depends(conexion.get_db),
    current_user: User = Depends(get_current_user)
):
    """Registra un pago pending; el estado final lo define el retorno de la pasarela"""
    reserva = _reserva_visible(db, reservation_id, current_user)
    if reserva.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="예약을 찾을 수 없습니다."
        )
    try:
        return PaymentService.create_payment(
            db, current_user, reserva,
            amount=datos.amount, payment_method=datos.payment_method, memo=datos.memo
        )
    except ServiceError as e:
        raise service_http_error(e)
