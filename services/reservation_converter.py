"""
Conversión de una cotización confirmada en reserva

En una sola transacción:
  1. guarda el perfil del usuario y lo promueve de guest a user
  2. inserta la reserva (pending, total = total de la cotización)
  3. marca la cotización como reserved
Si cualquier paso falla no queda nada escrito.
"""

from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models.quote import Quote, EstadoQuoteEnum
from models.reservation import Reservation, EstadoReservaEnum
from models.usuario import User, RolUsuario
from schemas.auth import ProfileUpdate
from schemas.reservations import ReservationRequest
from services.errors import (
    QuoteNotFoundError, QuoteStateError, ReservationConflictError, QuotePersistenceError
)
from utils.logging_utils import log_event, log_error


def apply_profile(user: User, profile: ProfileUpdate) -> None:
    """Copia al usuario solo los campos de perfil informados"""
    for campo, valor in profile.model_dump(exclude_unset=True).items():
        if valor is not None:
            setattr(user, campo, valor)


def promote_role(user: User) -> None:
    # member y staff conservan su rol
    if user.role == RolUsuario.GUEST.value:
        user.role = RolUsuario.USER.value


class ReservationService:

    @staticmethod
    def convert_quote(db: Session, user: User, quote_id: int, request: ReservationRequest) -> Reservation:
        quote = db.query(Quote).filter(Quote.id == quote_id).first()
        if not quote or quote.user_id != user.id:
            raise QuoteNotFoundError("견적을 찾을 수 없습니다.")

        if quote.status == EstadoQuoteEnum.RESERVED.value or quote.reservation is not None:
            raise ReservationConflictError("이미 예약이 완료된 견적입니다.")
        if not quote.is_reservable():
            raise QuoteStateError("승인된 견적만 예약할 수 있습니다.")

        try:
            apply_profile(user, request.profile)
            promote_role(user)

            reservation = Reservation(
                user_id=user.id,
                quote_id=quote.id,
                type=request.type,
                status=EstadoReservaEnum.PENDING.value,
                total_amount=quote.total_price or 0,
                contact_name=request.contact_name or user.name,
                contact_phone=request.contact_phone or user.phone,
                contact_email=request.contact_email or user.email,
                emergency_contact=request.emergency_contact or user.emergency_contact,
                applicant_name=request.applicant_name,
                applicant_email=request.applicant_email,
                applicant_phone=request.applicant_phone,
                special_requests=request.special_requests,
                applied_at=datetime.utcnow(),
            )
            db.add(reservation)

            quote.status = EstadoQuoteEnum.RESERVED.value
            db.commit()
            db.refresh(reservation)
        except IntegrityError as e:
            db.rollback()
            log_error("reservas", user.email, "Reserva duplicada", f"quote_id={quote_id}, error={e}")
            raise ReservationConflictError("이미 예약이 완료된 견적입니다.") from e
        except SQLAlchemyError as e:
            db.rollback()
            log_error("reservas", user.email, "Error creando reserva", f"quote_id={quote_id}, error={e}")
            raise QuotePersistenceError("예약 처리 중 오류가 발생했습니다.") from e

        log_event("reservas", user.email, "Reserva creada",
                  f"reservation_id={reservation.id}, quote_id={quote_id}, role={user.role}")
        return reservation
