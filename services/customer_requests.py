"""
Solicitudes del cliente ligadas opcionalmente a una cotización o reserva propia
"""

from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.customer_request import (
    CustomerRequest, CATEGORIA_POR_TIPO, EstadoSolicitudEnum, ESTADOS_CERRADOS
)
from models.quote import Quote
from models.reservation import Reservation
from models.usuario import User
from schemas.customer_requests import CustomerRequestCreate, CustomerRequestUpdate
from services.errors import (
    CustomerRequestNotFoundError, QuoteNotFoundError, ReservationNotFoundError,
    QuotePersistenceError
)
from utils.logging_utils import log_event, log_error


def get_request_for_user(db: Session, request_id: int, user: User) -> CustomerRequest:
    solicitud = db.query(CustomerRequest).filter(CustomerRequest.id == request_id).first()
    if not solicitud or (solicitud.user_id != user.id and not user.es_staff):
        raise CustomerRequestNotFoundError("요청사항을 찾을 수 없습니다.")
    return solicitud


class CustomerRequestService:

    @staticmethod
    def create_request(db: Session, user: User, data: CustomerRequestCreate) -> CustomerRequest:
        """Registra la solicitud en pending; las referencias deben ser del propio usuario"""
        if data.related_quote_id is not None:
            quote = db.query(Quote).filter(Quote.id == data.related_quote_id).first()
            if not quote or quote.user_id != user.id:
                raise QuoteNotFoundError("견적을 찾을 수 없습니다.")
        if data.related_reservation_id is not None:
            reserva = db.query(Reservation).filter(Reservation.id == data.related_reservation_id).first()
            if not reserva or reserva.user_id != user.id:
                raise ReservationNotFoundError("예약을 찾을 수 없습니다.")

        tipo = data.request_type.value
        try:
            solicitud = CustomerRequest(
                user_id=user.id,
                request_type=tipo,
                request_category=CATEGORIA_POR_TIPO[tipo],
                title=data.title,
                description=data.description,
                urgency_level=data.urgency_level.value,
                status=EstadoSolicitudEnum.PENDING.value,
                related_quote_id=data.related_quote_id,
                related_reservation_id=data.related_reservation_id,
            )
            db.add(solicitud)
            db.commit()
            db.refresh(solicitud)
        except SQLAlchemyError as e:
            db.rollback()
            log_error("solicitudes", user.email, "Error registrando solicitud", f"error={e}")
            raise QuotePersistenceError("요청사항 등록에 실패했습니다.") from e

        log_event("solicitudes", user.email, "Solicitud registrada",
                  f"request_id={solicitud.id}, type={tipo}, urgency={solicitud.urgency_level}")
        return solicitud

    @staticmethod
    def respond(db: Session, staff: User, solicitud: CustomerRequest,
                data: CustomerRequestUpdate) -> CustomerRequest:
        solicitud.status = data.status.value
        if data.response_message is not None:
            solicitud.response_message = data.response_message
        if solicitud.status in ESTADOS_CERRADOS:
            solicitud.processed_at = datetime.utcnow()

        try:
            db.commit()
            db.refresh(solicitud)
        except SQLAlchemyError as e:
            db.rollback()
            log_error("solicitudes", staff.email, "Error respondiendo solicitud",
                      f"request_id={solicitud.id}, error={e}")
            raise QuotePersistenceError("요청사항 처리 중 오류가 발생했습니다.") from e

        log_event("solicitudes", staff.email, "Solicitud actualizada",
                  f"request_id={solicitud.id}, status={solicitud.status}")
        return solicitud
