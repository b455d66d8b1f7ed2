"""
Solicitudes del cliente (modificación de cotización, cambios de reserva, consultas...)
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Index
from sqlalchemy.orm import relationship

from database.conexion import Base


class TipoSolicitudEnum(str, Enum):
    QUOTE_MODIFICATION = "quote_modification"
    RESERVATION_MODIFICATION = "reservation_modification"
    SERVICE_INQUIRY = "service_inquiry"
    COMPLAINT = "complaint"
    CANCELLATION = "cancellation"
    ADDITIONAL_SERVICE = "additional_service"
    OTHER = "other"


# Categoría que ve el staff para cada tipo
CATEGORIA_POR_TIPO = {
    TipoSolicitudEnum.QUOTE_MODIFICATION.value: "견적수정요청",
    TipoSolicitudEnum.RESERVATION_MODIFICATION.value: "예약변경요청",
    TipoSolicitudEnum.SERVICE_INQUIRY.value: "서비스문의",
    TipoSolicitudEnum.COMPLAINT.value: "불만접수",
    TipoSolicitudEnum.CANCELLATION.value: "취소요청",
    TipoSolicitudEnum.ADDITIONAL_SERVICE.value: "추가서비스요청",
    TipoSolicitudEnum.OTHER.value: "기타요청",
}


class UrgenciaEnum(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class EstadoSolicitudEnum(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


# Estados que cierran la solicitud (se registra processed_at)
ESTADOS_CERRADOS = (
    EstadoSolicitudEnum.COMPLETED.value,
    EstadoSolicitudEnum.REJECTED.value,
    EstadoSolicitudEnum.CANCELLED.value,
)


class CustomerRequest(Base):
    __tablename__ = "customer_requests"
    __table_args__ = (
        Index("idx_customer_request_user", "user_id"),
        Index("idx_customer_request_status", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    request_type = Column(String(40), nullable=False)
    request_category = Column(String(40), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    urgency_level = Column(String(20), nullable=False, default=UrgenciaEnum.NORMAL.value)
    status = Column(String(20), nullable=False, default=EstadoSolicitudEnum.PENDING.value)

    related_quote_id = Column(Integer, ForeignKey("quote.id"), nullable=True)
    related_reservation_id = Column(Integer, ForeignKey("reservation.id"), nullable=True)

    response_message = Column(Text, nullable=True)
    processed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User")

    def __repr__(self):
        return f"<CustomerRequest(id={self.id}, type='{self.request_type}', status='{self.status}')>"
