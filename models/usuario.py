"""
Modelo de usuario del portal de reservas
Roles: guest (recién registrado), member/user (cliente con reserva), manager/admin (staff)
"""
from datetime import datetime
from enum import Enum

from sqlalchemy import Column, Integer, String, Date, DateTime, Index
from sqlalchemy.orm import relationship

from database.conexion import Base


class RolUsuario(str, Enum):
    GUEST = "guest"
    MEMBER = "member"
    USER = "user"
    MANAGER = "manager"
    ADMIN = "admin"


ROLES_STAFF = (RolUsuario.MANAGER.value, RolUsuario.ADMIN.value)


class User(Base):
    """Tabla de usuarios (identidad + datos de perfil)"""
    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_email", "email"),
        Index("idx_users_role", "role"),
    )

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(120), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(60), nullable=True)
    english_name = Column(String(100), nullable=True)

    role = Column(String(20), nullable=False, default=RolUsuario.GUEST.value)
    status = Column(String(20), nullable=False, default="active")

    # Perfil extendido (se completa al reservar)
    phone = Column(String(30), nullable=True)
    passport_number = Column(String(30), nullable=True)
    birth_date = Column(Date, nullable=True)
    emergency_contact = Column(String(60), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    quotes = relationship("Quote", back_populates="user")
    reservations = relationship("Reservation", back_populates="user")

    @property
    def es_staff(self) -> bool:
        return self.role in ROLES_STAFF

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
