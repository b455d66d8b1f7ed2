"""
Dependencias de autenticación y autorización
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from database import conexion
from models.usuario import User, ROLES_STAFF
from utils.auth import verify_token, credentials_exception
from services.errors import ServiceError, QuoteValidationError
from utils.logging_utils import log_event


# auto_error=False: la ausencia de token se traduce a nuestro 401 con Location /login
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


# ========== DEPENDENCIAS DE AUTENTICACIÓN ==========

def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(conexion.get_db)
) -> User:
    """
    Obtiene el usuario actual desde el token JWT (equivalente a getUser())

    Raises:
        HTTPException: 401 si no hay sesión válida
    """
    if not token:
        raise credentials_exception()

    payload = verify_token(token, token_type="access")
    user_id = payload.get("user_id")
    if user_id is None:
        raise credentials_exception()

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise credentials_exception()

    if user.status != "active":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="비활성화된 계정입니다."
        )
    return user


# ========== DEPENDENCIAS POR ROL ==========

def require_staff(current_user: User = Depends(get_current_user)) -> User:
    """Requiere rol manager o admin (precios, aprobación de cotizaciones)"""
    if current_user.role not in ROLES_STAFF:
        log_event("auth", current_user.email, "Intento de acceso staff sin permisos", f"role={current_user.role}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="관리자 권한이 필요합니다."
        )
    return current_user


# ========== ERRORES DE SERVICIO ==========

def service_http_error(error: ServiceError) -> HTTPException:
    """Traduce una excepción de negocio a HTTPException"""
    detail = error.detail
    if isinstance(error, QuoteValidationError) and error.missing_fields:
        detail = {"message": error.detail, "missing_fields": error.missing_fields}
    return HTTPException(status_code=error.status_code, detail=detail)
