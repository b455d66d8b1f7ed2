"""
Perfil del usuario
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from database import conexion
from models.usuario import User
from schemas.auth import ProfileUpdate, UserRead
from services.reservation_converter import apply_profile
from utils.dependencies import get_current_user
from utils.logging_utils import log_event


router = APIRouter(prefix="/users", tags=["Usuarios"])


@router.get("/me", response_model=UserRead)
def obtener_perfil(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/me/profile", response_model=UserRead)
def guardar_perfil(
    datos: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(conexion.get_db)
):
    """
    Guarda los datos de perfil (nombre en inglés, pasaporte, contacto...).
    El rol no cambia aquí: la promoción ocurre al reservar.
    """
    try:
        apply_profile(current_user, datos)
        db.commit()
        db.refresh(current_user)
    except SQLAlchemyError as e:
        db.rollback()
        log_event("usuarios", current_user.email, "Error al guardar perfil", f"error={str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="프로필 저장 중 오류가 발생했습니다."
        )

    log_event("usuarios", current_user.email, "Perfil actualizado", "")
    return current_user
