"""
Endpoints de autenticación (registro, login, refresh, sesión)
"""
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from database import conexion
from models.usuario import User, RolUsuario
from schemas.auth import SignupRequest, UserRead, Token, RefreshTokenRequest
from utils.auth import (
    verify_password, get_password_hash,
    create_access_token, create_refresh_token, verify_token, credentials_exception,
    ACCESS_TOKEN_EXPIRE_MINUTES
)
from utils.dependencies import get_current_user
from utils.logging_utils import log_event
from utils.rate_limiter import limiter, LOGIN_LIMIT


router = APIRouter(prefix="/auth", tags=["Autenticación"])


def _issue_tokens(user: User) -> dict:
    access_token = create_access_token(
        data={"sub": user.email, "user_id": user.id, "role": user.role},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    refresh_token = create_refresh_token(data={"sub": user.email, "user_id": user.id})
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "expires_in": ACCESS_TOKEN_EXPIRE_MINUTES * 60  # en segundos
    }


# ========== ENDPOINTS DE AUTENTICACIÓN ==========

@router.post("/signup", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def registrar_usuario(datos: SignupRequest, db: Session = Depends(conexion.get_db)):
    """
    Registro de cliente. Todo usuario nuevo empieza como guest
    y pasa a user al hacer su primera reserva.
    """
    email = datos.email.lower()
    try:
        if db.query(User).filter(User.email == email).first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="이미 가입된 이메일입니다."
            )

        nuevo = User(
            email=email,
            hashed_password=get_password_hash(datos.password),
            name=datos.name,
            role=RolUsuario.GUEST.value,
        )
        db.add(nuevo)
        db.commit()
        db.refresh(nuevo)

        log_event("auth", email, "Usuario registrado", f"user_id={nuevo.id}")
        return nuevo

    except HTTPException:
        raise
    except IntegrityError as e:
        db.rollback()
        log_event("auth", email, "Error de integridad al registrar", f"error={str(e)}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="이미 가입된 이메일입니다."
        )
    except SQLAlchemyError as e:
        db.rollback()
        log_event("auth", email, "Error al registrar usuario", f"error={str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="회원가입 처리 중 오류가 발생했습니다."
        )


@router.post("/login", response_model=Token)
@limiter.limit(LOGIN_LIMIT)
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(conexion.get_db)
):
    """
    Inicia sesión (username = email) y retorna tokens de acceso y refresco
    """
    email = form_data.username.lower()
    try:
        usuario = db.query(User).filter(User.email == email).first()

        if not usuario or not verify_password(form_data.password, usuario.hashed_password):
            log_event("auth", email, "Intento de login fallido", "")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="이메일 또는 비밀번호가 올바르지 않습니다.",
                headers={"WWW-Authenticate": "Bearer"},
            )

        if usuario.status != "active":
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="비활성화된 계정입니다."
            )

        usuario.last_login = datetime.utcnow()
        db.commit()

        log_event("auth", usuario.email, "Login exitoso", f"role={usuario.role}")
        return _issue_tokens(usuario)

    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        log_event("auth", "system", "Error en login", f"error={str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="로그인 처리 중 오류가 발생했습니다."
        )


@router.post("/refresh", response_model=Token)
def refresh_token(
    refresh_data: RefreshTokenRequest,
    db: Session = Depends(conexion.get_db)
):
    """
    Renueva el token de acceso usando un refresh token válido
    """
    payload = verify_token(refresh_data.refresh_token, token_type="refresh")
    user_id = payload.get("user_id")
    if user_id is None:
        raise credentials_exception()

    usuario = db.query(User).filter(User.id == user_id, User.status == "active").first()
    if not usuario:
        raise credentials_exception()

    log_event("auth", usuario.email, "Token renovado", "")
    return _issue_tokens(usuario)


@router.get("/me", response_model=UserRead)
def obtener_sesion(current_user: User = Depends(get_current_user)):
    """Usuario de la sesión actual"""
    return current_user


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user)):
    """
    Los tokens no se guardan en servidor: el cliente descarta ambos tokens.
    """
    log_event("auth", current_user.email, "Logout", "")
    return {"message": "로그아웃되었습니다."}
