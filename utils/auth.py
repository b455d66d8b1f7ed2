"""
Utilidades para autenticación JWT y manejo de contraseñas
"""
import os
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, ExpiredSignatureError, jwt
from passlib.context import CryptContext
from fastapi import HTTPException, status


# Configuración de seguridad
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "cambiar-en-produccion-clave-de-desarrollo")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = 30
REFRESH_TOKEN_EXPIRE_DAYS = 7

LOGIN_ROUTE = "/login"

# Contexto de encriptación para passwords
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def credentials_exception(detail: str = "로그인이 필요합니다.") -> HTTPException:
    """401 con la ruta de login, equivalente API de la redirección a /login"""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer", "Location": LOGIN_ROUTE},
    )


# ========== FUNCIONES DE PASSWORD ==========

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Genera el hash de una contraseña
    Bcrypt tiene un límite de 72 bytes, truncamos si es necesario
    """
    if len(password.encode('utf-8')) > 72:
        password = password.encode('utf-8')[:72].decode('utf-8', errors='ignore')
    return pwd_context.hash(password)


# ========== FUNCIONES DE JWT ==========

def _create_token(data: dict, expire: datetime, token_type: str) -> str:
    to_encode = data.copy()
    to_encode.update({
        "exp": expire,
        "iat": datetime.utcnow(),
        "type": token_type
    })
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    return _create_token(data, expire, "access")


def create_refresh_token(data: dict) -> str:
    """Token de refresco con mayor duración"""
    expire = datetime.utcnow() + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
    return _create_token(data, expire, "refresh")


def verify_token(token: str, token_type: str = "access") -> dict:
    """
    Verifica y decodifica un token JWT

    Args:
        token: El token JWT a verificar
        token_type: Tipo de token esperado ("access" o "refresh")

    Returns:
        dict: Payload del token decodificado

    Raises:
        HTTPException: Si el token es inválido o expirado
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise credentials_exception("세션이 만료되었습니다. 다시 로그인해주세요.")
    except JWTError:
        raise credentials_exception()

    if payload.get("type") != token_type:
        raise credentials_exception()

    return payload
