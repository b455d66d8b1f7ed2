"""
Schemas Pydantic para autenticación y perfil
"""
from typing import Optional
from datetime import date, datetime
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator


# ========== SCHEMAS DE USUARIO ==========

class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    name: Optional[str] = Field(None, max_length=60)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if not any(c.isalpha() for c in v):
            raise ValueError('비밀번호에는 문자가 포함되어야 합니다.')
        if not any(c.isdigit() for c in v):
            raise ValueError('비밀번호에는 숫자가 포함되어야 합니다.')
        return v


class ProfileUpdate(BaseModel):
    """Campos de perfil que se guardan desde el formulario o al reservar"""
    name: Optional[str] = Field(None, max_length=60)
    english_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    passport_number: Optional[str] = Field(None, max_length=30)
    birth_date: Optional[date] = None
    emergency_contact: Optional[str] = Field(None, max_length=60)


class UserRead(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    english_name: Optional[str] = None
    role: str
    status: str
    phone: Optional[str] = None
    passport_number: Optional[str] = None
    birth_date: Optional[date] = None
    emergency_contact: Optional[str] = None
    created_at: datetime
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ========== SCHEMAS DE AUTENTICACIÓN ==========

class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # segundos


class RefreshTokenRequest(BaseModel):
    refresh_token: str
