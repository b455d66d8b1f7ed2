"""
Opciones en cascada para los formularios de cotización
Cada nivel recibe los códigos ya elegidos como query params.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from database import conexion
from models.quote import TipoServicioEnum
from schemas.opciones import OptionRead, CodeLookupRead
from services import option_cascade
from services.option_cascade import CascadeSelection, COMPOSITE_GRIDS


router = APIRouter(prefix="/options", tags=["Opciones"])


def seleccion_actual(
    checkin: Optional[str] = Query(None, description="YYYY-MM-DD"),
    schedule_code: Optional[str] = Query(None),
    cruise_code: Optional[str] = Query(None),
    payment_code: Optional[str] = Query(None),
    room_code: Optional[str] = Query(None),
    car_category_code: Optional[str] = Query(None),
) -> CascadeSelection:
    try:
        return CascadeSelection(
            checkin=checkin,
            schedule_code=schedule_code,
            cruise_code=cruise_code,
            payment_code=payment_code,
            room_code=room_code,
            car_category_code=car_category_code,
        )
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="날짜 형식이 올바르지 않습니다."
        )


# ========== CADENA DE CRUCERO ==========

@router.get("/schedules", response_model=List[OptionRead])
def listar_itinerarios(db: Session = Depends(conexion.get_db)):
    return option_cascade.list_schedules(db)


@router.get("/cruises", response_model=List[OptionRead])
def listar_cruceros(
    seleccion: CascadeSelection = Depends(seleccion_actual),
    db: Session = Depends(conexion.get_db)
):
    return option_cascade.list_cruises(db, seleccion)


@router.get("/payments", response_model=List[OptionRead])
def listar_formas_pago(
    seleccion: CascadeSelection = Depends(seleccion_actual),
    db: Session = Depends(conexion.get_db)
):
    return option_cascade.list_payments(db, seleccion)


@router.get("/rooms", response_model=List[OptionRead])
def listar_camarotes(
    seleccion: CascadeSelection = Depends(seleccion_actual),
    db: Session = Depends(conexion.get_db)
):
    return option_cascade.list_rooms(db, seleccion)


@router.get("/room-categories", response_model=List[OptionRead])
def listar_categorias_camarote(
    seleccion: CascadeSelection = Depends(seleccion_actual),
    db: Session = Depends(conexion.get_db)
):
    return option_cascade.list_room_categories(db, seleccion)


# ========== CADENA DE VEHÍCULO ==========

@router.get("/car-categories", response_model=List[OptionRead])
def listar_categorias_vehiculo(
    seleccion: CascadeSelection = Depends(seleccion_actual),
    db: Session = Depends(conexion.get_db)
):
    return option_cascade.list_car_categories(db, seleccion)


@router.get("/vehicles", response_model=List[OptionRead])
def listar_vehiculos(
    seleccion: CascadeSelection = Depends(seleccion_actual),
    db: Session = Depends(conexion.get_db)
):
    return option_cascade.list_vehicles(db, seleccion)


# ========== GRILLAS COMPUESTAS ==========

def _niveles_elegidos(servicio: TipoServicioEnum, request: Request) -> dict:
    niveles = COMPOSITE_GRIDS[servicio.value].levels
    return {nivel: request.query_params.get(nivel) for nivel in niveles}


def _checkin_param(request: Request):
    try:
        return option_cascade.parse_checkin(request.query_params.get("checkin"))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="날짜 형식이 올바르지 않습니다."
        )


@router.get("/{servicio}/code", response_model=CodeLookupRead)
def buscar_codigo(
    servicio: TipoServicioEnum,
    request: Request,
    db: Session = Depends(conexion.get_db)
):
    """Código fijo de la grilla para la selección completa (ej. categoría + ruta + vehículo)"""
    fila = option_cascade.find_composite_code(
        db, servicio.value, _niveles_elegidos(servicio, request), checkin=_checkin_param(request)
    )
    if fila is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="선택한 조건에 맞는 서비스를 찾을 수 없습니다."
        )
    return {"code": option_cascade.code_of(servicio.value, fila), "price": float(fila.price or 0)}


@router.get("/{servicio}")
def listar_opciones_servicio(
    servicio: TipoServicioEnum,
    request: Request,
    db: Session = Depends(conexion.get_db)
):
    """
    Opciones del primer nivel sin elegir.
    Ej: /options/airport -> categorías; /options/airport?airport_category=픽업 -> rutas
    """
    nivel, opciones = option_cascade.list_composite_options(
        db, servicio.value, _niveles_elegidos(servicio, request), checkin=_checkin_param(request)
    )
    return {"level": nivel, "options": opciones}
