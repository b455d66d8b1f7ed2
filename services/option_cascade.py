"""
Resolución de opciones en cascada para los formularios de cotización

Cadena de crucero:   itinerario -> crucero -> forma de pago -> camarote
Cadena de vehículo:  categoría -> vehículo
Grillas compuestas:  airport / rentcar / tour / hotel -> código fijo de la grilla

Reglas:
- Si falta una clave previa, la lista es vacía.
- Las grillas con vigencia filtran start_date <= checkin <= end_date.
- Un error de consulta se registra y devuelve lista vacía (nunca se propaga).
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from dateutil import parser as date_parser
from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.referencia import (
    ScheduleInfo, CruiseInfo, PaymentInfo, RoomInfo, CarInfo, CategoryInfo,
    RoomPrice, CarPrice, AirportPrice, RentPrice, TourPrice, HotelPrice,
)
from utils.logging_utils import log_warning


Option = Dict[str, str]


def parse_checkin(value) -> Optional[date]:
    """Acepta date, datetime o string ISO; vacío -> None"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date_parser.isoparse(str(value)).date()


# ========================================================================
# SELECCIÓN EN CURSO
# ========================================================================

class CascadeSelection:
    """
    Selección parcial del formulario de crucero.
    Se pasa explícitamente a cada consulta; cambiar un nivel limpia todos los niveles
    que dependen de él.
    """

    FIELDS = (
        "checkin", "schedule_code", "cruise_code", "payment_code", "room_code",
        "car_category_code", "vehicle_code",
    )

    DOWNSTREAM = {
        "checkin": ("cruise_code", "payment_code", "room_code", "car_category_code", "vehicle_code"),
        "schedule_code": ("cruise_code", "payment_code", "room_code", "car_category_code", "vehicle_code"),
        "cruise_code": ("payment_code", "room_code", "car_category_code", "vehicle_code"),
        "payment_code": ("room_code",),
        "room_code": (),
        "car_category_code": ("vehicle_code",),
        "vehicle_code": (),
    }

    def __init__(self, **values):
        for field in self.FIELDS:
            setattr(self, field, None)
        # Orden de FIELDS: los niveles superiores se asignan primero
        for field in self.FIELDS:
            if values.get(field):
                self._assign(field, values[field])

    def _assign(self, field: str, value) -> None:
        if field == "checkin":
            value = parse_checkin(value)
        setattr(self, field, value or None)

    def set(self, field: str, value) -> None:
        if field not in self.DOWNSTREAM:
            raise KeyError(field)
        previo = getattr(self, field)
        self._assign(field, value)
        if getattr(self, field) != previo:
            for dependiente in self.DOWNSTREAM[field]:
                setattr(self, dependiente, None)

    def as_dict(self) -> Dict[str, object]:
        return {field: getattr(self, field) for field in self.FIELDS}


# ========================================================================
# HELPERS DE CONSULTA
# ========================================================================

def window_filter(model, checkin: date, nullable: bool = False):
    if nullable:
        return and_(
            or_(model.start_date.is_(None), model.start_date <= checkin),
            or_(model.end_date.is_(None), model.end_date >= checkin),
        )
    return and_(model.start_date <= checkin, model.end_date >= checkin)


def _distinct(db: Session, column, filters: Sequence, area: str) -> List:
    """Valores únicos y ordenados de una columna; ante error devuelve []"""
    try:
        rows = db.query(column).filter(*filters).distinct().order_by(column).all()
    except SQLAlchemyError as e:
        db.rollback()
        log_warning("opciones", "sistema", f"Error consultando {area}", f"error={e}")
        return []
    return [row[0] for row in rows if row[0] not in (None, "")]


def _resolve_labels(db: Session, info_model, codes: List[str], area: str) -> List[Option]:
    if not codes:
        return []
    try:
        infos = db.query(info_model).filter(info_model.code.in_(codes)).all()
    except SQLAlchemyError as e:
        db.rollback()
        log_warning("opciones", "sistema", f"Error resolviendo nombres de {area}", f"error={e}")
        infos = []
    nombres = {info.code: info.name for info in infos}
    return [{"code": code, "label": nombres.get(code, code)} for code in codes]


def _plain_options(values: Iterable) -> List[Option]:
    return [{"code": str(v), "label": str(v)} for v in values]


# ========================================================================
# CADENA DE CRUCERO
# ========================================================================

def list_schedules(db: Session) -> List[Option]:
    try:
        infos = db.query(ScheduleInfo).order_by(ScheduleInfo.code).all()
    except SQLAlchemyError as e:
        db.rollback()
        log_warning("opciones", "sistema", "Error consultando itinerarios", f"error={e}")
        return []
    return [{"code": info.code, "label": info.name} for info in infos]


def list_cruises(db: Session, selection: CascadeSelection) -> List[Option]:
    if not (selection.schedule_code and selection.checkin):
        return []
    codes = _distinct(db, RoomPrice.cruise_code, [
        RoomPrice.schedule_code == selection.schedule_code,
        window_filter(RoomPrice, selection.checkin),
    ], "cruceros")
    return _resolve_labels(db, CruiseInfo, codes, "cruceros")


def list_payments(db: Session, selection: CascadeSelection) -> List[Option]:
    if not (selection.schedule_code and selection.checkin and selection.cruise_code):
        return []
    codes = _distinct(db, RoomPrice.payment_code, [
        RoomPrice.schedule_code == selection.schedule_code,
        RoomPrice.cruise_code == selection.cruise_code,
        window_filter(RoomPrice, selection.checkin),
    ], "formas de pago")
    return _resolve_labels(db, PaymentInfo, codes, "formas de pago")


def list_rooms(db: Session, selection: CascadeSelection) -> List[Option]:
    if not (selection.schedule_code and selection.checkin
            and selection.cruise_code and selection.payment_code):
        return []
    codes = _distinct(db, RoomPrice.room_code, [
        RoomPrice.schedule_code == selection.schedule_code,
        RoomPrice.cruise_code == selection.cruise_code,
        RoomPrice.payment_code == selection.payment_code,
        window_filter(RoomPrice, selection.checkin),
    ], "camarotes")
    return _resolve_labels(db, RoomInfo, codes, "camarotes")


def list_room_categories(db: Session, selection: CascadeSelection) -> List[Option]:
    """Categorías de tarifa (adulto, niño, ...) disponibles para el camarote elegido"""
    if not (selection.schedule_code and selection.checkin and selection.cruise_code
            and selection.payment_code and selection.room_code):
        return []
    values = _distinct(db, RoomPrice.room_category, [
        RoomPrice.schedule_code == selection.schedule_code,
        RoomPrice.cruise_code == selection.cruise_code,
        RoomPrice.payment_code == selection.payment_code,
        RoomPrice.room_code == selection.room_code,
        window_filter(RoomPrice, selection.checkin),
    ], "categorias de camarote")
    return _plain_options(values)


# ========================================================================
# CADENA DE VEHÍCULO
# ========================================================================

def _car_filters(selection: CascadeSelection) -> List:
    filters = [
        CarPrice.schedule_code == selection.schedule_code,
        CarPrice.cruise_code == selection.cruise_code,
    ]
    if selection.checkin:
        filters.append(window_filter(CarPrice, selection.checkin, nullable=True))
    return filters


def list_car_categories(db: Session, selection: CascadeSelection) -> List[Option]:
    if not (selection.schedule_code and selection.cruise_code):
        return []
    codes = _distinct(db, CarPrice.category_code, _car_filters(selection), "categorias de vehiculo")
    return _resolve_labels(db, CategoryInfo, codes, "categorias de vehiculo")


def list_vehicles(db: Session, selection: CascadeSelection) -> List[Option]:
    if not (selection.schedule_code and selection.cruise_code and selection.car_category_code):
        return []
    filters = _car_filters(selection) + [CarPrice.category_code == selection.car_category_code]
    codes = _distinct(db, CarPrice.car_code, filters, "vehiculos")
    return _resolve_labels(db, CarInfo, codes, "vehiculos")


# ========================================================================
# GRILLAS COMPUESTAS (airport / rentcar / tour / hotel)
# ========================================================================

@dataclass(frozen=True)
class CompositeGrid:
    model: type
    levels: Tuple[str, ...]
    code_column: str
    dated: bool = False


COMPOSITE_GRIDS: Dict[str, CompositeGrid] = {
    "airport": CompositeGrid(AirportPrice, ("airport_category", "airport_route", "airport_car_type"), "airport_code"),
    "rentcar": CompositeGrid(RentPrice, ("rent_category", "rent_route", "rent_car_type"), "rent_code"),
    "tour": CompositeGrid(TourPrice, ("tour_name", "tour_vehicle", "tour_type", "tour_capacity"), "tour_code"),
    "hotel": CompositeGrid(HotelPrice, ("hotel_name", "room_name", "room_type"), "hotel_code", dated=True),
}


def _coerce(grid: CompositeGrid, level: str, value):
    column = getattr(grid.model, level)
    if column.type.python_type is int and not isinstance(value, int):
        return int(value)
    return value


def _grid_filters(grid: CompositeGrid, values: Sequence, checkin: Optional[date]) -> List:
    filters = [
        getattr(grid.model, level) == _coerce(grid, level, value)
        for level, value in zip(grid.levels, values)
    ]
    if grid.dated and checkin:
        filters.append(window_filter(grid.model, checkin, nullable=True))
    return filters


def next_level(grid: CompositeGrid, selected: Dict[str, object]) -> Tuple[Optional[str], List]:
    """Primer nivel sin valor y los valores ya elegidos antes de él"""
    values = []
    for level in grid.levels:
        value = selected.get(level)
        if value in (None, ""):
            return level, values
        values.append(value)
    return None, values


def list_composite_options(db: Session, service: str, selected: Dict[str, object],
                           checkin: Optional[date] = None) -> Tuple[Optional[str], List[Option]]:
    """
    Opciones del siguiente nivel sin elegir de la grilla del servicio.
    Devuelve (nombre_del_nivel, opciones); nivel None cuando ya está todo elegido.
    """
    grid = COMPOSITE_GRIDS[service]
    level, values = next_level(grid, selected)
    if level is None:
        return None, []
    try:
        filters = _grid_filters(grid, values, checkin)
    except (TypeError, ValueError):
        return level, []
    found = _distinct(db, getattr(grid.model, level), filters, f"{service}.{level}")
    return level, _plain_options(found)


def find_composite_code(db: Session, service: str, selected: Dict[str, object],
                        checkin: Optional[date] = None):
    """
    Busca la fila de grilla que corresponde a la selección completa.
    Devuelve la fila (con código y precio) o None si no existe o la consulta falla.
    """
    grid = COMPOSITE_GRIDS[service]
    level, values = next_level(grid, selected)
    if level is not None:
        return None
    try:
        filters = _grid_filters(grid, values, checkin)
        return db.query(grid.model).filter(*filters).order_by(grid.model.id).first()
    except (TypeError, ValueError):
        return None
    except SQLAlchemyError as e:
        db.rollback()
        log_warning("opciones", "sistema", f"Error buscando codigo de {service}", f"error={e}")
        return None


def code_of(service: str, row) -> str:
    return getattr(row, COMPOSITE_GRIDS[service].code_column)
