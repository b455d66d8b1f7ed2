"""
Schemas de opciones de selección en cascada
"""
from pydantic import BaseModel


class OptionRead(BaseModel):
    code: str
    label: str


class CodeLookupRead(BaseModel):
    """Resultado de la búsqueda de código compuesto (airport/rentcar/tour/hotel)"""
    code: str
    price: float
