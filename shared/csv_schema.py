"""Esquema canonico del archivo CSV de productos."""

from __future__ import annotations

PRODUCT_HEADERS: tuple[str, ...] = (
    "id",
    "nombre",
    "descripcion",
    "precio",
    "cantidad",
    "activo",
)

PRODUCT_HEADER_LINE = ",".join(PRODUCT_HEADERS)

ACTIVE_FLAG = "1"
INACTIVE_FLAG = "0"


def normalize_header_name(header: str) -> str:
    """Normaliza un nombre de columna removiendo BOM y espacios extra."""
    return header.replace("\ufeff", "").strip()


def is_product_header(line: str) -> bool:
    """Indica si una linea corresponde al header canonico de productos."""
    columns = [normalize_header_name(column).casefold() for column in line.split(",")]
    return tuple(columns) == PRODUCT_HEADERS
