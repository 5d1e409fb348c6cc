"""Codificacion de productos a lineas CSV y viceversa."""

from __future__ import annotations

import csv
import re
from io import StringIO

from servidor.domain.models import Producto
from shared.csv_schema import ACTIVE_FLAG, INACTIVE_FLAG, PRODUCT_HEADERS
from shared.errors import StorageReadError

_LINE_BREAK_PATTERN = re.compile(r"[\r\n]+")


def format_number(value: float | int) -> str:
    """Formatea un numero en su forma decimal natural (``10`` y no ``10.0``)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def clean_text_field(value: str | None) -> str:
    """Reemplaza saltos de linea por un espacio para no romper el archivo."""
    if value is None:
        return ""
    return _LINE_BREAK_PATTERN.sub(" ", str(value))


def encode_line(product: Producto) -> str:
    """Serializa un producto como una linea CSV sin terminador."""
    buffer = StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(
        [
            str(product.id),
            clean_text_field(product.nombre),
            clean_text_field(product.descripcion),
            format_number(product.precio),
            str(product.cantidad),
            ACTIVE_FLAG if product.activo else INACTIVE_FLAG,
        ]
    )
    return buffer.getvalue().rstrip("\n")


def decode_line(line: str) -> Producto:
    """Parsea una linea CSV respetando campos entre comillas con comas."""
    try:
        values = next(csv.reader([line]))
    except (csv.Error, StopIteration) as exc:
        raise StorageReadError(f"Linea CSV malformada: {line!r}") from exc

    if len(values) != len(PRODUCT_HEADERS):
        raise StorageReadError(
            f"Se esperaban {len(PRODUCT_HEADERS)} columnas y se encontraron "
            f"{len(values)}: {line!r}"
        )

    raw_id, nombre, descripcion, raw_precio, raw_cantidad, raw_activo = values
    try:
        return Producto(
            id=int(raw_id.strip()),
            nombre=nombre,
            descripcion=descripcion,
            precio=float(raw_precio.strip()),
            cantidad=int(raw_cantidad.strip()),
            activo=raw_activo.strip() == ACTIVE_FLAG,
        )
    except ValueError as exc:
        raise StorageReadError(f"Valores invalidos en linea CSV: {line!r}") from exc
