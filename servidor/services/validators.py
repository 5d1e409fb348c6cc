"""Reglas de validacion y sanitizacion para productos y perfil de usuario.

Todas las funciones son puras: no hacen I/O y acumulan los errores en lugar
de detenerse en la primera regla violada.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any

from shared.protocol import ProductDraft, ValidationResult

MIN_NOMBRE_LENGTH = 3

TIPOS_DOCUMENTO: tuple[str, ...] = ("CC", "TI", "CE", "PAS", "NIT")
NUMERO_DOCUMENTO_MIN_LENGTH = 6
NUMERO_DOCUMENTO_MAX_LENGTH = 15
TELEFONO_MIN_DIGITS = 7
DIRECCION_MIN_LENGTH = 5
DIRECCION_MAX_LENGTH = 100

PROFILE_FIELDS: tuple[str, ...] = (
    "tipoDocumento",
    "numeroDocumento",
    "direccion",
    "telefono",
)

_DIGITS_PATTERN = re.compile(r"^[0-9]+$")
_TELEFONO_PATTERN = re.compile(r"^\+?[0-9\s\-()]+$")
_NON_DIGIT_PATTERN = re.compile(r"[^0-9]")

MSG_NOMBRE = "El nombre debe tener al menos 3 caracteres"
MSG_PRECIO = "El precio debe ser mayor a 0"
MSG_CANTIDAD = "La cantidad debe ser un número entero positivo"
MSG_TIPO_DOCUMENTO = "Tipo de documento inválido"
MSG_NUMERO_DOCUMENTO_DIGITOS = "El número de documento debe contener solo números"
MSG_NUMERO_DOCUMENTO_LONGITUD = "El número de documento debe tener entre 6 y 15 dígitos"
MSG_TELEFONO_CARACTERES = (
    "El teléfono debe contener solo números, espacios, guiones, paréntesis y el símbolo +"
)
MSG_TELEFONO_DIGITOS = "El teléfono debe tener al menos 7 dígitos"
MSG_DIRECCION = "La dirección debe tener entre 5 y 100 caracteres"


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_precio(value: Any) -> float | None:
    """Convierte precio a float; retorna None si no es un numero finito."""
    if _is_missing(value) or isinstance(value, bool):
        return None
    try:
        precio = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(precio):
        return None
    return precio


def parse_cantidad(value: Any) -> int | None:
    """Convierte cantidad a int; ``5.5`` o ``"abc"`` retornan None."""
    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        cantidad = float(text)
    except ValueError:
        return None
    if not math.isfinite(cantidad) or not cantidad.is_integer():
        return None
    return int(cantidad)


def validate_product_data(data: Mapping[str, Any]) -> ValidationResult:
    """Valida nombre, precio y cantidad de un producto candidato."""
    errors: list[str] = []

    nombre = data.get("nombre")
    if _is_missing(nombre) or len(str(nombre).strip()) < MIN_NOMBRE_LENGTH:
        errors.append(MSG_NOMBRE)

    precio = parse_precio(data.get("precio"))
    if precio is None or precio <= 0:
        errors.append(MSG_PRECIO)

    cantidad = parse_cantidad(data.get("cantidad"))
    if cantidad is None or cantidad < 0:
        errors.append(MSG_CANTIDAD)

    return ValidationResult.from_errors(errors)


def build_product_draft(data: Mapping[str, Any]) -> ProductDraft:
    """Normaliza campos de un producto previamente validado."""
    precio = parse_precio(data.get("precio"))
    cantidad = parse_cantidad(data.get("cantidad"))
    if precio is None or cantidad is None:
        raise ValueError("build_product_draft requiere datos validados.")

    return ProductDraft(
        nombre=str(data.get("nombre") or "").strip(),
        descripcion=str(data.get("descripcion") or "").strip(),
        precio=precio,
        cantidad=cantidad,
    )


def sanitize_profile_metadata(data: Mapping[str, Any]) -> dict[str, str]:
    """Recorta campos de perfil y pasa tipoDocumento a mayusculas.

    Los campos ausentes o vacios se omiten del resultado.
    """
    sanitized: dict[str, str] = {}
    for field_name in PROFILE_FIELDS:
        value = data.get(field_name)
        if _is_missing(value):
            continue
        cleaned = str(value).strip()
        if field_name == "tipoDocumento":
            cleaned = cleaned.upper()
        sanitized[field_name] = cleaned
    return sanitized


def validate_profile_metadata(data: Mapping[str, Any]) -> ValidationResult:
    """Valida solo los campos presentes de los metadatos de perfil."""
    errors: list[str] = []

    tipo_documento = data.get("tipoDocumento")
    if not _is_missing(tipo_documento) and tipo_documento not in TIPOS_DOCUMENTO:
        errors.append(MSG_TIPO_DOCUMENTO)

    numero_documento = data.get("numeroDocumento")
    if not _is_missing(numero_documento):
        numero = str(numero_documento)
        if not _DIGITS_PATTERN.fullmatch(numero):
            errors.append(MSG_NUMERO_DOCUMENTO_DIGITOS)
        if not NUMERO_DOCUMENTO_MIN_LENGTH <= len(numero) <= NUMERO_DOCUMENTO_MAX_LENGTH:
            errors.append(MSG_NUMERO_DOCUMENTO_LONGITUD)

    telefono = data.get("telefono")
    if not _is_missing(telefono):
        telefono_text = str(telefono)
        if not _TELEFONO_PATTERN.fullmatch(telefono_text):
            errors.append(MSG_TELEFONO_CARACTERES)
        if len(_NON_DIGIT_PATTERN.sub("", telefono_text)) < TELEFONO_MIN_DIGITS:
            errors.append(MSG_TELEFONO_DIGITOS)

    direccion = data.get("direccion")
    if not _is_missing(direccion):
        direccion_length = len(str(direccion).strip())
        if not DIRECCION_MIN_LENGTH <= direccion_length <= DIRECCION_MAX_LENGTH:
            errors.append(MSG_DIRECCION)

    return ValidationResult.from_errors(errors)
