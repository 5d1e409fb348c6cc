"""DTOs compartidos entre servicios y capa web."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class ValidationResult:
    """Resultado de una validacion con errores acumulados."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[str]) -> ValidationResult:
        return cls(is_valid=not errors, errors=errors)


@dataclass(slots=True)
class ProductDraft:
    """Campos editables de un producto ya validados y normalizados."""

    nombre: str
    descripcion: str
    precio: float
    cantidad: int


def success_envelope(message: str, product: dict[str, Any] | None = None) -> dict[str, Any]:
    """Construye el sobre JSON de una mutacion exitosa."""
    envelope: dict[str, Any] = {"success": True, "message": message}
    if product is not None:
        envelope["product"] = product
    return envelope


def error_envelope(error: str) -> dict[str, Any]:
    """Construye el sobre JSON de una mutacion fallida."""
    return {"success": False, "error": error}
