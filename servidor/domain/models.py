"""Modelos de dominio del catalogo de productos."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Producto:
    """Representa un producto del catalogo.

    ``activo`` en ``False`` marca el producto como eliminado (soft delete).
    """

    id: int
    nombre: str
    descripcion: str
    precio: float
    cantidad: int
    activo: bool = True
