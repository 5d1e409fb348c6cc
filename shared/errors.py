"""Excepciones compartidas del proyecto."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


class ValidationError(Exception):
    """Error de validacion de datos de entrada.

    Acumula todos los mensajes de validacion. ``data`` conserva la entrada ya
    sanitizada para que la capa web pueda volver a mostrar el formulario.
    """

    def __init__(
        self,
        errors: str | Sequence[str],
        data: Mapping[str, Any] | None = None,
    ) -> None:
        self.errors: list[str] = [errors] if isinstance(errors, str) else list(errors)
        self.data: dict[str, Any] = dict(data or {})
        super().__init__(", ".join(self.errors))


class NotFoundError(Exception):
    """El registro solicitado no existe."""


class ServiceError(Exception):
    """Error en la ejecucion de servicios."""


class StorageReadError(ServiceError):
    """No fue posible leer el archivo de productos."""


class StorageWriteError(ServiceError):
    """No fue posible escribir el archivo de productos."""


class UpstreamError(ServiceError):
    """Fallo de red o respuesta no exitosa del proveedor de identidad."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
