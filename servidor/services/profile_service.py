"""Flujo de consulta y edicion de metadatos de perfil."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from servidor.services.identity_gateway import IdentityMetadataGateway
from servidor.services.validators import sanitize_profile_metadata, validate_profile_metadata
from shared.errors import ValidationError

LOGGER = logging.getLogger(__name__)


class ProfileService:
    """Sanitiza, valida y delega en el gateway de identidad."""

    def __init__(self, gateway: IdentityMetadataGateway) -> None:
        self._gateway = gateway

    async def get_profile(self, user_id: str) -> dict[str, Any]:
        return await self._gateway.get_user(user_id)

    async def update_profile(
        self,
        user_id: str,
        form_data: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Actualiza metadatos y retorna el usuario recien leido.

        Lanza ``ValidationError`` (con los datos sanitizados) sin llamar al
        proveedor si algun campo es invalido.
        """
        sanitized = sanitize_profile_metadata(form_data)
        validation = validate_profile_metadata(sanitized)
        if not validation.is_valid:
            LOGGER.info(
                "Perfil rechazado por validacion: user=%s, errores=%s",
                user_id,
                validation.errors,
            )
            raise ValidationError(validation.errors, data=sanitized)

        await self._gateway.update_user_metadata(user_id, sanitized)
        LOGGER.info(
            "Metadatos de perfil actualizados: user=%s, campos=%s",
            user_id,
            sorted(sanitized),
        )
        return await self._gateway.get_user(user_id)
