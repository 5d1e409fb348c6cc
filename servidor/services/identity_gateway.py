"""Cliente de la Management API del proveedor de identidad."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from parametros import DEFAULT_HTTP_TIMEOUT_SECONDS, TOKEN_EXPIRY_MARGIN_SECONDS
from shared.errors import UpstreamError

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ManagementToken:
    """Token bearer en cache junto a su instante de expiracion (epoch)."""

    access_token: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return bool(self.access_token) and now < self.expires_at


class IdentityMetadataGateway:
    """Obtiene usuarios y actualiza ``user_metadata`` via la Management API.

    El token se refresca de forma perezosa; si dos refrescos concurren, el
    ultimo en terminar queda en cache.
    """

    def __init__(
        self,
        issuer_base_url: str,
        client_id: str,
        client_secret: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        expiry_margin: float = TOKEN_EXPIRY_MARGIN_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._domain = issuer_base_url.rstrip("/")
        self._client_id = client_id
        self._client_secret = client_secret
        self._audience = f"{self._domain}/api/v2/"
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)
        self._expiry_margin = expiry_margin
        self._clock = clock
        self._token: ManagementToken | None = None

    @property
    def cached_token(self) -> ManagementToken | None:
        return self._token

    async def aclose(self) -> None:
        await self._http_client.aclose()

    async def get_management_token(self) -> str:
        """Retorna el token en cache o solicita uno nuevo (client credentials)."""
        if self._token is not None and self._token.is_valid(self._clock()):
            return self._token.access_token

        payload = await self._request_json(
            "POST",
            f"{self._domain}/oauth/token",
            json={
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "audience": self._audience,
                "grant_type": "client_credentials",
            },
            error_message="No se pudo obtener el token de acceso a Auth0",
        )

        try:
            access_token = str(payload["access_token"])
            expires_in = float(payload["expires_in"])
        except (KeyError, TypeError, ValueError) as exc:
            LOGGER.error("Respuesta de token sin access_token/expires_in validos.")
            raise UpstreamError("No se pudo obtener el token de acceso a Auth0") from exc

        self._token = ManagementToken(
            access_token=access_token,
            expires_at=self._clock() + expires_in - self._expiry_margin,
        )
        LOGGER.info("Token de Management API renovado.")
        return access_token

    async def get_user(self, user_id: str) -> dict[str, Any]:
        """Obtiene el registro completo del usuario, incluido ``user_metadata``."""
        token = await self.get_management_token()
        return await self._request_json(
            "GET",
            self._user_url(user_id),
            headers=self._auth_headers(token),
            error_message="No se pudo obtener la información del usuario",
        )

    async def update_user_metadata(
        self,
        user_id: str,
        metadata: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Envia ``user_metadata`` con los campos indicados."""
        token = await self.get_management_token()
        return await self._request_json(
            "PATCH",
            self._user_url(user_id),
            json={"user_metadata": dict(metadata)},
            headers=self._auth_headers(token),
            error_message="No se pudieron actualizar los datos del usuario",
        )

    def _user_url(self, user_id: str) -> str:
        return f"{self._audience}users/{quote(user_id, safe='')}"

    @staticmethod
    def _auth_headers(token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def _request_json(
        self,
        method: str,
        url: str,
        error_message: str,
        json: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        try:
            response = await self._http_client.request(method, url, json=json, headers=headers)
        except httpx.HTTPError as exc:
            LOGGER.exception("Fallo de red llamando a %s %s", method, url)
            raise UpstreamError(error_message) from exc

        if not response.is_success:
            LOGGER.error(
                "Respuesta no exitosa de %s %s: status=%s, body=%s",
                method,
                url,
                response.status_code,
                response.text,
            )
            raise UpstreamError(
                f"{error_message} (status {response.status_code})",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            LOGGER.exception("Respuesta JSON invalida de %s %s", method, url)
            raise UpstreamError(error_message, status_code=response.status_code) from exc
