"""Inicializacion del servidor web."""

from __future__ import annotations

import logging

import uvicorn

from parametros import Settings
from servidor.web.app import create_app

LOGGER = logging.getLogger(__name__)


def main() -> int:
    """Ejecuta el servidor HTTP con la configuracion del entorno."""
    settings = Settings.from_env()
    if not settings.auth0_issuer_base_url:
        LOGGER.warning("AUTH0_ISSUER_BASE_URL no configurado; el perfil no estara disponible.")

    app = create_app(settings)
    LOGGER.info("Servidor corriendo en http://%s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
