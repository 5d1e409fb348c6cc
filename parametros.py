"""Parametros globales del proyecto."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent
DATA_DIR = BASE_DIR / "data"
DEFAULT_PRODUCTS_CSV = DATA_DIR / "productos.csv"

load_dotenv(BASE_DIR / ".env")

PRODUCTS_CSV = Path(os.getenv("PRODUCTS_CSV", str(DEFAULT_PRODUCTS_CSV)))

DEFAULT_HTTP_TIMEOUT_SECONDS = 10.0
TOKEN_EXPIRY_MARGIN_SECONDS = 300

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)


@dataclass(frozen=True, slots=True)
class Settings:
    """Configuracion de proceso leida desde el entorno."""

    products_csv: Path
    auth0_issuer_base_url: str
    auth0_client_id: str
    auth0_client_secret: str
    session_secret: str
    http_timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    host: str = "0.0.0.0"
    port: int = 3000

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            products_csv=PRODUCTS_CSV,
            auth0_issuer_base_url=os.getenv("AUTH0_ISSUER_BASE_URL", "").rstrip("/"),
            auth0_client_id=os.getenv("AUTH0_CLIENT_ID", ""),
            auth0_client_secret=os.getenv("AUTH0_CLIENT_SECRET", ""),
            session_secret=os.getenv("AUTH0_SECRET", "dev-session-secret"),
            http_timeout=float(
                os.getenv("HTTP_TIMEOUT_SECONDS", str(DEFAULT_HTTP_TIMEOUT_SECONDS))
            ),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
        )
