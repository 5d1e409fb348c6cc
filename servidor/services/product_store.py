"""Persistencia del catalogo en un archivo CSV plano."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from parametros import PRODUCTS_CSV
from servidor.domain.models import Producto
from servidor.services.record_codec import decode_line, encode_line
from shared.csv_schema import PRODUCT_HEADER_LINE, is_product_header
from shared.errors import StorageReadError, StorageWriteError

LOGGER = logging.getLogger(__name__)


class ProductStore:
    """Lee y reescribe el archivo completo de productos en cada operacion.

    No mantiene cache: el archivo es la unica fuente de verdad. Un archivo
    inexistente se trata como catalogo vacio; ``write_all`` lo crea.
    """

    def __init__(self, csv_path: Path = PRODUCTS_CSV) -> None:
        self._csv_path = Path(csv_path)

    @property
    def csv_path(self) -> Path:
        return self._csv_path

    def read_all(self) -> list[Producto]:
        """Retorna todos los productos del archivo, activos o no."""
        if not self._csv_path.exists():
            LOGGER.debug("Archivo de productos inexistente, catalogo vacio: %s", self._csv_path)
            return []

        try:
            with self._csv_path.open("r", newline="", encoding="utf-8-sig") as csv_file:
                content = csv_file.read()
        except OSError as exc:
            LOGGER.exception("Error leyendo archivo de productos: %s", self._csv_path)
            raise StorageReadError("No fue posible leer los productos.") from exc

        if not content.strip():
            return []

        # Solo "\n" separa registros; otros separadores Unicode son texto.
        lines = content.split("\n")

        if not is_product_header(lines[0].rstrip("\r")):
            LOGGER.warning(
                "Header inesperado en %s: %r (se descarta igualmente)",
                self._csv_path,
                lines[0],
            )

        products: list[Producto] = []
        for line in lines[1:]:
            stripped = line.rstrip("\r").strip()
            if not stripped:
                continue
            products.append(decode_line(stripped))
        return products

    def write_all(self, products: Iterable[Producto]) -> None:
        """Reescribe el archivo completo (temp + replace) en el orden recibido."""
        content_lines = [PRODUCT_HEADER_LINE]
        content_lines.extend(encode_line(product) for product in products)
        content = "\n".join(content_lines) + "\n"

        temp_path = self._csv_path.with_name(f"{self._csv_path.name}.tmp")
        try:
            self._csv_path.parent.mkdir(parents=True, exist_ok=True)
            with temp_path.open("w", newline="", encoding="utf-8") as csv_file:
                csv_file.write(content)
            temp_path.replace(self._csv_path)
        except OSError as exc:
            LOGGER.exception("Error escribiendo archivo de productos: %s", self._csv_path)
            raise StorageWriteError("No se pudieron guardar los productos.") from exc
        finally:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)

        LOGGER.debug(
            "Archivo de productos reescrito: path=%s, registros=%d",
            self._csv_path,
            len(content_lines) - 1,
        )

    def find_by_id(self, product_id: int) -> Producto | None:
        """Busca un producto por id sin filtrar por ``activo``."""
        for product in self.read_all():
            if product.id == product_id:
                return product
        return None

    def next_id(self) -> int:
        """Calcula el siguiente id correlativo sin persistirlo."""
        return self.allocate_id(self.read_all())

    @staticmethod
    def allocate_id(products: Iterable[Producto]) -> int:
        """Retorna ``max(id) + 1`` o ``1`` si no hay productos."""
        return max((product.id for product in products), default=0) + 1
