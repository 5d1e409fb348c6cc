"""Servicio de negocio para el CRUD de productos con soft delete."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any

from servidor.domain.models import Producto
from servidor.services.product_store import ProductStore
from servidor.services.validators import build_product_draft, validate_product_data
from shared.errors import NotFoundError, ValidationError

LOGGER = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Producto no encontrado"


class ProductService:
    """Orquesta validacion y persistencia del catalogo.

    Cada mutacion sigue el patron validar -> leer todo -> modificar -> escribir
    todo. El lock serializa mutaciones dentro del proceso; escritores en otros
    procesos siguen sin coordinacion (gana la ultima escritura).
    """

    def __init__(self, store: ProductStore | None = None) -> None:
        self._store = store or ProductStore()
        self._lock = threading.Lock()

    @property
    def store(self) -> ProductStore:
        return self._store

    def list_active(self) -> list[Producto]:
        """Retorna productos activos en el orden del archivo."""
        return [product for product in self._store.read_all() if product.activo]

    def get_by_id(self, product_id: int) -> Producto | None:
        """Busca por id incluyendo productos eliminados."""
        return self._store.find_by_id(product_id)

    def create(self, data: Mapping[str, Any]) -> Producto:
        """Valida y agrega un producto nuevo con id correlativo."""
        self._raise_if_invalid(data)
        draft = build_product_draft(data)

        with self._lock:
            products = self._store.read_all()
            product = Producto(
                id=self._store.allocate_id(products),
                nombre=draft.nombre,
                descripcion=draft.descripcion,
                precio=draft.precio,
                cantidad=draft.cantidad,
                activo=True,
            )
            products.append(product)
            self._store.write_all(products)

        LOGGER.info("Producto creado: id=%s, nombre=%s", product.id, product.nombre)
        return product

    def update(self, product_id: int, data: Mapping[str, Any]) -> Producto:
        """Reemplaza campos editables; ``id`` y ``activo`` se preservan."""
        self._raise_if_invalid(data)
        draft = build_product_draft(data)

        with self._lock:
            products = self._store.read_all()
            index = self._index_of(products, product_id)
            current = products[index]
            products[index] = Producto(
                id=current.id,
                nombre=draft.nombre,
                descripcion=draft.descripcion,
                precio=draft.precio,
                cantidad=draft.cantidad,
                activo=current.activo,
            )
            self._store.write_all(products)

        LOGGER.info("Producto actualizado: id=%s", product_id)
        return products[index]

    def delete(self, product_id: int) -> None:
        """Marca un producto como inactivo (soft delete)."""
        with self._lock:
            products = self._store.read_all()
            index = self._index_of(products, product_id)
            products[index].activo = False
            self._store.write_all(products)

        LOGGER.info("Producto eliminado (soft delete): id=%s", product_id)

    @staticmethod
    def _raise_if_invalid(data: Mapping[str, Any]) -> None:
        validation = validate_product_data(data)
        if not validation.is_valid:
            LOGGER.info("Producto rechazado por validacion: %s", validation.errors)
            raise ValidationError(validation.errors)

    @staticmethod
    def _index_of(products: list[Producto], product_id: int) -> int:
        for index, product in enumerate(products):
            if product.id == product_id:
                return index
        raise NotFoundError(NOT_FOUND_MESSAGE)
