"""Tests para ProductStore."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from servidor.domain.models import Producto
from servidor.services.product_service import ProductService
from servidor.services.product_store import ProductStore
from shared.csv_schema import PRODUCT_HEADER_LINE
from shared.errors import StorageReadError, StorageWriteError


class ProductStoreTests(unittest.TestCase):
    """Valida lectura, escritura completa y asignacion de ids."""

    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self._temp_dir.cleanup)
        self.csv_path = Path(self._temp_dir.name) / "data" / "productos.csv"
        self.store = ProductStore(csv_path=self.csv_path)

    def _write_csv(self, content: str) -> None:
        self.csv_path.parent.mkdir(parents=True, exist_ok=True)
        self.csv_path.write_text(content, encoding="utf-8")

    def test_read_all_missing_file_returns_empty(self) -> None:
        """Un archivo inexistente equivale a un catalogo vacio."""
        self.assertEqual(self.store.read_all(), [])

    def test_read_all_skips_header_and_blank_lines(self) -> None:
        """Debe descartar el header e ignorar lineas vacias o con espacios."""
        self._write_csv(
            "id,nombre,descripcion,precio,cantidad,activo\n"
            "        1,Producto Test 1,Descripcion test 1,1000,10,1\n"
            "\n"
            "   \n"
            '2,"Producto, Test 2",Descripcion test 2,2000,20,1\n'
            "3,Producto Inactivo,Descripcion inactiva,3000,30,0"
        )

        products = self.store.read_all()

        self.assertEqual([product.id for product in products], [1, 2, 3])
        self.assertEqual(products[1].nombre, "Producto, Test 2")
        self.assertFalse(products[2].activo)

    def test_read_all_header_only_returns_empty(self) -> None:
        """Un archivo solo con header no tiene productos."""
        self._write_csv(PRODUCT_HEADER_LINE + "\n")

        self.assertEqual(self.store.read_all(), [])

    def test_read_all_raises_storage_read_error_on_os_error(self) -> None:
        """Fallos de I/O deben propagarse como StorageReadError."""
        self._write_csv(PRODUCT_HEADER_LINE + "\n")

        with mock.patch.object(Path, "open", side_effect=PermissionError("denegado")):
            with self.assertRaises(StorageReadError):
                self.store.read_all()

    def test_write_all_creates_file_with_header_in_given_order(self) -> None:
        """Debe crear el archivo y respetar el orden recibido sin ordenar."""
        products = [
            Producto(id=5, nombre="Cinco", descripcion="", precio=5.0, cantidad=5),
            Producto(id=2, nombre="Dos", descripcion="d", precio=2.5, cantidad=0, activo=False),
        ]

        self.store.write_all(products)

        lines = self.csv_path.read_text(encoding="utf-8").splitlines()
        self.assertEqual(
            lines,
            [PRODUCT_HEADER_LINE, "5,Cinco,,5,5,1", "2,Dos,d,2.5,0,0"],
        )
        self.assertEqual(self.store.read_all(), products)

    def test_write_all_failure_keeps_previous_content(self) -> None:
        """Si falla el reemplazo, el archivo anterior debe quedar intacto."""
        original = PRODUCT_HEADER_LINE + "\n1,Original,,10,1,1\n"
        self._write_csv(original)

        with mock.patch.object(Path, "replace", side_effect=OSError("disco lleno")):
            with self.assertRaises(StorageWriteError):
                self.store.write_all(
                    [Producto(id=9, nombre="Nuevo", descripcion="", precio=1.0, cantidad=1)]
                )

        self.assertEqual(self.csv_path.read_text(encoding="utf-8"), original)
        self.assertFalse(self.csv_path.with_name("productos.csv.tmp").exists())

    def test_unicode_separators_in_text_survive_round_trip(self) -> None:
        """Separadores Unicode dentro de un texto no parten el registro."""
        service = ProductService(self.store)

        created = service.create({"nombre": "Caja\u2028grande", "precio": 2, "cantidad": 1})

        products = self.store.read_all()
        self.assertEqual(len(products), 1)
        self.assertEqual(products[0].nombre, "Caja\u2028grande")
        self.assertEqual(service.list_active(), [created])

    def test_write_all_then_read_all_keeps_awkward_text(self) -> None:
        """Comillas, comas y separadores no estandar vuelven intactos."""
        awkward = [
            'Dice "hola", adios',
            "coma,al,medio",
            "linea\u2028parrafo\u2029fin",
            "nel\x85vt\x0bff\x0cfs\x1ctab\tfin",
        ]
        products = [
            Producto(id=index, nombre=text, descripcion=text, precio=1.5, cantidad=index)
            for index, text in enumerate(awkward, start=1)
        ]

        self.store.write_all(products)

        self.assertEqual(self.store.read_all(), products)

    def test_carriage_returns_are_stored_as_spaces(self) -> None:
        """Saltos ``\\r`` y ``\\r\\n`` se guardan como un espacio."""
        self.store.write_all(
            [
                Producto(
                    id=1,
                    nombre="uno\rdos",
                    descripcion="tres\r\ncuatro",
                    precio=1.0,
                    cantidad=1,
                )
            ]
        )

        product = self.store.read_all()[0]

        self.assertEqual(product.nombre, "uno dos")
        self.assertEqual(product.descripcion, "tres cuatro")

    def test_next_id_empty_store_returns_one(self) -> None:
        """Sin productos el siguiente id es 1."""
        self.assertEqual(self.store.next_id(), 1)

    def test_next_id_uses_max_id_including_inactive(self) -> None:
        """El siguiente id es max + 1 aunque el maximo este inactivo."""
        self._write_csv(
            PRODUCT_HEADER_LINE
            + "\n1,Uno,,1,1,1\n2,Dos,,1,1,0\n3,Tres,,1,1,0\n"
        )

        self.assertEqual(self.store.next_id(), 4)

    def test_find_by_id_returns_inactive_product(self) -> None:
        """La busqueda por id no filtra por activo."""
        self._write_csv(PRODUCT_HEADER_LINE + "\n1,Uno,,1,1,0\n")

        product = self.store.find_by_id(1)

        self.assertIsNotNone(product)
        self.assertFalse(product.activo)
        self.assertIsNone(self.store.find_by_id(99))


if __name__ == "__main__":
    unittest.main()
