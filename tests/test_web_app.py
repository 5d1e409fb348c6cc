"""Tests de rutas HTTP con TestClient."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from typing import Any
from unittest import mock

from fastapi.testclient import TestClient

from parametros import Settings
from servidor.services.product_service import ProductService
from servidor.services.product_store import ProductStore
from servidor.services.profile_service import ProfileService
from servidor.web.app import create_app, get_current_user
from shared.errors import StorageReadError, UpstreamError

SEED_CSV = (
    "id,nombre,descripcion,precio,cantidad,activo\n"
    "1,Widget,Pieza basica,10,5,1\n"
    "2,Eliminado,,20,1,0\n"
)

SESSION_USER = {"sub": "auth0|1", "name": "Ana Perez", "email": "ana@example.com"}


class FakeGateway:
    """Gateway en memoria para el flujo de perfil."""

    def __init__(self) -> None:
        self.metadata: dict[str, Any] = {"tipoDocumento": "CC"}
        self.fail = False

    async def get_user(self, user_id: str) -> dict[str, Any]:
        if self.fail:
            raise UpstreamError("No se pudo obtener la información del usuario (status 500)", 500)
        return {**SESSION_USER, "user_metadata": dict(self.metadata)}

    async def update_user_metadata(self, user_id: str, metadata: dict[str, Any]) -> dict[str, Any]:
        self.metadata.update(metadata)
        return {**SESSION_USER, "user_metadata": dict(self.metadata)}


class WebAppTests(unittest.TestCase):
    """Valida sobres JSON, autenticacion y paginas."""

    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self._temp_dir.cleanup)
        csv_path = Path(self._temp_dir.name) / "productos.csv"
        csv_path.write_text(SEED_CSV, encoding="utf-8")

        self.gateway = FakeGateway()
        settings = Settings(
            products_csv=csv_path,
            auth0_issuer_base_url="https://tenant.example.com",
            auth0_client_id="client",
            auth0_client_secret="secret",
            session_secret="test-secret",
        )
        self.product_service = ProductService(ProductStore(csv_path))
        self.app = create_app(
            settings,
            product_service=self.product_service,
            profile_service=ProfileService(self.gateway),
        )
        self.client = TestClient(self.app)
        self.login()

    def login(self) -> None:
        self.app.dependency_overrides[get_current_user] = lambda: SESSION_USER

    def logout(self) -> None:
        self.app.dependency_overrides[get_current_user] = lambda: None

    def test_list_api_returns_only_active_products(self) -> None:
        """El listado JSON no incluye productos eliminados."""
        response = self.client.get("/products/api/list")

        self.assertEqual(response.status_code, 200)
        self.assertEqual([product["id"] for product in response.json()["products"]], [1])

    def test_api_requires_authentication(self) -> None:
        """Sin sesion la API responde 401."""
        self.logout()

        response = self.client.get("/products/api/list")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "No autenticado"})

    def test_pages_redirect_without_session(self) -> None:
        """Las paginas protegidas redirigen al inicio sin sesion."""
        self.logout()

        for path in ("/products", "/profile", "/edit"):
            with self.subTest(path=path):
                response = self.client.get(path, follow_redirects=False)
                self.assertEqual(response.status_code, 302)
                self.assertEqual(response.headers["location"], "/")

    def test_get_product_hides_soft_deleted(self) -> None:
        """Un producto eliminado se trata como no disponible."""
        self.assertEqual(self.client.get("/products/1").json()["nombre"], "Widget")

        deleted = self.client.get("/products/2")
        missing = self.client.get("/products/99")

        self.assertEqual(deleted.status_code, 404)
        self.assertEqual(deleted.json(), {"error": "Producto no disponible"})
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json(), {"error": "Producto no encontrado"})

    def test_create_product_returns_envelope(self) -> None:
        """Crear debe responder success, message y product."""
        response = self.client.post(
            "/products",
            json={"nombre": "Gadget", "descripcion": "Nuevo", "precio": 12, "cantidad": 3},
        )

        body = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Producto creado exitosamente")
        self.assertEqual(body["product"]["id"], 3)
        self.assertTrue(body["product"]["activo"])

    def test_create_invalid_product_returns_400(self) -> None:
        """Errores de validacion se informan en el sobre con success false."""
        response = self.client.post("/products", json={"nombre": "AB", "precio": 1, "cantidad": 1})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json(),
            {"success": False, "error": "El nombre debe tener al menos 3 caracteres"},
        )
        self.assertEqual(len(self.product_service.store.read_all()), 2)

    def test_update_and_delete_product(self) -> None:
        """Actualizar y eliminar deben reflejarse en el listado."""
        updated = self.client.put(
            "/products/1",
            json={"nombre": "Widget Pro", "precio": "15.5", "cantidad": "4"},
        )
        deleted = self.client.delete("/products/1")

        self.assertEqual(updated.json()["product"]["nombre"], "Widget Pro")
        self.assertEqual(updated.json()["product"]["precio"], 15.5)
        self.assertEqual(
            deleted.json(),
            {"success": True, "message": "Producto eliminado exitosamente"},
        )
        self.assertEqual(self.client.get("/products/api/list").json(), {"products": []})

    def test_delete_missing_product_returns_404(self) -> None:
        """Eliminar un id inexistente responde 404 con sobre de error."""
        response = self.client.delete("/products/99")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"success": False, "error": "Producto no encontrado"})

    def test_products_page_lists_active_products(self) -> None:
        """La pagina de productos muestra solo los activos."""
        response = self.client.get("/products")

        self.assertEqual(response.status_code, 200)
        self.assertIn("Widget", response.text)
        self.assertNotIn("Eliminado", response.text)

    def test_products_page_renders_error_when_storage_fails(self) -> None:
        """Un fallo leyendo el archivo muestra una pagina HTML de error."""
        with mock.patch.object(
            self.product_service.store,
            "read_all",
            side_effect=StorageReadError("No fue posible leer los productos."),
        ):
            response = self.client.get("/products")

        self.assertEqual(response.status_code, 500)
        self.assertTrue(response.headers["content-type"].startswith("text/html"))
        self.assertIn("Error al cargar los productos", response.text)

    def test_non_object_body_returns_error_envelope(self) -> None:
        """Un cuerpo JSON que no es objeto responde 400 con el sobre de error."""
        for method, path in (("POST", "/products"), ("PUT", "/products/1")):
            with self.subTest(method=method):
                response = self.client.request(method, path, json=[])

                self.assertEqual(response.status_code, 400)
                self.assertFalse(response.json()["success"])
                self.assertIn("objeto JSON", response.json()["error"])

        self.assertEqual(len(self.product_service.store.read_all()), 2)

    def test_edit_profile_success(self) -> None:
        """Un formulario valido actualiza metadatos y muestra mensaje de exito."""
        response = self.client.post(
            "/edit",
            data={
                "tipoDocumento": "ti",
                "numeroDocumento": "1234567",
                "telefono": "+57 (300) 123-4567",
            },
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn("Perfil actualizado exitosamente", response.text)
        self.assertEqual(self.gateway.metadata["tipoDocumento"], "TI")

    def test_edit_profile_validation_errors_are_rendered(self) -> None:
        """Errores de validacion se muestran y no se actualiza el proveedor."""
        response = self.client.post(
            "/edit",
            data={"numeroDocumento": "12AB34", "telefono": "123"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn("solo números", response.text)
        self.assertIn("al menos 7 dígitos", response.text)
        self.assertNotIn("numeroDocumento", self.gateway.metadata)

    def test_profile_falls_back_to_session_user_on_upstream_error(self) -> None:
        """Si el proveedor falla se muestra el usuario de sesion con aviso."""
        self.gateway.fail = True

        response = self.client.get("/profile")

        self.assertEqual(response.status_code, 200)
        self.assertIn("No se pudo cargar la información actualizada del perfil", response.text)
        self.assertIn("Ana Perez", response.text)

    def test_unknown_route_renders_404_page(self) -> None:
        """Rutas inexistentes muestran la pagina de error 404."""
        response = self.client.get("/no-existe")

        self.assertEqual(response.status_code, 404)
        self.assertIn("Página no encontrada", response.text)


if __name__ == "__main__":
    unittest.main()
