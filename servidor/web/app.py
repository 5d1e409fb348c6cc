"""Aplicacion web: rutas de perfil y CRUD de productos."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.exception_handlers import (
    http_exception_handler,
    request_validation_exception_handler,
)
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from parametros import Settings
from servidor.domain.models import Producto
from servidor.services.identity_gateway import IdentityMetadataGateway
from servidor.services.product_service import ProductService
from servidor.services.product_store import ProductStore
from servidor.services.profile_service import ProfileService
from servidor.services.validators import PROFILE_FIELDS
from servidor.web import views
from shared.errors import NotFoundError, ServiceError, ValidationError
from shared.protocol import error_envelope, success_envelope

LOGGER = logging.getLogger(__name__)

PROFILE_LOAD_ERROR = "No se pudo cargar la información actualizada del perfil"
PROFILE_FORM_LOAD_ERROR = "No se pudo cargar la información del perfil"
PROFILE_UPDATE_ERROR = "Error al actualizar el perfil. Por favor, intenta nuevamente."
PROFILE_UPDATE_SUCCESS = "Perfil actualizado exitosamente"
GENERIC_PRODUCT_ERROR = "No se pudo completar la operación sobre productos"
PRODUCTS_PAGE_ERROR = "Error al cargar los productos"
INVALID_PRODUCT_BODY = "El cuerpo de la solicitud debe ser un objeto JSON con los datos del producto"

profile_router = APIRouter()
product_router = APIRouter(prefix="/products")


class NotAuthenticatedError(Exception):
    """Peticion a la API de productos sin sesion autenticada."""


def get_current_user(request: Request) -> dict[str, Any] | None:
    """Retorna el usuario de la sesion firmada, o None si no hay sesion."""
    user = request.session.get("user")
    if isinstance(user, dict) and user.get("sub"):
        return user
    return None


def require_api_user(
    user: dict[str, Any] | None = Depends(get_current_user),
) -> dict[str, Any]:
    if user is None:
        raise NotAuthenticatedError()
    return user


def get_product_service(request: Request) -> ProductService:
    return request.app.state.product_service


def get_profile_service(request: Request) -> ProfileService:
    return request.app.state.profile_service


def product_to_dict(product: Producto) -> dict[str, Any]:
    return asdict(product)


@profile_router.get("/", response_class=HTMLResponse)
async def home(user: dict[str, Any] | None = Depends(get_current_user)) -> HTMLResponse:
    return HTMLResponse(views.render_home(user))


@profile_router.get("/profile", response_class=HTMLResponse)
async def profile(
    user: dict[str, Any] | None = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
):
    if user is None:
        return RedirectResponse("/", status_code=302)

    try:
        user_info = await profile_service.get_profile(user["sub"])
    except ServiceError:
        LOGGER.exception("Error obteniendo perfil: user=%s", user["sub"])
        return HTMLResponse(views.render_profile(user, error=PROFILE_LOAD_ERROR))

    return HTMLResponse(views.render_profile(user_info))


@profile_router.get("/edit", response_class=HTMLResponse)
async def edit_form(
    user: dict[str, Any] | None = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
):
    if user is None:
        return RedirectResponse("/", status_code=302)

    try:
        user_info = await profile_service.get_profile(user["sub"])
    except ServiceError:
        LOGGER.exception("Error mostrando formulario de edicion: user=%s", user["sub"])
        return HTMLResponse(
            views.render_edit_profile(
                user,
                meta=user.get("user_metadata") or {},
                errors=[PROFILE_FORM_LOAD_ERROR],
            )
        )

    return HTMLResponse(
        views.render_edit_profile(user_info, meta=user_info.get("user_metadata") or {})
    )


@profile_router.post("/edit", response_class=HTMLResponse)
async def update_profile(
    request: Request,
    user: dict[str, Any] | None = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service),
):
    if user is None:
        return RedirectResponse("/", status_code=302)

    form = await request.form()
    form_data = {name: form.get(name) for name in PROFILE_FIELDS if form.get(name) is not None}

    try:
        updated_user = await profile_service.update_profile(user["sub"], form_data)
    except ValidationError as exc:
        user_info = await _load_user_or_fallback(profile_service, user)
        meta = {**(user_info.get("user_metadata") or {}), **exc.data}
        return HTMLResponse(views.render_edit_profile(user_info, meta=meta, errors=exc.errors))
    except ServiceError:
        LOGGER.exception("Error actualizando perfil: user=%s", user["sub"])
        user_info = await _load_user_or_fallback(profile_service, user)
        meta = {**(user_info.get("user_metadata") or {}), **form_data}
        return HTMLResponse(
            views.render_edit_profile(user_info, meta=meta, errors=[PROFILE_UPDATE_ERROR])
        )

    return HTMLResponse(
        views.render_edit_profile(
            updated_user,
            meta=updated_user.get("user_metadata") or {},
            success=PROFILE_UPDATE_SUCCESS,
        )
    )


async def _load_user_or_fallback(
    profile_service: ProfileService,
    user: dict[str, Any],
) -> dict[str, Any]:
    """Relee el usuario; si el proveedor falla usa el usuario de sesion."""
    try:
        return await profile_service.get_profile(user["sub"])
    except ServiceError:
        LOGGER.exception("No fue posible releer el usuario: user=%s", user["sub"])
        return user


@product_router.get("", response_class=HTMLResponse)
def list_products_page(
    user: dict[str, Any] | None = Depends(get_current_user),
    product_service: ProductService = Depends(get_product_service),
):
    if user is None:
        return RedirectResponse("/", status_code=302)

    try:
        products = product_service.list_active()
    except ServiceError:
        LOGGER.exception("Error cargando productos para la pagina de listado")
        return HTMLResponse(
            views.render_error("Error", PRODUCTS_PAGE_ERROR, user),
            status_code=500,
        )

    return HTMLResponse(views.render_products(user, products))


@product_router.get("/api/list")
def list_products_api(
    _user: dict[str, Any] = Depends(require_api_user),
    product_service: ProductService = Depends(get_product_service),
) -> dict[str, Any]:
    products = product_service.list_active()
    return {"products": [product_to_dict(product) for product in products]}


@product_router.get("/{product_id}")
def get_product(
    product_id: int,
    _user: dict[str, Any] = Depends(require_api_user),
    product_service: ProductService = Depends(get_product_service),
):
    product = product_service.get_by_id(product_id)
    if product is None:
        return JSONResponse(status_code=404, content={"error": "Producto no encontrado"})
    if not product.activo:
        return JSONResponse(status_code=404, content={"error": "Producto no disponible"})
    return product_to_dict(product)


@product_router.post("")
def create_product(
    payload: dict[str, Any] = Body(...),
    _user: dict[str, Any] = Depends(require_api_user),
    product_service: ProductService = Depends(get_product_service),
) -> dict[str, Any]:
    product = product_service.create(payload)
    return success_envelope("Producto creado exitosamente", product_to_dict(product))


@product_router.put("/{product_id}")
def update_product(
    product_id: int,
    payload: dict[str, Any] = Body(...),
    _user: dict[str, Any] = Depends(require_api_user),
    product_service: ProductService = Depends(get_product_service),
) -> dict[str, Any]:
    product = product_service.update(product_id, payload)
    return success_envelope("Producto actualizado exitosamente", product_to_dict(product))


@product_router.delete("/{product_id}")
def delete_product(
    product_id: int,
    _user: dict[str, Any] = Depends(require_api_user),
    product_service: ProductService = Depends(get_product_service),
) -> dict[str, Any]:
    product_service.delete(product_id)
    return success_envelope("Producto eliminado exitosamente")


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotAuthenticatedError)
    async def _not_authenticated(_request: Request, _exc: NotAuthenticatedError) -> JSONResponse:
        return JSONResponse(status_code=401, content={"error": "No autenticado"})

    @app.exception_handler(ValidationError)
    async def _validation_error(_request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content=error_envelope(str(exc)))

    @app.exception_handler(NotFoundError)
    async def _not_found(_request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content=error_envelope(str(exc)))

    @app.exception_handler(ServiceError)
    async def _service_error(request: Request, exc: ServiceError) -> JSONResponse:
        LOGGER.error("Error de servicio en %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content=error_envelope(GENERIC_PRODUCT_ERROR))

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        if request.url.path.startswith(product_router.prefix):
            LOGGER.info("Cuerpo invalido en %s %s: %s", request.method, request.url.path, exc.errors())
            return JSONResponse(status_code=400, content=error_envelope(INVALID_PRODUCT_BODY))
        return await request_validation_exception_handler(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return HTMLResponse(
                views.render_error("Error 404", "Página no encontrada"),
                status_code=404,
            )
        return await http_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> HTMLResponse:
        LOGGER.exception("Error general en %s %s", request.method, request.url.path)
        return HTMLResponse(
            views.render_error("Error", "Error interno del servidor"),
            status_code=500,
        )


def create_app(
    settings: Settings | None = None,
    product_service: ProductService | None = None,
    profile_service: ProfileService | None = None,
) -> FastAPI:
    """Construye la aplicacion con servicios unicos por proceso."""
    settings = settings or Settings.from_env()
    owned_gateway: IdentityMetadataGateway | None = None

    if product_service is None:
        product_service = ProductService(ProductStore(settings.products_csv))
    if profile_service is None:
        owned_gateway = IdentityMetadataGateway(
            issuer_base_url=settings.auth0_issuer_base_url,
            client_id=settings.auth0_client_id,
            client_secret=settings.auth0_client_secret,
            timeout=settings.http_timeout,
        )
        profile_service = ProfileService(owned_gateway)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        LOGGER.info("Aplicacion iniciada. Productos en: %s", settings.products_csv)
        yield
        if owned_gateway is not None:
            await owned_gateway.aclose()

    app = FastAPI(title="Portal de productos", lifespan=lifespan)
    app.state.product_service = product_service
    app.state.profile_service = profile_service
    app.add_middleware(SessionMiddleware, secret_key=settings.session_secret)
    app.include_router(profile_router)
    app.include_router(product_router)
    _register_exception_handlers(app)
    return app
