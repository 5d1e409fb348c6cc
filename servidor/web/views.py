"""Constructores puros de paginas HTML."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from html import escape
from typing import Any

from servidor.domain.models import Producto
from servidor.services.validators import TIPOS_DOCUMENTO

_NAV_LINKS: tuple[tuple[str, str, str], ...] = (
    ("home", "/", "Inicio"),
    ("profile", "/profile", "Mi Perfil"),
    ("editProfile", "/edit", "Editar Perfil"),
    ("products", "/products", "Productos"),
)


def _layout(title: str, body: str, current_page: str, user: Mapping[str, Any] | None) -> str:
    links = []
    for page, href, label in _NAV_LINKS:
        if page != "home" and user is None:
            continue
        css_class = ' class="active"' if page == current_page else ""
        links.append(f'<a href="{href}"{css_class}>{escape(label)}</a>')

    return (
        "<!DOCTYPE html>\n"
        '<html lang="es">\n'
        f"<head><meta charset=\"utf-8\"><title>{escape(title)}</title></head>\n"
        "<body>\n"
        f"<nav>{' | '.join(links)}</nav>\n"
        f"<main>\n{body}\n</main>\n"
        "</body>\n"
        "</html>\n"
    )


def _messages(errors: Sequence[str], success: str | None = None) -> str:
    parts = []
    if success:
        parts.append(f'<p class="success">{escape(success)}</p>')
    if errors:
        items = "".join(f"<li>{escape(error)}</li>" for error in errors)
        parts.append(f'<ul class="errors">{items}</ul>')
    return "\n".join(parts)


def render_home(user: Mapping[str, Any] | None) -> str:
    if user is None:
        body = "<h1>Bienvenido</h1>\n<p>Inicia sesion para ver tu perfil y los productos.</p>"
    else:
        nombre = user.get("name") or user.get("email") or user.get("sub", "")
        body = f"<h1>Hola, {escape(str(nombre))}</h1>"
    return _layout("Inicio - Auth0 App", body, "home", user)


def render_profile(user: Mapping[str, Any], error: str | None = None) -> str:
    metadata = user.get("user_metadata") or {}
    rows = [
        ("Nombre", user.get("name", "")),
        ("Email", user.get("email", "")),
        ("Tipo de documento", metadata.get("tipoDocumento", "")),
        ("Numero de documento", metadata.get("numeroDocumento", "")),
        ("Direccion", metadata.get("direccion", "")),
        ("Telefono", metadata.get("telefono", "")),
    ]
    table_rows = "\n".join(
        f"<tr><th>{escape(label)}</th><td>{escape(str(value or ''))}</td></tr>"
        for label, value in rows
    )
    body = "\n".join(
        part
        for part in (
            "<h1>Mi Perfil</h1>",
            _messages([error] if error else []),
            f"<table>\n{table_rows}\n</table>",
        )
        if part
    )
    return _layout("Mi Perfil", body, "profile", user)


def render_edit_profile(
    user: Mapping[str, Any],
    meta: Mapping[str, Any],
    errors: Sequence[str] = (),
    success: str | None = None,
) -> str:
    tipo_actual = str(meta.get("tipoDocumento") or "")
    options = "".join(
        f'<option value="{tipo}"{" selected" if tipo == tipo_actual else ""}>{tipo}</option>'
        for tipo in TIPOS_DOCUMENTO
    )

    def _input(name: str, label: str) -> str:
        value = escape(str(meta.get(name) or ""), quote=True)
        return f'<label>{escape(label)} <input name="{name}" value="{value}"></label>'

    body = "\n".join(
        part
        for part in (
            "<h1>Editar Perfil</h1>",
            _messages(errors, success),
            '<form method="post" action="/edit">',
            '<label>Tipo de documento <select name="tipoDocumento">'
            f'<option value=""></option>{options}</select></label>',
            _input("numeroDocumento", "Numero de documento"),
            _input("direccion", "Direccion"),
            _input("telefono", "Telefono"),
            '<button type="submit">Guardar</button>',
            "</form>",
        )
        if part
    )
    return _layout("Editar Perfil", body, "editProfile", user)


def render_products(user: Mapping[str, Any], products: Sequence[Producto]) -> str:
    header = "".join(
        f"<th>{label}</th>"
        for label in ("ID", "Nombre", "Descripcion", "Precio", "Cantidad")
    )
    rows = "\n".join(
        "<tr>"
        f"<td>{product.id}</td>"
        f"<td>{escape(product.nombre)}</td>"
        f"<td>{escape(product.descripcion)}</td>"
        f"<td>{product.precio:g}</td>"
        f"<td>{product.cantidad}</td>"
        "</tr>"
        for product in products
    )
    body = f"<h1>Productos</h1>\n<table>\n<tr>{header}</tr>\n{rows}\n</table>"
    return _layout("Productos", body, "products", user)


def render_error(title: str, message: str, user: Mapping[str, Any] | None = None) -> str:
    body = f"<h1>{escape(title)}</h1>\n<p>{escape(message)}</p>"
    return _layout(title, body, "", user)
