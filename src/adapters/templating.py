"""Resolución de plantillas JSONPath en los parámetros de un job.

Sintaxis soportada: `{$.ruta.al.valor}`, `{$.lista[0].campo}`, `{$['clave']}`.

Reglas:
- Si un string es exactamente una plantilla, se devuelve el valor referenciado
  tal cual (puede ser número, dict, lista...).
- Si la plantilla está embebida en texto, se interpola como string.
- Una ruta que no existe se sustituye por `""` y se anota un error; nunca se
  lanza excepción (los errores se registran como warning).
"""

from __future__ import annotations

import json
import re
from typing import Any

_TEMPLATE_RE = re.compile(r"\{(\$[^{}]*)\}")
_FULL_TEMPLATE_RE = re.compile(r"^\{(\$[^{}]*)\}$")
_SEGMENT_RE = re.compile(
    r"""\.(?P<key>[^.\[\]]+)|\[(?P<index>-?\d+)\]|\[['"](?P<quoted>[^'"]*)['"]\]"""
)

_MISSING = object()


def _parse_path(path: str) -> list[str | int] | None:
    if not path.startswith("$"):
        return None
    rest = path[1:].strip()
    segments: list[str | int] = []
    pos = 0
    while pos < len(rest):
        match = _SEGMENT_RE.match(rest, pos)
        if not match:
            return None
        if match.group("key") is not None:
            segments.append(match.group("key").strip())
        elif match.group("index") is not None:
            segments.append(int(match.group("index")))
        else:
            segments.append(match.group("quoted"))
        pos = match.end()
    return segments


def _lookup(data: Any, segments: list[str | int]) -> Any:
    current = data
    for segment in segments:
        if isinstance(segment, int):
            if not isinstance(current, list):
                return _MISSING
            try:
                current = current[segment]
            except IndexError:
                return _MISSING
        else:
            if not isinstance(current, dict) or segment not in current:
                return _MISSING
            current = current[segment]
    return current


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _resolve_expression(expression: str, data: Any, errors: list[str]) -> Any:
    segments = _parse_path(expression.strip())
    if segments is None:
        errors.append(f"Invalid JSONPath expression: {expression}")
        return _MISSING
    value = _lookup(data, segments)
    if value is _MISSING:
        errors.append(f"Failed to resolve template {{{expression}}}: path not found")
    return value


def _resolve_string(value: str, data: Any, errors: list[str]) -> Any:
    full = _FULL_TEMPLATE_RE.match(value)
    if full:
        resolved = _resolve_expression(full.group(1), data, errors)
        return "" if resolved is _MISSING else resolved

    def _replace(match: re.Match[str]) -> str:
        resolved = _resolve_expression(match.group(1), data, errors)
        return "" if resolved is _MISSING else _stringify(resolved)

    return _TEMPLATE_RE.sub(_replace, value)


def _resolve(value: Any, data: Any, errors: list[str]) -> Any:
    if isinstance(value, str):
        return _resolve_string(value, data, errors)
    if isinstance(value, dict):
        return {key: _resolve(item, data, errors) for key, item in value.items()}
    if isinstance(value, list):
        return [_resolve(item, data, errors) for item in value]
    return value


def resolve_json_path_templates(
    params: dict[str, Any],
    data: dict[str, Any] | None,
) -> tuple[dict[str, Any], list[str]]:
    """Resuelve plantillas en `params` contra `data` (función pura)."""

    errors: list[str] = []
    resolved = _resolve(dict(params or {}), data or {}, errors)
    return resolved, errors
