"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que la acción reciba la dirección por defecto como objeto explícito
  en lugar de leer `os.environ` en mitad de la invocación.
"""

from __future__ import annotations

import os
from typing import Mapping

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import JobContext

__version__ = "1.0.0"

# Claves que el framework de jobs reparte entre `secrets` y `environment`.
SECRET_KEYS: tuple[str, ...] = (
    "BEARER_AUTH_TOKEN",
    "BASIC_USERNAME",
    "BASIC_PASSWORD",
    "OAUTH2_CLIENT_CREDENTIALS_CLIENT_SECRET",
    "OAUTH2_AUTHORIZATION_CODE_ACCESS_TOKEN",
)
ENVIRONMENT_KEYS: tuple[str, ...] = (
    "ADDRESS",
    "OAUTH2_CLIENT_CREDENTIALS_CLIENT_ID",
    "OAUTH2_CLIENT_CREDENTIALS_TOKEN_URL",
    "OAUTH2_CLIENT_CREDENTIALS_SCOPE",
    "OAUTH2_CLIENT_CREDENTIALS_AUDIENCE",
    "OAUTH2_CLIENT_CREDENTIALS_AUTH_STYLE",
)


class AppSettings(BaseSettings):
    """Configuración central de la acción.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters/tests.
    """

    model_config = SettingsConfigDict(
        env_prefix="OKTA_ACTION_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )

    address: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OKTA_ACTION_ADDRESS", "ADDRESS"),
        description="Base URL por defecto de la API de Okta (p.ej. https://example.okta.com).",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default=f"okta-unassign-user-from-group/{__version__}",
        min_length=1,
        description="User-Agent para las peticiones salientes.",
    )
    log_level: str = Field(
        default="INFO",
        min_length=1,
        description="Nivel de logging para la CLI (DEBUG, INFO, WARNING...).",
    )


def build_context_from_env(
    settings: AppSettings | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    data: dict | None = None,
) -> JobContext:
    """Construye un `JobContext` a partir del entorno del proceso.

    Solo lo usa la CLI: en producción el framework de jobs entrega el contexto
    ya armado.
    """

    settings = settings or AppSettings()
    source = os.environ if environ is None else environ

    secrets = {key: source[key] for key in SECRET_KEYS if source.get(key)}
    environment = {key: source[key] for key in ENVIRONMENT_KEYS if source.get(key)}
    if settings.address and "ADDRESS" not in environment:
        environment["ADDRESS"] = settings.address

    return JobContext(environment=environment, secrets=secrets, data=data or {})
