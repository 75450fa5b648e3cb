"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Los alias camelCase reproducen el contrato JSON que espera el framework de
  jobs, mientras el código Python usa snake_case.

Nota:
- Estos modelos describen *qué* viaja entre el framework y la acción, no
  *cómo* se obtiene.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic.config import ConfigDict

UNKNOWN = "unknown"


def utc_now_iso() -> str:
    """Timestamp ISO-8601 en UTC, con milisegundos y sufijo `Z`."""

    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JobContext(BaseModel):
    """Contexto de ejecución que entrega el framework de jobs.

    Por qué existe:
    - Separa configuración (`environment`), material sensible (`secrets`) y
      datos del job (`data`, usados por las plantillas JSONPath).
    - Permite inyectar configuraciones arbitrarias en tests sin tocar el entorno
      del proceso.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    environment: dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("environment", "env"),
        description="Configuración no sensible (ADDRESS, OAUTH2_* no secretos).",
    )
    secrets: dict[str, str] = Field(
        default_factory=dict,
        repr=False,
        description="Credenciales. Nunca se registran en logs.",
    )
    data: dict[str, Any] = Field(
        default_factory=dict,
        description="Datos del job referenciables desde plantillas `{$.ruta}`.",
    )

    @field_validator("data", mode="before")
    @classmethod
    def _data_or_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("environment", "secrets", mode="before")
    @classmethod
    def _string_values(cls, value: Any) -> Any:
        # El framework puede enviar `null` o valores numéricos/booleanos.
        if value is None:
            return {}
        if isinstance(value, dict):
            return {
                str(key): item if isinstance(item, str) else str(item)
                for key, item in value.items()
                if item is not None
            }
        return value


class UnassignRequest(BaseModel):
    """Parámetros validados de una invocación."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str = Field(..., alias="userId", min_length=1)
    group_id: str = Field(..., alias="groupId", min_length=1)
    address: str | None = Field(default=None)


class UnassignResult(BaseModel):
    """Resultado de una baja de membresía exitosa.

    `removed` siempre es `True`: no existe un estado de éxito parcial.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    group_id: str = Field(..., alias="groupId")
    removed: bool = Field(default=True)
    address: str = Field(..., description="Base URL efectivamente usada.")
    removed_at: str = Field(default_factory=utc_now_iso, alias="removedAt")

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class HaltResult(BaseModel):
    """Acuse de recibo de una cancelación (no hay nada que deshacer)."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(default=UNKNOWN, alias="userId")
    group_id: str = Field(default=UNKNOWN, alias="groupId")
    reason: Any = Field(default=None)
    halted_at: str = Field(default_factory=utc_now_iso, alias="haltedAt")
    cleanup_completed: bool = Field(default=True, alias="cleanupCompleted")

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
