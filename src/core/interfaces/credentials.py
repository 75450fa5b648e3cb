"""Contratos de esquemas de credenciales.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Cada esquema (bearer, basic, OAuth2...) es intercambiable y testeable por
  separado; la precedencia vive en un único resolver.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import httpx


@runtime_checkable
class CredentialScheme(Protocol):
    """Contrato mínimo para un esquema de autenticación.

    Reglas de diseño:
    - `authorization_header` es asíncrono porque OAuth2 client-credentials
      hace I/O (intercambio de token).
    - Devuelve el valor listo para enviar en la cabecera `Authorization`.
    """

    name: str

    async def authorization_header(self, client: httpx.AsyncClient) -> str:
        """Produce el valor de la cabecera `Authorization`."""

        ...
