"""Credential schemes and authorization header resolution.

Each scheme is a small class that knows how to turn its credential material
into an `Authorization` header value. `resolve_credential_scheme` applies the
fixed precedence (bearer, basic, OAuth2 client credentials, OAuth2 access
token) and `to_ssws_header` converts a generic bearer header into Okta's
`SSWS` convention.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from enum import Enum

import httpx

from core.domain.errors import AuthenticationError
from core.domain.models import JobContext
from core.interfaces.credentials import CredentialScheme

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
SSWS_PREFIX = "SSWS "


class AuthStyle(str, Enum):
    """Where the client credentials travel in the token request."""

    IN_PARAMS = "InParams"
    IN_HEADER = "InHeader"

    @classmethod
    def parse(cls, value: str | None) -> "AuthStyle":
        if not value:
            return cls.IN_PARAMS
        normalized = value.strip().lower().replace("_", "").replace("-", "")
        for style in cls:
            if style.value.lower() == normalized:
                return style
        raise AuthenticationError(
            f"Unsupported OAUTH2_CLIENT_CREDENTIALS_AUTH_STYLE: {value}"
        )


def _basic_credentials(username: str, password: str) -> str:
    raw = f"{username}:{password}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


@dataclass(frozen=True)
class BearerTokenAuth:
    token: str = field(repr=False)
    name: str = "bearer"

    async def authorization_header(self, client: httpx.AsyncClient) -> str:
        if self.token.startswith(BEARER_PREFIX):
            return self.token
        return f"{BEARER_PREFIX}{self.token}"


@dataclass(frozen=True)
class BasicAuth:
    username: str
    password: str = field(repr=False)
    name: str = "basic"

    async def authorization_header(self, client: httpx.AsyncClient) -> str:
        return f"Basic {_basic_credentials(self.username, self.password)}"


@dataclass(frozen=True)
class OAuth2ClientCredentialsAuth:
    """Client-credentials grant: exchanges id/secret for an access token."""

    client_id: str
    client_secret: str = field(repr=False)
    token_url: str
    scope: str | None = None
    audience: str | None = None
    auth_style: AuthStyle = AuthStyle.IN_PARAMS
    name: str = "oauth2_client_credentials"

    def _token_request(self) -> tuple[dict[str, str], dict[str, str]]:
        data: dict[str, str] = {"grant_type": "client_credentials"}
        headers: dict[str, str] = {
            "Accept": "application/json",
            "Content-Type": "application/x-www-form-urlencoded",
        }
        if self.scope:
            data["scope"] = self.scope
        if self.audience:
            data["audience"] = self.audience
        if self.auth_style is AuthStyle.IN_HEADER:
            headers["Authorization"] = (
                f"Basic {_basic_credentials(self.client_id, self.client_secret)}"
            )
        else:
            data["client_id"] = self.client_id
            data["client_secret"] = self.client_secret
        return data, headers

    async def fetch_access_token(self, client: httpx.AsyncClient) -> str:
        data, headers = self._token_request()
        logger.debug("Requesting OAuth2 client-credentials token from %s", self.token_url)
        try:
            response = await client.post(self.token_url, data=data, headers=headers)
        except httpx.HTTPError as exc:
            raise AuthenticationError(f"OAuth2 token request failed: {exc}") from exc

        if not response.is_success:
            raise AuthenticationError(
                f"OAuth2 token request failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthenticationError(
                "OAuth2 token response is not valid JSON",
                status_code=response.status_code,
            ) from exc

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(token, str) or not token:
            raise AuthenticationError(
                "OAuth2 token response did not include an access_token",
                status_code=response.status_code,
            )
        return token

    async def authorization_header(self, client: httpx.AsyncClient) -> str:
        token = await self.fetch_access_token(client)
        return f"{BEARER_PREFIX}{token}"


@dataclass(frozen=True)
class OAuth2AccessTokenAuth:
    access_token: str = field(repr=False)
    name: str = "oauth2_access_token"

    async def authorization_header(self, client: httpx.AsyncClient) -> str:
        return f"{BEARER_PREFIX}{self.access_token}"


def resolve_credential_scheme(context: JobContext) -> CredentialScheme:
    """Pick the first scheme with enough material present.

    Raises `AuthenticationError("No authentication configured")` when none of
    the four schemes can be satisfied.
    """

    secrets = context.secrets
    env = context.environment

    if secrets.get("BEARER_AUTH_TOKEN"):
        return BearerTokenAuth(token=secrets["BEARER_AUTH_TOKEN"])

    if secrets.get("BASIC_USERNAME") and secrets.get("BASIC_PASSWORD"):
        return BasicAuth(
            username=secrets["BASIC_USERNAME"],
            password=secrets["BASIC_PASSWORD"],
        )

    if secrets.get("OAUTH2_CLIENT_CREDENTIALS_CLIENT_SECRET"):
        missing = [
            key
            for key in (
                "OAUTH2_CLIENT_CREDENTIALS_CLIENT_ID",
                "OAUTH2_CLIENT_CREDENTIALS_TOKEN_URL",
            )
            if not env.get(key)
        ]
        if missing:
            raise AuthenticationError(
                "OAuth2 client credentials flow requires " + " and ".join(missing)
            )
        return OAuth2ClientCredentialsAuth(
            client_id=env["OAUTH2_CLIENT_CREDENTIALS_CLIENT_ID"],
            client_secret=secrets["OAUTH2_CLIENT_CREDENTIALS_CLIENT_SECRET"],
            token_url=env["OAUTH2_CLIENT_CREDENTIALS_TOKEN_URL"],
            scope=env.get("OAUTH2_CLIENT_CREDENTIALS_SCOPE") or None,
            audience=env.get("OAUTH2_CLIENT_CREDENTIALS_AUDIENCE") or None,
            auth_style=AuthStyle.parse(env.get("OAUTH2_CLIENT_CREDENTIALS_AUTH_STYLE")),
        )

    if secrets.get("OAUTH2_AUTHORIZATION_CODE_ACCESS_TOKEN"):
        return OAuth2AccessTokenAuth(
            access_token=secrets["OAUTH2_AUTHORIZATION_CODE_ACCESS_TOKEN"]
        )

    raise AuthenticationError("No authentication configured")


def to_ssws_header(header: str) -> str:
    """Rewrite `Bearer <token>` to Okta's `SSWS <token>`.

    A token that already carries the `SSWS ` prefix is not prefixed twice.
    Non-bearer headers (basic) pass through untouched.
    """

    if not header.startswith(BEARER_PREFIX):
        return header
    token = header[len(BEARER_PREFIX):]
    return token if token.startswith(SSWS_PREFIX) else f"{SSWS_PREFIX}{token}"


async def get_authorization_header(
    context: JobContext,
    client: httpx.AsyncClient,
) -> str:
    scheme = resolve_credential_scheme(context)
    logger.debug("Using %s authentication", scheme.name)
    return to_ssws_header(await scheme.authorization_header(client))
