"""Unit tests for credential schemes and header resolution."""

import asyncio
import base64
from urllib.parse import parse_qs

import httpx
import pytest

from adapters.auth_schemes import (
    AuthStyle,
    BasicAuth,
    BearerTokenAuth,
    OAuth2AccessTokenAuth,
    OAuth2ClientCredentialsAuth,
    get_authorization_header,
    resolve_credential_scheme,
    to_ssws_header,
)
from core.domain.errors import AuthenticationError
from core.domain.models import JobContext
from core.interfaces.credentials import CredentialScheme

TOKEN_URL = "https://auth.example.com/oauth2/v1/token"

CLIENT_CREDENTIALS_ENV = {
    "OAUTH2_CLIENT_CREDENTIALS_CLIENT_ID": "client-id",
    "OAUTH2_CLIENT_CREDENTIALS_TOKEN_URL": TOKEN_URL,
}
CLIENT_CREDENTIALS_SECRETS = {"OAUTH2_CLIENT_CREDENTIALS_CLIENT_SECRET": "client-secret"}


def _token_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def _header_for(context: JobContext, handler=None) -> str:
    handler = handler or (lambda request: httpx.Response(500))
    async with _token_client(handler) as client:
        return await get_authorization_header(context, client)


class TestSswsRewrite:
    def test_rewrites_bearer_to_ssws(self) -> None:
        assert to_ssws_header("Bearer abc") == "SSWS abc"

    def test_does_not_double_prefix(self) -> None:
        assert to_ssws_header("Bearer SSWS abc") == "SSWS abc"

    def test_is_idempotent(self) -> None:
        once = to_ssws_header("Bearer abc")
        assert to_ssws_header(once) == once

    def test_leaves_basic_untouched(self) -> None:
        assert to_ssws_header("Basic dXNlcjpwYXNz") == "Basic dXNlcjpwYXNz"


class TestResolveCredentialScheme:
    def test_bearer_token(self) -> None:
        scheme = resolve_credential_scheme(JobContext(secrets={"BEARER_AUTH_TOKEN": "tok"}))

        assert isinstance(scheme, BearerTokenAuth)
        assert isinstance(scheme, CredentialScheme)

    def test_basic(self) -> None:
        scheme = resolve_credential_scheme(
            JobContext(secrets={"BASIC_USERNAME": "user", "BASIC_PASSWORD": "pass"})
        )

        assert isinstance(scheme, BasicAuth)

    def test_basic_needs_both_parts(self) -> None:
        with pytest.raises(AuthenticationError, match="No authentication configured"):
            resolve_credential_scheme(JobContext(secrets={"BASIC_USERNAME": "user"}))

    def test_client_credentials(self) -> None:
        scheme = resolve_credential_scheme(
            JobContext(
                environment={
                    **CLIENT_CREDENTIALS_ENV,
                    "OAUTH2_CLIENT_CREDENTIALS_SCOPE": "okta.groups.manage",
                    "OAUTH2_CLIENT_CREDENTIALS_AUTH_STYLE": "InHeader",
                },
                secrets=CLIENT_CREDENTIALS_SECRETS,
            )
        )

        assert isinstance(scheme, OAuth2ClientCredentialsAuth)
        assert scheme.scope == "okta.groups.manage"
        assert scheme.auth_style is AuthStyle.IN_HEADER

    def test_client_credentials_missing_token_url(self) -> None:
        context = JobContext(
            environment={"OAUTH2_CLIENT_CREDENTIALS_CLIENT_ID": "client-id"},
            secrets=CLIENT_CREDENTIALS_SECRETS,
        )

        with pytest.raises(AuthenticationError, match="OAUTH2_CLIENT_CREDENTIALS_TOKEN_URL"):
            resolve_credential_scheme(context)

    def test_access_token(self) -> None:
        scheme = resolve_credential_scheme(
            JobContext(secrets={"OAUTH2_AUTHORIZATION_CODE_ACCESS_TOKEN": "access"})
        )

        assert isinstance(scheme, OAuth2AccessTokenAuth)

    def test_bearer_wins_over_everything(self) -> None:
        context = JobContext(
            environment=CLIENT_CREDENTIALS_ENV,
            secrets={
                "BEARER_AUTH_TOKEN": "tok",
                "BASIC_USERNAME": "user",
                "BASIC_PASSWORD": "pass",
                "OAUTH2_AUTHORIZATION_CODE_ACCESS_TOKEN": "access",
                **CLIENT_CREDENTIALS_SECRETS,
            },
        )

        assert isinstance(resolve_credential_scheme(context), BearerTokenAuth)

    def test_basic_wins_over_oauth(self) -> None:
        context = JobContext(
            environment=CLIENT_CREDENTIALS_ENV,
            secrets={
                "BASIC_USERNAME": "user",
                "BASIC_PASSWORD": "pass",
                "OAUTH2_AUTHORIZATION_CODE_ACCESS_TOKEN": "access",
                **CLIENT_CREDENTIALS_SECRETS,
            },
        )

        assert isinstance(resolve_credential_scheme(context), BasicAuth)

    def test_nothing_configured(self) -> None:
        with pytest.raises(AuthenticationError, match="No authentication configured"):
            resolve_credential_scheme(JobContext())

    def test_repr_hides_secrets(self) -> None:
        scheme = resolve_credential_scheme(JobContext(secrets={"BEARER_AUTH_TOKEN": "s3cr3t"}))

        assert "s3cr3t" not in repr(scheme)
        assert "s3cr3t" not in repr(JobContext(secrets={"BEARER_AUTH_TOKEN": "s3cr3t"}))


class TestAuthorizationHeader:
    def test_bearer_token_becomes_ssws(self) -> None:
        header = asyncio.run(_header_for(JobContext(secrets={"BEARER_AUTH_TOKEN": "tok"})))

        assert header == "SSWS tok"

    def test_bearer_token_already_ssws(self) -> None:
        header = asyncio.run(_header_for(JobContext(secrets={"BEARER_AUTH_TOKEN": "SSWS tok"})))

        assert header == "SSWS tok"

    def test_basic_header(self) -> None:
        header = asyncio.run(
            _header_for(JobContext(secrets={"BASIC_USERNAME": "user", "BASIC_PASSWORD": "pass"}))
        )

        assert header == "Basic " + base64.b64encode(b"user:pass").decode()

    def test_access_token_becomes_ssws(self) -> None:
        header = asyncio.run(
            _header_for(JobContext(secrets={"OAUTH2_AUTHORIZATION_CODE_ACCESS_TOKEN": "access"}))
        )

        assert header == "SSWS access"

    def test_client_credentials_in_params(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"access_token": "exchanged", "token_type": "Bearer"})

        context = JobContext(
            environment={
                **CLIENT_CREDENTIALS_ENV,
                "OAUTH2_CLIENT_CREDENTIALS_SCOPE": "okta.groups.manage",
                "OAUTH2_CLIENT_CREDENTIALS_AUDIENCE": "api://default",
            },
            secrets=CLIENT_CREDENTIALS_SECRETS,
        )

        header = asyncio.run(_header_for(context, handler))

        assert header == "SSWS exchanged"
        assert len(seen) == 1
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == TOKEN_URL
        form = parse_qs(request.content.decode())
        assert form == {
            "grant_type": ["client_credentials"],
            "scope": ["okta.groups.manage"],
            "audience": ["api://default"],
            "client_id": ["client-id"],
            "client_secret": ["client-secret"],
        }
        assert "Authorization" not in request.headers

    def test_client_credentials_in_header(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"access_token": "exchanged"})

        context = JobContext(
            environment={**CLIENT_CREDENTIALS_ENV, "OAUTH2_CLIENT_CREDENTIALS_AUTH_STYLE": "InHeader"},
            secrets=CLIENT_CREDENTIALS_SECRETS,
        )

        header = asyncio.run(_header_for(context, handler))

        assert header == "SSWS exchanged"
        expected = base64.b64encode(b"client-id:client-secret").decode()
        assert seen[0].headers["Authorization"] == f"Basic {expected}"
        assert parse_qs(seen[0].content.decode()) == {"grant_type": ["client_credentials"]}

    def test_client_credentials_token_endpoint_failure(self) -> None:
        context = JobContext(environment=CLIENT_CREDENTIALS_ENV, secrets=CLIENT_CREDENTIALS_SECRETS)

        with pytest.raises(AuthenticationError, match="HTTP 401") as exc_info:
            asyncio.run(_header_for(context, lambda request: httpx.Response(401)))

        assert exc_info.value.status_code == 401

    def test_client_credentials_without_access_token(self) -> None:
        context = JobContext(environment=CLIENT_CREDENTIALS_ENV, secrets=CLIENT_CREDENTIALS_SECRETS)

        with pytest.raises(AuthenticationError, match="access_token"):
            asyncio.run(_header_for(context, lambda request: httpx.Response(200, json={})))

    def test_client_credentials_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        context = JobContext(environment=CLIENT_CREDENTIALS_ENV, secrets=CLIENT_CREDENTIALS_SECRETS)

        with pytest.raises(AuthenticationError, match="OAuth2 token request failed") as exc_info:
            asyncio.run(_header_for(context, handler))

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


class TestAuthStyle:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, AuthStyle.IN_PARAMS),
            ("", AuthStyle.IN_PARAMS),
            ("InParams", AuthStyle.IN_PARAMS),
            ("in_header", AuthStyle.IN_HEADER),
            ("INHEADER", AuthStyle.IN_HEADER),
        ],
    )
    def test_parse(self, value, expected) -> None:
        assert AuthStyle.parse(value) is expected

    def test_parse_rejects_unknown(self) -> None:
        with pytest.raises(AuthenticationError, match="AUTH_STYLE"):
            AuthStyle.parse("AutoDetect")
