"""Okta group membership removal.

This module holds the three handlers the job framework calls: `invoke`
removes a user from a group, `error` logs and re-raises whatever made
`invoke` fail, and `halt` acknowledges a cancellation. The flow inside
`invoke` is strictly sequential: template pre-pass, validation, address and
authorization resolution, one `DELETE`, response mapping.

No retries here: the framework retries transient failures using the
`status_code` attached to the raised error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

import httpx

from adapters.auth_schemes import get_authorization_header
from adapters.http_client import build_async_client
from adapters.okta_groups import build_api_error, remove_group_member
from adapters.templating import resolve_json_path_templates
from core.config import AppSettings
from core.domain.errors import ConfigurationError, ValidationError
from core.domain.models import (
    UNKNOWN,
    HaltResult,
    JobContext,
    UnassignRequest,
    UnassignResult,
)

logger = logging.getLogger(__name__)

TemplateResolver = Callable[[dict[str, Any], dict[str, Any]], tuple[dict[str, Any], list[str]]]
ClientFactory = Callable[[AppSettings], httpx.AsyncClient]


def _coerce_context(context: JobContext | Mapping[str, Any] | None) -> JobContext:
    if isinstance(context, JobContext):
        return context
    return JobContext.model_validate(dict(context or {}))


def validate_params(params: Mapping[str, Any]) -> UnassignRequest:
    """Check `userId`/`groupId` before anything touches the network."""

    for name in ("userId", "groupId"):
        value = params.get(name)
        if not isinstance(value, str) or not value:
            raise ValidationError(f"Invalid or missing {name} parameter")

    address = params.get("address")
    if address is not None and not isinstance(address, str):
        raise ValidationError("Invalid address parameter")

    return UnassignRequest(
        userId=params["userId"],
        groupId=params["groupId"],
        address=address or None,
    )


def resolve_base_url(
    address: str | None,
    context: JobContext,
    settings: AppSettings,
) -> str:
    """Param first, then the job environment, then process settings."""

    candidate = next(
        (
            value.strip()
            for value in (address, context.environment.get("ADDRESS"), settings.address)
            if value and value.strip()
        ),
        "",
    )
    if not candidate:
        raise ConfigurationError(
            "No URL specified. Provide address parameter or ADDRESS environment variable"
        )
    return candidate.rstrip("/")


def _default_client_factory(settings: AppSettings) -> httpx.AsyncClient:
    return build_async_client(settings)


@dataclass
class UnassignUserFromGroupAction:
    """Removes an Okta user from a group."""

    settings: AppSettings = field(default_factory=AppSettings)
    resolve_templates: TemplateResolver = resolve_json_path_templates
    client_factory: ClientFactory = _default_client_factory

    async def invoke(
        self,
        params: Mapping[str, Any],
        context: JobContext | Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        ctx = _coerce_context(context)

        resolved, errors = self.resolve_templates(dict(params or {}), ctx.data)
        if errors:
            logger.warning("Template resolution errors: %s", errors)

        logger.info(
            "Starting Okta user group removal: user %s from group %s",
            resolved.get("userId"),
            resolved.get("groupId"),
        )

        request = validate_params(resolved)
        base_url = resolve_base_url(request.address, ctx, self.settings)

        async with self.client_factory(self.settings) as client:
            authorization = await get_authorization_header(ctx, client)
            response = await remove_group_member(
                client,
                base_url=base_url,
                group_id=request.group_id,
                user_id=request.user_id,
                authorization=authorization,
            )

        if not response.is_success:
            raise build_api_error(response)

        logger.info(
            "Successfully removed user %s from group %s",
            request.user_id,
            request.group_id,
        )
        result = UnassignResult(
            userId=request.user_id,
            groupId=request.group_id,
            address=base_url,
        )
        return result.to_record()

    async def error(
        self,
        params: Mapping[str, Any],
        context: JobContext | Mapping[str, Any] | None = None,
    ) -> Any:
        """Log the failure and re-raise it untouched for the framework."""

        err = params.get("error")
        if err is None:
            message = "Unknown error"
        elif isinstance(err, Mapping):
            message = str(err.get("message") or err)
        else:
            message = getattr(err, "message", None) or str(err)
        logger.error(
            "User group removal failed for user %s from group %s: %s",
            params.get("userId"),
            params.get("groupId"),
            message,
        )
        if isinstance(err, BaseException):
            raise err
        # Serialized errors arrive as plain data; surface them as an exception.
        raise RuntimeError(message)

    async def halt(
        self,
        params: Mapping[str, Any] | None,
        context: JobContext | Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        params = params or {}
        reason = params.get("reason")
        user_id = params.get("userId") or UNKNOWN
        group_id = params.get("groupId") or UNKNOWN
        logger.info(
            "User group removal job is being halted (%s) for user %s from group %s",
            reason,
            user_id,
            group_id,
        )
        return HaltResult(
            userId=str(user_id),
            groupId=str(group_id),
            reason=reason,
        ).to_record()
