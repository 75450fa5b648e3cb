"""Okta Groups API: remove a user from a group.

Wire contract:
- `DELETE {base}/api/v1/groups/{groupId}/users/{userId}`, no body.
- Okta answers `204 No Content` on success.
- Failures carry a JSON body like
  `{"errorCode": "E0000007", "errorSummary": "Not found: ...", ...}`.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from adapters.http_client import JSON_HEADERS
from core.domain.errors import APIError

logger = logging.getLogger(__name__)

FAILURE_PREFIX = "Failed to remove user from group"


def build_membership_url(base_url: str, group_id: str, user_id: str) -> str:
    """Path of the membership resource, each identifier encoded on its own."""

    encoded_group = quote(group_id, safe="")
    encoded_user = quote(user_id, safe="")
    return f"{base_url}/api/v1/groups/{encoded_group}/users/{encoded_user}"


async def remove_group_member(
    client: httpx.AsyncClient,
    *,
    base_url: str,
    group_id: str,
    user_id: str,
    authorization: str,
) -> httpx.Response:
    url = build_membership_url(base_url, group_id, user_id)
    headers = {"Authorization": authorization, **JSON_HEADERS}
    return await client.delete(url, headers=headers)


def _parse_error_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def build_api_error(response: httpx.Response) -> APIError:
    """Map a non-success response to `APIError` with the status attached."""

    status_code = response.status_code
    message = f"{FAILURE_PREFIX}: HTTP {status_code}"

    body = _parse_error_body(response)
    if body is None:
        logger.error("Failed to parse Okta error response (HTTP %s)", status_code)
    else:
        logger.error("Okta API error response: %s", body)
        if isinstance(body, dict):
            summary = body.get("errorSummary")
            if summary:
                message = f"{FAILURE_PREFIX}: {summary}"

    return APIError(message, status_code=status_code, body=body)
