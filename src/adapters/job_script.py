"""Job-script entry points.

The job framework loads a script and calls `invoke`, `error` and `halt` with
`(params, context)`. These module-level coroutines delegate to a shared
`UnassignUserFromGroupAction` built from process settings.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Mapping, Union

from core.domain.models import JobContext
from core.services.group_membership import UnassignUserFromGroupAction

ContextLike = Union[JobContext, Mapping[str, Any], None]


@lru_cache(maxsize=1)
def get_action() -> UnassignUserFromGroupAction:
    return UnassignUserFromGroupAction()


async def invoke(params: Mapping[str, Any], context: ContextLike = None) -> dict[str, Any]:
    return await get_action().invoke(params, context)


async def error(params: Mapping[str, Any], context: ContextLike = None) -> Any:
    return await get_action().error(params, context)


async def halt(params: Mapping[str, Any] | None, context: ContextLike = None) -> dict[str, Any]:
    return await get_action().halt(params, context)
