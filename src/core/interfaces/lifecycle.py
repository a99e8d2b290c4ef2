"""HTTP lifecycle hook contract.

A transport calls these four hooks around every device call:

1. `before_all` once per call, to build the options.
2. `before_each_attempt` before each attempt (first one and retries).
3. `on_success` after a successful response.
4. `on_failure` after a failed attempt. Returning options means "retry with
   these"; returning None means "stop and surface the failure".
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from core.domain.models import RequestOptions


@runtime_checkable
class LifecycleHooks(Protocol):
    async def before_all(self, options: RequestOptions) -> RequestOptions:
        ...

    async def before_each_attempt(self, options: RequestOptions) -> RequestOptions:
        ...

    async def on_success(self, options: RequestOptions) -> None:
        ...

    async def on_failure(
        self,
        options: RequestOptions,
        error: BaseException,
        response: Any | None,
    ) -> RequestOptions | None:
        ...
