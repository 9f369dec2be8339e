"""
Hook pipeline run around every store operation.

Hooks observe and may augment an operation. They are registered either
globally (run for every route) or for a single route key, and either before
(pre) or after (post) the store call.

Invariants:
    - Registration order is execution order; hooks are never reordered or deduplicated
    - Global hooks of a phase finish before route hooks of that phase start
    - Each hook completes before the next one starts
    - A hook exception propagates to the caller; the pipeline never swallows it

How to change safely:
    - Each DocumentService owns its own pipeline; do not add module-level registries
    - Keep run_pre/run_post sequential
"""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, DefaultDict, List, Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class HookContext:
    """State visible to hooks for one operation.

    Attributes:
        route: Route key of the operation (e.g. "addRecord")
        collection_name: Target collection, if any
        record_id: Target record id, if any
        payload: Request payload; hooks may mutate it in place before the
            store call (e.g. to enrich a record's data)
        result: Operation Result, set before post hooks run
    """

    route: str
    collection_name: Optional[str] = None
    record_id: Optional[str] = None
    payload: Any = None
    result: Any = None


HookCallback = Callable[[HookContext], Union[None, Awaitable[None]]]


class HookPipeline:
    """Ordered pre/post hook registry.

    Callbacks may be plain functions or coroutine functions.

    Example:
        >>> hooks = HookPipeline()
        >>> async def stamp(ctx):
        ...     ctx.payload["data"]["seen"] = True
        >>> hooks.register_route_pre("addRecord", stamp)
        >>> await hooks.run_pre(HookContext(route="addRecord", payload={"data": {}}))
    """

    def __init__(self) -> None:
        self.global_pre: List[HookCallback] = []
        self.global_post: List[HookCallback] = []
        self.route_pre: DefaultDict[str, List[HookCallback]] = defaultdict(list)
        self.route_post: DefaultDict[str, List[HookCallback]] = defaultdict(list)

    def register_global_pre(self, callback: HookCallback) -> None:
        self.global_pre.append(callback)

    def register_global_post(self, callback: HookCallback) -> None:
        self.global_post.append(callback)

    def register_route_pre(self, route: str, callback: HookCallback) -> None:
        self.route_pre[route].append(callback)

    def register_route_post(self, route: str, callback: HookCallback) -> None:
        self.route_post[route].append(callback)

    async def run_pre(self, ctx: HookContext) -> None:
        """Run global pre hooks, then pre hooks for ctx.route."""
        await self._run(self.global_pre, ctx)
        await self._run(self.route_pre.get(ctx.route, ()), ctx)

    async def run_post(self, ctx: HookContext) -> None:
        """Run global post hooks, then post hooks for ctx.route."""
        await self._run(self.global_post, ctx)
        await self._run(self.route_post.get(ctx.route, ()), ctx)

    @staticmethod
    async def _run(hooks, ctx: HookContext) -> None:
        # Hooks registered during a run take effect from the next run
        hooks = list(hooks)
        if hooks:
            logger.debug("Running hooks", extra={"route": ctx.route, "count": len(hooks)})
        for hook in hooks:
            outcome = hook(ctx)
            if inspect.isawaitable(outcome):
                await outcome
