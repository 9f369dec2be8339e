"""
Unit tests for the hook pipeline.

Tests cover:
- Execution order (global before route, registration order)
- Sync and async callbacks
- Exception propagation
- Pipeline isolation
"""

import asyncio

import pytest

from docdb.hooks import HookContext, HookPipeline


class TestHookOrdering:
    """Tests for hook execution order."""

    @pytest.mark.asyncio
    async def test_global_before_route(self):
        """Global hooks of a phase run before route hooks of that phase."""
        hooks = HookPipeline()
        calls = []
        hooks.register_route_pre("addRecord", lambda ctx: calls.append("route"))
        hooks.register_global_pre(lambda ctx: calls.append("global"))

        await hooks.run_pre(HookContext(route="addRecord"))

        assert calls == ["global", "route"]

    @pytest.mark.asyncio
    async def test_slow_global_completes_before_route_starts(self):
        """A slow async global hook finishes before the route hook starts."""
        hooks = HookPipeline()
        events = []

        async def slow_global(ctx):
            events.append("A start")
            await asyncio.sleep(0.01)
            events.append("A end")

        async def fast_route(ctx):
            events.append("B start")
            events.append("B end")

        hooks.register_global_pre(slow_global)
        hooks.register_route_pre("addRecord", fast_route)

        await hooks.run_pre(HookContext(route="addRecord"))

        assert events == ["A start", "A end", "B start", "B end"]

    @pytest.mark.asyncio
    async def test_registration_order(self):
        """Hooks in the same list run in registration order."""
        hooks = HookPipeline()
        calls = []
        for i in range(5):
            hooks.register_global_post(lambda ctx, i=i: calls.append(i))

        await hooks.run_post(HookContext(route="getRecord"))

        assert calls == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_duplicates_run_twice(self):
        """The same callback registered twice runs twice."""
        hooks = HookPipeline()
        calls = []

        def hook(ctx):
            calls.append(ctx.route)

        hooks.register_route_post("deleteRecord", hook)
        hooks.register_route_post("deleteRecord", hook)

        await hooks.run_post(HookContext(route="deleteRecord"))

        assert calls == ["deleteRecord", "deleteRecord"]

    @pytest.mark.asyncio
    async def test_route_hooks_scoped_to_route(self):
        """Route hooks only run for their own route key."""
        hooks = HookPipeline()
        calls = []
        hooks.register_route_pre("addRecord", lambda ctx: calls.append("add"))

        await hooks.run_pre(HookContext(route="getRecord"))

        assert calls == []

    @pytest.mark.asyncio
    async def test_pre_and_post_are_separate(self):
        """Pre hooks don't run in the post phase."""
        hooks = HookPipeline()
        calls = []
        hooks.register_global_pre(lambda ctx: calls.append("pre"))
        hooks.register_global_post(lambda ctx: calls.append("post"))

        await hooks.run_post(HookContext(route="listRecords"))

        assert calls == ["post"]


class TestHookBehavior:
    """Tests for callback handling."""

    @pytest.mark.asyncio
    async def test_mixed_sync_and_async(self):
        """Plain and coroutine functions may be mixed."""
        hooks = HookPipeline()
        calls = []

        async def async_hook(ctx):
            calls.append("async")

        hooks.register_global_pre(lambda ctx: calls.append("sync"))
        hooks.register_global_pre(async_hook)

        await hooks.run_pre(HookContext(route="addRecord"))

        assert calls == ["sync", "async"]

    @pytest.mark.asyncio
    async def test_hook_mutates_payload(self):
        """Hooks may mutate the payload in place."""
        hooks = HookPipeline()

        def stamp(ctx):
            ctx.payload["data"]["seen"] = True

        hooks.register_route_pre("addRecord", stamp)
        ctx = HookContext(route="addRecord", payload={"data": {}})

        await hooks.run_pre(ctx)

        assert ctx.payload == {"data": {"seen": True}}

    @pytest.mark.asyncio
    async def test_exception_propagates_and_stops(self):
        """A failing hook propagates its exception and later hooks don't run."""
        hooks = HookPipeline()
        calls = []

        def boom(ctx):
            raise RuntimeError("hook failed")

        hooks.register_global_pre(boom)
        hooks.register_global_pre(lambda ctx: calls.append("after"))

        with pytest.raises(RuntimeError, match="hook failed"):
            await hooks.run_pre(HookContext(route="addRecord"))
        assert calls == []

    @pytest.mark.asyncio
    async def test_pipelines_are_isolated(self):
        """Registering on one pipeline doesn't affect another."""
        first = HookPipeline()
        second = HookPipeline()
        calls = []
        first.register_global_pre(lambda ctx: calls.append("first"))

        await second.run_pre(HookContext(route="addRecord"))

        assert calls == []

    @pytest.mark.asyncio
    async def test_hook_registered_during_run_waits(self):
        """A hook registered mid-run takes effect from the next run."""
        hooks = HookPipeline()
        calls = []

        def late(ctx):
            calls.append("late")

        def registering(ctx):
            calls.append("registering")
            hooks.register_global_pre(late)

        hooks.register_global_pre(registering)

        await hooks.run_pre(HookContext(route="addRecord"))
        assert calls == ["registering"]

        calls.clear()
        await hooks.run_pre(HookContext(route="addRecord"))
        assert calls == ["registering", "late"]
