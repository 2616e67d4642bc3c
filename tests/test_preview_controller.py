import asyncio

from latexsync.render import RenderEngine
from latexsync.sync import RenderSyncController, SyncPhase


def _controller(renderer, config, clock, latex="", **kwargs):
    return RenderSyncController(renderer, latex, config=config, clock=clock, **kwargs)


def test_rapid_updates_render_once_with_latest_text(clock, renderer, backends, config):
    async def _run():
        await renderer.preload()
        controller = _controller(renderer, config, clock)
        for text in ["x", "x^", "x^2", "x^2+1"]:
            controller.update_text(text)
            await clock.advance(0.1)
        assert controller.state.phase is SyncPhase.PENDING
        assert backends[RenderEngine.MATHTEXT].calls == []

        await clock.advance(0.3)
        assert backends[RenderEngine.MATHTEXT].calls == ["x^2+1"]
        assert controller.state.rendered_html == "<mathtext mode=block>x^2+1</mathtext>"
        assert controller.state.sync_count == 1
        assert controller.state.phase is SyncPhase.IDLE
        assert controller.is_ready

    asyncio.run(_run())


def test_manual_sync_during_render_shares_outcome(clock, renderer, backends, config):
    backend = backends[RenderEngine.MATHTEXT]
    backend.render_delay = 1.0

    async def _run():
        await renderer.preload()
        controller = _controller(renderer, config, clock, "a+b", auto_sync=False)
        first = asyncio.ensure_future(controller.force_render())
        await clock.settle()
        assert controller.state.is_rendering
        second = asyncio.ensure_future(controller.manual_sync())
        await clock.settle()
        assert backend.calls == ["a+b"]

        await clock.advance(1.0)
        first_result, second_result = await first, await second
        assert first_result is second_result
        assert backend.calls == ["a+b"]
        assert controller.state.sync_count == 1

    asyncio.run(_run())


def test_debounce_during_render_renders_newest_source_afterwards(clock, renderer, backends, config):
    backend = backends[RenderEngine.MATHTEXT]
    backend.render_delay = 1.0

    async def _run():
        await renderer.preload()
        controller = _controller(renderer, config, clock)
        controller.update_text("a")
        await clock.advance(0.3)
        assert backend.calls == ["a"]

        controller.update_text("b")
        await clock.advance(0.4)
        # Timer for "b" fired while "a" is still rendering.
        assert backend.calls == ["a"]

        await clock.advance(2.0)
        assert backend.calls == ["a", "b"]
        assert controller.state.rendered_html == "<mathtext mode=block>b</mathtext>"
        assert controller.state.sync_count == 2

    asyncio.run(_run())


def test_manual_render_cancels_pending_debounce(clock, renderer, backends, config):
    async def _run():
        await renderer.preload()
        controller = _controller(renderer, config, clock)
        controller.update_text("y")
        assert controller.pending
        await controller.manual_sync()
        assert not controller.pending
        await clock.advance(1.0)
        assert backends[RenderEngine.MATHTEXT].calls == ["y"]

    asyncio.run(_run())


def test_failed_render_keeps_last_good_output(clock, renderer, backends, config):
    async def _run():
        await renderer.preload()
        controller = _controller(renderer, config, clock, "x", auto_sync=False)
        await controller.force_render()
        good = controller.state.rendered_html
        assert good

        for backend in backends.values():
            backend.fail = True
        controller.update_text("y")
        result = await controller.force_render()
        assert not result.success
        assert controller.state.rendered_html == good
        assert controller.state.render_error.startswith("Both rendering engines failed.")
        assert controller.has_error
        assert controller.state.phase is SyncPhase.ERROR

        for backend in backends.values():
            backend.fail = False
        await controller.force_render()
        assert controller.state.render_error is None
        assert controller.state.rendered_html == "<mathtext mode=block>y</mathtext>"

    asyncio.run(_run())


def test_empty_source_clears_output_without_rendering(clock, renderer, backends, config):
    async def _run():
        await renderer.preload()
        controller = _controller(renderer, config, clock, "x", auto_sync=False)
        await controller.force_render()
        controller.update_text("  ")
        result = await controller.force_render()
        assert result.success and result.html == ""
        assert controller.state.rendered_html == ""
        assert backends[RenderEngine.MATHTEXT].calls == ["x"]
        assert not controller.has_content

    asyncio.run(_run())


def test_auto_sync_off_only_tracks_text(clock, renderer, backends, config):
    async def _run():
        await renderer.preload()
        controller = _controller(renderer, config, clock, auto_sync=False)
        controller.update_text("z")
        await clock.advance(1.0)
        assert backends[RenderEngine.MATHTEXT].calls == []

        task = controller.set_auto_sync(True)
        await task
        assert backends[RenderEngine.MATHTEXT].calls == ["z"]
        assert controller.toggle_auto_sync() is None
        assert controller.state.auto_sync is False

    asyncio.run(_run())


def test_engine_and_display_changes_rearm_render(clock, renderer, backends, config):
    async def _run():
        await renderer.preload()
        controller = _controller(renderer, config, clock, "q")
        controller.set_engine(RenderEngine.MATHML)
        await clock.advance(0.3)
        assert backends[RenderEngine.MATHML].calls == ["q"]

        controller.set_display_mode("inline")
        await clock.advance(0.3)
        assert controller.state.rendered_html == "<mathml mode=inline>q</mathml>"
        assert controller.render_stats()["engine"] == "mathml"

        assert controller.set_display_mode("sideways") is False
        assert controller.state.display_mode == "inline"
        assert controller.set_display_mode("inline") is True

    asyncio.run(_run())


def test_debounced_render_future_resolves(clock, renderer, config):
    async def _run():
        await renderer.preload()
        controller = _controller(renderer, config, clock, "w", auto_sync=False)
        waiter = controller.debounced_render()
        await clock.advance(0.2)
        assert not waiter.done()
        await clock.advance(0.2)
        result = await waiter
        assert result.html == "<mathtext mode=block>w</mathtext>"

    asyncio.run(_run())


def test_listeners_receive_state_copies(clock, renderer, config):
    async def _run():
        await renderer.preload()
        controller = _controller(renderer, config, clock, auto_sync=False)
        phases = []
        unsubscribe = controller.subscribe(lambda state: phases.append(state.phase))
        controller.update_text("x")
        await controller.force_render()
        unsubscribe()
        controller.update_text("y")
        assert SyncPhase.RENDERING in phases
        assert phases[-1] is SyncPhase.IDLE
        count = len(phases)
        controller.update_text("z")
        assert len(phases) == count

    asyncio.run(_run())


def test_render_stats_and_reset(clock, renderer, config):
    async def _run():
        await renderer.preload()
        controller = _controller(renderer, config, clock, "a\nb", auto_sync=False)
        await controller.force_render()
        stats = controller.render_stats()
        assert stats["character_count"] == 3
        assert stats["line_count"] == 2
        assert stats["sync_count"] == 1
        assert stats["render_time_ms"] == 0.0

        controller.set_engine(RenderEngine.MATHML)
        controller.reset_state()
        assert controller.state.latex == ""
        assert controller.state.rendered_html == ""
        assert controller.state.sync_count == 0
        assert controller.state.engine is RenderEngine.MATHTEXT

    asyncio.run(_run())


def test_text_utilities_update_source(clock, renderer, config):
    controller = _controller(renderer, config, clock, "ab", auto_sync=False)
    assert controller.insert_at_position(1, "X") == 2
    assert controller.state.latex == "aXb"
    assert controller.replace_range(0, 1, "yy") == 2
    assert controller.state.latex == "yyXb"
    assert controller.wrap_selection(2, 3, "{", "}") == (3, 4)
    assert controller.state.latex == "yy{X}b"


def test_clear_preview_and_close_drop_pending_work(clock, renderer, backends, config):
    async def _run():
        await renderer.preload()
        controller = _controller(renderer, config, clock, "x", auto_sync=False)
        await controller.force_render()
        controller.clear_preview()
        assert controller.state.rendered_html == ""
        assert controller.state.last_render_time_ms is None

        controller.update_text("y", schedule=False)
        waiter = controller.debounced_render()
        controller.close()
        result = await waiter
        assert result.success is False
        assert result.error == "Preview closed"
        await clock.advance(1.0)
        assert backends[RenderEngine.MATHTEXT].calls == ["x"]

    asyncio.run(_run())


def test_manual_sync_during_render_of_older_text_renders_latest(clock, renderer, backends, config):
    backend = backends[RenderEngine.MATHTEXT]
    backend.render_delay = 1.0

    async def _run():
        await renderer.preload()
        controller = _controller(renderer, config, clock)
        controller.update_text("a")
        await clock.advance(0.3)
        assert backend.calls == ["a"]

        controller.update_text("b")
        manual = asyncio.ensure_future(controller.manual_sync())
        await clock.settle()
        assert not controller.pending

        await clock.advance(1.0)
        assert backend.calls == ["a", "b"]
        assert not manual.done()

        await clock.advance(1.0)
        result = await manual
        assert result.html == "<mathtext mode=block>b</mathtext>"
        assert controller.state.rendered_html == "<mathtext mode=block>b</mathtext>"
        assert controller.state.phase is SyncPhase.IDLE

    asyncio.run(_run())


def test_render_after_engine_switch_mid_render_uses_new_engine(clock, renderer, backends, config):
    backends[RenderEngine.MATHTEXT].render_delay = 1.0

    async def _run():
        await renderer.preload()
        controller = _controller(renderer, config, clock, "q", auto_sync=False)
        first = asyncio.ensure_future(controller.force_render())
        await clock.settle()
        controller.set_engine(RenderEngine.MATHML)
        second = asyncio.ensure_future(controller.force_render())
        await clock.advance(1.0)
        assert (await first).engine is RenderEngine.MATHTEXT
        assert (await second).engine is RenderEngine.MATHML
        assert controller.state.rendered_html == "<mathml mode=block>q</mathml>"

    asyncio.run(_run())


def test_cancelled_debounce_resolves_waiters(clock, renderer, backends, config):
    async def _run():
        await renderer.preload()
        controller = _controller(renderer, config, clock, "x", auto_sync=False)
        waiter = controller.debounced_render()
        assert controller.cancel_pending("Missing closing brace") is True
        result = await waiter
        assert result.success is False
        assert result.error == "Missing closing brace"

        waiter = controller.debounced_render()
        controller.clear_preview()
        result = await waiter
        assert result.success is True
        assert result.html == ""
        await clock.advance(1.0)
        assert backends[RenderEngine.MATHTEXT].calls == []

    asyncio.run(_run())
