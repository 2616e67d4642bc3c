import pytest

from latexsync.config import Settings
from latexsync.core.clock import VirtualClock
from latexsync.render.base import RenderBackend, RenderEngine, RenderOptions
from latexsync.render.delimiters import strip_delimiters
from latexsync.render.engine import MathRenderer


class FakeBackend(RenderBackend):
    """In-memory backend that records what it was asked to render."""

    def __init__(self, engine, clock=None, fail=False, fail_load=False, load_delay=0.0, render_delay=0.0):
        self.engine = engine
        super().__init__()
        self.clock = clock
        self.fail = fail
        self.fail_load = fail_load
        self.load_delay = load_delay
        self.render_delay = render_delay
        self.calls = []

    async def _load(self):
        if self.load_delay:
            await self.clock.sleep(self.load_delay)
        if self.fail_load:
            raise RuntimeError("script blocked")

    def prepare(self, latex, options: RenderOptions):
        return strip_delimiters(latex)

    async def _render(self, prepared, options):
        self.calls.append(prepared)
        if self.render_delay:
            await self.clock.sleep(self.render_delay)
        if self.fail:
            raise ValueError(f"{self.engine.value} cannot parse input")
        mode = "block" if options.display_mode else "inline"
        return f"<{self.engine.value} mode={mode}>{prepared}</{self.engine.value}>"


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def backends(clock):
    return {
        RenderEngine.MATHTEXT: FakeBackend(RenderEngine.MATHTEXT, clock=clock),
        RenderEngine.MATHML: FakeBackend(RenderEngine.MATHML, clock=clock),
    }


@pytest.fixture
def renderer(clock, backends):
    return MathRenderer(backends, clock=clock, load_timeout_ms=1_000, poll_interval_ms=100)


@pytest.fixture
def config():
    return Settings(
        default_engine="mathtext",
        display_mode="block",
        render_debounce_ms=300,
        validation_debounce_ms=500,
        auto_sync=True,
        auto_validate=True,
        auto_save=False,
    )
