"""Synthetic host contexts shared by the test-suite."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Sequence, Set, Tuple

import pytest

from devprint.host import (
    DEBUG_RENDERER_INFO,
    UNMASKED_RENDERER,
    UNMASKED_VENDOR,
    AudioContext,
    CanvasSurface,
    FontSource,
    GraphicsContext,
    HostEnvironment,
)

CANVAS_BYTES = b"\x89PNG\r\n\x1a\nfake-canvas"


class FakeFonts(FontSource):
    def __init__(self, host: "FakeHost", families: Sequence[str]):
        self.host = host
        self._families = list(families)
        self.is_ready = False

    async def ready(self) -> None:
        await self.host.pause("fonts")
        self.host.raise_if_failing("fonts")
        self.is_ready = True

    def families(self):
        assert self.is_ready, "families read before ready()"
        return list(self._families)


class FakeCanvas(CanvasSurface):
    def __init__(self, host: "FakeHost", width: int, height: int):
        self.host = host
        self.size = (width, height)
        self.operations: List[tuple] = []

    def set_font(self, family, size_px):
        self.operations.append(("font", family, size_px))

    def fill_rect(self, x, y, width, height, color):
        self.operations.append(("rect", x, y, width, height, color))

    def fill_text(self, text, x, y, color):
        self.operations.append(("text", text, x, y, color))

    async def encode_png(self) -> bytes:
        await self.host.pause("canvas")
        self.host.raise_if_failing("canvas")
        return self.host.canvas_bytes


class FakeGraphics(GraphicsContext):
    def __init__(self, renderer: Optional[str], vendor: Optional[str], extension: bool = True):
        self.parameters = {UNMASKED_RENDERER: renderer, UNMASKED_VENDOR: vendor}
        self.extension = extension

    def get_extension(self, name):
        return self if self.extension and name == DEBUG_RENDERER_INFO else None

    def get_parameter(self, name):
        return self.parameters.get(name)


class FakeAudio(AudioContext):
    def __init__(self, host: "FakeHost"):
        self.host = host
        self.rendered: List[Tuple[str, float, int]] = []

    async def start_rendering(self, shape, frequency, length):
        await self.host.pause("audio")
        self.host.raise_if_failing("audio")
        self.rendered.append((shape, frequency, length))
        return [0.0] * length

    def byte_frequency_data(self, samples, fft_size):
        return self.host.audio_bytes


class FakeHost(HostEnvironment):
    """Fully synthetic host; ``failures`` and ``delays`` are keyed by signal name."""

    def __init__(
        self,
        failures: Optional[Set[str]] = None,
        delays: Optional[Dict[str, float]] = None,
        **overrides,
    ):
        self.user_agent = "Mozilla/5.0 (X11; Linux x86_64)"
        self.screen_width = 1920
        self.screen_height = 1080
        self.timezone = "Europe/Berlin"
        self.language = "de-DE"
        self.platform = "Linux x86_64"
        self.do_not_track = None
        self.hardware_concurrency = 8
        self.cookie_enabled = True
        self.plugins = ["PDF Viewer", "Chrome PDF Viewer", "PDF Viewer"]
        self.touch_events = False
        self.max_touch_points = 0
        self.font_families = ["Arial", "DejaVu Sans", "Arial"]
        self.canvas_bytes = CANVAS_BYTES
        self.webgl: Optional[Tuple[Optional[str], Optional[str]]] = ("ANGLE (Intel)", "Google Inc.")
        self.audio_bytes = bytes([0, 1, 2, 255])
        self.failures = set(failures or ())
        self.delays = dict(delays or {})
        self.canvases: List[FakeCanvas] = []
        self.audio_contexts: List[FakeAudio] = []
        for key, value in overrides.items():
            setattr(self, key, value)
        self.fonts = FakeFonts(self, self.font_families)

    async def pause(self, name: str) -> None:
        await asyncio.sleep(self.delays.get(name, 0))

    def raise_if_failing(self, name: str) -> None:
        if name in self.failures:
            raise RuntimeError(f"{name} subsystem blocked")

    def create_canvas(self, width, height):
        canvas = FakeCanvas(self, width, height)
        self.canvases.append(canvas)
        return canvas

    async def open_graphics_context(self):
        await self.pause("webgl")
        self.raise_if_failing("webgl")
        if self.webgl is None:
            return None
        return FakeGraphics(*self.webgl)

    def create_audio_context(self):
        context = FakeAudio(self)
        self.audio_contexts.append(context)
        return context


ASYNC_SIGNALS = ("fonts", "canvas", "webgl", "audio")


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def broken_host() -> FakeHost:
    return FakeHost(failures=set(ASYNC_SIGNALS))
