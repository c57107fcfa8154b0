"""Tests for individual signal providers."""

import pytest

from conftest import CANVAS_BYTES, FakeHost
from devprint.fingerprint import hash_buffer
from devprint.models import BUFFER, SENTINEL
from devprint.providers import (
    AUDIO_FFT_SIZE,
    CANVAS_BLUE,
    CANVAS_GREEN,
    CANVAS_ORANGE,
    CANVAS_TEXT,
    PROVIDERS,
    AudioProvider,
    CanvasProvider,
    CookiesProvider,
    DoNotTrackProvider,
    FontsProvider,
    HardwareConcurrencyProvider,
    PluginsProvider,
    ScreenResolutionProvider,
    TouchSupportProvider,
    UserAgentProvider,
    WebGLProvider,
    provider_names,
)


class ExplodingHost(FakeHost):
    @property
    def user_agent(self):
        raise PermissionError("blocked by policy")

    @user_agent.setter
    def user_agent(self, value):
        pass


class TestRegistry:
    def test_declared_order(self):
        assert provider_names() == [
            "user_agent",
            "screen_resolution",
            "timezone",
            "language",
            "platform",
            "do_not_track",
            "hardware_concurrency",
            "cookies",
            "touch_support",
            "plugins",
            "fonts",
            "canvas",
            "webgl",
            "audio",
        ]

    def test_exactly_one_buffer_provider(self):
        assert [p.name for p in PROVIDERS if p.kind == BUFFER] == ["canvas"]

    def test_async_providers(self):
        assert [p.name for p in PROVIDERS if p.asynchronous] == ["fonts", "canvas", "webgl", "audio"]


class TestAttributeProviders:
    def test_screen_resolution(self, host):
        assert ScreenResolutionProvider().produce(1, host).value == "1920x1080"

    def test_do_not_track_absent_is_sentinel(self, host):
        assert DoNotTrackProvider().produce(5, host).render() == SENTINEL

    def test_do_not_track_present(self):
        assert DoNotTrackProvider().produce(5, FakeHost(do_not_track="1")).render() == "1"

    @pytest.mark.parametrize("count", [None, 0])
    def test_hardware_concurrency_missing_or_zero(self, count):
        signal = HardwareConcurrencyProvider().produce(6, FakeHost(hardware_concurrency=count))
        assert signal.render() == SENTINEL

    def test_hardware_concurrency(self, host):
        assert HardwareConcurrencyProvider().produce(6, host).render() == "8"

    @pytest.mark.parametrize("enabled, expected", [(True, "Cookies Enabled"), (False, "Cookies Disabled")])
    def test_cookies(self, enabled, expected):
        assert CookiesProvider().produce(7, FakeHost(cookie_enabled=enabled)).render() == expected

    @pytest.mark.parametrize(
        "events, points, expected",
        [
            (False, 0, "Touch Not Supported"),
            (True, 0, "Touch Supported"),
            (False, 5, "Touch Supported"),
        ],
    )
    def test_touch_support(self, events, points, expected):
        host = FakeHost(touch_events=events, max_touch_points=points)
        assert TouchSupportProvider().produce(8, host).render() == expected

    def test_plugins_deduplicated_in_order(self, host):
        assert PluginsProvider().produce(9, host).render() == "PDF Viewer;Chrome PDF Viewer"

    def test_empty_plugins_render_empty_string(self):
        signal = PluginsProvider().produce(9, FakeHost(plugins=[]))
        assert signal.available
        assert signal.render() == ""

    def test_read_error_becomes_sentinel(self):
        signal = UserAgentProvider().produce(0, ExplodingHost())
        assert not signal.available
        assert signal.render() == SENTINEL

    def test_empty_identity_is_sentinel(self):
        assert UserAgentProvider().produce(0, FakeHost(user_agent="")).render() == SENTINEL


@pytest.mark.asyncio
class TestAsyncProviders:
    async def test_fonts_distinct_after_ready(self, host):
        signal = await FontsProvider().produce(10, host)
        assert signal.render() == "Arial;DejaVu Sans"
        assert host.fonts.is_ready

    async def test_fonts_subsystem_missing(self):
        host = FakeHost()
        host.fonts = None
        assert (await FontsProvider().produce(10, host)).render() == SENTINEL

    async def test_fonts_enumeration_error(self):
        host = FakeHost(failures={"fonts"})
        assert (await FontsProvider().produce(10, host)).render() == SENTINEL

    async def test_fonts_empty_enumeration(self):
        host = FakeHost(font_families=[])
        assert (await FontsProvider().produce(10, host)).render() == SENTINEL

    async def test_canvas_hashes_png_bytes(self, host):
        signal = await CanvasProvider().produce(11, host)
        assert signal.kind == BUFFER
        assert signal.value == CANVAS_BYTES
        assert signal.render() == hash_buffer(CANVAS_BYTES)

    async def test_canvas_draws_fixed_scene(self, host):
        await CanvasProvider().produce(11, host)
        canvas = host.canvases[-1]
        assert canvas.size == (300, 150)
        assert canvas.operations == [
            ("font", "Arial", 14),
            ("rect", 125, 1, 62, 20, CANVAS_ORANGE),
            ("text", CANVAS_TEXT, 2, 15, CANVAS_BLUE),
            ("text", CANVAS_TEXT, 4, 17, CANVAS_GREEN),
        ]

    async def test_canvas_unavailable_surface(self):
        host = FakeHost()
        host.create_canvas = lambda width, height: None
        assert (await CanvasProvider().produce(11, host)).render() == SENTINEL

    async def test_canvas_encode_failure(self):
        signal = await CanvasProvider().produce(11, FakeHost(failures={"canvas"}))
        assert signal.value is None
        assert signal.render() == SENTINEL

    async def test_canvas_empty_encoding_is_unavailable(self):
        signal = await CanvasProvider().produce(11, FakeHost(canvas_bytes=b""))
        assert signal.render() == SENTINEL

    async def test_canvas_surface_per_call(self, host):
        await CanvasProvider().produce(11, host)
        await CanvasProvider().produce(11, host)
        assert len(host.canvases) == 2
        assert host.canvases[0] is not host.canvases[1]

    async def test_webgl_concatenates_without_delimiter(self, host):
        assert (await WebGLProvider().produce(12, host)).render() == "ANGLE (Intel)Google Inc."

    async def test_webgl_missing_parameter(self):
        host = FakeHost(webgl=(None, "Mesa"))
        assert (await WebGLProvider().produce(12, host)).render() == "N/AMesa"

    async def test_webgl_without_context(self):
        host = FakeHost(webgl=None)
        assert (await WebGLProvider().produce(12, host)).render() == SENTINEL

    async def test_webgl_without_extension(self, monkeypatch):
        from conftest import FakeGraphics

        host = FakeHost()

        async def no_extension():
            return FakeGraphics("r", "v", extension=False)

        monkeypatch.setattr(host, "open_graphics_context", no_extension)
        assert (await WebGLProvider().produce(12, host)).render() == SENTINEL

    async def test_audio_joins_bytes(self, host):
        signal = await AudioProvider().produce(13, host)
        assert signal.render() == "0,1,2,255"
        assert host.audio_contexts[-1].rendered == [("triangle", 10000.0, AUDIO_FFT_SIZE)]

    async def test_audio_failure(self):
        host = FakeHost(failures={"audio"})
        assert (await AudioProvider().produce(13, host)).render() == SENTINEL

    async def test_audio_without_subsystem(self):
        from devprint.host import HostEnvironment

        assert (await AudioProvider().produce(13, HostEnvironment())).render() == SENTINEL
