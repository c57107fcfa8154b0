"""Signal providers and the fixed provider registry.

Every provider reads one attribute (or one subsystem) of a
:class:`~devprint.host.HostEnvironment` and turns it into a :class:`Signal`.
A provider never raises: whatever goes wrong while reading the host is
reported as an unavailable signal, which renders as ``"N/A"``.

The position of a provider in :data:`PROVIDERS` is its signal index and
therefore its place in the canonical string. Reordering the tuple changes
every fingerprint.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Tuple, Union

from .host import (
    DEBUG_RENDERER_INFO,
    UNMASKED_RENDERER,
    UNMASKED_VENDOR,
    HostEnvironment,
    RGBA,
)
from .models import BUFFER, SENTINEL, TEXT, Signal, SignalKind

logger = logging.getLogger(__name__)

CANVAS_WIDTH = 300
CANVAS_HEIGHT = 150
CANVAS_TEXT = "CanvasFingerprint"
CANVAS_FONT = ("Arial", 14)
CANVAS_ORANGE: RGBA = (255, 102, 0, 255)
CANVAS_BLUE: RGBA = (0, 102, 153, 255)
CANVAS_GREEN: RGBA = (102, 204, 0, 178)

AUDIO_WAVEFORM = "triangle"
AUDIO_FREQUENCY = 10000.0
AUDIO_FFT_SIZE = 2048


def _distinct(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))


def _text(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text or None


class SignalProvider(ABC):
    name: str = ""
    kind: SignalKind = TEXT
    asynchronous: bool = False

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class AttributeProvider(SignalProvider):
    """Immediate provider: a plain read of one host attribute."""

    @abstractmethod
    def read(self, host: HostEnvironment) -> Optional[str]:
        ...

    def produce(self, index: int, host: HostEnvironment) -> Signal:
        try:
            value = self.read(host)
        except Exception as exc:
            logger.debug("Signal %s unavailable: %s", self.name, exc)
            value = None
        return Signal(index=index, name=self.name, kind=self.kind, value=value)


class AsyncProvider(SignalProvider):
    """Provider that waits on a host subsystem before it can answer."""

    asynchronous = True

    @abstractmethod
    async def read(self, host: HostEnvironment) -> Union[str, bytes, None]:
        ...

    async def produce(self, index: int, host: HostEnvironment) -> Signal:
        try:
            value = await self.read(host)
        except Exception as exc:
            logger.debug("Signal %s unavailable: %s", self.name, exc)
            value = None
        return Signal(index=index, name=self.name, kind=self.kind, value=value)


class UserAgentProvider(AttributeProvider):
    name = "user_agent"

    def read(self, host: HostEnvironment) -> Optional[str]:
        return _text(host.user_agent)


class ScreenResolutionProvider(AttributeProvider):
    name = "screen_resolution"

    def read(self, host: HostEnvironment) -> Optional[str]:
        return f"{host.screen_width}x{host.screen_height}"


class TimezoneProvider(AttributeProvider):
    name = "timezone"

    def read(self, host: HostEnvironment) -> Optional[str]:
        return _text(host.timezone)


class LanguageProvider(AttributeProvider):
    name = "language"

    def read(self, host: HostEnvironment) -> Optional[str]:
        return _text(host.language)


class PlatformProvider(AttributeProvider):
    name = "platform"

    def read(self, host: HostEnvironment) -> Optional[str]:
        return _text(host.platform)


class DoNotTrackProvider(AttributeProvider):
    name = "do_not_track"

    def read(self, host: HostEnvironment) -> Optional[str]:
        return _text(host.do_not_track)


class HardwareConcurrencyProvider(AttributeProvider):
    name = "hardware_concurrency"

    def read(self, host: HostEnvironment) -> Optional[str]:
        count = host.hardware_concurrency
        if not count or int(count) <= 0:
            return None
        return str(int(count))


class CookiesProvider(AttributeProvider):
    name = "cookies"

    def read(self, host: HostEnvironment) -> Optional[str]:
        return "Cookies Enabled" if host.cookie_enabled else "Cookies Disabled"


class TouchSupportProvider(AttributeProvider):
    name = "touch_support"

    def read(self, host: HostEnvironment) -> Optional[str]:
        if host.touch_events or (host.max_touch_points or 0) > 0:
            return "Touch Supported"
        return "Touch Not Supported"


class PluginsProvider(AttributeProvider):
    name = "plugins"

    def read(self, host: HostEnvironment) -> Optional[str]:
        # An empty plugin list is a real answer, not a missing one.
        return ";".join(_distinct(host.plugins or ()))


async def enumerate_fonts(host: HostEnvironment) -> Optional[List[str]]:
    source = host.fonts
    if source is None:
        return None
    await source.ready()
    return _distinct(source.families())


async def render_canvas(host: HostEnvironment) -> Optional[bytes]:
    """Draw the fixed scene on a fresh surface and return its PNG bytes."""
    surface = host.create_canvas(CANVAS_WIDTH, CANVAS_HEIGHT)
    if surface is None:
        return None
    surface.set_font(*CANVAS_FONT)
    surface.fill_rect(125, 1, 62, 20, CANVAS_ORANGE)
    surface.fill_text(CANVAS_TEXT, 2, 15, CANVAS_BLUE)
    surface.fill_text(CANVAS_TEXT, 4, 17, CANVAS_GREEN)
    return await surface.encode_png() or None


async def read_renderer_info(host: HostEnvironment) -> Optional[Tuple[Optional[str], Optional[str]]]:
    context = await host.open_graphics_context()
    if context is None:
        return None
    if context.get_extension(DEBUG_RENDERER_INFO) is None:
        return None
    return context.get_parameter(UNMASKED_RENDERER), context.get_parameter(UNMASKED_VENDOR)


async def sample_audio(host: HostEnvironment) -> bytes:
    context = host.create_audio_context()
    samples = await context.start_rendering(AUDIO_WAVEFORM, AUDIO_FREQUENCY, AUDIO_FFT_SIZE)
    return context.byte_frequency_data(samples, AUDIO_FFT_SIZE)


class FontsProvider(AsyncProvider):
    name = "fonts"

    async def read(self, host: HostEnvironment) -> Optional[str]:
        families = await enumerate_fonts(host)
        if families is None:
            return None
        return ";".join(families) or None


class CanvasProvider(AsyncProvider):
    name = "canvas"
    kind = BUFFER

    async def read(self, host: HostEnvironment) -> Optional[bytes]:
        return await render_canvas(host)


class WebGLProvider(AsyncProvider):
    name = "webgl"

    async def read(self, host: HostEnvironment) -> Optional[str]:
        info = await read_renderer_info(host)
        if info is None:
            return None
        renderer, vendor = info
        return f"{renderer or SENTINEL}{vendor or SENTINEL}"


class AudioProvider(AsyncProvider):
    name = "audio"

    async def read(self, host: HostEnvironment) -> Optional[str]:
        data = await sample_audio(host)
        return ",".join(str(byte) for byte in data)


PROVIDERS: Tuple[SignalProvider, ...] = (
    UserAgentProvider(),
    ScreenResolutionProvider(),
    TimezoneProvider(),
    LanguageProvider(),
    PlatformProvider(),
    DoNotTrackProvider(),
    HardwareConcurrencyProvider(),
    CookiesProvider(),
    TouchSupportProvider(),
    PluginsProvider(),
    FontsProvider(),
    CanvasProvider(),
    WebGLProvider(),
    AudioProvider(),
)


def provider_names() -> List[str]:
    return [provider.name for provider in PROVIDERS]
