"""Host context interfaces read by the signal providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence, Tuple

RGBA = Tuple[int, int, int, int]

DEBUG_RENDERER_INFO = "WEBGL_debug_renderer_info"
UNMASKED_RENDERER = "UNMASKED_RENDERER_WEBGL"
UNMASKED_VENDOR = "UNMASKED_VENDOR_WEBGL"


class FontSource(ABC):
    """Font enumeration subsystem; families are only valid after ``ready``."""

    @abstractmethod
    async def ready(self) -> None:
        ...

    @abstractmethod
    def families(self) -> Iterable[str]:
        ...


class CanvasSurface(ABC):
    """Offscreen 2-D raster surface owned by a single provider call."""

    @abstractmethod
    def set_font(self, family: str, size_px: int) -> None:
        ...

    @abstractmethod
    def fill_rect(self, x: int, y: int, width: int, height: int, color: RGBA) -> None:
        ...

    @abstractmethod
    def fill_text(self, text: str, x: int, y: int, color: RGBA) -> None:
        """Draw ``text`` with its alphabetic baseline at ``y``."""

    @abstractmethod
    async def encode_png(self) -> bytes:
        ...


class GraphicsContext(ABC):
    """3-D rendering context reduced to its diagnostic surface."""

    @abstractmethod
    def get_extension(self, name: str) -> Optional[object]:
        ...

    @abstractmethod
    def get_parameter(self, name: str) -> Optional[str]:
        ...


class AudioContext(ABC):
    sample_rate: int = 44100

    @abstractmethod
    async def start_rendering(self, shape: str, frequency: float, length: int) -> Sequence[float]:
        """Render ``length`` samples of an oscillator offline."""

    @abstractmethod
    def byte_frequency_data(self, samples: Sequence[float], fft_size: int) -> bytes:
        """Capture analyser output for the last ``fft_size`` samples as bytes."""


class HostEnvironment:
    """Everything the providers may read about the environment.

    Subclasses fill in the plain attributes and override the factories for
    the subsystems they actually expose. The defaults describe a host with no
    font, canvas, graphics or audio subsystem.
    """

    user_agent: str = ""
    screen_width: int = 0
    screen_height: int = 0
    timezone: str = ""
    language: str = ""
    platform: str = ""
    do_not_track: Optional[str] = None
    hardware_concurrency: Optional[int] = None
    cookie_enabled: bool = False
    plugins: Sequence[str] = ()
    touch_events: bool = False
    max_touch_points: int = 0
    fonts: Optional[FontSource] = None

    def create_canvas(self, width: int, height: int) -> Optional[CanvasSurface]:
        return None

    async def open_graphics_context(self) -> Optional[GraphicsContext]:
        return None

    def create_audio_context(self) -> AudioContext:
        raise RuntimeError("Host exposes no audio subsystem")
