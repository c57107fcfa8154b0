"""Capture a host into a document and replay it as a host context."""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import yaml

from .config_loader import load_document
from .host import (
    DEBUG_RENDERER_INFO,
    UNMASKED_RENDERER,
    UNMASKED_VENDOR,
    RGBA,
    AudioContext,
    CanvasSurface,
    FontSource,
    GraphicsContext,
    HostEnvironment,
)
from .providers import enumerate_fonts, read_renderer_info, render_canvas, sample_audio

logger = logging.getLogger(__name__)

ATTRIBUTES = (
    "user_agent",
    "timezone",
    "language",
    "platform",
    "do_not_track",
    "hardware_concurrency",
    "cookie_enabled",
    "plugins",
)


class RecordedFonts(FontSource):
    def __init__(self, families: Sequence[str]):
        self._families = list(families)

    async def ready(self) -> None:
        return None

    def families(self) -> Iterable[str]:
        return list(self._families)


class RecordedCanvas(CanvasSurface):
    """Replays captured image bytes; drawing calls are accepted and ignored."""

    def __init__(self, png: bytes):
        self.png = png

    def set_font(self, family: str, size_px: int) -> None:
        pass

    def fill_rect(self, x: int, y: int, width: int, height: int, color: RGBA) -> None:
        pass

    def fill_text(self, text: str, x: int, y: int, color: RGBA) -> None:
        pass

    async def encode_png(self) -> bytes:
        return self.png


class RecordedGraphics(GraphicsContext):
    def __init__(self, renderer: Optional[str], vendor: Optional[str]):
        self.parameters = {UNMASKED_RENDERER: renderer, UNMASKED_VENDOR: vendor}

    def get_extension(self, name: str) -> Optional[object]:
        return self if name == DEBUG_RENDERER_INFO else None

    def get_parameter(self, name: str) -> Optional[str]:
        return self.parameters.get(name)


class RecordedAudio(AudioContext):
    def __init__(self, data: bytes):
        self.data = data

    async def start_rendering(self, shape: str, frequency: float, length: int) -> Sequence[float]:
        return []

    def byte_frequency_data(self, samples: Sequence[float], fft_size: int) -> bytes:
        return self.data


class SnapshotHost(HostEnvironment):
    """Host context replayed from a captured snapshot document."""

    def __init__(self, data: Mapping[str, Any]):
        if not isinstance(data, Mapping):
            raise ValueError("Snapshot must be a mapping")
        for name in ATTRIBUTES:
            if name in data:
                setattr(self, name, data[name])
        if self.plugins is None:
            self.plugins = ()
        if not isinstance(self.plugins, (list, tuple)):
            raise ValueError("Snapshot 'plugins' must be a list")

        screen = _section(data, "screen")
        self.screen_width = _integer(screen.get("width", 0), "screen.width")
        self.screen_height = _integer(screen.get("height", 0), "screen.height")

        touch = _section(data, "touch")
        self.touch_events = bool(touch.get("events", False))
        self.max_touch_points = _integer(touch.get("max_touch_points", 0), "touch.max_touch_points")

        fonts = data.get("fonts")
        if fonts is not None and not isinstance(fonts, (list, tuple)):
            raise ValueError("Snapshot 'fonts' must be a list")
        self.fonts = RecordedFonts(fonts) if fonts is not None else None

        self._canvas_png = _decode_png(data.get("canvas_png"))
        webgl = _section(data, "webgl")
        self._webgl = (webgl.get("renderer"), webgl.get("vendor")) if webgl else None
        self._audio = _decode_audio(data.get("audio"))
        self.captured_at: Optional[str] = data.get("captured_at")

    @classmethod
    def from_file(cls, path: Path) -> "SnapshotHost":
        return cls(load_document(path))

    def create_canvas(self, width: int, height: int) -> Optional[CanvasSurface]:
        if self._canvas_png is None:
            return None
        return RecordedCanvas(self._canvas_png)

    async def open_graphics_context(self) -> Optional[GraphicsContext]:
        if self._webgl is None:
            return None
        return RecordedGraphics(*self._webgl)

    def create_audio_context(self) -> AudioContext:
        if self._audio is None:
            raise RuntimeError("Snapshot has no audio capture")
        return RecordedAudio(self._audio)


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Snapshot '{key}' must be a mapping, got {type(value).__name__}")
    return value


def _integer(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Snapshot '{name}' must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Snapshot '{name}' must be an integer, got {value!r}") from None


def _decode_audio(values: Any) -> Optional[bytes]:
    if values is None:
        return None
    if not isinstance(values, (list, tuple)):
        raise ValueError("Snapshot 'audio' must be a list of byte values")
    try:
        return bytes(values)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Snapshot 'audio' must hold integers 0-255: {exc}") from None


def _decode_png(encoded: Optional[str]) -> Optional[bytes]:
    if not encoded:
        return None
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, TypeError, ValueError) as exc:
        raise ValueError(f"Snapshot 'canvas_png' is not valid base64: {exc}") from None


async def capture_snapshot(host: HostEnvironment) -> Dict[str, Any]:
    """Read every attribute and subsystem of ``host`` into a plain document."""

    snapshot: Dict[str, Any] = {}
    for name in ATTRIBUTES:
        try:
            value = getattr(host, name)
        except Exception as exc:
            logger.debug("Attribute %s unreadable: %s", name, exc)
            continue
        snapshot[name] = list(value) if name == "plugins" else value
    snapshot["screen"] = {"width": host.screen_width, "height": host.screen_height}
    snapshot["touch"] = {"events": host.touch_events, "max_touch_points": host.max_touch_points}

    fonts, canvas, webgl, audio = await asyncio.gather(
        enumerate_fonts(host),
        render_canvas(host),
        read_renderer_info(host),
        sample_audio(host),
        return_exceptions=True,
    )
    snapshot["fonts"] = _captured("fonts", fonts)
    canvas = _captured("canvas", canvas)
    snapshot["canvas_png"] = base64.b64encode(canvas).decode("ascii") if canvas else None
    webgl = _captured("webgl", webgl)
    snapshot["webgl"] = {"renderer": webgl[0], "vendor": webgl[1]} if webgl else None
    audio = _captured("audio", audio)
    snapshot["audio"] = list(audio) if audio is not None else None
    snapshot["captured_at"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return snapshot


def _captured(name: str, value: Any) -> Any:
    if isinstance(value, Exception):
        logger.debug("Subsystem %s unavailable during capture: %s", name, value)
        return None
    return value


def write_snapshot(path: Path, snapshot: Mapping[str, Any]) -> Path:
    path = Path(path).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() in {".yaml", ".yml"}:
        path.write_text(yaml.safe_dump(dict(snapshot), sort_keys=False, allow_unicode=True), encoding="utf-8")
    else:
        path.write_text(json.dumps(snapshot, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def load_snapshots(paths: Sequence[str]) -> List[SnapshotHost]:
    return [SnapshotHost.from_file(Path(raw)) for raw in paths]
