"""Host context for the machine the Python process runs on."""

from __future__ import annotations

import asyncio
import locale
import logging
import os
import platform
import re
import subprocess
from datetime import datetime
from importlib import metadata
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import psutil

from .audio import NumpyAudioContext
from .canvas import PillowCanvas
from .config_loader import Settings
from .host import (
    DEBUG_RENDERER_INFO,
    UNMASKED_RENDERER,
    UNMASKED_VENDOR,
    AudioContext,
    CanvasSurface,
    FontSource,
    GraphicsContext,
    HostEnvironment,
)

logger = logging.getLogger(__name__)

DEFAULT_FONT_COMMAND = ("fc-list", ":", "family")
DEFAULT_RENDERER_COMMAND = ("glxinfo", "-B")
DEFAULT_SCREEN_COMMAND = ("xrandr", "--current")

_XRANDR_CURRENT = re.compile(r"current (\d+) x (\d+)")
_XDPYINFO_DIMENSIONS = re.compile(r"dimensions:\s+(\d+)x(\d+) pixels")


async def run_tool(command: Sequence[str]) -> str:
    """Run an external tool and return its stdout; raise if it fails."""
    process = await asyncio.create_subprocess_exec(
        *command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.DEVNULL,
    )
    try:
        stdout, _ = await process.communicate()
    except asyncio.CancelledError:
        # A deadline gave up on the tool; do not leave the child behind.
        if process.returncode is None:
            process.kill()
            await process.wait()
        raise
    if process.returncode != 0:
        raise RuntimeError(f"{command[0]} exited with status {process.returncode}")
    return stdout.decode("utf-8", errors="replace")


class FontConfigFonts(FontSource):
    """Font families reported by fontconfig; ready once ``fc-list`` returns."""

    def __init__(self, command: Sequence[str] = DEFAULT_FONT_COMMAND):
        self.command = list(command)
        self._families: Optional[List[str]] = None

    async def ready(self) -> None:
        output = await run_tool(self.command)
        self._families = parse_font_families(output)

    def families(self) -> Iterable[str]:
        if self._families is None:
            raise RuntimeError("Font enumeration used before the font subsystem was ready")
        return list(self._families)


def parse_font_families(output: str) -> List[str]:
    # fc-list prints "Primary,Localized alias" per face; keep the primary name.
    names = {line.split(",")[0].strip() for line in output.splitlines()}
    names.discard("")
    return sorted(names)


class GlxGraphicsContext(GraphicsContext):
    def __init__(self, parameters: Dict[str, str]):
        self.parameters = parameters

    def get_extension(self, name: str) -> Optional[object]:
        if name == DEBUG_RENDERER_INFO and self.parameters:
            return self
        return None

    def get_parameter(self, name: str) -> Optional[str]:
        return self.parameters.get(name)


def parse_glxinfo(output: str) -> Dict[str, str]:
    parameters: Dict[str, str] = {}
    for line in output.splitlines():
        key, _, value = line.strip().partition(":")
        if key == "OpenGL renderer string":
            parameters[UNMASKED_RENDERER] = value.strip()
        elif key == "OpenGL vendor string":
            parameters[UNMASKED_VENDOR] = value.strip()
    return parameters


def parse_screen_size(output: str) -> Tuple[int, int]:
    """Screen size from ``xrandr --current`` or ``xdpyinfo`` output; ``(0, 0)`` if absent."""
    for pattern in (_XRANDR_CURRENT, _XDPYINFO_DIMENSIONS):
        match = pattern.search(output)
        if match:
            return int(match.group(1)), int(match.group(2))
    return 0, 0


def read_screen_size(command: Sequence[str] = DEFAULT_SCREEN_COMMAND) -> Tuple[int, int]:
    try:
        result = subprocess.run(
            list(command),
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.debug("No display geometry: %s", exc)
        return 0, 0
    if result.returncode != 0:
        logger.debug("%s exited with status %s", command[0], result.returncode)
        return 0, 0
    return parse_screen_size(result.stdout)


def resolve_timezone() -> str:
    tz_env = os.environ.get("TZ", "").lstrip(":")
    if tz_env:
        return tz_env
    timezone_file = Path("/etc/timezone")
    if timezone_file.exists():
        name = timezone_file.read_text().strip()
        if name:
            return name
    localtime = Path("/etc/localtime")
    if localtime.is_symlink():
        target = str(localtime.resolve())
        if "zoneinfo/" in target:
            return target.split("zoneinfo/", 1)[1]
    return datetime.now().astimezone().tzname() or ""


def resolve_language() -> str:
    code = locale.getlocale()[0]
    if not code:
        for variable in ("LC_ALL", "LC_MESSAGES", "LANG"):
            value = os.environ.get(variable, "")
            if value and value not in {"C", "POSIX"}:
                code = value.split(".")[0]
                break
    return code.replace("_", "-") if code else ""


def installed_distributions() -> List[str]:
    names = {dist.metadata["Name"] for dist in metadata.distributions() if dist.metadata["Name"]}
    return sorted(names, key=str.lower)


class LocalHost(HostEnvironment):
    """Local machine attributes, read once when the host is built.

    Subsystems (fonts, renderer, canvas, audio) are queried when a provider asks.
    """

    def __init__(
        self,
        font_command: Sequence[str] = DEFAULT_FONT_COMMAND,
        renderer_command: Sequence[str] = DEFAULT_RENDERER_COMMAND,
        screen_command: Sequence[str] = DEFAULT_SCREEN_COMMAND,
        canvas_font: Optional[str] = None,
        cookie_enabled: bool = True,
    ):
        self.user_agent = (
            f"Python/{platform.python_version()} "
            f"({platform.system()} {platform.release()}; {platform.machine()}) "
            f"{platform.python_implementation()}"
        )
        self.screen_width, self.screen_height = read_screen_size(screen_command)
        self.timezone = resolve_timezone()
        self.language = resolve_language()
        self.platform = f"{platform.system()} {platform.machine()}".strip()
        self.do_not_track = os.environ.get("DO_NOT_TRACK") or None
        self.hardware_concurrency = psutil.cpu_count(logical=True)
        self.cookie_enabled = cookie_enabled
        self.plugins = installed_distributions()
        self.touch_events = False
        self.max_touch_points = 0
        self.fonts = FontConfigFonts(font_command)
        self.renderer_command = list(renderer_command)
        self.canvas_font = canvas_font

    def create_canvas(self, width: int, height: int) -> Optional[CanvasSurface]:
        return PillowCanvas(width, height, font_family=self.canvas_font)

    async def open_graphics_context(self) -> Optional[GraphicsContext]:
        try:
            output = await run_tool(self.renderer_command)
        except (OSError, RuntimeError) as exc:
            logger.debug("No graphics context: %s", exc)
            return None
        return GlxGraphicsContext(parse_glxinfo(output))

    def create_audio_context(self) -> AudioContext:
        return NumpyAudioContext()


def build_local_host(settings: Settings) -> LocalHost:
    return LocalHost(
        font_command=settings.font_command,
        renderer_command=settings.renderer_command,
        screen_command=settings.screen_command,
        canvas_font=settings.canvas_font,
        cookie_enabled=settings.cookie_enabled,
    )
