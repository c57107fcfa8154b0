"""Helpers for loading settings and JSON/YAML documents."""

from __future__ import annotations

import json
import os
import shlex
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from dotenv import load_dotenv

CONFIG_FILENAMES = (".devprint.json", ".devprint.yaml", ".devprint.yml")
ENV_PREFIX = "DEVPRINT_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Settings:
    """Runtime knobs; none of them changes the provider set or its order."""

    provider_timeout: Optional[float] = None
    host_file: Optional[Path] = None
    font_command: List[str] = field(default_factory=lambda: ["fc-list", ":", "family"])
    renderer_command: List[str] = field(default_factory=lambda: ["glxinfo", "-B"])
    screen_command: List[str] = field(default_factory=lambda: ["xrandr", "--current"])
    canvas_font: Optional[str] = None
    cookie_enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["host_file"] = str(self.host_file) if self.host_file else None
        return payload


def load_document(path: Path) -> Any:
    """Parse a JSON or YAML file, choosing the parser by suffix."""

    path = Path(path).expanduser().resolve()
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from None
    if suffix == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {path}: {exc}") from None
    raise ValueError(f"Unsupported document type {suffix!r} for {path}; use .json, .yaml or .yml")


def find_config_file(workdir: Path) -> Optional[Path]:
    for name in CONFIG_FILENAMES:
        candidate = workdir / name
        if candidate.exists():
            return candidate
    return None


def load_settings(workdir: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from defaults, the config file, then ``DEVPRINT_*`` variables."""

    workdir = Path(workdir or Path.cwd()).expanduser().resolve()
    settings = Settings()

    config_file = find_config_file(workdir)
    if config_file is not None:
        content = load_document(config_file)
        if content is None:
            content = {}
        if not isinstance(content, Mapping):
            raise ValueError(f"Config file {config_file} must contain a mapping")
        apply_overrides(settings, content, base_dir=config_file.parent)

    if environ is None:
        load_dotenv(workdir / ".env", override=False)
        environ = os.environ
    env_values = {
        key[len(ENV_PREFIX):].lower(): value
        for key, value in environ.items()
        if key.startswith(ENV_PREFIX)
    }
    if env_values:
        apply_overrides(settings, env_values, base_dir=workdir)
    return settings


def apply_overrides(settings: Settings, values: Mapping[str, Any], base_dir: Path) -> Settings:
    known = {f.name for f in fields(Settings)}
    for key, raw in values.items():
        if key not in known:
            raise ValueError(f"Unknown setting: {key}")
        setattr(settings, key, _coerce(key, raw, base_dir))
    return settings


def _coerce(key: str, raw: Any, base_dir: Path) -> Any:
    if key == "provider_timeout":
        if raw is None or raw == "":
            return None
        try:
            timeout = float(raw)
        except (TypeError, ValueError):
            raise ValueError(f"provider_timeout must be a number, got {raw!r}") from None
        if timeout <= 0:
            raise ValueError(f"provider_timeout must be positive, got {raw!r}")
        return timeout
    if key == "host_file":
        if not raw:
            return None
        path = Path(str(raw)).expanduser()
        return path if path.is_absolute() else (base_dir / path).resolve()
    if key in {"font_command", "renderer_command", "screen_command"}:
        if isinstance(raw, str):
            return shlex.split(raw)
        if isinstance(raw, (list, tuple)) and raw:
            return [str(part) for part in raw]
        raise ValueError(f"{key} must be a command string or a non-empty list")
    if key == "canvas_font":
        return str(raw) if raw else None
    if key == "cookie_enabled":
        if isinstance(raw, bool):
            return raw
        lowered = str(raw).strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"cookie_enabled must be a boolean, got {raw!r}")
    return raw


def save_settings(path: Path, settings: Settings) -> Path:
    path.write_text(json.dumps(settings.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    return path
