"""devprint package initializer."""

from __future__ import annotations

from .fingerprint import build_canonical, digest, hash_buffer
from .guardian import FingerprintGuardian, collect_fingerprint, compute_fingerprint
from .host import HostEnvironment
from .models import SENTINEL, FingerprintResult, Signal
from .providers import PROVIDERS, provider_names

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # 管线入口
    "compute_fingerprint",
    "collect_fingerprint",
    "FingerprintGuardian",
    # 组成部分
    "hash_buffer",
    "build_canonical",
    "digest",
    "HostEnvironment",
    "Signal",
    "FingerprintResult",
    "SENTINEL",
    "PROVIDERS",
    "provider_names",
]
