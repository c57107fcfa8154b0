"""Dataclasses shared across modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .fingerprint import hash_buffer

SENTINEL = "N/A"

TEXT = "text"
BUFFER = "buffer"

SignalKind = str
SignalValue = Union[str, bytes, None]


@dataclass(frozen=True)
class Signal:
    """One environment-derived value; ``value is None`` means unavailable."""

    index: int
    name: str
    kind: SignalKind
    value: SignalValue

    @property
    def available(self) -> bool:
        return self.value is not None

    def render(self) -> str:
        if self.value is None:
            return SENTINEL
        if isinstance(self.value, bytes):
            return hash_buffer(self.value)
        return self.value

    @classmethod
    def unavailable(cls, index: int, name: str, kind: SignalKind = TEXT) -> "Signal":
        return cls(index=index, name=name, kind=kind, value=None)


@dataclass
class FingerprintResult:
    fingerprint: str
    canonical: str
    signals: List[Signal] = field(default_factory=list)
    elapsed_seconds: Optional[float] = None

    def rendered(self) -> List[str]:
        return [signal.render() for signal in self.signals]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fingerprint": self.fingerprint,
            "canonical": self.canonical,
            "elapsed_seconds": self.elapsed_seconds,
            "signals": [
                {
                    "index": signal.index,
                    "name": signal.name,
                    "kind": signal.kind,
                    "available": signal.available,
                    "value": signal.render(),
                }
                for signal in self.signals
            ],
        }
