"""FingerprintGuardian orchestration layer."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, List, Optional, Sequence

from .environment import LocalHost
from .fingerprint import DEFAULT_ALGORITHM, build_canonical, digest
from .host import HostEnvironment
from .models import FingerprintResult, Signal
from .providers import PROVIDERS, AsyncProvider, AttributeProvider, SignalProvider

logger = logging.getLogger(__name__)


class FingerprintGuardian:
    """Runs every provider against one host and digests the result.

    Immediate providers are read during dispatch; asynchronous providers are
    all started as tasks before the first one is awaited. Signals are placed
    by provider index, never by completion order.
    """

    def __init__(
        self,
        host: HostEnvironment,
        providers: Sequence[SignalProvider] = PROVIDERS,
        provider_timeout: Optional[float] = None,
        algorithm: str = DEFAULT_ALGORITHM,
    ):
        if provider_timeout is not None and provider_timeout <= 0:
            raise ValueError(f"provider_timeout must be positive, got {provider_timeout}")
        self.host = host
        self.providers = list(providers)
        self.provider_timeout = provider_timeout
        self.algorithm = algorithm

    async def collect(self) -> List[Signal]:
        signals: List[Signal] = []
        pending: List[asyncio.Task] = []
        for index, provider in enumerate(self.providers):
            if isinstance(provider, AsyncProvider):
                pending.append(asyncio.create_task(self._guard(index, provider)))
            elif isinstance(provider, AttributeProvider):
                signals.append(provider.produce(index, self.host))
            else:
                raise TypeError(f"Unsupported provider type: {provider!r}")
        if pending:
            signals.extend(await asyncio.gather(*pending))
        return sorted(signals, key=lambda signal: signal.index)

    async def execute(self) -> FingerprintResult:
        started = time.perf_counter()
        signals = await self.collect()
        canonical = build_canonical(signal.render() for signal in signals)
        result = FingerprintResult(
            fingerprint=digest(canonical, self.algorithm),
            canonical=canonical,
            signals=signals,
            elapsed_seconds=time.perf_counter() - started,
        )
        missing = [signal.name for signal in signals if not signal.available]
        if missing:
            logger.info("Fingerprint computed with unavailable signals: %s", ", ".join(missing))
        return result

    async def _guard(self, index: int, provider: AsyncProvider) -> Signal:
        work: Awaitable[Signal] = provider.produce(index, self.host)
        if self.provider_timeout is None:
            return await work
        try:
            return await asyncio.wait_for(work, timeout=self.provider_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Signal %s did not settle within %.2fs, using fallback",
                provider.name,
                self.provider_timeout,
            )
            return Signal.unavailable(index, provider.name, provider.kind)


async def collect_fingerprint(
    host: Optional[HostEnvironment] = None,
    *,
    provider_timeout: Optional[float] = None,
) -> FingerprintResult:
    guardian = FingerprintGuardian(host if host is not None else LocalHost(), provider_timeout=provider_timeout)
    return await guardian.execute()


async def compute_fingerprint(
    host: Optional[HostEnvironment] = None,
    *,
    provider_timeout: Optional[float] = None,
) -> str:
    result = await collect_fingerprint(host, provider_timeout=provider_timeout)
    return result.fingerprint
