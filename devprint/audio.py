"""Offline oscillator and analyser built on numpy."""

from __future__ import annotations

import asyncio
from typing import Sequence

import numpy as np

from .host import AudioContext

MIN_DECIBELS = -100.0
MAX_DECIBELS = -30.0
SMOOTHING_TIME_CONSTANT = 0.8


def oscillator(shape: str, frequency: float, length: int, sample_rate: int) -> np.ndarray:
    phase = np.mod(frequency * np.arange(length, dtype=np.float64) / sample_rate, 1.0)
    if shape == "sine":
        return np.sin(2.0 * np.pi * phase)
    if shape == "square":
        return np.where(phase < 0.5, 1.0, -1.0)
    if shape == "sawtooth":
        return 2.0 * np.mod(phase + 0.5, 1.0) - 1.0
    if shape == "triangle":
        return 1.0 - 4.0 * np.abs(np.mod(phase + 0.25, 1.0) - 0.5)
    raise ValueError(f"Unsupported oscillator shape: {shape}")


def blackman(size: int) -> np.ndarray:
    n = np.arange(size, dtype=np.float64)
    return 0.42 - 0.5 * np.cos(2.0 * np.pi * n / size) + 0.08 * np.cos(4.0 * np.pi * n / size)


def byte_frequency_data(samples: Sequence[float], fft_size: int) -> bytes:
    """Analyser byte output for a freshly created analyser node.

    The smoothing history starts at zero, so the first frame is attenuated by
    the smoothing constant before the decibel mapping.
    """
    frame = np.zeros(fft_size, dtype=np.float64)
    tail = np.asarray(samples, dtype=np.float64)[-fft_size:]
    frame[fft_size - len(tail):] = tail
    spectrum = np.fft.rfft(frame * blackman(fft_size))[: fft_size // 2]
    magnitude = np.abs(spectrum) / fft_size
    smoothed = (1.0 - SMOOTHING_TIME_CONSTANT) * magnitude
    with np.errstate(divide="ignore"):
        decibels = 20.0 * np.log10(smoothed)
    scaled = np.floor(255.0 / (MAX_DECIBELS - MIN_DECIBELS) * (decibels - MIN_DECIBELS))
    return np.clip(np.nan_to_num(scaled, neginf=0.0), 0, 255).astype(np.uint8).tobytes()


class NumpyAudioContext(AudioContext):
    def __init__(self, sample_rate: int = 44100):
        self.sample_rate = sample_rate

    async def start_rendering(self, shape: str, frequency: float, length: int) -> Sequence[float]:
        return await asyncio.to_thread(oscillator, shape, frequency, length, self.sample_rate)

    def byte_frequency_data(self, samples: Sequence[float], fft_size: int) -> bytes:
        return byte_frequency_data(samples, fft_size)
