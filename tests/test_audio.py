"""Tests for the numpy offline audio graph."""

import numpy as np
import pytest

from devprint.audio import NumpyAudioContext, byte_frequency_data, oscillator
from devprint.providers import AUDIO_FFT_SIZE, AUDIO_FREQUENCY, AudioProvider, sample_audio
from devprint.host import HostEnvironment


class NumpyHost(HostEnvironment):
    def create_audio_context(self):
        return NumpyAudioContext()


class TestOscillator:
    def test_triangle_shape(self):
        assert np.allclose(oscillator("triangle", 1.0, 4, 4), [0.0, 1.0, 0.0, -1.0])

    def test_square_shape(self):
        assert np.allclose(oscillator("square", 1.0, 4, 4), [1.0, 1.0, -1.0, -1.0])

    def test_unknown_shape(self):
        with pytest.raises(ValueError):
            oscillator("noise", 440.0, 16, 44100)


class TestByteFrequencyData:
    def test_silence_is_all_zero(self):
        data = byte_frequency_data([0.0] * AUDIO_FFT_SIZE, AUDIO_FFT_SIZE)
        assert data == bytes(AUDIO_FFT_SIZE // 2)

    def test_peak_at_oscillator_frequency(self):
        samples = oscillator("triangle", AUDIO_FREQUENCY, AUDIO_FFT_SIZE, 44100)
        data = byte_frequency_data(samples, AUDIO_FFT_SIZE)
        assert len(data) == 1024
        peak = max(range(len(data)), key=data.__getitem__)
        expected_bin = AUDIO_FREQUENCY * AUDIO_FFT_SIZE / 44100
        assert abs(peak - expected_bin) < 2
        assert data[peak] > 200

    def test_short_input_is_zero_padded(self):
        assert len(byte_frequency_data([0.5] * 10, 64)) == 32

    def test_deterministic(self):
        samples = oscillator("triangle", AUDIO_FREQUENCY, AUDIO_FFT_SIZE, 44100)
        assert byte_frequency_data(samples, AUDIO_FFT_SIZE) == byte_frequency_data(list(samples), AUDIO_FFT_SIZE)


@pytest.mark.asyncio
class TestNumpyAudioContext:
    async def test_start_rendering_length(self):
        samples = await NumpyAudioContext().start_rendering("triangle", AUDIO_FREQUENCY, 128)
        assert len(samples) == 128

    async def test_audio_signal_end_to_end(self):
        host = NumpyHost()
        data = await sample_audio(host)
        assert len(data) == AUDIO_FFT_SIZE // 2
        signal = await AudioProvider().produce(13, host)
        assert signal.render() == ",".join(str(b) for b in data)
