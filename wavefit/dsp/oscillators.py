"""
Synthetic sources for driving the analyzer without an audio file.
All generators start at phase 0 and return mono WaveformBuffers.
"""

import math

import torch
import numpy as np

from wavefit.core.types import WaveformBuffer

SAMPLING_FREQUENCY = 24000


class Oscillator:
    @staticmethod
    def sine(frequency: float, sample_count: int, sample_rate: int = SAMPLING_FREQUENCY, phase: float = 0.0) -> WaveformBuffer:
        """
        Sine wave evaluated directly per sample.

        Args:
            frequency: Frequency (Hz)
            sample_count: Number of samples
            sample_rate: Sample rate
            phase: Initial phase offset (radians)
        """
        n = torch.arange(sample_count, dtype=torch.float64)
        wave = torch.sin(2 * np.pi * frequency * n / sample_rate + phase)
        return WaveformBuffer(wave.float(), sample_rate)

    @staticmethod
    def square(frequency: float = 440.0, sample_count: int = SAMPLING_FREQUENCY * 3, sample_rate: int = SAMPLING_FREQUENCY) -> WaveformBuffer:
        """
        Square wave from the sign of an incrementally advanced sine.
        sin <= 0 maps to -1, sin > 0 maps to +1, so the first sample is -1.
        """
        if sample_count <= 0:
            return WaveformBuffer(torch.zeros(0), sample_rate)
        step = np.float32(2.0 * math.pi * (1.0 / sample_rate) * frequency)
        # Sequential float32 running sum; the drift is part of the waveform.
        steps = np.full(sample_count, step, dtype=np.float32)
        steps[0] = 0.0
        angle = torch.from_numpy(np.add.accumulate(steps, dtype=np.float32))
        wave = torch.where(torch.sin(angle) <= 0.0, torch.tensor(-1.0), torch.tensor(1.0))
        return WaveformBuffer(wave, sample_rate)

    @staticmethod
    def pulse_blocks(block: int, sample_count: int, low: float = 0.0, high: float = 1.0, sample_rate: int = 44100) -> WaveformBuffer:
        """
        Alternating constant blocks of `block` samples, starting with `low`.
        block=50, low=0, high=1 at 44100 Hz is the classic test pulse.
        """
        if block <= 0:
            raise ValueError(f"block must be positive, got {block}")
        n = torch.arange(sample_count)
        odd = ((n // block) % 2) == 1
        wave = torch.where(odd, torch.tensor(float(high)), torch.tensor(float(low)))
        return WaveformBuffer(wave, sample_rate)
