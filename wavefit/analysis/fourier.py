"""
Window analyzer: projects one window of samples onto a truncated harmonic series.

Each window is treated as one period. For harmonic k of fundamental f the phase at
local sample n is 2*pi * (1/sample_rate) * f * k * n, so phase always starts at 0 on
the window's first sample. Coefficients are normalized by the window's own length.

Phase strategies (AnalysisConfig.phase_mode):
    direct       phase = step * n, evaluated per sample (default)
    incremental  phase accumulated as a float32 running sum of step, sample by sample
"""
import math
from typing import Sequence, Tuple, Union

import torch

from wavefit.core.config import AnalysisConfig, DEFAULT_CONFIG
from wavefit.core.types import AnalysisResult, WaveformBuffer, WindowRangeError

# Upper bound on F * K * count elements materialized per projection chunk.
MAX_CHUNK_ELEMENTS = 1 << 22


def samples_of(buffer: Union[WaveformBuffer, torch.Tensor]) -> torch.Tensor:
    if isinstance(buffer, WaveformBuffer):
        return buffer.samples
    if buffer.dim() != 1:
        raise ValueError(f"Expected mono (1-D) samples, got shape {tuple(buffer.shape)}")
    return buffer.float()


def check_window(length: int, start: int, count: int) -> None:
    """Raise WindowRangeError unless 0 <= start, 0 < count and start + count <= length."""
    if start < 0:
        raise WindowRangeError(f"Window start {start} is negative")
    if count <= 0:
        raise WindowRangeError(f"Window count must be positive, got {count}")
    if start + count > length:
        raise WindowRangeError(
            f"Window [{start}, {start + count}) exceeds buffer of {length} samples"
        )


def phase_step(frequencies: torch.Tensor, config: AnalysisConfig) -> torch.Tensor:
    """Per-sample phase increment for every (frequency, harmonic) pair. Shape [F, K]."""
    base = torch.tensor(2.0 * math.pi * (1.0 / config.sample_rate), dtype=torch.float32)
    harmonics = torch.tensor(config.harmonics, dtype=torch.float32)
    freqs = frequencies.to(torch.float32).view(-1, 1)
    return base * freqs * harmonics.view(1, -1)


def phase_table(frequencies: torch.Tensor, count: int, config: AnalysisConfig) -> torch.Tensor:
    """Phase for local samples 0..count-1. Shape [F, K, count]."""
    step = phase_step(frequencies, config)
    if config.phase_mode == "incremental":
        # float32 running sum, one add per sample (torch.cumsum accumulates in double).
        phase = torch.empty(step.shape + (count,), dtype=torch.float32)
        angle = torch.zeros_like(step)
        for n in range(count):
            phase[..., n] = angle
            angle = angle + step
        return phase
    n = torch.arange(count, dtype=torch.float32)
    return step.unsqueeze(-1) * n


def analyze_candidates(
    buffer: Union[WaveformBuffer, torch.Tensor],
    frequencies: Union[Sequence[float], torch.Tensor],
    start: int,
    count: int,
    config: AnalysisConfig = None,
) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
    """
    Fit one window at many candidate fundamentals at once.

    Returns:
        a0: scalar tensor, window mean
        a:  [F, K] cosine coefficients
        b:  [F, K] sine coefficients
    """
    config = config or DEFAULT_CONFIG
    samples = samples_of(buffer)
    check_window(int(samples.shape[0]), start, count)

    freqs = torch.as_tensor(frequencies, dtype=torch.float32).view(-1)
    window = samples[start:start + count]
    a0 = window.sum() / count

    per_freq = config.parameter_count * count
    chunk = max(1, MAX_CHUNK_ELEMENTS // per_freq)

    a_parts = []
    b_parts = []
    for i in range(0, freqs.shape[0], chunk):
        phase = phase_table(freqs[i:i + chunk], count, config)
        a_parts.append((window * torch.cos(phase)).sum(dim=-1) / count)
        b_parts.append((window * torch.sin(phase)).sum(dim=-1) / count)

    if not a_parts:
        empty = torch.zeros(0, config.parameter_count)
        return a0, empty, empty.clone()
    return a0, torch.cat(a_parts, dim=0), torch.cat(b_parts, dim=0)


def analyze_window(
    buffer: Union[WaveformBuffer, torch.Tensor],
    base_frequency: float,
    start: int,
    count: int,
    config: AnalysisConfig = None,
) -> AnalysisResult:
    """Fit samples[start:start+count] at a single fundamental."""
    a0, a, b = analyze_candidates(buffer, [float(base_frequency)], start, count, config)
    return AnalysisResult(
        base_frequency=float(base_frequency),
        a0=float(a0),
        a=a[0].tolist(),
        b=b[0].tolist(),
    )
