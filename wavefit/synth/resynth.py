"""
Synthesizer: rebuilds samples by evaluating stored harmonic series.

Phase is evaluated directly per sample and restarts at 0 for every window; no phase
is carried across windows, so a window that is not a whole number of periods of its
fundamental produces a discontinuity at the boundary.

Reconstruction modes (AnalysisConfig.reconstruction):
    reference  b_k is applied through cos, like a_k (default)
    corrected  b_k is applied through sin
"""
import logging
from typing import Optional, Sequence

import torch

from wavefit.analysis.fourier import MAX_CHUNK_ELEMENTS, phase_table
from wavefit.core.config import AnalysisConfig, DEFAULT_CONFIG
from wavefit.core.types import AnalysisResult, UnfitResultError, WaveformBuffer

logger = logging.getLogger(__name__)


def _coefficients(results: Sequence[Optional[AnalysisResult]], config: AnalysisConfig):
    """Stack results into (freqs [R], a0 [R], a [R, K], b [R, K])."""
    for i, result in enumerate(results):
        if result is None or not result.is_complete(config.parameter_count):
            raise UnfitResultError(
                f"Result {i} has no full set of {config.parameter_count} coefficients"
            )
    freqs = torch.tensor([r.base_frequency for r in results], dtype=torch.float32)
    a0 = torch.tensor([r.a0 for r in results], dtype=torch.float32)
    a = torch.tensor([r.a for r in results], dtype=torch.float32)
    b = torch.tensor([r.b for r in results], dtype=torch.float32)
    return freqs, a0, a, b


def _render(
    results: Sequence[Optional[AnalysisResult]],
    sample_count: int,
    config: AnalysisConfig,
) -> torch.Tensor:
    """One row of sample_count samples per result. Shape [R, sample_count]."""
    freqs, a0, a, b = _coefficients(results, config)
    direct = config.with_overrides(phase_mode="direct")
    phase = phase_table(freqs, sample_count, direct)  # [R, K, N]

    cos = torch.cos(phase)
    b_basis = cos if config.reconstruction == "reference" else torch.sin(phase)

    out = a0.unsqueeze(-1) + (a.unsqueeze(-1) * cos).sum(dim=1)
    out = out + (b.unsqueeze(-1) * b_basis).sum(dim=1)
    return out


def synthesize(
    results: Sequence[AnalysisResult],
    window_size: int = None,
    multiplier: float = 1.0,
    config: AnalysisConfig = None,
) -> WaveformBuffer:
    """Concatenate window_size samples per result, in order, scaled by multiplier."""
    config = (config or DEFAULT_CONFIG).with_overrides(window_size=window_size)
    results = list(results)
    if not results:
        return WaveformBuffer(torch.zeros(0), config.sample_rate)

    chunk = max(1, MAX_CHUNK_ELEMENTS // (config.parameter_count * config.window_size))
    parts = [
        _render(results[i:i + chunk], config.window_size, config).reshape(-1)
        for i in range(0, len(results), chunk)
    ]
    samples = torch.cat(parts) * multiplier
    logger.debug(
        "Synthesized %d samples from %d windows (%s reconstruction)",
        samples.shape[0],
        len(results),
        config.reconstruction,
    )
    return WaveformBuffer(samples, config.sample_rate)


def synthesize_one(
    result: AnalysisResult,
    total_sample_count: int,
    multiplier: float = 1.0,
    config: AnalysisConfig = None,
) -> WaveformBuffer:
    """Render one continuous tone of total_sample_count samples from a single result."""
    config = config or DEFAULT_CONFIG
    if total_sample_count < 0:
        raise ValueError(f"total_sample_count must be non-negative, got {total_sample_count}")
    if total_sample_count == 0:
        # Validate the result even when nothing is rendered.
        _coefficients([result], config)
        return WaveformBuffer(torch.zeros(0), config.sample_rate)

    samples = _render([result], total_sample_count, config)[0] * multiplier
    return WaveformBuffer(samples, config.sample_rate)
