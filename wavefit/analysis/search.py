"""
Frequency search over consecutive windows.

The buffer is split into non-overlapping windows of window_size samples; the last
window keeps the remainder. Every integer candidate in [freq_lo, freq_hi) is fitted
and the strictly greatest score wins, starting from a best score of 0.0. Equal scores
keep the lowest frequency. A window whose best score is not above 0.0 is skipped, so
the output can be shorter than the number of windows.
"""
import logging
from typing import List, Tuple, Union

import torch

from wavefit.analysis.fourier import analyze_candidates, samples_of
from wavefit.analysis.score import score_coefficients
from wavefit.core.config import AnalysisConfig, DEFAULT_CONFIG
from wavefit.core.types import AnalysisResult, Fit, WaveformBuffer

logger = logging.getLogger(__name__)


def window_bounds(length: int, window_size: int) -> List[Tuple[int, int]]:
    """(start, count) for every window of a buffer of the given length."""
    if window_size <= 0:
        raise ValueError(f"window_size must be positive, got {window_size}")
    bounds = []
    position = 0
    while position < length:
        count = min(window_size, length - position)
        bounds.append((position, count))
        position += count
    return bounds


def candidate_frequencies(freq_lo: int, freq_hi: int) -> torch.Tensor:
    """Integer Hz candidates in [freq_lo, freq_hi). freq_hi is exclusive."""
    if freq_hi <= freq_lo:
        raise ValueError(f"Empty frequency range [{freq_lo}, {freq_hi})")
    return torch.arange(int(freq_lo), int(freq_hi), dtype=torch.float32)


def best_fit(
    buffer: Union[WaveformBuffer, torch.Tensor],
    start: int,
    count: int,
    frequencies: torch.Tensor,
    config: AnalysisConfig = None,
) -> Fit:
    """Best-scoring candidate for one window, or None when nothing scores above 0.0."""
    config = config or DEFAULT_CONFIG
    a0, a, b = analyze_candidates(buffer, frequencies, start, count, config)
    if a.shape[0] == 0:
        return None

    scores = score_coefficients(a, b)
    # argmax returns the first maximal index: ties resolve to the lowest frequency.
    idx = int(torch.argmax(scores))
    best_score = float(scores[idx])
    if not best_score > 0.0:
        logger.debug("window [%d, %d): no fit (best score %s)", start, start + count, best_score)
        return None

    result = AnalysisResult(
        base_frequency=float(frequencies[idx]),
        a0=float(a0),
        a=a[idx].tolist(),
        b=b[idx].tolist(),
    )
    logger.debug("base_frequency: %s, score: %s", result.base_frequency, best_score)
    return result


def search(
    buffer: Union[WaveformBuffer, torch.Tensor],
    window_size: int = None,
    freq_lo: int = None,
    freq_hi: int = None,
    config: AnalysisConfig = None,
) -> List[AnalysisResult]:
    """
    Fit every window of buffer and return the winners in time order.
    Explicit window_size / freq_lo / freq_hi override the config.
    """
    config = (config or DEFAULT_CONFIG).with_overrides(
        window_size=window_size, freq_lo=freq_lo, freq_hi=freq_hi
    )
    samples = samples_of(buffer)
    frequencies = candidate_frequencies(config.freq_lo, config.freq_hi)
    bounds = window_bounds(int(samples.shape[0]), config.window_size)

    results: List[AnalysisResult] = []
    for start, count in bounds:
        result = best_fit(samples, start, count, frequencies, config)
        if result is not None:
            results.append(result)

    logger.info(
        "Analyzed %d windows (%d fitted, %d candidates each, window_size=%d)",
        len(bounds),
        len(results),
        int(frequencies.shape[0]),
        config.window_size,
    )
    return results
