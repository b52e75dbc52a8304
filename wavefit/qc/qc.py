"""
Quality control for resynthesized buffers.
Compares a source with its reconstruction: level, clipping, error, correlation, coverage.
"""
import torch
import numpy as np
from typing import Dict, Optional

from wavefit.core.types import WaveformBuffer
from wavefit.qc.thresholds import QC_THRESHOLDS


def _dbfs(x: float) -> float:
    """Convert linear amplitude to dBFS (full scale)."""
    if x <= 0:
        return -np.inf
    return 20.0 * np.log10(abs(x))


def _rms(audio: torch.Tensor) -> float:
    if audio.numel() == 0:
        return 0.0
    return float(torch.sqrt(torch.mean(audio ** 2) + 1e-12))


def _correlation(x: torch.Tensor, y: torch.Tensor) -> float:
    """Pearson correlation over equal-length tensors; 0.0 when either side is flat."""
    if x.numel() < 2:
        return 0.0
    xc = x - x.mean()
    yc = y - y.mean()
    denom = torch.sqrt(torch.sum(xc ** 2) * torch.sum(yc ** 2))
    if float(denom) < 1e-12:
        return 0.0
    return float(torch.sum(xc * yc) / denom)


def analyze(
    source: WaveformBuffer,
    reconstructed: WaveformBuffer,
    thresholds: Optional[Dict] = None,
) -> Dict:
    """
    Compare a source buffer with its resynthesis.

    Args:
        source: Buffer that was analyzed
        reconstructed: Output of the synthesizer
        thresholds: Override for QC_THRESHOLDS["resynth"]

    Returns:
        Dict with metrics and pass/fail flags
    """
    thresholds = thresholds or QC_THRESHOLDS["resynth"]
    src = source.samples.double()
    rec = reconstructed.samples.double()

    common = min(src.shape[0], rec.shape[0])
    src_common = src[:common]
    rec_common = rec[:common]

    peak = float(torch.max(torch.abs(rec))) if rec.numel() else 0.0
    source_rms = _rms(src)
    error_rms = _rms(src_common - rec_common)

    metrics = {
        "peak_linear": peak,
        "peak_dbfs": _dbfs(peak),
        "source_rms": source_rms,
        "resynth_rms": _rms(rec),
        "error_rms": error_rms,
        "error_ratio": error_rms / source_rms if source_rms > 1e-9 else 0.0,
        "correlation": _correlation(src_common, rec_common),
        "length_ratio": rec.shape[0] / src.shape[0] if src.shape[0] else 1.0,
        "clipped_samples": int(torch.sum(torch.abs(rec) > 1.0)),
    }

    failures = []
    warnings = []

    peak_max = thresholds.get("peak_dbfs_max", 0.0)
    if metrics["peak_dbfs"] > peak_max:
        failures.append(
            f"Peak too high (clipping on write): {metrics['peak_dbfs']:.2f} dBFS > {peak_max:.2f} dBFS"
        )

    length_min = thresholds.get("length_ratio_min", 0.9)
    if metrics["length_ratio"] < length_min:
        warnings.append(f"Resynth shorter than source: {metrics['length_ratio']:.3f} < {length_min:.3f}")

    corr_min = thresholds.get("correlation_min", 0.5)
    if metrics["correlation"] < corr_min:
        warnings.append(f"Correlation low: {metrics['correlation']:.4f} < {corr_min:.4f}")

    error_max = thresholds.get("error_ratio_max", 1.0)
    if metrics["error_ratio"] > error_max:
        warnings.append(f"Reconstruction error high: {metrics['error_ratio']:.4f} > {error_max:.4f}")

    status = "PASS"
    if failures:
        status = "FAIL"
    elif warnings:
        status = "WARN"

    return {
        "status": status,
        "metrics": metrics,
        "failures": failures,
        "warnings": warnings,
    }
