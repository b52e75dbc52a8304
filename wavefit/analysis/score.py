"""
Fit scorer: mean absolute harmonic coefficient magnitude. Higher is a better fit.
"""
from typing import Optional

import torch

from wavefit.core.config import AnalysisConfig, DEFAULT_CONFIG
from wavefit.core.types import AnalysisResult, UnfitResultError


def score_coefficients(a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
    """Score candidate rows: (sum|a| + sum|b|) / (2 * K). a, b: [..., K] -> [...]."""
    k = a.shape[-1]
    return (a.abs().sum(dim=-1) + b.abs().sum(dim=-1)) / (2 * k)


def score(result: Optional[AnalysisResult], config: AnalysisConfig = None) -> float:
    """Score a single fitted window. Unfit results raise UnfitResultError."""
    config = config or DEFAULT_CONFIG
    if result is None:
        raise UnfitResultError("Cannot score a window without a fit")
    if not result.is_complete(config.parameter_count):
        raise UnfitResultError(
            f"Expected {config.parameter_count} a/b coefficients, "
            f"got {len(result.a)}/{len(result.b)}"
        )
    a = torch.tensor(result.a, dtype=torch.float32)
    b = torch.tensor(result.b, dtype=torch.float32)
    return float(score_coefficients(a, b))
