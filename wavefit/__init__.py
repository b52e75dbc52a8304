"""
wavefit: windowed harmonic (truncated Fourier series) analysis and resynthesis.
"""
from wavefit.core.config import AnalysisConfig, DEFAULT_CONFIG, resolve_config
from wavefit.core.types import AnalysisResult, WaveformBuffer, WindowRangeError, UnfitResultError
from wavefit.analysis import analyze_window, score, search
from wavefit.synth import synthesize, synthesize_one

__all__ = [
    "AnalysisConfig",
    "DEFAULT_CONFIG",
    "resolve_config",
    "AnalysisResult",
    "WaveformBuffer",
    "WindowRangeError",
    "UnfitResultError",
    "analyze_window",
    "score",
    "search",
    "synthesize",
    "synthesize_one",
]
