"""
Windowed harmonic analysis: per-window fit, scoring, and frequency search.
"""
from wavefit.analysis.fourier import analyze_window, analyze_candidates
from wavefit.analysis.score import score, score_coefficients
from wavefit.analysis.search import search, window_bounds, candidate_frequencies

__all__ = [
    "analyze_window",
    "analyze_candidates",
    "score",
    "score_coefficients",
    "search",
    "window_bounds",
    "candidate_frequencies",
]
