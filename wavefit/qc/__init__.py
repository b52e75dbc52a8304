"""
Quality Control module for evaluating resynthesized buffers.
"""
from wavefit.qc.qc import analyze
from wavefit.qc.thresholds import QC_THRESHOLDS

__all__ = ["analyze", "QC_THRESHOLDS"]
