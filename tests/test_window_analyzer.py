"""
Tests for wavefit/analysis/fourier: per-window harmonic fit.
Run from project root: python -m pytest tests/test_window_analyzer.py -v
"""
import sys
import os
import math

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
import torch
from wavefit.analysis.fourier import analyze_window, analyze_candidates, check_window
from wavefit.core.config import AnalysisConfig
from wavefit.core.types import WaveformBuffer, WindowRangeError
from wavefit.dsp.oscillators import Oscillator

SR = 24000
# f * 500 / 24000 is an integer: every harmonic spans whole periods of a 500-sample window.
WHOLE_PERIOD_FREQS = [240.0, 288.0, 336.0, 384.0, 432.0]


# -----------------------------------------------------------------------------
# Constant and silent windows
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("freq", WHOLE_PERIOD_FREQS)
def test_constant_window_has_only_dc(freq):
    """A constant window fits as a0 == c with vanishing harmonics."""
    buf = WaveformBuffer(torch.full((500,), 0.5))
    result = analyze_window(buf, freq, 0, 500)
    assert result.a0 == pytest.approx(0.5)
    assert max(abs(v) for v in result.a) < 1e-4
    assert max(abs(v) for v in result.b) < 1e-4


def test_constant_window_a0_any_frequency():
    """a0 is the window mean whatever the candidate frequency."""
    buf = WaveformBuffer(torch.full((500,), -0.25))
    for freq in (220.0, 317.0, 440.0):
        assert analyze_window(buf, freq, 0, 500).a0 == pytest.approx(-0.25)


def test_zero_window_is_exactly_zero():
    buf = WaveformBuffer(torch.zeros(700))
    result = analyze_window(buf, 301.0, 100, 500)
    assert result.a0 == 0.0
    assert all(v == 0.0 for v in result.a)
    assert all(v == 0.0 for v in result.b)


# -----------------------------------------------------------------------------
# Coefficients
# -----------------------------------------------------------------------------

def test_result_shape_and_frequency_echo():
    buf = Oscillator.sine(300.0, 500)
    result = analyze_window(buf, 300.0, 0, 500)
    assert result.base_frequency == 300.0
    assert len(result.a) == 8
    assert len(result.b) == 8


def test_sine_projects_onto_b1():
    """sin at the candidate fundamental -> b1 ~ 0.5, a1 ~ 0."""
    buf = Oscillator.sine(240.0, 500)
    result = analyze_window(buf, 240.0, 0, 500)
    assert result.b[0] == pytest.approx(0.5, abs=1e-3)
    assert abs(result.a[0]) < 1e-3
    assert max(abs(v) for v in result.b[1:]) < 1e-3


def test_cosine_projects_onto_a1():
    buf = Oscillator.sine(240.0, 500, phase=math.pi / 2)
    result = analyze_window(buf, 240.0, 0, 500)
    assert result.a[0] == pytest.approx(0.5, abs=1e-3)
    assert abs(result.b[0]) < 1e-3


def test_normalized_by_window_length_not_buffer_length():
    """A window inside a longer buffer is divided by its own count."""
    tone = Oscillator.sine(240.0, 500).samples
    buf = WaveformBuffer(torch.cat([torch.zeros(500), tone, torch.zeros(1000)]))
    result = analyze_window(buf, 240.0, 500, 500)
    assert result.b[0] == pytest.approx(0.5, abs=1e-3)


def test_phase_restarts_at_window_start():
    """Fitting a shifted window matches fitting the same samples at offset 0."""
    tone = Oscillator.sine(275.0, 400).samples
    shifted = WaveformBuffer(torch.cat([torch.ones(123), tone]))
    alone = WaveformBuffer(tone)
    r1 = analyze_window(shifted, 275.0, 123, 400)
    r2 = analyze_window(alone, 275.0, 0, 400)
    torch.testing.assert_close(torch.tensor(r1.a), torch.tensor(r2.a))
    torch.testing.assert_close(torch.tensor(r1.b), torch.tensor(r2.b))


def test_parameter_count_follows_config():
    config = AnalysisConfig(parameter_count=4)
    result = analyze_window(Oscillator.sine(300.0, 500), 300.0, 0, 500, config)
    assert len(result.a) == 4
    assert len(result.b) == 4


def test_incremental_phase_close_to_direct():
    """Both phase strategies compute the same projection up to float32 drift."""
    buf = Oscillator.square(440.0, 500)
    direct = analyze_window(buf, 330.0, 0, 500, AnalysisConfig(phase_mode="direct"))
    incremental = analyze_window(buf, 330.0, 0, 500, AnalysisConfig(phase_mode="incremental"))
    torch.testing.assert_close(torch.tensor(direct.a), torch.tensor(incremental.a), atol=1e-2, rtol=0.0)
    torch.testing.assert_close(torch.tensor(direct.b), torch.tensor(incremental.b), atol=1e-2, rtol=0.0)


def test_batched_candidates_match_single_fits():
    buf = Oscillator.square(440.0, 600)
    freqs = [220.0, 333.0, 440.0]
    a0, a, b = analyze_candidates(buf, freqs, 50, 500)
    assert a.shape == (3, 8)
    assert b.shape == (3, 8)
    for i, freq in enumerate(freqs):
        single = analyze_window(buf, freq, 50, 500)
        assert float(a0) == pytest.approx(single.a0)
        torch.testing.assert_close(a[i], torch.tensor(single.a), atol=1e-6, rtol=1e-5)
        torch.testing.assert_close(b[i], torch.tensor(single.b), atol=1e-6, rtol=1e-5)


def test_accepts_raw_tensor():
    result = analyze_window(torch.full((100,), 2.0), 250.0, 0, 100)
    assert result.a0 == pytest.approx(2.0)


def test_rejects_multichannel_raw_tensor():
    with pytest.raises(ValueError):
        analyze_window(torch.zeros(2, 500), 300.0, 0, 500)


# -----------------------------------------------------------------------------
# Bounds
# -----------------------------------------------------------------------------

def test_window_past_end_raises():
    buf = WaveformBuffer(torch.zeros(500))
    with pytest.raises(WindowRangeError):
        analyze_window(buf, 300.0, 400, 200)


def test_negative_start_raises():
    buf = WaveformBuffer(torch.zeros(500))
    with pytest.raises(WindowRangeError):
        analyze_window(buf, 300.0, -1, 10)


def test_zero_count_raises():
    buf = WaveformBuffer(torch.zeros(500))
    with pytest.raises(WindowRangeError):
        analyze_window(buf, 300.0, 0, 0)


def test_range_error_is_index_error():
    with pytest.raises(IndexError):
        check_window(10, 5, 6)


def test_window_ending_at_buffer_end_is_valid():
    buf = WaveformBuffer(torch.ones(500))
    result = analyze_window(buf, 300.0, 250, 250)
    assert result.a0 == pytest.approx(1.0)
