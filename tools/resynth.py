#!/usr/bin/env python3
"""
Analyze a waveform window by window, then resynthesize it from the fitted harmonics.

Usage:
    python tools/resynth.py --input assets/test.wav
    python tools/resynth.py --synthetic square --multiplier 4.0 --qc

Options:
    --input <path>            Mono audio file to analyze
    --synthetic <kind>        "square" (440 Hz, 3 s at 24 kHz) or "pulse" (50-sample blocks)
    --window-size <int>       Samples per analysis window (default: config)
    --freq-lo / --freq-hi     Candidate range in Hz, freq-hi exclusive (default: 220 / 441)
    --multiplier <float>      Output gain applied to every resynthesized sample (default: 4.0)
    --reconstruction <mode>   "reference" or "corrected"
    --phase-mode <mode>       "direct" or "incremental"
    --qc                      Run QC comparison of source vs resynthesis
    --output-dir <path>       Output directory (default: unique timestamped dir)
"""
import sys
import os
import json
import logging
import argparse
from datetime import datetime
from pathlib import Path

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from wavefit.analysis.search import search, window_bounds
from wavefit.analysis.score import score
from wavefit.core.config import config_from_env
from wavefit.core.io import AudioIO
from wavefit.dsp.oscillators import Oscillator
from wavefit.qc.qc import analyze
from wavefit.synth.resynth import synthesize

logger = logging.getLogger("wavefit")


def get_unique_output_dir(name: str) -> Path:
    """Timestamped output directory under renders/."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return Path("renders") / f"{name}_{stamp}"


def load_source(args):
    if args.input:
        return AudioIO.load_wav(args.input)
    if args.synthetic == "pulse":
        return Oscillator.pulse_blocks(50, 24000 * 3)
    return Oscillator.square()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Windowed harmonic analysis and resynthesis")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--input", type=str, default=None)
    source.add_argument("--synthetic", choices=["square", "pulse"], default="square")
    parser.add_argument("--window-size", type=int, default=None)
    parser.add_argument("--freq-lo", type=int, default=None)
    parser.add_argument("--freq-hi", type=int, default=None)
    parser.add_argument("--multiplier", type=float, default=4.0)
    parser.add_argument("--reconstruction", choices=["reference", "corrected"], default=None)
    parser.add_argument("--phase-mode", choices=["direct", "incremental"], default=None)
    parser.add_argument("--qc", action="store_true")
    parser.add_argument("--output-dir", type=str, default=None)
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    config = config_from_env().with_overrides(
        window_size=args.window_size,
        freq_lo=args.freq_lo,
        freq_hi=args.freq_hi,
        reconstruction=args.reconstruction,
        phase_mode=args.phase_mode,
    )

    source = load_source(args)
    if source.sample_rate != config.sample_rate:
        logger.warning(
            "Source sample rate %d differs from analysis rate %d; phase math uses %d",
            source.sample_rate, config.sample_rate, config.sample_rate,
        )

    results = search(source, config=config)
    resynth = synthesize(results, multiplier=args.multiplier, config=config)

    output_dir = Path(args.output_dir) if args.output_dir else get_unique_output_dir("resynth")
    output_dir.mkdir(parents=True, exist_ok=True)
    source_path = output_dir / "source.wav"
    resynth_path = output_dir / "resynth.wav"
    AudioIO.save_wav(source, source_path)
    AudioIO.save_wav(resynth, resynth_path)

    with open(output_dir / "results.json", "w") as f:
        json.dump({
            "config": config.to_dict(),
            "multiplier": args.multiplier,
            "results": [r.to_dict() for r in results],
        }, f, indent=2)

    print(f"\n=== Resynth Complete ===")
    print(f"Windows: {len(window_bounds(len(source), config.window_size))}, fitted: {len(results)}")
    if results:
        scores = [score(r, config) for r in results]
        freqs = [r.base_frequency for r in results]
        print(f"Base frequency: min {min(freqs):.0f} Hz, max {max(freqs):.0f} Hz")
        print(f"Score: mean {sum(scores) / len(scores):.4f}")
    print(f"Source: {source_path}")
    print(f"Resynth: {resynth_path}")

    if args.qc:
        qc = analyze(source, resynth)
        print(f"QC Status: {qc['status']}")
        if qc["failures"]:
            print("  FAILURES:")
            for msg in qc["failures"]:
                print(f"    - {msg}")
        if qc["warnings"]:
            print("  WARNINGS:")
            for msg in qc["warnings"]:
                print(f"    - {msg}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
