from wavefit.synth.resynth import synthesize, synthesize_one

__all__ = ["synthesize", "synthesize_one"]
