from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import torch


class WindowRangeError(IndexError):
    """Raised when a requested analysis window falls outside the buffer."""


class UnfitResultError(ValueError):
    """Raised when a result without a full coefficient set is scored or rendered."""


SampleLike = Union[torch.Tensor, np.ndarray, Sequence[float]]


def _as_samples(samples: SampleLike) -> torch.Tensor:
    """Coerce input to a detached, contiguous 1-D float32 tensor (always a copy)."""
    if isinstance(samples, torch.Tensor):
        t = samples.detach().to(dtype=torch.float32).clone()
    else:
        t = torch.tensor(np.asarray(samples, dtype=np.float32))
    if t.dim() != 1:
        raise ValueError(f"WaveformBuffer expects mono (1-D) samples, got shape {tuple(t.shape)}")
    return t.contiguous()


@dataclass(frozen=True, eq=False)
class WaveformBuffer:
    samples: torch.Tensor  # float32, 1-D; shared, treat as read-only
    sample_rate: int = 24000

    def __post_init__(self):
        object.__setattr__(self, "samples", _as_samples(self.samples))
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    def __len__(self) -> int:
        return int(self.samples.shape[0])

    def __getitem__(self, index):
        return self.samples[index].clone()

    def duration(self) -> float:
        """Length in seconds at the buffer's own sample rate."""
        if self.sample_rate <= 0:
            return 0.0
        return len(self) / float(self.sample_rate)

    def to_numpy(self) -> np.ndarray:
        return self.samples.numpy().copy()

    def scaled(self, multiplier: float) -> "WaveformBuffer":
        return WaveformBuffer(self.samples * float(multiplier), self.sample_rate)


@dataclass
class AnalysisResult:
    """
    Harmonic fit of one window at one fundamental.
    a[k-1] / b[k-1] hold the cosine / sine coefficient of harmonic k.
    """
    base_frequency: float
    a0: float = 0.0
    a: List[float] = field(default_factory=list)
    b: List[float] = field(default_factory=list)

    def is_complete(self, parameter_count: int) -> bool:
        return len(self.a) == parameter_count and len(self.b) == parameter_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_frequency": float(self.base_frequency),
            "a0": float(self.a0),
            "a": [float(v) for v in self.a],
            "b": [float(v) for v in self.b],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisResult":
        try:
            return cls(
                base_frequency=float(data["base_frequency"]),
                a0=float(data.get("a0", 0.0)),
                a=[float(v) for v in data.get("a", [])],
                b=[float(v) for v in data.get("b", [])],
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed analysis result: {exc}") from exc


# A window either has a fit or it does not.
Fit = Optional[AnalysisResult]
