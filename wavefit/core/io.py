import io
from typing import Union

import numpy as np
import soundfile as sf

from wavefit.core.types import WaveformBuffer


class AudioIO:
    @staticmethod
    def load_wav(path) -> WaveformBuffer:
        """Reads a mono audio file as float32. The file's sample rate is kept on the buffer."""
        data, sample_rate = sf.read(path, dtype="float32", always_2d=False)
        return AudioIO._to_buffer(data, sample_rate)

    @staticmethod
    def from_bytes(data: bytes) -> WaveformBuffer:
        """Decodes an in-memory audio file (e.g. a base64-decoded API upload)."""
        samples, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=False)
        return AudioIO._to_buffer(samples, sample_rate)

    @staticmethod
    def _to_buffer(data: np.ndarray, sample_rate: int) -> WaveformBuffer:
        if data.ndim > 1:
            if data.shape[1] != 1:
                raise ValueError(f"Only mono audio is supported, got {data.shape[1]} channels")
            data = data[:, 0]
        return WaveformBuffer(data, int(sample_rate))

    @staticmethod
    def _prepare(buffer: Union[WaveformBuffer, np.ndarray], normalize: bool = False) -> np.ndarray:
        if isinstance(buffer, WaveformBuffer):
            data = buffer.to_numpy()
        else:
            data = np.asarray(buffer, dtype=np.float32)

        if normalize:
            peak = np.max(np.abs(data)) if data.size else 0.0
            if peak > 0:
                data = data / peak

        # Clamp to avoid wrap-around clipping
        return np.clip(data, -1.0, 1.0)

    @staticmethod
    def save_wav(buffer: WaveformBuffer, path, normalize: bool = False, sample_rate: int = None):
        """Writes a buffer to a WAV file at the buffer's sample rate unless one is given."""
        rate = sample_rate or buffer.sample_rate
        sf.write(path, AudioIO._prepare(buffer, normalize), rate)

    @staticmethod
    def to_bytes(buffer: WaveformBuffer, format: str = "WAV", normalize: bool = False) -> bytes:
        """Returns the buffer as an encoded audio file (for API responses)."""
        out = io.BytesIO()
        sf.write(out, AudioIO._prepare(buffer, normalize), buffer.sample_rate, format=format)
        return out.getvalue()
