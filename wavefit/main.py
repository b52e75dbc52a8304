from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import logging
import base64
import binascii
import math

from wavefit.analysis.search import search, window_bounds
from wavefit.core.config import config_from_env
from wavefit.core.io import AudioIO
from wavefit.core.types import AnalysisResult, WaveformBuffer
from wavefit.qc.qc import analyze as qc_analyze
from wavefit.synth.resynth import synthesize, synthesize_one

# Configure Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("wavefit")

app = FastAPI(
    title="wavefit",
    version="0.1.0",
    description="Windowed harmonic analysis and resynthesis"
)

# CORS (Allow Frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _config(data: dict):
    """Request config on top of environment defaults. Invalid values -> 400."""
    base = data.get("config") or {}
    if not isinstance(base, dict):
        raise HTTPException(status_code=400, detail="'config' must be an object")
    try:
        return config_from_env(base)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _buffer(data: dict, sample_rate: int) -> WaveformBuffer:
    """Source buffer from raw samples or a base64 WAV upload."""
    try:
        if data.get("audio"):
            return AudioIO.from_bytes(base64.b64decode(data["audio"], validate=True))
        if "samples" in data:
            return WaveformBuffer(data["samples"], int(data.get("sample_rate", sample_rate)))
    except (ValueError, TypeError, binascii.Error, RuntimeError) as exc:
        # soundfile reports undecodable payloads as RuntimeError subclasses
        raise HTTPException(status_code=400, detail=f"Invalid audio payload: {exc}")
    raise HTTPException(status_code=400, detail="Provide 'samples' or base64 'audio'")


def _finite(value):
    """JSON-safe copy: non-finite floats become None."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _finite(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_finite(v) for v in value]
    return value


def _encode(buffer: WaveformBuffer) -> str:
    return base64.b64encode(AudioIO.to_bytes(buffer, format="WAV")).decode("utf-8")


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "wavefit"}


@app.post("/analyze")
async def analyze(data: dict):
    """
    Fits every window of the posted buffer.
    Body: { samples: [...], sample_rate?, config? } or { audio: <base64 WAV>, config? }
    """
    config = _config(data)
    buffer = _buffer(data, config.sample_rate)
    results = search(buffer, config=config)
    return {
        "results": [r.to_dict() for r in results],
        "window_count": len(window_bounds(len(buffer), config.window_size)),
        "config": config.to_dict(),
    }


@app.post("/synthesize")
async def synthesize_route(data: dict):
    """
    Renders stored results back to audio.
    Body: { results: [...], multiplier?, total_sample_count?, config? }
    With total_sample_count, the first result is rendered as one continuous tone.
    """
    config = _config(data)
    try:
        results = [AnalysisResult.from_dict(r) for r in data.get("results", [])]
        multiplier = float(data.get("multiplier", 1.0))
        if data.get("total_sample_count") is not None:
            if not results:
                raise ValueError("total_sample_count needs at least one result")
            audio = synthesize_one(results[0], int(data["total_sample_count"]), multiplier, config)
        else:
            audio = synthesize(results, multiplier=multiplier, config=config)
    except (ValueError, TypeError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return {
        "audio": _encode(audio),
        "sample_count": len(audio),
        "sample_rate": audio.sample_rate,
    }


@app.post("/resynth")
async def resynth(data: dict):
    """
    Analyze then resynthesize in one call.
    Returns base64 WAV, the fitted results and a QC report.
    """
    config = _config(data)
    buffer = _buffer(data, config.sample_rate)
    try:
        multiplier = float(data.get("multiplier", 1.0))
    except (ValueError, TypeError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    results = search(buffer, config=config)
    audio = synthesize(results, multiplier=multiplier, config=config)
    report = qc_analyze(buffer, audio)
    logger.info("resynth: %d samples -> %d windows fitted, QC %s", len(buffer), len(results), report["status"])

    return _finite({
        "audio": _encode(audio),
        "results": [r.to_dict() for r in results],
        "qc": report,
    })


if __name__ == "__main__":
    uvicorn.run("wavefit.main:app", host="0.0.0.0", port=8000, reload=True)
