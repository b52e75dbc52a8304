"""
Tests for the HTTP service: /health, /analyze, /synthesize, /resynth.
"""
import sys
import os
import base64

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
from fastapi.testclient import TestClient

from wavefit.core.io import AudioIO
from wavefit.dsp.oscillators import Oscillator
from wavefit.main import app


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c


def _tone_samples(count=500):
    return Oscillator.sine(300.0, count).samples.tolist()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_analyze_samples(client):
    resp = client.post("/analyze", json={"samples": _tone_samples(1250)})
    assert resp.status_code == 200
    body = resp.json()
    assert body["window_count"] == 3
    assert len(body["results"]) == 3
    first = body["results"][0]
    assert 220.0 <= first["base_frequency"] <= 440.0
    assert len(first["a"]) == 8
    assert len(first["b"]) == 8


def test_analyze_wav_upload_with_config(client):
    wav = AudioIO.to_bytes(Oscillator.sine(300.0, 1000))
    resp = client.post("/analyze", json={
        "audio": base64.b64encode(wav).decode("utf-8"),
        "config": {"window_size": 250, "parameter_count": 4},
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["window_count"] == 4
    assert all(len(r["a"]) == 4 for r in body["results"])


def test_analyze_requires_source(client):
    resp = client.post("/analyze", json={})
    assert resp.status_code == 400


def test_analyze_rejects_bad_audio(client):
    resp = client.post("/analyze", json={"audio": base64.b64encode(b"not a wav").decode("utf-8")})
    assert resp.status_code == 400


def test_analyze_rejects_bad_config(client):
    resp = client.post("/analyze", json={"samples": _tone_samples(), "config": {"freq_lo": 500}})
    assert resp.status_code == 400


@pytest.mark.parametrize("config", [[1], "window_size=100", 7])
def test_analyze_rejects_non_object_config(client, config):
    resp = client.post("/analyze", json={"samples": _tone_samples(), "config": config})
    assert resp.status_code == 400


def test_synthesize_windows(client):
    results = client.post("/analyze", json={"samples": _tone_samples(1000)}).json()["results"]
    resp = client.post("/synthesize", json={"results": results, "multiplier": 4.0})
    assert resp.status_code == 200
    body = resp.json()
    assert body["sample_count"] == 1000
    assert body["sample_rate"] == 24000
    decoded = AudioIO.from_bytes(base64.b64decode(body["audio"]))
    assert len(decoded) == 1000


def test_synthesize_single_tone(client):
    results = client.post("/analyze", json={"samples": _tone_samples()}).json()["results"]
    resp = client.post("/synthesize", json={"results": results, "total_sample_count": 2400})
    assert resp.status_code == 200
    assert resp.json()["sample_count"] == 2400


def test_synthesize_rejects_unfit_result(client):
    resp = client.post("/synthesize", json={"results": [{"base_frequency": 300.0, "a0": 0.0}]})
    assert resp.status_code == 400


def test_resynth_reports_qc(client):
    resp = client.post("/resynth", json={"samples": _tone_samples(1000), "multiplier": 1.0})
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["results"]) == 2
    assert body["qc"]["status"] in ("PASS", "WARN", "FAIL")
    assert body["audio"]


def test_resynth_silence_is_json_safe(client):
    resp = client.post("/resynth", json={"samples": [0.0] * 600})
    assert resp.status_code == 200
    body = resp.json()
    assert body["results"] == []
    assert body["qc"]["metrics"]["peak_dbfs"] is None
