"""
Analysis configuration: one explicit object instead of global constants.
CONFIG_DEFAULTS is the single source of default values; resolve_config() merges
partial params (flat, dotted, or nested under "analysis") onto it.
"""
import logging
import os
from dataclasses import dataclass, replace, asdict
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

PHASE_MODES = ("direct", "incremental")
RECONSTRUCTION_MODES = ("reference", "corrected")

DEV = os.environ.get("ENV", "development").lower() in ("development", "dev", "test")


# -----------------------------------------------------------------------------
# Param definitions
# -----------------------------------------------------------------------------

@dataclass
class ParamDef:
    """Definition of a single config value. Bounds/unit are optional."""
    name: str
    default: Any
    min: Optional[float] = None
    max: Optional[float] = None
    unit: Optional[str] = None


CONFIG_SCHEMA: Dict[str, ParamDef] = {
    "sample_rate": ParamDef("sample_rate", 24000, min=1, unit="Hz"),
    "parameter_count": ParamDef("parameter_count", 8, min=1, max=64),
    "window_size": ParamDef("window_size", 500, min=1, unit="samples"),
    "freq_lo": ParamDef("freq_lo", 220, min=1, unit="Hz"),
    "freq_hi": ParamDef("freq_hi", 441, min=1, unit="Hz"),
    "phase_mode": ParamDef("phase_mode", "direct"),
    "reconstruction": ParamDef("reconstruction", "reference"),
}

CONFIG_DEFAULTS: Dict[str, Any] = {name: p.default for name, p in CONFIG_SCHEMA.items()}


# -----------------------------------------------------------------------------
# Lookup helpers
# -----------------------------------------------------------------------------

def get_param(params: dict, name: str, default: Any = None) -> Any:
    """
    Read a value from params, supporting dotted keys for nested dicts.
    get_param(p, "analysis.window_size", 500) -> p["analysis"]["window_size"] or default.
    """
    if not params or not name:
        return default
    keys = name.split(".")
    current = params
    for key in keys[:-1]:
        next_val = current.get(key)
        if not isinstance(next_val, dict):
            return default
        current = next_val
    return current.get(keys[-1], default)


def clamp_if_bounds(value: Any, min: Optional[float] = None, max: Optional[float] = None) -> Any:
    """Clamp a numeric value to [min, max] where bounds are set. Non-numbers pass through."""
    if isinstance(value, bool):
        return value
    try:
        v = float(value)
    except (TypeError, ValueError):
        return value
    if min is not None and v < min:
        return min
    if max is not None and v > max:
        return max
    return value


# -----------------------------------------------------------------------------
# Config object
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class AnalysisConfig:
    sample_rate: int = 24000
    parameter_count: int = 8
    window_size: int = 500
    freq_lo: int = 220
    freq_hi: int = 441  # exclusive: 220..440 are scanned
    phase_mode: str = "direct"
    reconstruction: str = "reference"

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.parameter_count <= 0:
            raise ValueError(f"parameter_count must be positive, got {self.parameter_count}")
        if self.window_size <= 0:
            raise ValueError(f"window_size must be positive, got {self.window_size}")
        if self.freq_hi <= self.freq_lo:
            raise ValueError(
                f"Empty frequency range: freq_lo={self.freq_lo}, freq_hi={self.freq_hi} (freq_hi is exclusive)"
            )
        if self.phase_mode not in PHASE_MODES:
            raise ValueError(f"Unknown phase_mode {self.phase_mode!r}; expected one of {PHASE_MODES}")
        if self.reconstruction not in RECONSTRUCTION_MODES:
            raise ValueError(
                f"Unknown reconstruction {self.reconstruction!r}; expected one of {RECONSTRUCTION_MODES}"
            )

    @property
    def harmonics(self) -> Tuple[int, ...]:
        """Harmonic numbers 1..parameter_count."""
        return tuple(range(1, self.parameter_count + 1))

    def with_overrides(self, **overrides: Any) -> "AnalysisConfig":
        """Copy with the given non-None fields replaced."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_CONFIG = AnalysisConfig()


def _coerce(name: str, value: Any) -> Any:
    default = CONFIG_SCHEMA[name].default
    if isinstance(default, int):
        return int(value)
    return str(value)


def resolve_config(params: Optional[dict] = None) -> AnalysisConfig:
    """
    Resolve an AnalysisConfig from a partial params dict.
    Keys may be top-level or nested under "analysis"; nested keys win.
    Numeric values are clamped to schema bounds. Unknown keys are dropped.
    """
    params = params or {}
    nested = params.get("analysis") if isinstance(params.get("analysis"), dict) else {}

    unknown = [k for k in params if k != "analysis" and k not in CONFIG_SCHEMA]
    unknown += [f"analysis.{k}" for k in nested if k not in CONFIG_SCHEMA]
    if unknown and DEV:
        logger.warning("[Config] Unknown keys ignored: %s", sorted(unknown))

    values: Dict[str, Any] = {}
    for name, pdef in CONFIG_SCHEMA.items():
        raw = get_param(params, f"analysis.{name}", get_param(params, name, CONFIG_DEFAULTS[name]))
        try:
            value = _coerce(name, raw)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid value for {name}: {raw!r}") from exc
        values[name] = clamp_if_bounds(value, pdef.min, pdef.max)

    return AnalysisConfig(**values)


def config_from_env(base: Optional[dict] = None) -> AnalysisConfig:
    """resolve_config() with WAVEFIT_* environment overrides applied on top of base."""
    params = dict(base or {})
    if isinstance(params.get("analysis"), dict):
        params["analysis"] = dict(params["analysis"])
    env_keys = {
        "WAVEFIT_WINDOW_SIZE": "window_size",
        "WAVEFIT_RECONSTRUCTION": "reconstruction",
        "WAVEFIT_PHASE_MODE": "phase_mode",
    }
    for env_key, name in env_keys.items():
        if env_key in os.environ:
            params[name] = os.environ[env_key]
            if isinstance(params.get("analysis"), dict):
                params["analysis"].pop(name, None)
    return resolve_config(params)
