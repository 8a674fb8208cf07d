"""
Pipeline configuration shared by the analyser and the synthetic data generator.

Values are layered, lowest precedence first:
    1. dataclass defaults
    2. LODPREP_* environment variables
    3. an optional JSON config file
    4. explicit command-line flags

Block length and sampling interval are defined here only; both the
generator and the analyser read them from the same PipelineConfig.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from lodprep.dsp.frequency import FrequencyMode
from lodprep.dsp.windows import WindowKind
from lodprep.errors import ConfigurationError

DEFAULT_BLOCK_SIZE = 64
DEFAULT_SAMPLING_INTERVAL_S = 52.39e-3
DEFAULT_BLOCKS_PER_SENSOR = 16
DEFAULT_SYNTHETIC_MEAN = 2048.0


def _int_env(name: str) -> Optional[int]:
    """Parse an integer from environment, returning None on missing/invalid."""
    val = os.getenv(name)
    if not val:
        return None
    try:
        return int(float(val))
    except ValueError:
        return None


def _float_env(name: str) -> Optional[float]:
    """Parse a float from environment, returning None on missing/invalid."""
    val = os.getenv(name)
    if not val:
        return None
    try:
        return float(val)
    except ValueError:
        return None


def _id_tuple(value: Any, name: str) -> Optional[Tuple[int, ...]]:
    if value is None:
        return None
    if isinstance(value, (int, str)):
        value = [value]
    try:
        ids = tuple(int(v) for v in value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a list of integer ids, got {value!r}")
    return tuple(sorted(set(ids)))


@dataclass(frozen=True)
class PipelineConfig:
    """All constants the spectral pipeline and the generator depend on."""

    block_size: int = DEFAULT_BLOCK_SIZE
    sampling_interval_s: float = DEFAULT_SAMPLING_INTERVAL_S
    window: WindowKind = WindowKind.RECTANGULAR
    frequency_mode: FrequencyMode = FrequencyMode.CENTERED
    measurement_ids: Optional[Tuple[int, ...]] = None
    sensor_ids: Optional[Tuple[int, ...]] = None
    workers: int = 1
    blocks_per_sensor: int = DEFAULT_BLOCKS_PER_SENSOR
    synthetic_mean: float = DEFAULT_SYNTHETIC_MEAN

    def __post_init__(self) -> None:
        if not isinstance(self.window, WindowKind):
            object.__setattr__(self, "window", WindowKind.from_name(self.window))
        if not isinstance(self.frequency_mode, FrequencyMode):
            object.__setattr__(self, "frequency_mode", FrequencyMode.from_name(self.frequency_mode))

    def validate(self) -> "PipelineConfig":
        if not isinstance(self.block_size, int) or self.block_size < 1:
            raise ConfigurationError(f"block size must be a positive integer, got {self.block_size!r}")
        if not self.sampling_interval_s > 0:
            raise ConfigurationError(f"sampling interval must be > 0 seconds, got {self.sampling_interval_s!r}")
        if self.workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {self.workers}")
        if self.blocks_per_sensor < 1:
            raise ConfigurationError(f"blocks per sensor must be >= 1, got {self.blocks_per_sensor}")
        if not 1.0 <= self.synthetic_mean <= 32768.0:
            raise ConfigurationError(f"synthetic mean must lie in [1, 32768], got {self.synthetic_mean}")
        for name in ("measurement_ids", "sensor_ids"):
            ids = getattr(self, name)
            if ids is not None and any(i < 1 for i in ids):
                raise ConfigurationError(f"{name} must contain positive ids, got {ids}")
        return self

    def with_overrides(self, overrides: Mapping[str, Any]) -> "PipelineConfig":
        """Return a copy with ``overrides`` applied (None values are ignored)."""
        return replace(self, **_coerce(overrides))


_FIELD_NAMES = {f.name for f in fields(PipelineConfig)}


def _coerce(raw: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        if value is None:
            continue
        name = key.replace("-", "_")
        if name not in _FIELD_NAMES:
            raise ConfigurationError(f"Unknown configuration key '{key}'")
        try:
            if name == "window":
                value = value if isinstance(value, WindowKind) else WindowKind.from_name(value)
            elif name == "frequency_mode":
                value = value if isinstance(value, FrequencyMode) else FrequencyMode.from_name(value)
            elif name in ("measurement_ids", "sensor_ids"):
                value = _id_tuple(value, name)
            elif name in ("block_size", "workers", "blocks_per_sensor"):
                if isinstance(value, float) and not value.is_integer():
                    raise ConfigurationError(f"{name} must be an integer, got {value}")
                value = int(value)
            else:
                value = float(value)
        except ConfigurationError:
            raise
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid value for {name}: {value!r}") from exc
        out[name] = value
    return out


def env_overrides() -> Dict[str, Any]:
    """Collect LODPREP_* environment overrides."""
    return {
        "block_size": _int_env("LODPREP_BLOCK_SIZE"),
        "sampling_interval_s": _float_env("LODPREP_SAMPLING_INTERVAL"),
        "window": os.getenv("LODPREP_WINDOW") or None,
        "frequency_mode": os.getenv("LODPREP_FREQUENCY_MODE") or None,
    }


def load_config_file(path: str) -> Dict[str, Any]:
    """Read a JSON object of configuration keys."""
    try:
        payload = json.loads(Path(path).expanduser().read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Config file {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")
    return payload


def build_config(
    *,
    config_file: Optional[str] = None,
    cli_overrides: Optional[Mapping[str, Any]] = None,
    use_env: bool = True,
) -> PipelineConfig:
    """Resolve the layered configuration and validate it."""
    layers: Iterable[Mapping[str, Any]] = [
        env_overrides() if use_env else {},
        load_config_file(config_file) if config_file else {},
        cli_overrides or {},
    ]
    config = PipelineConfig()
    for layer in layers:
        config = config.with_overrides(layer)
    return config.validate()
