"""YAML configuration for the atlas CLI and viewer."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .contour import DEFAULT_ITERATIONS, DEFAULT_LEVELS, DEFAULT_SAMPLES
from .mesh import DEFAULT_HEIGHT_SCALE, DEFAULT_RESOLUTION
from .raster import DETAIL_2D, PREVIEW_2D, PREVIEW_3D, RasterProfile, profile_with_overrides

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_SECTIONS = {"logging", "raster", "contour", "mesh", "animation", "output"}
_RASTER_KEYS = {"preview_3d": PREVIEW_3D, "preview_2d": PREVIEW_2D, "detail": DETAIL_2D}


def cfg_get(cfg: Mapping[str, Any] | None, key: str, default: Any = None) -> Any:
    if cfg is None:
        return default
    if hasattr(cfg, "get"):
        try:
            return cfg.get(key, default)
        except TypeError:
            pass
    return getattr(cfg, key, default)


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    format: str = DEFAULT_LOG_FORMAT


@dataclass(frozen=True)
class ContourConfig:
    levels: tuple[float, ...] = DEFAULT_LEVELS
    samples: int = DEFAULT_SAMPLES
    iterations: int = DEFAULT_ITERATIONS


@dataclass(frozen=True)
class MeshConfig:
    resolution: int = DEFAULT_RESOLUTION
    height_scale: float = DEFAULT_HEIGHT_SCALE


@dataclass(frozen=True)
class AnimationConfig:
    interval_ms: int = 16
    step: float = 0.005


@dataclass(frozen=True)
class OutputConfig:
    dir: str = "atlas_out"
    dpi: int = 150


@dataclass(frozen=True)
class AtlasConfig:
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    preview_3d: RasterProfile = PREVIEW_3D
    preview_2d: RasterProfile = PREVIEW_2D
    detail: RasterProfile = DETAIL_2D
    contour: ContourConfig = field(default_factory=ContourConfig)
    mesh: MeshConfig = field(default_factory=MeshConfig)
    animation: AnimationConfig = field(default_factory=AnimationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"config section '{name}' must be a mapping")
    return value


def _check_keys(section: Mapping[str, Any], allowed: set[str], label: str) -> None:
    unknown = sorted(set(section) - allowed)
    if unknown:
        raise ValueError(f"unknown keys in config section '{label}': {unknown}")


def build_config(data: Mapping[str, Any] | None) -> AtlasConfig:
    if data is None:
        return AtlasConfig()
    if not isinstance(data, Mapping):
        raise ValueError("config must be a mapping")
    _check_keys(data, _SECTIONS, "<root>")

    log_cfg = _section(data, "logging")
    _check_keys(log_cfg, {"level", "format"}, "logging")
    logging_cfg = LoggingConfig(
        level=str(cfg_get(log_cfg, "level", "INFO")).upper(),
        format=str(cfg_get(log_cfg, "format", DEFAULT_LOG_FORMAT)) or DEFAULT_LOG_FORMAT,
    )

    raster_cfg = _section(data, "raster")
    _check_keys(raster_cfg, set(_RASTER_KEYS), "raster")
    profiles = {
        key: profile_with_overrides(base, _section(raster_cfg, key))
        for key, base in _RASTER_KEYS.items()
    }

    contour_cfg = _section(data, "contour")
    _check_keys(contour_cfg, {"levels", "samples", "iterations"}, "contour")
    levels = cfg_get(contour_cfg, "levels", DEFAULT_LEVELS)
    if not isinstance(levels, (list, tuple)):
        raise ValueError("contour.levels must be a list of floats")
    bad_levels = [float(level) for level in levels if not -1.0 < float(level) < 1.0]
    if bad_levels:
        raise ValueError(f"contour.levels must lie in (-1, 1), got {bad_levels}")
    contour = ContourConfig(
        levels=tuple(float(level) for level in levels),
        samples=int(cfg_get(contour_cfg, "samples", DEFAULT_SAMPLES)),
        iterations=int(cfg_get(contour_cfg, "iterations", DEFAULT_ITERATIONS)),
    )

    mesh_cfg = _section(data, "mesh")
    _check_keys(mesh_cfg, {"resolution", "height_scale"}, "mesh")
    mesh = MeshConfig(
        resolution=int(cfg_get(mesh_cfg, "resolution", DEFAULT_RESOLUTION)),
        height_scale=float(cfg_get(mesh_cfg, "height_scale", DEFAULT_HEIGHT_SCALE)),
    )

    anim_cfg = _section(data, "animation")
    _check_keys(anim_cfg, {"interval_ms", "step"}, "animation")
    animation = AnimationConfig(
        interval_ms=int(cfg_get(anim_cfg, "interval_ms", 16)),
        step=float(cfg_get(anim_cfg, "step", 0.005)),
    )

    out_cfg = _section(data, "output")
    _check_keys(out_cfg, {"dir", "dpi"}, "output")
    output = OutputConfig(
        dir=str(cfg_get(out_cfg, "dir", "atlas_out")),
        dpi=int(cfg_get(out_cfg, "dpi", 150)),
    )

    return AtlasConfig(
        logging=logging_cfg,
        preview_3d=profiles["preview_3d"],
        preview_2d=profiles["preview_2d"],
        detail=profiles["detail"],
        contour=contour,
        mesh=mesh,
        animation=animation,
        output=output,
    )


def load_config(path: str | Path | None) -> AtlasConfig:
    if path is None:
        return AtlasConfig()
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if data is None:
        return AtlasConfig()
    if not isinstance(data, Mapping):
        raise ValueError(f"{path} must contain a mapping")
    return build_config(data)


__all__ = [
    "AnimationConfig",
    "AtlasConfig",
    "ContourConfig",
    "LoggingConfig",
    "MeshConfig",
    "OutputConfig",
    "build_config",
    "cfg_get",
    "load_config",
]
